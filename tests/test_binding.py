import logging

import pytest

from kitgen import svcmodel
from kitgen.binding import (
    Binding,
    Field,
    Helper,
    Method,
    new_binding,
    new_helper,
    new_method,
)


def _int_field(name, pb_name):
    return svcmodel.Field(name=name, type=svcmodel.FieldType("int64"), pb_field_name=pb_name)


def _sum_method():
    a = _int_field("A", "a")
    b = _int_field("B", "b")
    orig = _int_field("OrigName", "orig_name")
    request = svcmodel.Message("SumRequest", [a, b, orig])
    reply = svcmodel.Message(
        "SumReply",
        [_int_field("V", "v"), svcmodel.Field("Err", svcmodel.FieldType("string"), "err")],
    )
    binding = svcmodel.HTTPBinding(
        verb="get",
        path="/sum/{a}",
        params=[
            svcmodel.HTTPParameter(a, "path"),
            svcmodel.HTTPParameter(b, "query"),
            svcmodel.HTTPParameter(orig, "query"),
        ],
    )
    return svcmodel.ServiceMethod("Sum", request, reply, [binding])


def _method_with(field, location="query", path="/sum"):
    request = svcmodel.Message("SumRequest", [field])
    reply = svcmodel.Message("SumReply")
    binding = svcmodel.HTTPBinding("get", path, [svcmodel.HTTPParameter(field, location)])
    return svcmodel.ServiceMethod("Sum", request, reply, [binding])


def test_new_method_matches_expected():
    expected_binding = Binding(
        label="SumZero",
        path_template="/sum/{a}",
        base_path="/sum/",
        verb="get",
        fields=[
            Field(
                name="A",
                query_param_name="a",
                camel_name="A",
                low_camel_name="a",
                local_name="ASum",
                location="path",
                go_type="int64",
                convert_func="ASum, err := strconv.ParseInt(ASumStr, 10, 64)",
                convert_func_needs_error_check=True,
                type_conversion="ASum",
                is_base_type=True,
            ),
            Field(
                name="B",
                query_param_name="b",
                camel_name="B",
                low_camel_name="b",
                local_name="BSum",
                location="query",
                go_type="int64",
                convert_func="BSum, err := strconv.ParseInt(BSumStr, 10, 64)",
                convert_func_needs_error_check=True,
                type_conversion="BSum",
                is_base_type=True,
            ),
            Field(
                name="OrigName",
                query_param_name="orig_name",
                camel_name="OrigName",
                low_camel_name="origName",
                local_name="OrigNameSum",
                location="query",
                go_type="int64",
                convert_func="OrigNameSum, err := strconv.ParseInt(OrigNameSumStr, 10, 64)",
                convert_func_needs_error_check=True,
                type_conversion="OrigNameSum",
                is_base_type=True,
            ),
        ],
    )
    expected = Method(
        name="Sum", request_type="SumRequest", response_type="SumReply", bindings=[expected_binding]
    )
    expected_binding.parent = expected

    got = new_method(_sum_method())
    assert got == expected
    assert got.bindings[0].parent is got


def test_binding_label_uses_english_index():
    meth = _sum_method()
    meth.bindings.append(svcmodel.HTTPBinding("post", "/sum", []))
    assert [b.label for b in new_method(meth).bindings] == ["SumZero", "SumOne"]


def test_path_sections_documented_example():
    binding = new_method(_sum_method()).bindings[0]
    assert binding.path_sections() == ['""', '"sum"', "fmt.Sprint(req.A)"]


def test_path_sections_enum_uses_integer_format():
    enum = svcmodel.EnumType("Color", ["RED"])
    field = svcmodel.Field("Color", svcmodel.FieldType("Color", enum=enum), "color")
    binding = new_binding(0, _method_with(field, "path", "/paint/{color}"))
    assert binding.path_sections() == ['""', '"paint"', 'fmt.Sprintf("%d", req.Color)']


def test_helper_skips_methods_without_bindings():
    bare = svcmodel.ServiceMethod("Ping", svcmodel.Message("A"), svcmodel.Message("B"))
    svc = svcmodel.Service("SumSvc", [bare, _sum_method()])
    helper = new_helper(svc)
    assert isinstance(helper, Helper)
    assert [m.name for m in helper.methods] == ["Sum"]


def test_string_field_needs_no_error_check():
    field = svcmodel.Field("Name", svcmodel.FieldType("string"), "name")
    got = new_binding(0, _method_with(field)).fields[0]
    assert got.convert_func == "NameSum := NameSumStr"
    assert got.convert_func_needs_error_check is False
    assert got.type_conversion == "NameSum"


def test_narrow_int_is_converted():
    field = svcmodel.Field("Count", svcmodel.FieldType("uint32"), "count")
    got = new_binding(0, _method_with(field)).fields[0]
    assert got.convert_func == "CountSum, err := strconv.ParseUint(CountSumStr, 10, 32)"
    assert got.type_conversion == "uint32(CountSum)"


def test_enum_field():
    enum = svcmodel.EnumType("Color", ["RED"])
    field = svcmodel.Field("Color", svcmodel.FieldType("Color", enum=enum), "color")
    got = new_binding(0, _method_with(field)).fields[0]
    assert got.is_enum and not got.is_base_type
    assert got.go_type == "pb.Color"
    assert got.convert_func == "ColorSum, err := strconv.ParseInt(ColorSumStr, 10, 32)"
    assert got.convert_func_needs_error_check is True
    assert got.type_conversion == "pb.Color(ColorSum)"


def test_repeated_string_splits_without_error_check():
    field = svcmodel.Field("Tags", svcmodel.FieldType("string", array_type=True), "tags")
    got = new_binding(0, _method_with(field)).fields[0]
    assert got.go_type == "[]string"
    assert "strings.Split(TagsSumStr" in got.convert_func
    assert "TagsSum = TagsSumStrArr" in got.convert_func
    assert "couldn't decode" not in got.convert_func
    assert got.convert_func_needs_error_check is False
    assert got.type_conversion == "TagsSum"


def test_repeated_int_parses_each_value():
    field = svcmodel.Field("Ids", svcmodel.FieldType("int32", array_type=True), "ids")
    got = new_binding(0, _method_with(field)).fields[0]
    code = got.convert_func
    assert "converted, err := strconv.ParseInt(v, 10, 32)" in code
    assert "IdsSum[i] = int32(converted)" in code
    assert code.count("couldn't decode IdsSum") == 2


def test_message_field_unmarshals_json_pointer(caplog):
    msg = svcmodel.Message("Inner")
    field = svcmodel.Field("Inner", svcmodel.FieldType("Inner", star_expr=True, message=msg), "inner")
    with caplog.at_level(logging.WARNING):
        got = new_binding(0, _method_with(field)).fields[0]
    assert got.go_type == "pb.Inner"
    assert got.convert_func.startswith("\nvar InnerSum *pb.Inner\nInnerSum = &pb.Inner{}")
    assert got.convert_func_needs_error_check is False
    assert "non-base type" in caplog.text


def test_repeated_message_pointer_type():
    msg = svcmodel.Message("Inner")
    ftype = svcmodel.FieldType("Inner", star_expr=True, array_type=True, message=msg)
    field = svcmodel.Field("Items", ftype, "items")
    got = new_binding(0, _method_with(field, "body")).fields[0]
    assert got.go_type == "[]*pb.Inner"
    assert "len(ItemsSumStrArr)" not in got.convert_func


def test_oneof_options():
    wrapper_a = svcmodel.Message("SumRequest_Alpha")
    wrapper_b = svcmodel.Message("SumRequest_Beta")
    alpha = svcmodel.Field("Alpha", svcmodel.FieldType("string", message=wrapper_a), "alpha")
    beta = svcmodel.Field("Beta", svcmodel.FieldType("int32", message=wrapper_b), "beta")
    choice = svcmodel.Field("Choice", svcmodel.FieldType("isChoice", oneof=[alpha, beta]), "choice")
    binding = new_binding(0, _method_with(choice))

    assert binding.fields == []
    assert len(binding.oneof_fields) == 1
    oneof = binding.oneof_fields[0]
    assert (oneof.name, oneof.location) == ("Choice", "query")
    first, second = oneof.options
    assert first.camel_name == "Choice"
    assert first.local_name == "AlphaSum"
    assert first.type_conversion == "&pb.SumRequest_Alpha{Alpha: AlphaSum}"
    assert first.zero_value == '""'
    assert second.convert_func == "BetaSum, err := strconv.ParseInt(BetaSumStr, 10, 32)"
    assert second.type_conversion == "&pb.SumRequest_Beta{Beta: int32(BetaSum)}"
    assert second.zero_value == "0"


def test_oneof_option_without_wrapper_raises():
    alpha = svcmodel.Field("Alpha", svcmodel.FieldType("string"), "alpha")
    choice = svcmodel.Field("Choice", svcmodel.FieldType("isChoice", oneof=[alpha]), "choice")
    with pytest.raises(ValueError):
        new_binding(0, _method_with(choice))


def test_repeated_path_field_warns(caplog):
    field = svcmodel.Field("Ids", svcmodel.FieldType("int64", array_type=True), "ids")
    with caplog.at_level(logging.WARNING):
        new_binding(0, _method_with(field, "path", "/sum/{ids}"))
    assert "repeated field" in caplog.text