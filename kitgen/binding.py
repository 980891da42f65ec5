"""HTTP transport description of a service, built from its definition."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional

from . import svcmodel
from .naming import camel_case, english_number, low_camel_name
from .paramsmap import remove_braces

log = logging.getLogger(__name__)


@dataclass
class Field:
    """A request field as seen by the HTTP transport templates."""

    name: str = ""
    query_param_name: str = ""
    camel_name: str = ""
    low_camel_name: str = ""
    local_name: str = ""
    location: str = ""
    go_type: str = ""
    convert_func: str = ""
    convert_func_needs_error_check: bool = False
    type_conversion: str = ""
    is_base_type: bool = False
    is_enum: bool = False
    repeated: bool = False
    zero_value: str = ""


@dataclass
class OneofField:
    """A protobuf oneof whose options are decoded from query parameters."""

    name: str = ""
    location: str = ""
    options: list[Field] = dataclasses.field(default_factory=list)


@dataclass
class Binding:
    """One HTTP route of a method."""

    label: str = ""
    path_template: str = ""
    base_path: str = ""
    verb: str = ""
    fields: list[Field] = dataclasses.field(default_factory=list)
    oneof_fields: list[OneofField] = dataclasses.field(default_factory=list)
    parent: Optional["Method"] = dataclasses.field(default=None, repr=False, compare=False)

    def path_sections(self) -> list[str]:
        """Go expressions that, joined with "/", rebuild the request path."""
        enum_names = {f.camel_name for f in self.fields if f.is_enum}
        sections = []
        for part in self.path_template.split("/"):
            if len(part) > 2 and part.startswith("{") and part.endswith("}"):
                name = camel_case(remove_braces(part))
                if name in enum_names:
                    sections.append(f'fmt.Sprintf("%d", req.{name})')
                else:
                    sections.append(f"fmt.Sprint(req.{name})")
            else:
                sections.append(f'"{part}"')
        return sections


@dataclass
class Method:
    """An rpc that has at least one HTTP binding."""

    name: str = ""
    request_type: str = ""
    response_type: str = ""
    bindings: list[Binding] = dataclasses.field(default_factory=list)


@dataclass
class Helper:
    """Everything needed to template the HTTP transport of a service."""

    methods: list[Method] = dataclasses.field(default_factory=list)


def new_helper(svc: svcmodel.Service) -> Helper:
    """Build a Helper from the service's methods that have HTTP bindings."""
    return Helper(methods=[new_method(m) for m in svc.methods if m.bindings])


def new_method(meth: svcmodel.ServiceMethod) -> Method:
    """Build a Method, with all its bindings, from a service method."""
    method = Method(
        name=meth.name,
        request_type=meth.request_type.name,
        response_type=meth.response_type.name,
    )
    for i in range(len(meth.bindings)):
        binding = new_binding(i, meth)
        binding.parent = method
        method.bindings.append(binding)
    return method


def _qualify_go_type(go_type: str, ftype: svcmodel.FieldType, base: bool) -> str:
    if not base:
        go_type = "pb." + go_type
    if ftype.star_expr and ftype.array_type:
        return "[]*" + go_type
    if ftype.array_type:
        return "[]" + go_type
    return go_type


def _oneof_field(param: svcmodel.HTTPParameter, meth: svcmodel.ServiceMethod) -> OneofField:
    field = param.field
    oneof = OneofField(name=field.name, location=param.location)
    for option_def in field.type.oneof or []:
        otype = option_def.type
        base = otype.enum is None and otype.map is None
        option = Field(
            name=option_def.name,
            query_param_name=option_def.pb_field_name,
            camel_name=camel_case(field.name),
            low_camel_name=low_camel_name(option_def.name),
            repeated=otype.array_type,
            go_type=_qualify_go_type(otype.name, otype, base),
            local_name=camel_case(option_def.name) + camel_case(meth.name),
            is_base_type=base,
            is_enum=otype.enum is not None,
        )
        option.convert_func, option.convert_func_needs_error_check = _decode_convert_func(option)
        if otype.message is None:
            raise ValueError(f"oneof option {option_def.name!r} has no wrapper message")
        option.type_conversion = (
            f"&pb.{otype.message.name}{{{camel_case(option_def.name)}: "
            f"{_decode_type_conversion(option)}}}"
        )
        option.zero_value = _zero_value(option)
        oneof.options.append(option)
    return oneof


def new_binding(i: int, meth: svcmodel.ServiceMethod) -> Binding:
    """Build the Binding for the ``i``-th HTTP binding of ``meth``."""
    source = meth.bindings[i]
    binding = Binding(
        label=meth.name + english_number(i),
        path_template=source.path,
        base_path=_base_path(source.path),
        verb=source.verb,
    )

    binding.oneof_fields = [
        _oneof_field(param, meth) for param in source.params if param.field.type.oneof is not None
    ]

    for param in source.params:
        field = param.field
        ftype = field.type
        if ftype.oneof is not None:
            continue
        base = ftype.message is None and ftype.enum is None and ftype.map is None
        new_field = Field(
            name=field.name,
            query_param_name=field.pb_field_name,
            camel_name=camel_case(field.name),
            low_camel_name=low_camel_name(field.name),
            location=param.location,
            repeated=ftype.array_type,
            go_type=_qualify_go_type(ftype.name, ftype, base),
            local_name=camel_case(field.name) + camel_case(meth.name),
            is_base_type=base,
            is_enum=ftype.enum is not None,
        )
        new_field.convert_func, new_field.convert_func_needs_error_check = _decode_convert_func(
            new_field
        )
        new_field.type_conversion = _decode_type_conversion(new_field)
        binding.fields.append(new_field)

        if new_field.is_enum:
            continue
        if not new_field.is_base_type and new_field.location != "body":
            log.warning(
                "%s.%s is a non-base type specified to be located outside of the body. "
                "Non-base types outside the body may result in generated code which "
                "fails to compile.",
                meth.name,
                new_field.name,
            )
        if new_field.repeated and new_field.location == "path":
            log.warning(
                "%s.%s is a repeated field specified to be in the path. Repeated fields "
                "are not supported in the path and may result in generated code which "
                "fails to compile.",
                meth.name,
                new_field.name,
            )
    return binding


_CONVERT_FORMATS = {
    "uint32": "{0}, err := strconv.ParseUint({1}, 10, 32)",
    "uint64": "{0}, err := strconv.ParseUint({1}, 10, 64)",
    "int32": "{0}, err := strconv.ParseInt({1}, 10, 32)",
    "int64": "{0}, err := strconv.ParseInt({1}, 10, 64)",
    "bool": "{0}, err := strconv.ParseBool({1})",
    "float32": "{0}, err := strconv.ParseFloat({1}, 32)",
    "float64": "{0}, err := strconv.ParseFloat({1}, 64)",
    "string": "{0} := {1}",
}
_ENUM_CONVERT = "{0}, err := strconv.ParseInt({1}, 10, 32)"
_NARROW_TYPES = ("uint32", "int32", "float32")


def _decode_convert_func(f: Field) -> tuple[str, bool]:
    """Go code converting the string form of ``f`` to its type, and whether it needs an error check."""
    go_type = f.go_type.removeprefix("[]")
    convert = _CONVERT_FORMATS.get(go_type, "")
    needs_error_check = go_type != "string"

    if f.is_enum and not f.repeated:
        return _ENUM_CONVERT.format(f.local_name, f.local_name + "Str"), True

    if not f.is_base_type or f.repeated:
        return _json_convert(f, convert), False

    return convert.format(f.local_name, f.local_name + "Str"), needs_error_check


def _json_convert(f: Field, convert: str) -> str:
    name = f.local_name
    go_type = f.go_type
    error_check = (
        f"\nif err != nil {{\n\treturn nil, errors.Wrapf(err, \"couldn't decode {name} "
        f"from %v\", {name}Str)\n}}"
    )

    if not f.repeated:
        return (
            f"\nvar {name} *{go_type}\n{name} = &{go_type}{{}}\n"
            f"err = json.Unmarshal([]byte({name}Str), {name})" + error_check
        )

    elem = go_type.removeprefix("[]")
    converted = f"{elem}(converted)" if elem in _NARROW_TYPES else "converted"
    plain = f.is_base_type and "[]byte" not in go_type
    string_slice = "[]string" in go_type

    parts = [f"\nvar {name} {go_type}"]
    if plain:
        parts.append(f"\nif len({name}StrArr) > 1 {{")
        if string_slice:
            parts.append(f"\n\t{name} = {name}StrArr")
        else:
            parts.append(
                f"\n\t{name} = make({go_type}, len({name}StrArr))\n"
                f"\tfor i, v := range {name}StrArr {{\n\t"
                + (convert.format("converted", "v") if convert else "")
                + error_check
                + f"\n\t\t{name}[i] = {converted}\n\t}}"
            )
        parts.append("\n} else {")
    if string_slice:
        parts.append(f'\n\t\t{name} = strings.Split({name}Str, ",")')
    elif plain:
        parts.append(
            f"\n\terr = json.Unmarshal([]byte({name}Str), &{name})\n"
            f"\tif err != nil {{\n\t\t{name}Str = \"[\" + {name}Str + \"]\"\n\t}}\n"
            f"\terr = json.Unmarshal([]byte({name}Str), &{name})"
        )
    else:
        parts.append(f"\n\terr = json.Unmarshal([]byte({name}Str), &{name})")
    if plain:
        parts.append("\n}")
    if elem != "string":
        parts.append(error_check)
    return "".join(parts)


def _decode_type_conversion(f: Field) -> str:
    """Go expression narrowing the parsed 64-bit value to the field's type."""
    if f.repeated:
        return f.local_name
    if f.is_enum or f.go_type in _NARROW_TYPES:
        return f"{f.go_type}({f.local_name})"
    return f.local_name


def _zero_value(f: Field) -> str:
    if not f.is_base_type or f.repeated:
        return "nil"
    if f.go_type == "bool":
        return "false"
    if f.go_type == "string":
        return '""'
    return "0"


def _base_path(path: str) -> str:
    """The part of ``path`` before the first '{'."""
    return path.split("{", 1)[0]