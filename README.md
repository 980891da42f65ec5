# kitgen

kitgen works from a description of a gRPC service and produces pieces of the
Go code of a go-kit service:

- the server handler file, with one method stub per RPC, and the update of a
  handler file you have already edited;
- the records that describe each RPC's HTTP bindings (labels, paths, fields,
  the Go snippets that decode each field from a request);
- helpers for Go identifiers, URL path templates, tidying Go code and diffing
  it.

## Installing

```
pip install kitgen
```

## Describing a service

A service is described with the dataclasses in `kitgen.svcmodel`. `Svcdef`
holds the package name and a `Service`; a `Service` holds `ServiceMethod`s,
each with a request and a response `Message` and any number of
`HTTPBinding`s. A binding has a verb, a path such as `/sum/{a}`, and
`HTTPParameter`s that tie a request `Field` to a location (`path`, `query`
or `body`). A field's `FieldType` records its Go type name and whether it is
a pointer, a slice, a message, an enum (`EnumType`), a map (`MapType`) or a
oneof.

```python
from kitgen.svcmodel import (
    Field, FieldType, HTTPBinding, HTTPParameter, Message, Service,
    ServiceMethod, Svcdef,
)

a = Field("A", FieldType("int64"), pb_field_name="a")
b = Field("B", FieldType("int64"), pb_field_name="b")
request = Message("SumRequest", [a, b])
reply = Message("SumReply", [Field("V", FieldType("int64"), pb_field_name="v")])

sum_rpc = ServiceMethod(
    "Sum", request, reply,
    bindings=[HTTPBinding("get", "/sum/{a}", [
        HTTPParameter(a, "path"),
        HTTPParameter(b, "query"),
    ])],
)
svcdef = Svcdef("sum", Service("SumSvc", [sum_rpc]), messages=[request, reply])
```

## Template data

`kitgen.data.new_data(sd, conf)` combines a `Svcdef` with a `Config`
(`go_package`, `pb_package`, `version`, `version_date`) into a `Data` object.
`Data.apply_template(templ, name)` renders a Jinja2 template with the data's
fields (`import_path`, `pb_import_path`, `package_name`, `service`,
`version`, `version_date`) as variables and `ToLower` and `GoName` available
both as functions and as filters; `data.http_helper` gives the HTTP binding
description of the service. The free function
`kitgen.data.apply_template(templ, name, data, func_map)` does the same for
any dataclass or mapping. Template syntax or rendering errors raise
`TemplateError`.

## Server handlers

```python
from kitgen.data import Config, new_data
from kitgen.handlers import SERVER_HANDLER_PATH, Handler

data = new_data(svcdef, Config(pb_package="example.com/sum"))

first = Handler(svcdef.service).render(SERVER_HANDLER_PATH, data)

# later, after editing the file and changing the service
updated = Handler(svcdef.service, first).render(SERVER_HANDLER_PATH, data)
```

With no previous file, `Handler.render` renders a new handler file. Given a
previous version (a string or a readable file object), it keeps
`NewService`, unexported functions and every non-function declaration; keeps
exported methods that are RPCs of the service with the receiver
`<lower-cased service name>Service`, updating their request and response
types; drops other exported functions; and appends stubs for RPCs that were
missing. Any other path than `SERVER_HANDLER_PATH` raises `ValueError`. Use a
new `Handler` for each render.

The steps are available separately: `prune_decls`, `is_valid_func`,
`recv_type_to_string`, `apply_server_templ` and `apply_server_meths_templ`.
They work on the declarations produced by `kitgen.goscan.parse_go_file`,
which splits Go source into its package clause and top-level declarations
(`GoFile`, with `FuncDecl` for functions); `GoFile.render()` writes it back
out, and `update_pb_field_type` rewrites `pb.Old` / `*pb.Old` to a new type
name.

## HTTP binding descriptions

```python
from kitgen.binding import new_helper, new_method

method = new_method(svcdef.service.methods[0])
binding = method.bindings[0]
binding.label            # "SumZero"
binding.base_path        # "/sum/"
binding.path_sections()  # ['""', '"sum"', 'fmt.Sprint(req.A)']
binding.fields[0].convert_func
# 'ASum, err := strconv.ParseInt(ASumStr, 10, 64)'
```

`new_helper(service)` builds a `Method` for every RPC that has at least one
HTTP binding. Each `Binding` holds its `Field`s and `OneofField`s, and each
field carries its Go type, local variable name, the Go statement that parses
it from a string, and the conversion to its final type. A warning is logged
for non-base types outside the body and for repeated fields in the path.

## Smaller helpers

- `kitgen.naming`: `camel_case("client_id")` gives `"ClientId"`,
  `low_camel_name("example_name")` gives `"exampleName"`,
  `english_number(48)` gives `"FourEight"`.
- `kitgen.paramsmap`: `build_param_map("/v1/{a}/{b}")` gives
  `{"a": 2, "b": 3}`; `path_params(url, template)` returns the parameter
  values of a URL and raises `ValueError` when the number of path parts
  differs; `remove_braces` strips curly braces.
- `kitgen.gofmt`: `format_source` re-indents Go code with tabs and
  normalises spacing, raising `FormatError` on unbalanced brackets or
  unterminated literals; `format_code` returns the input unchanged instead of
  raising; `diff_strings` and `diff_go_code` give unified diffs, the latter
  of the formatted forms.

## What kitgen does not do

kitgen does not write a whole service to disk and has no command-line tool.
It does not render the HTTP transport source files themselves (server
decoding, client encoding), the hooks file or the middlewares file; it gives
the binding descriptions and template data from which such files can be
rendered. It does not read `.proto` files: the service description is built
in Python. `kitgen.gofmt` is a light tidier, not a full Go formatter or
parser.

## Running the tests

```
pip install -e .[test]
pytest
```