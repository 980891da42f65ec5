"""Service definition model consumed by the code generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class EnumType:
    """A protobuf enum: its name and its value names in order."""

    name: str
    values: list[str] = field(default_factory=list)


@dataclass
class MapType:
    """A protobuf map; key and value types are FieldType instances."""

    key_type: "FieldType"
    value_type: "FieldType"


@dataclass
class FieldType:
    """The type of a message field as it appears in Go code."""

    name: str
    star_expr: bool = False
    array_type: bool = False
    message: Optional["Message"] = None
    enum: Optional[EnumType] = None
    map: Optional[MapType] = None
    oneof: Optional[list["Field"]] = None


@dataclass
class Field:
    """A field of a message; ``pb_field_name`` is the original proto name."""

    name: str
    type: FieldType
    pb_field_name: str = ""

    def __post_init__(self) -> None:
        if not self.pb_field_name:
            self.pb_field_name = self.name


@dataclass
class Message:
    """A protobuf message."""

    name: str
    fields: list[Field] = field(default_factory=list)


@dataclass
class HTTPParameter:
    """A request field bound to a location of an HTTP request."""

    field: Field
    location: str


@dataclass
class HTTPBinding:
    """One HTTP annotation of an rpc."""

    verb: str
    path: str
    params: list[HTTPParameter] = field(default_factory=list)


@dataclass
class ServiceMethod:
    """An rpc of a service."""

    name: str
    request_type: Message
    response_type: Message
    bindings: list[HTTPBinding] = field(default_factory=list)


@dataclass
class Service:
    """A gRPC service."""

    name: str
    methods: list[ServiceMethod] = field(default_factory=list)


@dataclass
class Svcdef:
    """A whole service definition: package, service, and declared types."""

    pkg_name: str
    service: Service
    messages: list[Message] = field(default_factory=list)
    enums: list[EnumType] = field(default_factory=list)