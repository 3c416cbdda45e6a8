from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

PROTO2_SYNTAX = "proto2"
PROTO3_SYNTAX = "proto3"

LABEL_OPTIONAL = "optional"
LABEL_REQUIRED = "required"
LABEL_REPEATED = "repeated"

SINGULAR = "singular"
REPEATED = "repeated"
MAP = "map"

MESSAGE_TYPES = ("message", "group")


@dataclass
class ProtoField:
    name: str
    number: int
    type: str
    type_name: str = ""
    label: str = LABEL_OPTIONAL
    oneof_index: Optional[int] = None
    jstype: str = "normal"
    proto3_optional: bool = False
    is_map: bool = False

    @property
    def is_message(self) -> bool:
        return self.type in MESSAGE_TYPES

    @property
    def is_repeated(self) -> bool:
        return self.label == LABEL_REPEATED

    @property
    def repetition(self) -> str:
        if self.is_map:
            return MAP
        if self.is_repeated:
            return REPEATED
        return SINGULAR

    @property
    def in_real_oneof(self) -> bool:
        """True for fields of a user-declared oneof (not a proto3 optional)."""
        return self.oneof_index is not None and not self.proto3_optional


@dataclass
class ProtoEnumValue:
    name: str
    number: int


@dataclass
class ProtoEnum:
    name: str
    full_name: str
    values: List[ProtoEnumValue] = field(default_factory=list)


@dataclass
class ProtoMessage:
    name: str
    full_name: str
    fields: List[ProtoField] = field(default_factory=list)
    nested_messages: List[ProtoMessage] = field(default_factory=list)
    enums: List[ProtoEnum] = field(default_factory=list)
    oneofs: List[str] = field(default_factory=list)
    extensions: List[ProtoField] = field(default_factory=list)
    map_entry: bool = False

    def oneof_fields(self, index: int) -> List[ProtoField]:
        return [f for f in self.fields if f.oneof_index == index]

    def is_synthetic_oneof(self, index: int) -> bool:
        """proto3 `optional` fields live in a generated single-member oneof."""
        members = self.oneof_fields(index)
        return bool(members) and all(f.proto3_optional for f in members)


@dataclass
class ProtoMethod:
    name: str
    input_type: str
    output_type: str
    client_streaming: bool = False
    server_streaming: bool = False


@dataclass
class ProtoService:
    name: str
    full_name: str
    methods: List[ProtoMethod] = field(default_factory=list)


@dataclass
class ProtoFile:
    name: str
    package: str = ""
    syntax: str = PROTO2_SYNTAX
    dependencies: List[str] = field(default_factory=list)
    messages: List[ProtoMessage] = field(default_factory=list)
    enums: List[ProtoEnum] = field(default_factory=list)
    services: List[ProtoService] = field(default_factory=list)
    extensions: List[ProtoField] = field(default_factory=list)

    @property
    def is_proto2(self) -> bool:
        return self.syntax == PROTO2_SYNTAX


@dataclass
class GeneratedFile:
    name: str
    content: str
