from __future__ import annotations

from typing import Dict, Set

from google.protobuf import descriptor_pb2 as d2

from protoc_ts.errors import UnhandledCaseError
from protoc_ts.models import (
    LABEL_OPTIONAL,
    LABEL_REPEATED,
    LABEL_REQUIRED,
    PROTO2_SYNTAX,
    PROTO3_SYNTAX,
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoFile,
    ProtoMessage,
    ProtoMethod,
    ProtoService,
)

FIELD_TYPE_NAMES: Dict[int, str] = {
    d2.FieldDescriptorProto.TYPE_DOUBLE: "double",
    d2.FieldDescriptorProto.TYPE_FLOAT: "float",
    d2.FieldDescriptorProto.TYPE_INT64: "int64",
    d2.FieldDescriptorProto.TYPE_UINT64: "uint64",
    d2.FieldDescriptorProto.TYPE_INT32: "int32",
    d2.FieldDescriptorProto.TYPE_FIXED64: "fixed64",
    d2.FieldDescriptorProto.TYPE_FIXED32: "fixed32",
    d2.FieldDescriptorProto.TYPE_BOOL: "bool",
    d2.FieldDescriptorProto.TYPE_STRING: "string",
    d2.FieldDescriptorProto.TYPE_GROUP: "group",
    d2.FieldDescriptorProto.TYPE_MESSAGE: "message",
    d2.FieldDescriptorProto.TYPE_BYTES: "bytes",
    d2.FieldDescriptorProto.TYPE_UINT32: "uint32",
    d2.FieldDescriptorProto.TYPE_ENUM: "enum",
    d2.FieldDescriptorProto.TYPE_SFIXED32: "sfixed32",
    d2.FieldDescriptorProto.TYPE_SFIXED64: "sfixed64",
    d2.FieldDescriptorProto.TYPE_SINT32: "sint32",
    d2.FieldDescriptorProto.TYPE_SINT64: "sint64",
}

LABEL_NAMES: Dict[int, str] = {
    d2.FieldDescriptorProto.LABEL_OPTIONAL: LABEL_OPTIONAL,
    d2.FieldDescriptorProto.LABEL_REQUIRED: LABEL_REQUIRED,
    d2.FieldDescriptorProto.LABEL_REPEATED: LABEL_REPEATED,
}

JSTYPE_NAMES: Dict[int, str] = {
    d2.FieldOptions.JS_NORMAL: "normal",
    d2.FieldOptions.JS_STRING: "string",
    d2.FieldOptions.JS_NUMBER: "number",
}


def _join(scope: str, name: str) -> str:
    return f"{scope}.{name}" if scope else name


def _load_field(fd: d2.FieldDescriptorProto, map_entries: Set[str]) -> ProtoField:
    if fd.type not in FIELD_TYPE_NAMES:
        raise UnhandledCaseError(f"Unknown field type {fd.type} for field {fd.name}")
    if fd.label not in LABEL_NAMES:
        raise UnhandledCaseError(f"Unknown field label {fd.label} for field {fd.name}")

    jstype = "normal"
    if fd.HasField("options") and fd.options.HasField("jstype"):
        jstype = JSTYPE_NAMES.get(fd.options.jstype, "normal")

    type_name = fd.type_name.lstrip(".")
    label = LABEL_NAMES[fd.label]
    return ProtoField(
        name=fd.name,
        number=fd.number,
        type=FIELD_TYPE_NAMES[fd.type],
        type_name=type_name,
        label=label,
        oneof_index=fd.oneof_index if fd.HasField("oneof_index") else None,
        jstype=jstype,
        proto3_optional=fd.proto3_optional,
        is_map=label == LABEL_REPEATED and type_name in map_entries,
    )


def _load_enum(desc: d2.EnumDescriptorProto, scope: str) -> ProtoEnum:
    return ProtoEnum(
        name=desc.name,
        full_name=_join(scope, desc.name),
        values=[ProtoEnumValue(name=v.name, number=v.number) for v in desc.value],
    )


def _load_message(desc: d2.DescriptorProto, scope: str) -> ProtoMessage:
    full_name = _join(scope, desc.name)
    map_entries = {
        _join(full_name, n.name) for n in desc.nested_type if n.options.map_entry
    }
    return ProtoMessage(
        name=desc.name,
        full_name=full_name,
        fields=[_load_field(f, map_entries) for f in desc.field],
        nested_messages=[_load_message(n, full_name) for n in desc.nested_type],
        enums=[_load_enum(e, full_name) for e in desc.enum_type],
        oneofs=[o.name for o in desc.oneof_decl],
        extensions=[_load_field(f, set()) for f in desc.extension],
        map_entry=desc.options.map_entry,
    )


def load_file(fd: d2.FileDescriptorProto) -> ProtoFile:
    """Map a FileDescriptorProto into the generator's model.

    An empty syntax means proto2.
    """
    syntax = fd.syntax or PROTO2_SYNTAX
    if syntax not in (PROTO2_SYNTAX, PROTO3_SYNTAX):
        raise UnhandledCaseError(f"Unsupported syntax '{syntax}' in {fd.name}")

    package = fd.package
    services = []
    for svc in fd.service:
        methods = [
            ProtoMethod(
                name=m.name,
                input_type=m.input_type.lstrip("."),
                output_type=m.output_type.lstrip("."),
                client_streaming=m.client_streaming,
                server_streaming=m.server_streaming,
            )
            for m in svc.method
        ]
        services.append(ProtoService(name=svc.name, full_name=_join(package, svc.name), methods=methods))

    return ProtoFile(
        name=fd.name,
        package=package,
        syntax=syntax,
        dependencies=list(fd.dependency),
        messages=[_load_message(m, package) for m in fd.message_type],
        enums=[_load_enum(e, package) for e in fd.enum_type],
        services=services,
        extensions=[_load_field(f, set()) for f in fd.extension],
    )
