from __future__ import annotations

from typing import Dict, List

from protoc_ts.errors import UnhandledCaseError
from protoc_ts.export_map import ExportMap
from protoc_ts.generator.field_types import BYTES_TYPE, TypeResolver
from protoc_ts.generator.printer import Printer
from protoc_ts.models import ProtoEnum, ProtoField, ProtoFile, ProtoMessage
from protoc_ts.naming import (
    field_camel_name,
    file_path_to_pseudo_namespace,
    import_path_for,
    normalise_field_object_name,
    one_of_name,
    snake_to_camel,
    uppercase_first,
)


def has_field_presence(field: ProtoField, proto_file: ProtoFile) -> bool:
    """Whether the runtime generates has/clear accessors for a field."""
    if field.is_repeated:
        return False
    if field.oneof_index is not None or field.proto3_optional:
        return True
    if field.is_message:
        return True
    return proto_file.is_proto2


def print_enum(enum: ProtoEnum, indent_level: int) -> str:
    printer = Printer(indent_level)
    interface_name = f"{enum.name}Map"
    printer.print_empty_ln()
    printer.print_ln(f"export interface {interface_name} {{")
    for value in enum.values:
        printer.print_indented_ln(f"{value.name.upper()}: {value.number};")
    printer.print_ln("}")
    printer.print_empty_ln()
    printer.print_ln(f"export const {enum.name}: {interface_name};")
    return printer.get_output()


def print_oneof_decl(name: str, fields: List[ProtoField], indent_level: int) -> str:
    printer = Printer(indent_level)
    printer.print_empty_ln()
    printer.print_ln(f"export enum {one_of_name(name)}Case {{")
    printer.print_indented_ln(f"{name.upper()}_NOT_SET = 0,")
    for field in fields:
        printer.print_indented_ln(f"{field.name.upper()} = {field.number},")
    printer.print_ln("}")
    return printer.get_output()


def print_extension(extension: ProtoField, resolver: TypeResolver, indent_level: int) -> str:
    printer = Printer(indent_level)
    printer.print_empty_ln()
    field_type = resolver.field_type(extension.type, extension.type_name, extension.jstype)
    if extension.is_repeated:
        field_type = f"Array<{field_type}>"
    printer.print_ln(
        f"export const {snake_to_camel(extension.name)}: jspb.ExtensionFieldInfo<{field_type}>;"
    )
    return printer.get_output()


def _print_field(
    field: ProtoField,
    proto_file: ProtoFile,
    resolver: TypeResolver,
    printer: Printer,
    to_object: Printer,
) -> None:
    camel_name = field_camel_name(field.name)
    upper_name = uppercase_first(camel_name)

    if field.is_map:
        entry = resolver.map_entry(field.type_name)
        if entry is None:
            raise UnhandledCaseError(f"Map field {field.name} refers to {field.type_name}, not a map entry")
        key, value = entry.key, entry.value
        key_type = resolver.field_type(key.type, key.type_name, key.jstype)
        value_type = resolver.field_type(value.type, value.type_name, value.jstype)
        key_object = key_type + (".AsObject" if key.is_message else "")
        value_object = value_type + (".AsObject" if value.is_message else "")
        printer.print_indented_ln(f"get{upper_name}Map(): jspb.Map<{key_type}, {value_type}>;")
        printer.print_indented_ln(f"clear{upper_name}Map(): void;")
        to_object.print_indented_ln(f"{camel_name}Map: Array<[{key_object}, {value_object}]>,")
        return

    export_type = resolver.field_type(field.type, field.type_name, field.jstype)
    has_clear = False

    def print_clear() -> None:
        nonlocal has_clear
        if not has_clear:
            has_clear = True
            suffix = "List" if field.is_repeated else ""
            printer.print_indented_ln(f"clear{upper_name}{suffix}(): void;")

    if has_field_presence(field, proto_file):
        printer.print_indented_ln(f"has{upper_name}(): boolean;")
        print_clear()

    if field.is_repeated:
        print_clear()
        optional_value = "?" if field.is_message else ""
        if field.type == "bytes":
            printer.print_indented_ln(f"get{upper_name}List(): Array<{BYTES_TYPE}>;")
            printer.print_indented_ln(f"get{upper_name}List_asU8(): Array<Uint8Array>;")
            printer.print_indented_ln(f"get{upper_name}List_asB64(): Array<string>;")
        else:
            printer.print_indented_ln(f"get{upper_name}List(): Array<{export_type}>;")
        printer.print_indented_ln(f"set{upper_name}List(value: Array<{export_type}>): void;")
        printer.print_indented_ln(
            f"add{upper_name}(value{optional_value}: {export_type}, index?: number): {export_type};"
        )
        object_type = export_type + (".AsObject" if field.is_message else "")
        to_object.print_indented_ln(f"{camel_name}List: Array<{object_type}>,")
        return

    object_name = normalise_field_object_name(camel_name)
    if field.is_message:
        print_clear()
        printer.print_indented_ln(f"get{upper_name}(): {export_type} | undefined;")
        printer.print_indented_ln(f"set{upper_name}(value?: {export_type}): void;")
        to_object.print_indented_ln(f"{object_name}?: {export_type}.AsObject,")
        return

    if field.type == "bytes":
        printer.print_indented_ln(f"get{upper_name}(): {export_type};")
        printer.print_indented_ln(f"get{upper_name}_asU8(): Uint8Array;")
        printer.print_indented_ln(f"get{upper_name}_asB64(): string;")
    else:
        printer.print_indented_ln(f"get{upper_name}(): {export_type};")
    printer.print_indented_ln(f"set{upper_name}(value: {export_type}): void;")

    # proto3 scalars always carry a default; proto2 and proto3 `optional` may be unset
    can_be_undefined = proto_file.is_proto2 or field.proto3_optional
    to_object.print_indented_ln(f"{object_name}{'?' if can_be_undefined else ''}: {export_type},")


def print_message(
    message: ProtoMessage,
    proto_file: ProtoFile,
    resolver: TypeResolver,
    indent_level: int,
) -> str:
    # map entry tuples are exposed through the owning field's jspb.Map
    if message.map_entry:
        return ""

    name = message.name
    object_type_name = f"{name}.AsObject"
    to_object = Printer(indent_level + 1)
    to_object.print_ln("export type AsObject = {")

    printer = Printer(indent_level)
    printer.print_empty_ln()
    printer.print_ln(f"export class {name} extends jspb.Message {{")

    oneof_groups: Dict[int, List[ProtoField]] = {}
    for field in message.fields:
        if field.in_real_oneof:
            oneof_groups.setdefault(field.oneof_index, []).append(field)
        _print_field(field, proto_file, resolver, printer, to_object)
        printer.print_empty_ln()

    to_object.print_ln("}")

    real_oneofs = [
        (index, oneof)
        for index, oneof in enumerate(message.oneofs)
        if not message.is_synthetic_oneof(index)
    ]
    for _, oneof in real_oneofs:
        case_name = one_of_name(oneof)
        printer.print_indented_ln(f"get{case_name}Case(): {name}.{case_name}Case;")

    printer.print_indented_ln("serializeBinary(): Uint8Array;")
    printer.print_indented_ln(f"toObject(includeInstance?: boolean): {object_type_name};")
    printer.print_indented_ln(f"static toObject(includeInstance: boolean, msg: {name}): {object_type_name};")
    printer.print_indented_ln("static extensions: {[key: number]: jspb.ExtensionFieldInfo<jspb.Message>};")
    printer.print_indented_ln(
        "static extensionsBinary: {[key: number]: jspb.ExtensionFieldBinaryInfo<jspb.Message>};"
    )
    printer.print_indented_ln(f"static serializeBinaryToWriter(message: {name}, writer: jspb.BinaryWriter): void;")
    printer.print_indented_ln(f"static deserializeBinary(bytes: Uint8Array): {name};")
    printer.print_indented_ln(
        f"static deserializeBinaryFromReader(message: {name}, reader: jspb.BinaryReader): {name};"
    )
    printer.print_ln("}")
    printer.print_empty_ln()

    printer.print_ln(f"export namespace {name} {{")
    printer.print(to_object.get_output())

    for nested in message.nested_messages:
        printer.print(print_message(nested, proto_file, resolver, indent_level + 1))
    for enum in message.enums:
        printer.print(print_enum(enum, indent_level + 1))
    for index, oneof in real_oneofs:
        printer.print(print_oneof_decl(oneof, oneof_groups.get(index, []), indent_level + 1))
    for extension in message.extensions:
        printer.print(print_extension(extension, resolver, indent_level + 1))

    printer.print_ln("}")
    return printer.get_output()


def print_file_descriptor_tsd(proto_file: ProtoFile, export_map: ExportMap) -> str:
    """Render the `<name>_pb.d.ts` declaration for one proto file."""
    resolver = TypeResolver(proto_file.name, export_map)

    body = Printer(0)
    for message in proto_file.messages:
        body.print(print_message(message, proto_file, resolver, 0))
    for extension in proto_file.extensions:
        body.print(print_extension(extension, resolver, 0))
    for enum in proto_file.enums:
        body.print(print_enum(enum, 0))
    body.print_empty_ln()

    imports = list(proto_file.dependencies)
    imports.extend(f for f in resolver.referenced_files if f not in imports)

    printer = Printer(0)
    printer.print_ln(f"// package: {proto_file.package}")
    printer.print_ln(f"// file: {proto_file.name}")
    printer.print_empty_ln()
    printer.print_ln('import * as jspb from "google-protobuf";')
    for dependency in imports:
        pseudo_namespace = file_path_to_pseudo_namespace(dependency)
        printer.print_ln(f'import * as {pseudo_namespace} from "{import_path_for(proto_file.name, dependency)}";')
    printer.print(body.get_output())
    return printer.get_output()
