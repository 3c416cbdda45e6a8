from __future__ import annotations

from typing import Dict, List, Optional

from protoc_ts.errors import UnhandledCaseError
from protoc_ts.export_map import ExportEntry, ExportMap, MapEntry
from protoc_ts.naming import file_path_to_pseudo_namespace

BYTES_TYPE = "Uint8Array | string"

# Proto scalar -> TypeScript type of the google-protobuf JS accessors
SCALAR_TYPE_MAP_TS: Dict[str, str] = {
    "double": "number",
    "float": "number",
    "int64": "number",
    "uint64": "number",
    "int32": "number",
    "fixed64": "number",
    "fixed32": "number",
    "uint32": "number",
    "sfixed32": "number",
    "sfixed64": "number",
    "sint32": "number",
    "sint64": "number",
    "bool": "boolean",
    "string": "string",
    "bytes": BYTES_TYPE,
}

INT64_TYPES = ("int64", "uint64", "fixed64", "sfixed64", "sint64")


def scalar_type(proto_type: str, jstype: str = "normal") -> str:
    if jstype == "string" and proto_type in INT64_TYPES:
        return "string"
    if proto_type not in SCALAR_TYPE_MAP_TS:
        raise UnhandledCaseError(f"No TypeScript type for proto type '{proto_type}'")
    return SCALAR_TYPE_MAP_TS[proto_type]


def namespaced_type_name(entry: ExportEntry) -> str:
    """Reference to a type through its file's pseudo-namespace import."""
    return f"{file_path_to_pseudo_namespace(entry.file_name)}.{entry.exported_name}"


def enum_value_type(enum_type: str) -> str:
    return f"{enum_type}Map[keyof {enum_type}Map]"


class TypeResolver:
    """Resolves field types for one output file and records which other
    files the references pull in."""

    def __init__(self, file_name: str, export_map: ExportMap):
        self.file_name = file_name
        self.export_map = export_map
        self.referenced_files: List[str] = []

    def _reference(self, entry: ExportEntry) -> str:
        if entry.file_name == self.file_name:
            return entry.exported_name
        if entry.file_name not in self.referenced_files:
            self.referenced_files.append(entry.file_name)
        return namespaced_type_name(entry)

    def message_type(self, full_name: str) -> str:
        return self._reference(self.export_map.resolve_message(full_name, self.file_name))

    def enum_type(self, full_name: str) -> str:
        return enum_value_type(self._reference(self.export_map.resolve_enum(full_name, self.file_name)))

    def map_entry(self, full_name: str) -> Optional[MapEntry]:
        return self.export_map.resolve_message(full_name, self.file_name).map_entry

    def field_type(self, proto_type: str, type_name: str, jstype: str = "normal") -> str:
        if proto_type in ("message", "group"):
            return self.message_type(type_name)
        if proto_type == "enum":
            return self.enum_type(type_name)
        return scalar_type(proto_type, jstype)
