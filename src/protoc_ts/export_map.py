from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from protoc_ts.errors import UnhandledCaseError, UnresolvedTypeError
from protoc_ts.models import ProtoEnum, ProtoField, ProtoFile, ProtoMessage
from protoc_ts.naming import within_namespace

MESSAGE = "message"
ENUM = "enum"


@dataclass(frozen=True)
class MapEntry:
    key: ProtoField
    value: ProtoField


@dataclass(frozen=True)
class ExportEntry:
    kind: str
    full_name: str
    pkg: str
    file_name: str
    map_entry: Optional[MapEntry] = None

    @property
    def exported_name(self) -> str:
        """Name to use inside the declaring module (package stripped)."""
        return within_namespace(self.full_name, self)


def _map_entry_of(message: ProtoMessage) -> Optional[MapEntry]:
    if not message.map_entry:
        return None
    by_name = {f.name: f for f in message.fields}
    if "key" not in by_name or "value" not in by_name:
        raise UnhandledCaseError(f"Map entry {message.full_name} lacks a key or value field")
    return MapEntry(key=by_name["key"], value=by_name["value"])


class ExportMap:
    """Index of every message and enum in a request by fully qualified name.

    Built in one pass over all files before any output is generated, then
    only read.
    """

    def __init__(self, messages: Mapping[str, ExportEntry], enums: Mapping[str, ExportEntry]):
        self._messages = MappingProxyType(dict(messages))
        self._enums = MappingProxyType(dict(enums))

    @classmethod
    def from_files(cls, files: Iterable[ProtoFile]) -> "ExportMap":
        messages: Dict[str, ExportEntry] = {}
        enums: Dict[str, ExportEntry] = {}

        def add_enum(enum: ProtoEnum, proto_file: ProtoFile) -> None:
            enums[enum.full_name] = ExportEntry(ENUM, enum.full_name, proto_file.package, proto_file.name)

        def add_message(message: ProtoMessage, proto_file: ProtoFile) -> None:
            messages[message.full_name] = ExportEntry(
                MESSAGE,
                message.full_name,
                proto_file.package,
                proto_file.name,
                map_entry=_map_entry_of(message),
            )
            for nested in message.nested_messages:
                add_message(nested, proto_file)
            for enum in message.enums:
                add_enum(enum, proto_file)

        for proto_file in files:
            for message in proto_file.messages:
                add_message(message, proto_file)
            for enum in proto_file.enums:
                add_enum(enum, proto_file)

        return cls(messages, enums)

    @property
    def messages(self) -> Mapping[str, ExportEntry]:
        return self._messages

    @property
    def enums(self) -> Mapping[str, ExportEntry]:
        return self._enums

    def get_message(self, full_name: str) -> Optional[ExportEntry]:
        return self._messages.get(full_name)

    def get_enum(self, full_name: str) -> Optional[ExportEntry]:
        return self._enums.get(full_name)

    def resolve_message(self, full_name: str, referencing_file: str) -> ExportEntry:
        entry = self.get_message(full_name)
        if entry is None:
            raise UnresolvedTypeError(MESSAGE, full_name, referencing_file)
        return entry

    def resolve_enum(self, full_name: str, referencing_file: str) -> ExportEntry:
        entry = self.get_enum(full_name)
        if entry is None:
            raise UnresolvedTypeError(ENUM, full_name, referencing_file)
        return entry

    def __len__(self) -> int:
        return len(self._messages) + len(self._enums)
