from __future__ import annotations

import re
from typing import Dict, FrozenSet

PROTO_SUFFIX = ".proto"
GENERATED_SUFFIX = "_pb"

# Names the google-protobuf JS generator prefixes with `pb_` in toObject()
# output (js_generator.cc, IsReserved).
RESERVED_FIELD_NAMES: FrozenSet[str] = frozenset({
    "abstract", "boolean", "break", "byte", "case", "catch", "char", "class",
    "const", "continue", "debugger", "default", "delete", "do", "double",
    "else", "enum", "export", "extends", "false", "final", "finally", "float",
    "for", "function", "goto", "if", "implements", "import", "in",
    "instanceof", "int", "interface", "long", "native", "new", "null",
    "package", "private", "protected", "public", "return", "short", "static",
    "super", "switch", "synchronized", "this", "throw", "throws", "transient",
    "try", "typeof", "var", "void", "volatile", "while", "with",
})
RESERVED_PREFIX = "pb_"

# Well-known types ship prebuilt inside the google-protobuf npm package.
WELL_KNOWN_TYPES: Dict[str, str] = {
    f"google/protobuf/{name}.proto": f"google-protobuf/google/protobuf/{name}_pb"
    for name in (
        "any",
        "api",
        "descriptor",
        "duration",
        "empty",
        "field_mask",
        "source_context",
        "struct",
        "timestamp",
        "type",
        "wrappers",
    )
}
WELL_KNOWN_TYPES["google/protobuf/compiler/plugin.proto"] = (
    "google-protobuf/google/protobuf/compiler/plugin_pb"
)


def strip_prefix(s: str, prefix: str) -> str:
    if s.startswith(prefix):
        return s[len(prefix):]
    return s


def strip_proto_suffix(file_path: str) -> str:
    if file_path.endswith(PROTO_SUFFIX):
        return file_path[: -len(PROTO_SUFFIX)]
    return file_path


def file_path_to_pseudo_namespace(file_path: str) -> str:
    """Module identifier for a proto file: examplecom/a-b.proto -> examplecom_a_b_pb."""
    stem = strip_proto_suffix(file_path)
    return re.sub(r"[/.\-]", "_", stem) + GENERATED_SUFFIX


def replace_proto_suffix(file_path: str) -> str:
    """foo/bar.proto -> foo/bar_pb; other paths are returned unchanged."""
    if file_path.endswith(PROTO_SUFFIX):
        return strip_proto_suffix(file_path) + GENERATED_SUFFIX
    return file_path


def get_path_to_root(file_name: str) -> str:
    depth = len(file_name.split("/"))
    if depth == 1:
        return "./"
    return "../" * (depth - 1)


def relative_import_path(from_file: str, to_file: str) -> str:
    """Import path of to_file's generated module, as seen from from_file's."""
    return get_path_to_root(from_file) + replace_proto_suffix(to_file)


def import_path_for(from_file: str, dependency: str) -> str:
    if dependency in WELL_KNOWN_TYPES:
        return WELL_KNOWN_TYPES[dependency]
    return relative_import_path(from_file, dependency)


def snake_to_camel(s: str) -> str:
    return re.sub(r"_\w", lambda m: m.group(0)[1].upper(), s)


def uppercase_first(s: str) -> str:
    return s[:1].upper() + s[1:]


def lowercase_first(s: str) -> str:
    return s[:1].lower() + s[1:]


def one_of_name(name: str) -> str:
    """Case accessor stem for a oneof: my_choice -> MyChoice."""
    return uppercase_first(snake_to_camel(name.lower()))


def field_camel_name(name: str) -> str:
    """Accessor stem used by the JS runtime: Foo_Bar -> fooBar."""
    return snake_to_camel(strip_prefix(name.lower(), "_"))


def normalise_field_object_name(name: str) -> str:
    if name in RESERVED_FIELD_NAMES:
        return RESERVED_PREFIX + name
    return name


def within_namespace(full_name: str, entry) -> str:
    """Strip the declaring package from a qualified type name."""
    if entry.pkg:
        return full_name[len(entry.pkg) + 1:]
    return full_name
