import pytest
from google.protobuf import descriptor_pb2 as d2

from protoc_ts.descriptor_loader import load_file
from protoc_ts.errors import UnresolvedTypeError
from protoc_ts.export_map import ENUM, MESSAGE, ExportMap

F = d2.FieldDescriptorProto


def _make_file(name, package, messages=(), enums=()):
    fd = d2.FileDescriptorProto(name=name, package=package, syntax="proto3")
    for message in messages:
        fd.message_type.add(name=message)
    for enum in enums:
        fd.enum_type.add(name=enum).value.add(name="ZERO", number=0)
    return fd


def _build(*fds):
    return ExportMap.from_files([load_file(fd) for fd in fds])


class TestBuild:
    def test_registers_messages_and_enums_of_every_file(self):
        export_map = _build(
            _make_file("geo/point.proto", "geo", messages=["Point"], enums=["Color"]),
            _make_file("shapes/circle.proto", "shapes", messages=["Circle"]),
        )

        point = export_map.get_message("geo.Point")
        assert point.kind == MESSAGE
        assert point.file_name == "geo/point.proto"
        assert point.pkg == "geo"
        assert point.exported_name == "Point"
        assert export_map.get_enum("geo.Color").kind == ENUM
        assert export_map.get_message("shapes.Circle").file_name == "shapes/circle.proto"
        assert len(export_map) == 3

    def test_nested_types_keep_their_outer_path(self):
        fd = _make_file("a.proto", "com.example")
        outer = fd.message_type.add(name="Outer")
        inner = outer.nested_type.add(name="Inner")
        inner.enum_type.add(name="Kind").value.add(name="A", number=0)

        export_map = _build(fd)

        assert export_map.get_message("com.example.Outer.Inner").exported_name == "Outer.Inner"
        assert export_map.get_enum("com.example.Outer.Inner.Kind").exported_name == "Outer.Inner.Kind"

    def test_map_entries_carry_key_and_value(self):
        fd = _make_file("a.proto", "pkg")
        msg = fd.message_type.add(name="M")
        entry = msg.nested_type.add(name="LabelsEntry")
        entry.options.map_entry = True
        entry.field.add(name="key", number=1, type=F.TYPE_STRING, label=F.LABEL_OPTIONAL)
        entry.field.add(name="value", number=2, type=F.TYPE_MESSAGE, type_name=".pkg.M",
                        label=F.LABEL_OPTIONAL)

        map_entry = _build(fd).get_message("pkg.M.LabelsEntry").map_entry

        assert map_entry.key.type == "string"
        assert map_entry.value.type_name == "pkg.M"
        assert _build(fd).get_message("pkg.M").map_entry is None

    def test_file_order_does_not_matter(self):
        first = _make_file("a.proto", "a", messages=["A"])
        second = _make_file("b.proto", "b", messages=["B"], enums=["E"])

        forward = _build(first, second)
        backward = _build(second, first)

        assert dict(forward.messages) == dict(backward.messages)
        assert dict(forward.enums) == dict(backward.enums)

    def test_map_is_read_only(self):
        export_map = _build(_make_file("a.proto", "a", messages=["A"]))
        with pytest.raises(TypeError):
            export_map.messages["a.B"] = export_map.get_message("a.A")


class TestResolve:
    def test_miss_returns_none(self):
        export_map = _build(_make_file("a.proto", "a", messages=["A"]))
        assert export_map.get_message("a.Missing") is None
        assert export_map.get_enum("a.A") is None

    def test_resolve_miss_names_type_and_file(self):
        export_map = _build(_make_file("a.proto", "a", messages=["A"]))
        with pytest.raises(UnresolvedTypeError) as excinfo:
            export_map.resolve_message("a.Missing", "b/c.proto")
        message = str(excinfo.value)
        assert "a.Missing" in message
        assert "b/c.proto" in message
        assert "unhandled behaviour" in message

    def test_resolve_enum(self):
        export_map = _build(_make_file("a.proto", "a", enums=["E"]))
        assert export_map.resolve_enum("a.E", "a.proto").file_name == "a.proto"
        with pytest.raises(UnresolvedTypeError, match="No enum export for: a.F"):
            export_map.resolve_enum("a.F", "a.proto")
