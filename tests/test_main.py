import io

import pytest
from google.protobuf import descriptor_pb2 as d2
from google.protobuf.compiler.plugin_pb2 import CodeGeneratorRequest, CodeGeneratorResponse

from protoc_ts.errors import ParameterError, UnhandledCaseError
from protoc_ts.main import generate, main, run

F = d2.FieldDescriptorProto


def _make_request(parameter="", files_to_generate=("shapes/circle.proto",)):
    point = d2.FileDescriptorProto(name="geo/point.proto", package="geo", syntax="proto3")
    point.message_type.add(name="Point").field.add(
        name="x", number=1, type=F.TYPE_INT32, label=F.LABEL_OPTIONAL)

    circle = d2.FileDescriptorProto(name="shapes/circle.proto", package="shapes", syntax="proto3",
                                    dependency=["geo/point.proto"])
    circle.message_type.add(name="Circle").field.add(
        name="center", number=1, type=F.TYPE_MESSAGE, type_name=".geo.Point", label=F.LABEL_OPTIONAL)
    circle.service.add(name="Drawer").method.add(
        name="Draw", input_type=".shapes.Circle", output_type=".geo.Point")

    # the dependency is listed after the file that uses it
    return CodeGeneratorRequest(
        file_to_generate=list(files_to_generate),
        parameter=parameter,
        proto_file=[circle, point],
    )


class TestGenerate:
    def test_declarations_only_for_files_to_generate(self):
        response = generate(_make_request())

        assert [f.name for f in response.file] == ["shapes/circle_pb.d.ts"]
        assert 'import * as geo_point_pb from "../geo/point_pb";' in response.file[0].content
        assert response.supported_features == CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    def test_service_files_follow_declaration(self):
        response = generate(_make_request("service=grpc-web"))

        assert [f.name for f in response.file] == [
            "shapes/circle_pb.d.ts",
            "shapes/circle_pb_service.d.ts",
            "shapes/circle_pb_service.js",
        ]

    def test_grpc_node_service_file(self):
        response = generate(_make_request("service=grpc-node,mode=grpc-js"))

        names = [f.name for f in response.file]
        assert names == ["shapes/circle_pb.d.ts", "shapes/circle_grpc_pb.d.ts"]
        assert '"@grpc/grpc-js"' in response.file[1].content

    def test_parameter_override(self):
        response = generate(_make_request("service=grpc-web"), parameter="")
        assert len(response.file) == 1

    def test_several_files(self):
        response = generate(_make_request(files_to_generate=("geo/point.proto", "shapes/circle.proto")))
        assert [f.name for f in response.file] == ["geo/point_pb.d.ts", "shapes/circle_pb.d.ts"]

    def test_bad_parameter_fails_before_generation(self):
        with pytest.raises(ParameterError, match="bogus"):
            generate(_make_request("service=bogus"))

    def test_missing_descriptor_is_unhandled(self):
        with pytest.raises(UnhandledCaseError, match="nowhere.proto"):
            generate(_make_request(files_to_generate=("nowhere.proto",)))

    def test_deprecated_service_true_still_generates(self, capsys):
        response = generate(_make_request("service=true"))

        assert "shapes/circle_pb_service.js" in [f.name for f in response.file]
        assert "deprecated" in capsys.readouterr().err


class TestRun:
    def test_round_trip_bytes(self):
        data = _make_request().SerializeToString()

        response = CodeGeneratorResponse.FromString(run(data))

        assert response.file[0].name == "shapes/circle_pb.d.ts"


class TestMain:
    def test_reads_stdin_writes_stdout(self):
        stdin = io.BytesIO(_make_request("service=grpc-promise").SerializeToString())
        stdout = io.BytesIO()

        main([], stdin=stdin, stdout=stdout)

        response = CodeGeneratorResponse.FromString(stdout.getvalue())
        assert "return new Promise" in response.file[2].content

    def test_request_file_option(self, tmp_path):
        request_path = tmp_path / "request.bin"
        request_path.write_bytes(_make_request().SerializeToString())
        stdout = io.BytesIO()

        main(["--request", str(request_path), "--parameter", "service=grpc-node"], stdout=stdout)

        names = [f.name for f in CodeGeneratorResponse.FromString(stdout.getvalue()).file]
        assert "shapes/circle_grpc_pb.d.ts" in names

    def test_failure_writes_nothing_and_exits(self, capsys):
        stdin = io.BytesIO(_make_request("service=bogus").SerializeToString())
        stdout = io.BytesIO()

        with pytest.raises(SystemExit) as excinfo:
            main([], stdin=stdin, stdout=stdout)

        assert excinfo.value.code == 1
        assert stdout.getvalue() == b""
        err = capsys.readouterr().err
        assert err.startswith("FATAL:")
        assert "bogus" in err

    def test_missing_request_file_is_fatal(self, tmp_path, capsys):
        stdout = io.BytesIO()

        with pytest.raises(SystemExit) as excinfo:
            main(["--request", str(tmp_path / "absent.bin")], stdout=stdout)

        assert excinfo.value.code == 1
        assert stdout.getvalue() == b""
        err = capsys.readouterr().err
        assert err.startswith("FATAL:")
        assert "absent.bin" in err

    def test_unresolved_reference_aborts_run(self, capsys):
        request = _make_request()
        del request.proto_file[1]
        stdout = io.BytesIO()

        with pytest.raises(SystemExit):
            main([], stdin=io.BytesIO(request.SerializeToString()), stdout=stdout)

        assert stdout.getvalue() == b""
        assert "geo.Point" in capsys.readouterr().err
