from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional

from google.protobuf.compiler.plugin_pb2 import CodeGeneratorRequest, CodeGeneratorResponse
from google.protobuf.message import DecodeError

from protoc_ts.descriptor_loader import load_file
from protoc_ts.errors import GeneratorError, UnhandledCaseError
from protoc_ts.export_map import ExportMap
from protoc_ts.generator.declaration_generator import print_file_descriptor_tsd
from protoc_ts.generator.service_generator import generate_service_files
from protoc_ts.models import GeneratedFile, ProtoFile
from protoc_ts.naming import replace_proto_suffix
from protoc_ts.parameters import parse_parameter

DECLARATION_SUFFIX = ".d.ts"


def generate(request: CodeGeneratorRequest, parameter: Optional[str] = None) -> CodeGeneratorResponse:
    """Main pipeline: decode parameters, index every type, then emit.

    The export map covers all of `proto_file` (imports included) and is
    complete before the first file is rendered; output is only produced for
    `file_to_generate`.
    """
    parameters = parse_parameter(request.parameter if parameter is None else parameter)

    files: List[ProtoFile] = [load_file(fd) for fd in request.proto_file]
    export_map = ExportMap.from_files(files)
    files_by_name: Dict[str, ProtoFile] = {f.name: f for f in files}

    generated: List[GeneratedFile] = []
    for file_name in request.file_to_generate:
        proto_file = files_by_name.get(file_name)
        if proto_file is None:
            raise UnhandledCaseError(f"File to generate '{file_name}' has no descriptor in the request")
        generated.append(
            GeneratedFile(
                name=replace_proto_suffix(file_name) + DECLARATION_SUFFIX,
                content=print_file_descriptor_tsd(proto_file, export_map),
            )
        )
        generated.extend(generate_service_files(proto_file, export_map, parameters))

    response = CodeGeneratorResponse()
    response.supported_features = CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
    for out in generated:
        response.file.add(name=out.name, content=out.content)
    return response


def run(data: bytes, parameter: Optional[str] = None) -> bytes:
    """Serialized request in, serialized response out."""
    request = CodeGeneratorRequest.FromString(data)
    return generate(request, parameter=parameter).SerializeToString()


def main(argv: Optional[List[str]] = None, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None):
    parser = argparse.ArgumentParser(
        description="protoc plugin: TypeScript declarations and gRPC service stubs for google-protobuf",
    )
    parser.add_argument(
        "--request",
        required=False,
        help="Read a serialized CodeGeneratorRequest from this file instead of stdin",
    )
    parser.add_argument(
        "--parameter",
        required=False,
        help="Override the request's parameter string, e.g. service=grpc-web,mode=grpc-js",
    )
    args = parser.parse_args(argv)

    # nothing reaches stdout unless the whole response was generated
    try:
        if args.request:
            data = Path(args.request).read_bytes()
        else:
            data = (stdin or sys.stdin.buffer).read()
        output = run(data, parameter=args.parameter)
    except (GeneratorError, DecodeError, OSError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    stdout = stdout or sys.stdout.buffer
    stdout.write(output)
    stdout.flush()


if __name__ == "__main__":
    main()
