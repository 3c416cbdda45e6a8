from __future__ import annotations

import enum
from pathlib import Path
from typing import Dict, List

from jinja2 import Environment, FileSystemLoader

from protoc_ts.errors import UnhandledCaseError
from protoc_ts.export_map import ExportMap
from protoc_ts.generator.field_types import namespaced_type_name
from protoc_ts.models import GeneratedFile, ProtoFile, ProtoMethod, ProtoService
from protoc_ts.naming import (
    file_path_to_pseudo_namespace,
    import_path_for,
    lowercase_first,
    replace_proto_suffix,
    strip_proto_suffix,
)
from protoc_ts.parameters import GenerationParameters, ModeParameter, ServiceParameter

GRPC_WEB_SERVICE_SUFFIX = "_service"
GRPC_NODE_SERVICE_SUFFIX = "_grpc_pb"


class CallType(enum.Enum):
    UNARY = "unary"
    SERVER_STREAMING = "server_streaming"
    CLIENT_STREAMING = "client_streaming"
    BIDI_STREAMING = "bidi_streaming"


# grpc-node server handler type per call shape
SERVER_HANDLERS: Dict[CallType, str] = {
    CallType.UNARY: "handleUnaryCall",
    CallType.SERVER_STREAMING: "handleServerStreamingCall",
    CallType.CLIENT_STREAMING: "handleClientStreamingCall",
    CallType.BIDI_STREAMING: "handleBidiStreamingCall",
}

GRPC_NODE_MODULES: Dict[ModeParameter, str] = {
    ModeParameter.NONE: "grpc",
    ModeParameter.GRPC_JS: "@grpc/grpc-js",
}


def call_type(method: ProtoMethod) -> CallType:
    if method.client_streaming and method.server_streaming:
        return CallType.BIDI_STREAMING
    if method.client_streaming:
        return CallType.CLIENT_STREAMING
    if method.server_streaming:
        return CallType.SERVER_STREAMING
    return CallType.UNARY


def _js_bool(value: bool) -> str:
    return "true" if value else "false"


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class _ServiceContextBuilder:
    """Collects template data for a file's services and the imports they need."""

    def __init__(self, proto_file: ProtoFile, export_map: ExportMap):
        self.proto_file = proto_file
        self.export_map = export_map
        # the file's own generated module always comes first
        self.imported_files: List[str] = [proto_file.name]

    def _type_reference(self, full_name: str) -> str:
        entry = self.export_map.resolve_message(full_name, self.proto_file.name)
        if entry.file_name not in self.imported_files:
            self.imported_files.append(entry.file_name)
        return namespaced_type_name(entry)

    def _method(self, service: ProtoService, method: ProtoMethod) -> Dict:
        kind = call_type(method)
        return {
            "name": method.name,
            "js_name": lowercase_first(method.name),
            "path": f"/{service.full_name}/{method.name}",
            "call_type": kind.value,
            "server_handler": SERVER_HANDLERS[kind],
            "request_type": self._type_reference(method.input_type),
            "response_type": self._type_reference(method.output_type),
            "request_stream": _js_bool(method.client_streaming),
            "response_stream": _js_bool(method.server_streaming),
        }

    def build(self) -> Dict:
        services = [
            {
                "name": service.name,
                "full_name": service.full_name,
                "methods": [self._method(service, m) for m in service.methods],
            }
            for service in self.proto_file.services
        ]
        imports = [
            {
                "namespace": file_path_to_pseudo_namespace(f),
                "path": import_path_for(self.proto_file.name, f),
            }
            for f in self.imported_files
        ]
        return {
            "package": self.proto_file.package,
            "file_name": self.proto_file.name,
            "services": services,
            "imports": imports,
        }


def _render(template_name: str, **context) -> str:
    return _get_template_env().get_template(template_name).render(**context)


def _grpc_web_files(context: Dict, proto_file: ProtoFile, promises: bool) -> List[GeneratedFile]:
    base_name = replace_proto_suffix(proto_file.name) + GRPC_WEB_SERVICE_SUFFIX
    return [
        GeneratedFile(
            name=f"{base_name}.d.ts",
            content=_render("grpc_web_service.d.ts.j2", promises=promises, **context),
        ),
        GeneratedFile(
            name=f"{base_name}.js",
            content=_render("grpc_web_service.js.j2", promises=promises, **context),
        ),
    ]


def generate_grpc_web_service(proto_file: ProtoFile, export_map: ExportMap) -> List[GeneratedFile]:
    """Callback-style @improbable-eng/grpc-web client."""
    context = _ServiceContextBuilder(proto_file, export_map).build()
    return _grpc_web_files(context, proto_file, promises=False)


def generate_grpc_web_promise_services(proto_file: ProtoFile, export_map: ExportMap) -> List[GeneratedFile]:
    """grpc-web client whose unary calls return a Promise."""
    context = _ServiceContextBuilder(proto_file, export_map).build()
    return _grpc_web_files(context, proto_file, promises=True)


def generate_grpc_node_service(
    proto_file: ProtoFile,
    export_map: ExportMap,
    mode: ModeParameter,
) -> List[GeneratedFile]:
    """Declarations for the client that grpc-tools' node plugin generates."""
    context = _ServiceContextBuilder(proto_file, export_map).build()
    content = _render("grpc_node_service.d.ts.j2", grpc_module=GRPC_NODE_MODULES[mode], **context)
    name = strip_proto_suffix(proto_file.name) + GRPC_NODE_SERVICE_SUFFIX + ".d.ts"
    return [GeneratedFile(name=name, content=content)]


def generate_service_files(
    proto_file: ProtoFile,
    export_map: ExportMap,
    parameters: GenerationParameters,
) -> List[GeneratedFile]:
    service = parameters.service
    if service is ServiceParameter.NONE or not proto_file.services:
        return []
    if service is ServiceParameter.GRPC_WEB:
        return generate_grpc_web_service(proto_file, export_map)
    if service is ServiceParameter.GRPC_WEB_PROMISES:
        return generate_grpc_web_promise_services(proto_file, export_map)
    if service is ServiceParameter.GRPC_NODE:
        return generate_grpc_node_service(proto_file, export_map, parameters.mode)
    raise UnhandledCaseError(f"No service generator for {service}")
