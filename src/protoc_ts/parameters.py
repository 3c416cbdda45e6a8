from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from protoc_ts.errors import ParameterError

SERVICE_TRUE_DEPRECATION = (
    "protoc-gen-ts warning: The service=true parameter has been deprecated. "
    "Use service=grpc-web instead."
)


class ServiceParameter(enum.Enum):
    NONE = "none"
    GRPC_WEB = "grpc-web"
    GRPC_WEB_PROMISES = "grpc-promise"
    GRPC_NODE = "grpc-node"


class ModeParameter(enum.Enum):
    NONE = "none"
    GRPC_JS = "grpc-js"


@dataclass(frozen=True)
class GenerationParameters:
    service: ServiceParameter = ServiceParameter.NONE
    mode: ModeParameter = ModeParameter.NONE


def _split_parameter_string(parameter: str) -> Dict[str, List[str]]:
    """Split `a=b,c=d` into {key: [values]}; a key given twice keeps both."""
    values: Dict[str, List[str]] = {}
    if not parameter:
        return values
    for chunk in parameter.split(","):
        if not chunk:
            continue
        key, _, value = chunk.partition("=")
        values.setdefault(key, []).append(value)
    return values


def _single(values: Dict[str, List[str]], key: str) -> Optional[str]:
    found = values.get(key)
    if found is None:
        return None
    if len(found) > 1:
        raise ParameterError(f"Unrecognised {key} parameter: {','.join(found)}")
    return found[0]


def get_service_parameter(service: Optional[str]) -> ServiceParameter:
    if service is None:
        return ServiceParameter.NONE
    if service == "true":
        print(SERVICE_TRUE_DEPRECATION, file=sys.stderr)
        return ServiceParameter.GRPC_WEB
    if service == "grpc-web":
        return ServiceParameter.GRPC_WEB
    if service == "grpc-promise":
        return ServiceParameter.GRPC_WEB_PROMISES
    if service == "grpc-node":
        return ServiceParameter.GRPC_NODE
    raise ParameterError(f"Unrecognised service parameter: {service}")


def get_mode_parameter(mode: Optional[str]) -> ModeParameter:
    if mode is None:
        return ModeParameter.NONE
    if mode == "grpc-js":
        return ModeParameter.GRPC_JS
    raise ParameterError(f"Unrecognised mode parameter: {mode}")


def parse_parameter(parameter: str) -> GenerationParameters:
    """Decode the protoc parameter string, e.g. `service=grpc-web,mode=grpc-js`.

    Only `service` and `mode` are read; other keys are ignored. An
    unrecognised value for either raises ParameterError.
    """
    values = _split_parameter_string(parameter)
    return GenerationParameters(
        service=get_service_parameter(_single(values, "service")),
        mode=get_mode_parameter(_single(values, "mode")),
    )
