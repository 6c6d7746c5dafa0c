"""OpenAgenda API client SDK."""

from openagenda_sdk.auth import AccessTokenManager
from openagenda_sdk.client import OpenAgendaClient
from openagenda_sdk.endpoints import Endpoints, Operation, resolve
from openagenda_sdk.exceptions import (
    AuthenticationFailed,
    DecodingFailure,
    MalformedRequest,
    MissingParameter,
    OpenAgendaError,
    TransportFailure,
    UnknownOperation,
)
from openagenda_sdk.request import FormBody, MultipartBody, RequestSpec, build
from openagenda_sdk.rich_snippet import EventRecord, locale_value, project, to_json_ld
from openagenda_sdk.transport import HttpTransport

__all__ = [
    "OpenAgendaClient",
    "AccessTokenManager",
    "HttpTransport",
    "Endpoints",
    "Operation",
    "resolve",
    "build",
    "RequestSpec",
    "FormBody",
    "MultipartBody",
    "EventRecord",
    "project",
    "locale_value",
    "to_json_ld",
    "OpenAgendaError",
    "UnknownOperation",
    "MissingParameter",
    "MalformedRequest",
    "AuthenticationFailed",
    "TransportFailure",
    "DecodingFailure",
]
