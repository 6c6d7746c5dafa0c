"""Request construction for OpenAgenda API calls.

Turns an operation name plus parameters into a transport-ready
``RequestSpec``. Nothing here touches the network.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from openagenda_sdk.endpoints import BASE_URL, Endpoints, Operation, resolve
from openagenda_sdk.exceptions import MalformedRequest, MissingParameter

PUBLIC_KEY_PARAM = "key"
ACCESS_TOKEN_HEADER = "access-token"

UNRESOLVED_RE = re.compile(r"\{[^{}/]*\}")


def encode_json(value: Any) -> str:
    """JSON-encode a payload value.

    Raises:
        MalformedRequest: If the value is not JSON serializable.
    """
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise MalformedRequest(f"Payload is not JSON serializable: {e}") from e


@dataclass(frozen=True)
class FormBody:
    """Urlencoded form entity."""

    fields: Mapping[str, Any]

    def encode(self) -> dict[str, str]:
        """Flatten field values to strings, JSON-encoding nested values."""
        encoded = {}
        for name, value in self.fields.items():
            if isinstance(value, (dict, list, tuple)):
                encoded[name] = encode_json(value)
            elif isinstance(value, bool):
                encoded[name] = "1" if value else "0"
            elif value is None:
                encoded[name] = ""
            else:
                encoded[name] = str(value)
        return encoded


@dataclass(frozen=True)
class MultipartBody:
    """Ordered multipart/form-data parts without filenames."""

    parts: Sequence[tuple[str, str]]

    def encode(self) -> list[tuple[str, tuple[None, str]]]:
        """Parts in the shape ``httpx`` expects for ``files=``."""
        return [(name, (None, contents)) for name, contents in self.parts]


Body = FormBody | MultipartBody


@dataclass
class RequestSpec:
    """A fully resolved HTTP request."""

    operation: Operation
    url: str
    path_params: dict[str, Any] = field(default_factory=dict)
    query_params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: Body | None = None

    @property
    def verb(self) -> str:
        return self.operation.verb


def resolve_path(operation: Operation, path_params: Mapping[str, Any]) -> str:
    """Substitute template placeholders with URL-quoted values.

    Raises:
        MissingParameter: If a placeholder has no value.
        MalformedRequest: If a placeholder survives substitution.
    """
    path = operation.template
    for placeholder in operation.placeholders:
        value = path_params.get(placeholder)
        if value is None or value == "":
            raise MissingParameter(placeholder, operation.name)
        path = path.replace(f"{{{placeholder}}}", quote(str(value), safe=""))

    leftover = UNRESOLVED_RE.search(path)
    if leftover:
        raise MalformedRequest(
            f"Unresolved placeholder {leftover.group(0)} in {operation.name} URL: {path}"
        )
    return path


def build(
    operation: str | Endpoints | Operation,
    path_params: Mapping[str, Any] | None = None,
    query_params: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    body: Body | None = None,
    public_key: str | None = None,
    base_url: str = BASE_URL,
) -> RequestSpec:
    """Build a request for an operation.

    Args:
        operation: Operation name, ``Endpoints`` member or ``Operation``.
        path_params: Values for the URL template placeholders.
        query_params: Query string parameters.
        headers: Extra request headers.
        body: ``FormBody`` or ``MultipartBody`` for write operations.
        public_key: API public key, always sent as the ``key`` query parameter.
        base_url: API root URL.

    Returns:
        The request description.

    Raises:
        UnknownOperation: If the operation is not registered.
        MissingParameter: If a path placeholder has no value.
        MalformedRequest: If the public key is missing or the body does not
            fit the operation.
    """
    if not isinstance(operation, Operation):
        operation = resolve(operation)

    if not public_key:
        raise MalformedRequest(
            "No public key configured. Set OPENAGENDA_PUBLIC_KEY or pass public_key."
        )

    path_params = dict(path_params or {})
    path = resolve_path(operation, path_params)

    if body is not None:
        if not operation.has_body:
            raise MalformedRequest(f"{operation.verb} operation {operation.name} takes no body")
        if not isinstance(body, (FormBody, MultipartBody)):
            raise MalformedRequest(f"Unsupported body type: {type(body).__name__}")

    # The public key always wins over whatever the caller passed under its name
    params = dict(query_params or {})
    params[PUBLIC_KEY_PARAM] = public_key

    return RequestSpec(
        operation=operation,
        url=f"{base_url.rstrip('/')}{path}",
        path_params=path_params,
        query_params=params,
        headers=dict(headers or {}),
        body=body,
    )
