"""HTTP transport for OpenAgenda requests."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from openagenda_sdk.exceptions import TransportFailure
from openagenda_sdk.request import FormBody, MultipartBody, RequestSpec

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpTransport:
    """Sends ``RequestSpec`` objects with an ``httpx.Client``.

    Client options are handed to ``httpx.Client`` as-is, so callers can set
    timeouts, proxies, default headers or a custom ``transport``.

    Example:
        >>> transport = HttpTransport({"timeout": 10.0})
        >>> body = transport.send(spec)
    """

    def __init__(self, client_options: dict[str, Any] | None = None):
        options = dict(client_options or {})
        options.setdefault("timeout", DEFAULT_TIMEOUT)
        self.client_options = options
        self._client = httpx.Client(**options)

    def send(self, spec: RequestSpec) -> str:
        """Dispatch a request and return the response body.

        Args:
            spec: The request to send.

        Returns:
            Response body text.

        Raises:
            TransportFailure: On network errors or non-2xx responses.
        """
        kwargs: dict[str, Any] = {
            "params": spec.query_params,
            "headers": spec.headers,
        }
        if isinstance(spec.body, FormBody):
            kwargs["data"] = spec.body.encode()
        elif isinstance(spec.body, MultipartBody):
            kwargs["files"] = spec.body.encode()

        logger.debug(f"{spec.verb} {spec.url} ({spec.operation.name})")

        try:
            response = self._client.request(spec.verb, spec.url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailure(f"Request failed: {e}") from e

        if not response.is_success:
            raise TransportFailure(
                f"API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        return response.text

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
