"""Access token lifecycle for OpenAgenda write operations.

The secret key is exchanged once for a bearer access token, which is then
reused for the lifetime of the manager. Tokens are never refreshed or
invalidated here.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING

from openagenda_sdk.endpoints import Endpoints
from openagenda_sdk.exceptions import AuthenticationFailed, OpenAgendaError
from openagenda_sdk.request import MultipartBody, build

if TYPE_CHECKING:
    from openagenda_sdk.transport import HttpTransport

logger = logging.getLogger(__name__)


class AccessTokenManager:
    """Lazily obtains and caches the access token.

    States are ``NoToken`` (``access_token is None``) and ``HasToken``.
    The only transition is ``NoToken -> HasToken`` on the first successful
    exchange. A lock keeps concurrent callers from issuing more than one
    exchange request; they all observe the same token.

    Example:
        >>> tokens = AccessTokenManager(transport, public_key="pk", secret_key="sk")
        >>> tokens.get_access_token()
        'abc123'
    """

    GRANT_TYPE = "authorization_code"

    def __init__(
        self,
        transport: HttpTransport,
        public_key: str | None = None,
        secret_key: str | None = None,
    ):
        self.transport = transport
        self.public_key = public_key
        self.secret_key = secret_key
        self._access_token: str | None = None
        self._lock = threading.Lock()

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @property
    def has_token(self) -> bool:
        return self._access_token is not None

    def get_access_token(self) -> str | None:
        """Return the cached token, exchanging the secret key on first use.

        Returns:
            The access token, or None when no secret key is configured.

        Raises:
            AuthenticationFailed: If the exchange fails or returns no token.
                The manager stays tokenless so a later call can retry.
        """
        if self._access_token is not None:
            return self._access_token
        if not self.secret_key:
            return None

        with self._lock:
            # Another thread may have finished the exchange while we waited
            if self._access_token is None:
                self._access_token = self._exchange()
        return self._access_token

    def _exchange(self) -> str:
        """Trade the secret key for an access token."""
        spec = build(
            Endpoints.REQUEST_ACCESS_TOKEN,
            body=MultipartBody(
                [
                    ("grant_type", self.GRANT_TYPE),
                    ("code", self.secret_key),
                ]
            ),
            public_key=self.public_key,
        )

        try:
            content = self.transport.send(spec)
        except OpenAgendaError as e:
            raise AuthenticationFailed(f"Unable to get access token: {e}") from e

        try:
            data = json.loads(content)
        except ValueError as e:
            raise AuthenticationFailed(
                f"Unable to get access token: invalid response: {e}"
            ) from e

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationFailed("Unable to get access token: no access_token in response")

        logger.info("Obtained OpenAgenda access token")
        return token
