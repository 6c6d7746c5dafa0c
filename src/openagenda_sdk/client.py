"""OpenAgenda API client.

Every raw accessor returns the response body as a JSON string. Failures are
returned as a ``{"error": message}`` JSON string instead of being raised, so
callers check the decoded payload for an ``error`` key. The one exception is
``AuthenticationFailed``, raised by write operations when no access token
can be obtained.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from typing import Any

from openagenda_sdk import config
from openagenda_sdk.auth import AccessTokenManager
from openagenda_sdk.endpoints import BASE_URL, Endpoints
from openagenda_sdk.exceptions import AuthenticationFailed, DecodingFailure, OpenAgendaError
from openagenda_sdk.request import (
    ACCESS_TOKEN_HEADER,
    Body,
    FormBody,
    MultipartBody,
    build,
    encode_json,
)
from openagenda_sdk.rich_snippet import DEFAULT_LOCALE, EventRecord, locale_value, project
from openagenda_sdk.transport import HttpTransport

logger = logging.getLogger(__name__)

DETAIL_PARAMS = {"includeLabels": 1, "detailed": 1}


def error_envelope(message: str) -> str:
    """Encode an error message the way failed calls report it."""
    return json.dumps({"error": message})


def decode(content: str) -> dict[str, Any]:
    """Decode a JSON object response body.

    Raises:
        DecodingFailure: If the body is not a JSON object.
    """
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as e:
        raise DecodingFailure(f"Invalid JSON response: {e}") from e
    if not isinstance(data, dict):
        raise DecodingFailure(f"Expected a JSON object, got {type(data).__name__}")
    return data


class OpenAgendaClient:
    """OpenAgenda API client.

    Example:
        >>> client = OpenAgendaClient(public_key="your-public-key")
        >>> events = json.loads(client.get_events(12345678, {"size": 20}))
        >>> snippet = client.get_event_rich_snippet(events["events"][0], url, "fr")

    Write operations also need the secret key:
        >>> client = OpenAgendaClient(public_key="pk", secret_key="sk")
        >>> client.create_event(12345678, {"title": {"fr": "Concert"}})
    """

    def __init__(
        self,
        public_key: str | None = None,
        client_options: dict[str, Any] | None = None,
        secret_key: str | None = None,
        base_url: str = BASE_URL,
    ):
        """Initialize the client.

        Args:
            public_key: API public key. If None, reads OPENAGENDA_PUBLIC_KEY.
            client_options: Options passed to ``httpx.Client`` unexamined.
            secret_key: API secret key, needed for write operations.
                If None, reads OPENAGENDA_SECRET_KEY.
            base_url: API root URL.
        """
        self.public_key = public_key or config.get_public_key()
        self.secret_key = secret_key or config.get_secret_key()
        self.client_options = client_options or {}
        self.base_url = base_url

        self._transport: HttpTransport | None = None
        self._tokens: AccessTokenManager | None = None
        # Reentrant: tokens builds the transport while holding it
        self._setup_lock = threading.RLock()

    def get_client(self) -> HttpTransport:
        """Get or create the HTTP transport."""
        with self._setup_lock:
            if self._transport is None:
                self._transport = HttpTransport(self.client_options)
            return self._transport

    @property
    def tokens(self) -> AccessTokenManager:
        with self._setup_lock:
            if self._tokens is None:
                self._tokens = AccessTokenManager(
                    self.get_client(),
                    public_key=self.public_key,
                    secret_key=self.secret_key,
                )
            return self._tokens

    def get_access_token(self) -> str | None:
        """Get the access token, exchanging the secret key on first use.

        Returns:
            The access token, or None when no secret key is configured.

        Raises:
            AuthenticationFailed: If the token exchange fails.
        """
        return self.tokens.get_access_token()

    def _require_access_token(self) -> str:
        token = self.get_access_token()
        if token is None:
            raise AuthenticationFailed(
                "No secret key configured. "
                "Set OPENAGENDA_SECRET_KEY or pass secret_key to use write operations."
            )
        return token

    def _request(
        self,
        operation: Endpoints,
        path_params: Mapping[str, Any] | None = None,
        query_params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Body | None = None,
    ) -> str:
        """Build and send a request, returning the body or an error envelope."""
        try:
            spec = build(
                operation,
                path_params,
                query_params,
                headers,
                body,
                public_key=self.public_key,
                base_url=self.base_url,
            )
            return self.get_client().send(spec)
        except OpenAgendaError as e:
            logger.warning(f"OpenAgenda {operation.value} request failed: {e}")
            return error_envelope(str(e))

    def get_my_agenda(self, agenda_uid: int) -> str:
        """Get one of the agendas linked to the public key, with membership info."""
        return self._request(Endpoints.MY_AGENDA, {"agendaUid": agenda_uid})

    def get_my_agendas(self) -> str:
        """Get the agendas linked to the public key."""
        return self._request(Endpoints.MY_AGENDAS)

    def get_my_agendas_uids(self) -> list[Any]:
        """Get the UIDs of the agendas linked to the public key.

        Returns:
            Agenda UIDs in API order, or an empty list on any error.
        """
        try:
            agendas = decode(self.get_my_agendas())
        except DecodingFailure as e:
            logger.debug(f"Could not decode my agendas: {e}")
            return []

        if agendas.get("error"):
            return []
        items = agendas.get("items")
        if not isinstance(items, list):
            return []

        return [item["uid"] for item in items if isinstance(item, Mapping) and "uid" in item]

    def has_permission(self, agenda_uid: int) -> bool:
        """Check whether the public key's user is a member of the agenda."""
        try:
            agenda = decode(self.get_my_agenda(agenda_uid))
        except DecodingFailure:
            return False

        me = agenda.get("me")
        return isinstance(me, Mapping) and bool(me.get("member"))

    def get_agenda(self, agenda_uid: int) -> str:
        """Get an agenda, including its schema."""
        return self._request(Endpoints.AGENDAS, {"agendaUid": agenda_uid})

    def get_agenda_additional_fields(self, agenda_uid: int) -> list[str]:
        """Get the names of the agenda-specific event fields.

        Args:
            agenda_uid: The agenda UID.

        Returns:
            Field names of schema entries that are not standard event
            fields. Empty when not a member or on any error.
        """
        if not self.has_permission(agenda_uid):
            return []

        try:
            agenda = decode(self.get_agenda(agenda_uid))
        except DecodingFailure:
            return []
        if agenda.get("error"):
            return []

        schema = agenda.get("schema")
        fields = schema.get("fields") if isinstance(schema, Mapping) else None
        if not isinstance(fields, list):
            return []

        return [
            field["field"]
            for field in fields
            if isinstance(field, Mapping)
            and "field" in field
            and field.get("fieldType") != "event"
        ]

    def get_events(self, agenda_uid: int, params: Mapping[str, Any] | None = None) -> str:
        """List the events of an agenda.

        Args:
            agenda_uid: The agenda UID.
            params: Query parameters such as search, sort and filters.
                ``includeLabels`` and ``detailed`` default to 1 and may be
                overridden here.

        Returns:
            Response body as JSON.
        """
        return self._request(
            Endpoints.EVENTS,
            {"agendaUid": agenda_uid},
            {**DETAIL_PARAMS, **(params or {})},
        )

    def get_event(self, agenda_uid: int, event_uid: int) -> str:
        """Get a single event of an agenda, with labels and details."""
        return self._request(
            Endpoints.EVENT,
            {"agendaUid": agenda_uid, "eventUid": event_uid},
            dict(DETAIL_PARAMS),
        )

    def get_locations(self, agenda_uid: int, params: Mapping[str, Any] | None = None) -> str:
        """List the locations of an agenda."""
        return self._request(Endpoints.LOCATIONS, {"agendaUid": agenda_uid}, params)

    def create_event(self, agenda_uid: int, event_data: Mapping[str, Any]) -> str:
        """Create a new event in the agenda.

        Args:
            agenda_uid: The agenda UID.
            event_data: The event payload.

        Returns:
            Response body as JSON.

        Raises:
            AuthenticationFailed: If no access token can be obtained.
        """
        try:
            payload = encode_json(event_data)
        except OpenAgendaError as e:
            logger.warning(f"OpenAgenda createEvent payload rejected: {e}")
            return error_envelope(str(e))

        token = self._require_access_token()
        return self._request(
            Endpoints.CREATE_EVENT,
            {"agendaUid": agenda_uid},
            headers={ACCESS_TOKEN_HEADER: token},
            body=MultipartBody([("data", payload)]),
        )

    def update_event(self, agenda_uid: int, event_uid: int, event_data: Mapping[str, Any]) -> str:
        """Update an existing event.

        Raises:
            AuthenticationFailed: If no access token can be obtained.
        """
        token = self._require_access_token()
        return self._request(
            Endpoints.UPDATE_EVENT,
            {"agendaUid": agenda_uid, "eventUid": event_uid},
            headers={ACCESS_TOKEN_HEADER: token},
            body=FormBody(dict(event_data)),
        )

    def delete_event(self, agenda_uid: int, event_uid: int) -> str:
        """Delete an event.

        Raises:
            AuthenticationFailed: If no access token can be obtained.
        """
        token = self._require_access_token()
        return self._request(
            Endpoints.DELETE_EVENT,
            {"agendaUid": agenda_uid, "eventUid": event_uid},
            headers={ACCESS_TOKEN_HEADER: token},
        )

    def get_event_rich_snippet(
        self,
        event: EventRecord | Mapping[str, Any],
        url: str = "",
        locale: str = DEFAULT_LOCALE,
    ) -> dict[str, Any]:
        """Get the schema.org JSON-LD data of an event for rich snippets."""
        return project(event, url, locale)

    def get_event_field_locale_value(self, field: Any, locale: str = DEFAULT_LOCALE) -> str:
        """Get a localized field value, falling back to English then the first entry."""
        return locale_value(field, locale)

    def close(self):
        """Close the HTTP client."""
        if self._transport is not None:
            self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
