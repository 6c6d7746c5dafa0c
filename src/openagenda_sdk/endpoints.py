"""Built-in OpenAgenda API endpoints.

Each operation maps a name to an HTTP verb and a URL template relative to
the API base URL. Templates use ``{placeholder}`` path parameters which are
substituted by the request builder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from openagenda_sdk.exceptions import UnknownOperation

BASE_URL = "https://api.openagenda.com/v2"

PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class Endpoints(str, Enum):
    """Names of the operations the API exposes."""

    MY_AGENDA = "my_agenda"
    MY_AGENDAS = "my_agendas"
    AGENDAS = "agendas"
    EVENTS = "events"
    EVENT = "event"
    LOCATIONS = "locations"
    REQUEST_ACCESS_TOKEN = "requestAccessToken"
    CREATE_EVENT = "createEvent"
    UPDATE_EVENT = "updateEvent"
    DELETE_EVENT = "deleteEvent"


@dataclass(frozen=True)
class Operation:
    """A named API operation."""

    name: str
    template: str
    verb: str = "GET"

    @property
    def placeholders(self) -> list[str]:
        """Placeholder names in template order."""
        return PLACEHOLDER_RE.findall(self.template)

    @property
    def has_body(self) -> bool:
        return self.verb not in ("GET", "HEAD")


OPERATIONS: dict[str, Operation] = {
    op.name: op
    for op in (
        Operation(Endpoints.MY_AGENDA.value, "/me/agendas/{agendaUid}"),
        Operation(Endpoints.MY_AGENDAS.value, "/me/agendas"),
        Operation(Endpoints.AGENDAS.value, "/agendas/{agendaUid}"),
        Operation(Endpoints.EVENTS.value, "/agendas/{agendaUid}/events"),
        Operation(Endpoints.EVENT.value, "/agendas/{agendaUid}/events/{eventUid}"),
        Operation(Endpoints.LOCATIONS.value, "/agendas/{agendaUid}/locations"),
        Operation(Endpoints.REQUEST_ACCESS_TOKEN.value, "/requestAccessToken", "POST"),
        Operation(Endpoints.CREATE_EVENT.value, "/agendas/{agendaUid}/events", "POST"),
        Operation(
            Endpoints.UPDATE_EVENT.value, "/agendas/{agendaUid}/events/{eventUid}", "POST"
        ),
        Operation(
            Endpoints.DELETE_EVENT.value, "/agendas/{agendaUid}/events/{eventUid}", "DELETE"
        ),
    )
}


def resolve(name: str | Endpoints) -> Operation:
    """Look up a registered operation.

    Args:
        name: Operation name or ``Endpoints`` member.

    Returns:
        The registered operation.

    Raises:
        UnknownOperation: If the name is not registered.
    """
    key = name.value if isinstance(name, Endpoints) else name
    try:
        return OPERATIONS[key]
    except KeyError:
        raise UnknownOperation(str(key)) from None
