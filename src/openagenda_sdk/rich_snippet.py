"""schema.org ``Event`` structured data for OpenAgenda events.

Projects an event record, as returned by the events endpoints, into a
JSON-LD mapping that search engines use for rich snippets. Every optional
block is omitted when its source data is missing so the output stays
schema-valid.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, TypedDict

SCHEMA_ORG = "https://schema.org"
DEFAULT_LOCALE = "en"

ATTENDANCE_MODES = {
    1: "OfflineEventAttendanceMode",
    2: "OnlineEventAttendanceMode",
    3: "MixedEventAttendanceMode",
}

EVENT_STATUSES = {
    1: "EventScheduled",
    2: "EventRescheduled",
    3: "EventMovedOnline",
    4: "EventPostponed",
    5: "EventScheduled",  # full
    6: "EventCancelled",
}

STATUS_FULL = 5

LocalizedText = str | Mapping[str, str]


class Timing(TypedDict, total=False):
    begin: str
    end: str


class Registration(TypedDict, total=False):
    type: str
    value: str


class Image(TypedDict, total=False):
    base: str
    filename: str


class Location(TypedDict, total=False):
    name: str
    address: str
    city: str
    region: str
    postalCode: str
    countryCode: str
    latitude: float
    longitude: float


class AgeRange(TypedDict, total=False):
    min: int
    max: int


class EventRecord(TypedDict, total=False):
    """Fields of an OpenAgenda event used for structured data.

    Every field is optional; records usually carry many more keys.
    """

    title: LocalizedText
    description: LocalizedText
    timings: list[Timing]
    firstTiming: Timing
    lastTiming: Timing
    attendanceMode: dict[str, int]
    status: dict[str, int]
    registration: list[Registration]
    image: Image
    location: Location
    onlineAccessLink: str
    age: AgeRange


def locale_value(field: Any, locale: str = DEFAULT_LOCALE) -> str:
    """Pick the best value of a possibly localized field.

    Plain strings are returned as-is. For a locale mapping the requested
    locale wins, then English, then the first entry.

    Args:
        field: A string or a ``{locale: text}`` mapping.
        locale: Preferred locale code.

    Returns:
        The localized text, or an empty string.
    """
    if isinstance(field, str):
        return field
    if not isinstance(field, Mapping) or not field:
        return ""

    if field.get(locale):
        return field[locale]
    if field.get(DEFAULT_LOCALE):
        return field[DEFAULT_LOCALE]

    first = next(iter(field.values()))
    return first if isinstance(first, str) else ""


def schema_url(term: str) -> str:
    return f"{SCHEMA_ORG}/{term}"


def _code(block: Any) -> int | None:
    """Read the integer ``id`` of an enumeration block like ``status``."""
    if not isinstance(block, Mapping):
        return None
    try:
        return int(block.get("id"))
    except (TypeError, ValueError):
        return None


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _time_span(event: Mapping[str, Any]) -> tuple[str, str]:
    timings = event.get("timings")
    if isinstance(timings, Sequence) and not isinstance(timings, str) and timings:
        first, last = _mapping(timings[0]), _mapping(timings[-1])
    else:
        first, last = _mapping(event.get("firstTiming")), _mapping(event.get("lastTiming"))
    return first.get("begin") or "", last.get("end") or ""


def _offers(event: Mapping[str, Any], status: int | None) -> list[dict[str, str]]:
    availability = schema_url("SoldOut" if status == STATUS_FULL else "InStock")
    offers = []
    for entry in event.get("registration") or []:
        entry = _mapping(entry)
        if entry.get("type") != "link":
            continue
        offers.append(
            {
                "@type": "Offer",
                "url": entry.get("value", ""),
                "availability": availability,
            }
        )
    return offers


def _place(location: Mapping[str, Any]) -> dict[str, Any]:
    if not location:
        return {}

    address = {
        "@type": "PostalAddress",
        "streetAddress": location.get("address"),
        "addressLocality": location.get("city"),
        "addressRegion": location.get("region"),
        "postalCode": location.get("postalCode"),
        "addressCountry": location.get("countryCode"),
    }
    place: dict[str, Any] = {"@type": "Place"}
    if location.get("name"):
        place["name"] = location["name"]
    place["address"] = {key: value for key, value in address.items() if value}

    latitude, longitude = location.get("latitude"), location.get("longitude")
    if latitude is not None and longitude is not None:
        place["geo"] = {
            "@type": "GeoCoordinates",
            "latitude": latitude,
            "longitude": longitude,
        }
    return place


def _virtual_location(event: Mapping[str, Any]) -> dict[str, str]:
    link = event.get("onlineAccessLink")
    if not link:
        return {}
    return {"@type": "VirtualLocation", "url": link}


def project(
    event: EventRecord | Mapping[str, Any],
    url: str = "",
    locale: str = DEFAULT_LOCALE,
) -> dict[str, Any]:
    """Build the schema.org ``Event`` JSON-LD for an event record.

    Args:
        event: Event record as returned by the API.
        url: Canonical URL of the event page. Sets ``@id`` and ``url``.
        locale: Locale for ``title`` and ``description``.

    Returns:
        JSON-LD mapping, ready for ``json.dumps``.
    """
    begin, end = _time_span(event)

    mode_code = _code(event.get("attendanceMode"))
    attendance_mode = ATTENDANCE_MODES.get(mode_code, ATTENDANCE_MODES[1])

    status_code = _code(event.get("status"))
    event_status = EVENT_STATUSES.get(status_code, EVENT_STATUSES[1])

    schema: dict[str, Any] = {
        "@context": SCHEMA_ORG,
        "@type": "Event",
        "name": locale_value(event.get("title"), locale),
        "description": locale_value(event.get("description"), locale),
        "startDate": begin,
        "endDate": end,
        "eventAttendanceMode": schema_url(attendance_mode),
        "eventStatus": schema_url(event_status),
    }

    offers = _offers(event, status_code)
    if offers:
        schema["offers"] = offers

    if url:
        schema["@id"] = url
        schema["url"] = url

    image = _mapping(event.get("image"))
    image_url = f"{image.get('base') or ''}{image.get('filename') or ''}"
    if image_url:
        schema["image"] = image_url

    place = _place(_mapping(event.get("location")))
    virtual_location = _virtual_location(event)

    if attendance_mode == ATTENDANCE_MODES[2]:
        location: Any = virtual_location
    elif attendance_mode == ATTENDANCE_MODES[3]:
        # Both sides are kept even when one of them is empty
        location = [place, virtual_location]
    else:
        location = place
    if location:
        schema["location"] = location

    age = _mapping(event.get("age"))
    if age:
        schema["typicalAgeRange"] = f"{_as_int(age.get('min'))}-{_as_int(age.get('max'))}"

    return schema


def to_json_ld(
    event: EventRecord | Mapping[str, Any],
    url: str = "",
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Serialize the structured data of an event to a JSON string."""
    return json.dumps(project(event, url, locale), ensure_ascii=False)


def render_script_tag(
    event: EventRecord | Mapping[str, Any],
    url: str = "",
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Wrap the structured data in a ``<script type="application/ld+json">`` element."""
    # "</" would close the script element early
    payload = to_json_ld(event, url, locale).replace("</", "<\\/")
    return f'<script type="application/ld+json">{payload}</script>'
