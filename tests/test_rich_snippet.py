"""Tests for schema.org Event structured data."""

import json

import pytest

from openagenda_sdk.rich_snippet import locale_value, project, render_script_tag, to_json_ld


@pytest.fixture
def event():
    """A fully populated offline event."""
    return {
        "uid": 99,
        "title": {"fr": "Concert de jazz", "en": "Jazz concert"},
        "description": {"fr": "Un concert", "en": "A concert"},
        "timings": [
            {"begin": "2026-06-01T20:00:00+02:00", "end": "2026-06-01T22:00:00+02:00"},
            {"begin": "2026-06-02T20:00:00+02:00", "end": "2026-06-02T22:00:00+02:00"},
        ],
        "attendanceMode": {"id": 1},
        "status": {"id": 1},
        "registration": [
            {"type": "email", "value": "tickets@example.com"},
            {"type": "link", "value": "https://tickets.example.com/99"},
        ],
        "image": {"base": "https://cdn.example.com/main/", "filename": "jazz.jpg"},
        "location": {
            "name": "Salle Pleyel",
            "address": "252 Rue du Faubourg Saint-Honoré",
            "city": "Paris",
            "region": "",
            "postalCode": "75008",
            "countryCode": "FR",
            "latitude": 48.8777,
            "longitude": 2.3017,
        },
        "age": {"min": "7", "max": 99},
    }


class TestLocaleValue:
    """Test localized field resolution."""

    def test_requested_locale(self):
        assert locale_value({"en": "A", "fr": "B"}, "fr") == "B"

    def test_first_entry_when_english_missing(self):
        assert locale_value({"fr": "B"}, "de") == "B"

    def test_english_fallback(self):
        assert locale_value({"fr": "B", "en": "A"}, "de") == "A"

    def test_empty_locale_value_falls_back(self):
        assert locale_value({"fr": "", "en": "A"}, "fr") == "A"

    def test_plain_string(self):
        assert locale_value("plain", "fr") == "plain"
        assert locale_value("", "fr") == ""

    def test_absent_or_empty(self):
        assert locale_value(None) == ""
        assert locale_value({}) == ""


class TestProject:
    """Test event projection."""

    def test_full_event(self, event):
        """Should project every populated block."""
        data = project(event, "https://example.com/events/99", "fr")

        assert data["@context"] == "https://schema.org"
        assert data["@type"] == "Event"
        assert data["name"] == "Concert de jazz"
        assert data["description"] == "Un concert"
        assert data["startDate"] == "2026-06-01T20:00:00+02:00"
        assert data["endDate"] == "2026-06-02T22:00:00+02:00"
        assert data["eventAttendanceMode"] == "https://schema.org/OfflineEventAttendanceMode"
        assert data["eventStatus"] == "https://schema.org/EventScheduled"
        assert data["@id"] == data["url"] == "https://example.com/events/99"
        assert data["image"] == "https://cdn.example.com/main/jazz.jpg"
        assert data["offers"] == [
            {
                "@type": "Offer",
                "url": "https://tickets.example.com/99",
                "availability": "https://schema.org/InStock",
            }
        ]
        assert data["location"] == {
            "@type": "Place",
            "name": "Salle Pleyel",
            "address": {
                "@type": "PostalAddress",
                "streetAddress": "252 Rue du Faubourg Saint-Honoré",
                "addressLocality": "Paris",
                "postalCode": "75008",
                "addressCountry": "FR",
            },
            "geo": {"@type": "GeoCoordinates", "latitude": 48.8777, "longitude": 2.3017},
        }
        assert data["typicalAgeRange"] == "7-99"

    def test_minimal_event(self):
        """Should degrade gracefully when every field is absent."""
        data = project({})

        assert data == {
            "@context": "https://schema.org",
            "@type": "Event",
            "name": "",
            "description": "",
            "startDate": "",
            "endDate": "",
            "eventAttendanceMode": "https://schema.org/OfflineEventAttendanceMode",
            "eventStatus": "https://schema.org/EventScheduled",
        }

    def test_first_and_last_timing_fallback(self):
        """Should use firstTiming/lastTiming when timings are absent."""
        data = project(
            {
                "timings": [],
                "firstTiming": {"begin": "2026-01-01T10:00:00Z", "end": "2026-01-01T11:00:00Z"},
                "lastTiming": {"begin": "2026-03-01T10:00:00Z", "end": "2026-03-01T11:00:00Z"},
            }
        )
        assert data["startDate"] == "2026-01-01T10:00:00Z"
        assert data["endDate"] == "2026-03-01T11:00:00Z"

    def test_online_event(self):
        """Should use the virtual location only for online events."""
        data = project({"attendanceMode": {"id": 2}, "onlineAccessLink": "https://x"})

        assert data["eventAttendanceMode"] == "https://schema.org/OnlineEventAttendanceMode"
        assert data["location"] == {"@type": "VirtualLocation", "url": "https://x"}

    def test_online_event_ignores_place(self, event):
        event["attendanceMode"] = {"id": 2}
        assert "location" not in project(event)

    def test_mixed_event(self, event):
        """Should list the place then the virtual location."""
        event["attendanceMode"] = {"id": 3}
        event["onlineAccessLink"] = "https://stream.example.com"

        location = project(event)["location"]

        assert [item["@type"] for item in location] == ["Place", "VirtualLocation"]
        assert location[1]["url"] == "https://stream.example.com"

    def test_mixed_event_keeps_empty_side(self):
        """Should keep both entries even when one is empty."""
        data = project({"attendanceMode": {"id": 3}, "onlineAccessLink": "https://x"})
        assert data["location"] == [{}, {"@type": "VirtualLocation", "url": "https://x"}]

    def test_unknown_attendance_mode_defaults_to_offline(self):
        data = project({"attendanceMode": {"id": 9}})
        assert data["eventAttendanceMode"] == "https://schema.org/OfflineEventAttendanceMode"

    @pytest.mark.parametrize(
        ("code", "status"),
        [
            (2, "EventRescheduled"),
            (3, "EventMovedOnline"),
            (4, "EventPostponed"),
            (5, "EventScheduled"),
            (6, "EventCancelled"),
            (42, "EventScheduled"),
        ],
    )
    def test_event_status(self, code, status):
        assert project({"status": {"id": code}})["eventStatus"] == f"https://schema.org/{status}"

    def test_full_event_sold_out(self, event):
        """Should mark offers sold out when the event is full."""
        event["status"] = {"id": 5}
        assert project(event)["offers"][0]["availability"] == "https://schema.org/SoldOut"

    def test_no_registration_links(self, event):
        """Should omit offers rather than emit an empty list."""
        event["registration"] = []
        assert "offers" not in project(event)

        event["registration"] = [{"type": "phone", "value": "+33 1 23 45 67 89"}]
        assert "offers" not in project(event)

    def test_no_url(self, event):
        data = project(event)
        assert "@id" not in data
        assert "url" not in data

    def test_place_without_coordinates(self):
        """Should omit geo and empty address parts."""
        data = project({"location": {"name": "Parc", "city": "Lyon"}})
        assert data["location"] == {
            "@type": "Place",
            "name": "Parc",
            "address": {"@type": "PostalAddress", "addressLocality": "Lyon"},
        }

    def test_image_with_null_parts(self):
        """Should treat null image parts as empty."""
        assert project({"image": {"base": None, "filename": "a.jpg"}})["image"] == "a.jpg"

    def test_empty_image_omitted(self):
        assert "image" not in project({"image": {"base": "", "filename": None}})

    def test_age_range_coerced(self):
        assert project({"age": {"min": 3.0, "max": None}})["typicalAgeRange"] == "3-0"

    def test_plain_string_title(self):
        assert project({"title": "Fête"}, locale="de")["name"] == "Fête"


class TestSerialization:
    """Test JSON-LD output helpers."""

    def test_to_json_ld(self, event):
        data = json.loads(to_json_ld(event, "https://example.com/events/99"))
        assert data == project(event, "https://example.com/events/99")

    def test_render_script_tag(self):
        html = render_script_tag({"title": "</script><b>"})
        assert html.startswith('<script type="application/ld+json">')
        assert html.endswith("</script>")
        assert html.count("</script>") == 1
