"""
Google Calendar API wrapper with mock fallback.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from googleapiclient.errors import HttpError

from backend.config import settings
from backend.services.google_auth import build_service
from backend.utils.logger import get_logger

log = get_logger("services.calendar")


def normalize_event(e: dict) -> dict:
    """Flatten a Calendar v3 event into the shape the app works with."""
    start = e.get("start", {})
    end = e.get("end", {})
    conference_uri = ""
    for ep in e.get("conferenceData", {}).get("entryPoints", []):
        if ep.get("uri"):
            conference_uri = ep["uri"]
            break

    return {
        "id": e["id"],
        "summary": e.get("summary", ""),
        "description": e.get("description"),
        "location": e.get("location"),
        "start": start.get("dateTime", start.get("date", "")),
        "end": end.get("dateTime", end.get("date", "")),
        "all_day": "dateTime" not in start,
        "attendees": [
            {
                "email": a["email"],
                "display_name": a.get("displayName"),
                "response_status": a.get("responseStatus"),
                "organizer": a.get("organizer", False),
                "optional": a.get("optional", False),
            }
            for a in e.get("attendees", [])
            if a.get("email")
        ],
        "hangout_link": e.get("hangoutLink"),
        "conference_uri": conference_uri or None,
        "visibility": e.get("visibility", "default"),
        "link": e.get("htmlLink", ""),
    }


class CalendarService:
    """Thin wrapper – delegates to Google API or mock."""

    def __init__(self):
        if settings.MOCK_GOOGLE:
            log.info("Calendar running in MOCK mode")
            self._svc = None
        else:
            self._svc = build_service("calendar", "v3")

    # ── list ──────────────────────────────────────────
    def list_events(self, max_results: int = 100) -> list[dict]:
        if self._svc is None:
            return self._mock_list()[:max_results]

        try:
            now = datetime.now(timezone.utc).isoformat()
            result = (
                self._svc.events()
                .list(
                    calendarId="primary",
                    timeMin=now,
                    maxResults=max_results,
                    singleEvents=True,
                    orderBy="startTime",
                )
                .execute()
            )
            events = [normalize_event(e) for e in result.get("items", [])]
            log.info("Fetched %d upcoming events", len(events))
            return events
        except HttpError as exc:
            log.exception("list_events failed")
            raise RuntimeError(f"Calendar API error: {exc}") from exc

    # ── mocks ─────────────────────────────────────────
    @staticmethod
    def _mock_list() -> list[dict]:
        base = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
        raw = [
            {
                "id": "mock_1",
                "summary": "Partnership intro",
                "description": "Intro call with the platform team.",
                "start": {"dateTime": (base + timedelta(hours=2)).isoformat()},
                "end": {"dateTime": (base + timedelta(hours=2, minutes=30)).isoformat()},
                "attendees": [
                    {"email": "jane.doe@example.com", "displayName": "Jane Doe", "responseStatus": "accepted"},
                    {"email": "sam+ops@example.com", "responseStatus": "tentative", "optional": True},
                    {"email": "me@example.com", "responseStatus": "accepted", "organizer": True},
                ],
                "conferenceData": {
                    "entryPoints": [{"entryPointType": "video", "uri": "https://meet.google.com/abc-defg-hij"}]
                },
                "htmlLink": "mock://mock_1",
            },
            {
                "id": "mock_2",
                "summary": "Quarterly review",
                "location": "Room 4",
                "start": {"dateTime": (base + timedelta(days=1, hours=1)).isoformat()},
                "end": {"dateTime": (base + timedelta(days=1, hours=2)).isoformat()},
                "attendees": [
                    {"email": "alex.kim@example.com", "displayName": "Alex Kim", "responseStatus": "needsAction"},
                    {"email": "me@example.com", "responseStatus": "accepted", "organizer": True},
                ],
                "htmlLink": "mock://mock_2",
            },
            {
                "id": "mock_3",
                "summary": "Offsite",
                "start": {"date": (base + timedelta(days=3)).date().isoformat()},
                "end": {"date": (base + timedelta(days=4)).date().isoformat()},
                "htmlLink": "mock://mock_3",
            },
        ]
        return [normalize_event(e) for e in raw]
