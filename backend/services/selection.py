"""
Per-session attendee selection.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

MANUAL_DOMAIN = "manual.entry"


def selection_key(event_id: str, email: str) -> str:
    return f"{event_id}-{email}"


def manual_attendee(name: str) -> dict:
    email = re.sub(r"\s+", ".", name.lower()) + f"@{MANUAL_DOMAIN}"
    return {"email": email, "display_name": name}


def is_manual(email: str) -> bool:
    return email.endswith(f"@{MANUAL_DOMAIN}")


class AttendeeSelection:
    def __init__(self):
        # key -> {"event_id", "attendee"}, insertion ordered
        self.selected: dict[str, dict] = {}
        # email -> contact details
        self.enhanced: dict[str, dict] = {}
        self.job_id: Optional[str] = None

    def toggle(self, event_id: str, attendee: dict) -> bool:
        """
        Select or deselect an attendee of an event.

        Returns True when the attendee was newly selected and has no cached
        contact details yet, i.e. the caller should look them up.
        """
        key = selection_key(event_id, attendee["email"])
        if key in self.selected:
            del self.selected[key]
            return False

        self.selected[key] = {"event_id": event_id, "attendee": attendee}
        return attendee["email"] not in self.enhanced and not is_manual(attendee["email"])

    def add_manual(self, name: str, now: Optional[datetime] = None) -> tuple[str, dict]:
        name = name.strip()
        if not name:
            raise ValueError("Attendee name must not be empty")
        now = now or datetime.now()
        event_id = f"manual-{int(now.timestamp() * 1000)}"
        attendee = manual_attendee(name)
        # never a deselect, even when the same name lands in the same millisecond
        self.selected[selection_key(event_id, attendee["email"])] = {
            "event_id": event_id,
            "attendee": attendee,
        }
        return event_id, attendee

    def remember(self, email: str, details: Optional[dict]) -> None:
        if details:
            self.enhanced[email] = details

    def resolve_name(self, attendee: dict) -> str:
        details = self.enhanced.get(attendee["email"], {})
        if details.get("first_name") and details.get("last_name"):
            return f"{details['first_name']} {details['last_name']}"
        return attendee.get("display_name") or attendee["email"].split("@")[0]

    def research_attendees(self) -> list[dict]:
        return [
            {"name": self.resolve_name(s["attendee"]), "email": s["attendee"]["email"]}
            for s in self.selected.values()
        ]

    def clear(self) -> None:
        self.selected.clear()
        self.job_id = None

    def __len__(self) -> int:
        return len(self.selected)
