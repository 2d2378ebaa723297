"""
Google People API lookups that enrich calendar attendees with names,
photos and organisations.
"""

from __future__ import annotations

import re
from typing import Optional

from googleapiclient.errors import HttpError

from backend.config import settings
from backend.services.google_auth import build_service
from backend.utils.logger import get_logger

log = get_logger("services.contacts")

SEARCH_READ_MASK = "names,emailAddresses,photos,organizations"
PROFILE_FIELDS = "names,emailAddresses,photos,organizations,nicknames,biographies"


def _cap(value: str) -> str:
    return value[:1].upper() + value[1:]


def details_from_email(email: str) -> Optional[dict]:
    """Best-effort names from the address itself, e.g. jane.doe@x -> Jane Doe."""
    if "@" not in email:
        return None
    local = email.split("@")[0]
    names = re.split(r"[.+]", local)
    return {
        "first_name": _cap(names[0]),
        "last_name": _cap(names[1]) if len(names) > 1 and names[1] else "",
        "profile_photo_url": None,
        "company": None,
        "title": None,
        "bio": None,
    }


def details_from_profile(email: str, profile: dict) -> dict:
    names = (profile.get("names") or [{}])[0]
    photo = (profile.get("photos") or [{}])[0].get("url")
    org = (profile.get("organizations") or [{}])[0]
    nickname = (profile.get("nicknames") or [{}])[0].get("value")
    bio = (profile.get("biographies") or [{}])[0].get("value")

    local_parts = email.split("@")[0].split(".")
    nick_parts = nickname.split(" ") if nickname else []

    first_name = names.get("givenName") or (nick_parts[0] if nick_parts else "") or local_parts[0]
    last_name = (
        names.get("familyName")
        or " ".join(nick_parts[1:])
        or " ".join(local_parts[1:])
    )

    return {
        "first_name": _cap(first_name),
        "last_name": _cap(last_name) if last_name else "",
        "profile_photo_url": photo,
        "company": org.get("name"),
        "title": org.get("title"),
        "bio": bio,
    }


class ContactsService:
    """Thin wrapper – delegates to Google People API or mock."""

    def __init__(self):
        if settings.MOCK_GOOGLE:
            log.info("Contacts running in MOCK mode")
            self._svc = None
        else:
            self._svc = build_service("people", "v1")

    def _search(self, query: str) -> list[dict]:
        result = (
            self._svc.people()
            .searchContacts(query=query, readMask=SEARCH_READ_MASK)
            .execute()
        )
        return [r["person"] for r in result.get("results", []) if r.get("person")]

    def find_person(self, email: str) -> Optional[dict]:
        """Try exact email, then local part, then a name guessed from the local part."""
        people = self._search(email)
        if people:
            log.debug("Found %s by exact email", email)
            return people[0]

        if "@" not in email:
            return None
        local = email.split("@")[0]

        wanted = email.lower()
        for person in self._search(local):
            addresses = [(e.get("value") or "").lower() for e in person.get("emailAddresses", [])]
            if wanted in addresses:
                log.debug("Found %s by local part", email)
                return person

        guessed = re.sub(r"[.+]", " ", local).lower()
        for person in self._search(guessed):
            full_name = ((person.get("names") or [{}])[0].get("displayName") or "").lower()
            if full_name and (full_name in guessed or guessed in full_name):
                log.debug("Found %s by name '%s'", email, guessed)
                return person

        return None

    def lookup(self, email: str) -> Optional[dict]:
        """Enhanced details for an attendee; falls back to parsing the address."""
        if self._svc is None:
            return details_from_email(email)

        try:
            person = self.find_person(email)
            if person and person.get("resourceName"):
                profile = (
                    self._svc.people()
                    .get(resourceName=person["resourceName"], personFields=PROFILE_FIELDS)
                    .execute()
                )
                details = details_from_profile(email, profile)
                log.info("Enhanced details for %s: %s", email, details)
                return details
        except HttpError as exc:
            log.warning("Contact lookup failed for %s: %s", email, exc)

        return details_from_email(email)
