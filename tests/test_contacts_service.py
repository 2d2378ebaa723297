"""
Tests for People API attendee enrichment.
"""

from typing import Any, Dict, List

import pytest

from backend.services.contacts_service import (
    ContactsService,
    details_from_email,
    details_from_profile,
)


class _Call:
    def __init__(self, value):
        self._value = value

    def execute(self):
        return self._value


class FakePeopleAPI:
    """Minimal stand-in for ``build("people", "v1")``."""

    def __init__(self, search: Dict[str, List[dict]], profiles: Dict[str, dict]):
        self.search = search
        self.profiles = profiles
        self.queries: List[str] = []

    def people(self):
        return self

    def searchContacts(self, query: str, readMask: str):
        self.queries.append(query)
        return _Call({"results": [{"person": p} for p in self.search.get(query, [])]})

    def get(self, resourceName: str, personFields: str):
        return _Call(self.profiles[resourceName])


def _service(api: FakePeopleAPI) -> ContactsService:
    service = ContactsService()
    service._svc = api
    return service


JANE_PROFILE: Dict[str, Any] = {
    "resourceName": "people/1",
    "names": [{"givenName": "jane", "familyName": "Doe", "displayName": "Jane Doe"}],
    "photos": [{"url": "https://photos.example/jane.png"}],
    "organizations": [{"name": "Acme", "title": "VP Platform"}],
    "biographies": [{"value": "Builds things."}],
}


@pytest.mark.unit
class TestDetailsFromEmail:

    def test_dotted_local_part(self):
        details = details_from_email("jane.doe@example.com")
        assert details["first_name"] == "Jane"
        assert details["last_name"] == "Doe"
        assert details["company"] is None

    def test_plus_separator(self):
        details = details_from_email("sam+ops@example.com")
        assert (details["first_name"], details["last_name"]) == ("Sam", "Ops")

    def test_single_segment_has_empty_last_name(self):
        assert details_from_email("alex@example.com")["last_name"] == ""

    def test_not_an_email(self):
        assert details_from_email("no-at-sign") is None


@pytest.mark.unit
class TestDetailsFromProfile:

    def test_names_are_capitalised(self):
        details = details_from_profile("jane.doe@example.com", JANE_PROFILE)
        assert details == {
            "first_name": "Jane",
            "last_name": "Doe",
            "profile_photo_url": "https://photos.example/jane.png",
            "company": "Acme",
            "title": "VP Platform",
            "bio": "Builds things.",
        }

    def test_nickname_fills_missing_names(self):
        profile = {"nicknames": [{"value": "jj van dyke"}]}
        details = details_from_profile("x@example.com", profile)
        assert details["first_name"] == "Jj"
        assert details["last_name"] == "Van dyke"

    def test_email_fills_missing_names(self):
        details = details_from_profile("mary.ann.smith@example.com", {})
        assert details["first_name"] == "Mary"
        assert details["last_name"] == "Ann smith"


@pytest.mark.unit
class TestContactsLookup:

    def test_exact_email_match(self):
        api = FakePeopleAPI(
            search={"jane.doe@example.com": [{"resourceName": "people/1"}]},
            profiles={"people/1": JANE_PROFILE},
        )
        details = _service(api).lookup("jane.doe@example.com")

        assert details["title"] == "VP Platform"
        assert api.queries == ["jane.doe@example.com"]

    def test_local_part_requires_matching_address(self):
        other = {"resourceName": "people/2", "emailAddresses": [{"value": "jane.doe@other.com"}]}
        match = {"resourceName": "people/1", "emailAddresses": [{"value": "Jane.Doe@Example.com"}]}
        api = FakePeopleAPI(
            search={"jane.doe": [other, match]},
            profiles={"people/1": JANE_PROFILE},
        )
        details = _service(api).lookup("jane.doe@example.com")

        assert details["company"] == "Acme"
        assert api.queries == ["jane.doe@example.com", "jane.doe"]

    def test_name_guessed_from_email(self):
        nameless = {"resourceName": "people/9", "names": [{}]}
        named = {"resourceName": "people/1", "names": [{"displayName": "Jane Doe"}]}
        api = FakePeopleAPI(
            search={"jane doe": [nameless, named]},
            profiles={"people/1": JANE_PROFILE},
        )
        details = _service(api).lookup("jane.doe@example.com")

        assert details["first_name"] == "Jane"
        assert details["company"] == "Acme"
        assert api.queries[-1] == "jane doe"

    def test_falls_back_to_email_when_nothing_matches(self):
        api = FakePeopleAPI(search={}, profiles={})
        details = _service(api).lookup("alex.kim@example.com")

        assert details["first_name"] == "Alex"
        assert details["last_name"] == "Kim"
        assert details["company"] is None
        assert len(api.queries) == 3

    def test_mock_mode_parses_email(self):
        assert ContactsService().lookup("jane.doe@example.com")["last_name"] == "Doe"
