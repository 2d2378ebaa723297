from __future__ import annotations
from typing import TypedDict, Optional


class ResearchAttendee(TypedDict):
    name: str
    email: str


class LoadingState(TypedDict):
    stage: str                   # searching | summarizing | documenting
    person: Optional[str]
    progress: int
    total: int


class ResearchState(TypedDict, total=False):
    attendees: list[ResearchAttendee]
    create_documents: bool
    results: list[dict]          # PersonInfo per attendee, same order
    summaries: list[dict]        # PersonSummary per result, same order
    documents: dict[str, str]    # name -> document url
    document_errors: dict[str, str]
