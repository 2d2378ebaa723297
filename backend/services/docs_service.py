"""
Google Docs meeting-notes writer.

The whole document is produced by one ``batchUpdate`` whose requests insert
text at explicit indexes, so every request has to know where the previous
one ended. Docs indexes start at 1 and count UTF-16 code units.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from googleapiclient.errors import HttpError

from backend.config import settings
from backend.services.google_auth import NOT_AUTHENTICATED, build_service
from backend.utils.logger import get_logger

log = get_logger("services.docs")

DOC_URL = "https://docs.google.com/document/d/{document_id}/edit"
SPACE_BELOW = {"magnitude": 10, "unit": "PT"}
LINK_COLOR = {"color": {"rgbColor": {"red": 0.13, "green": 0.13, "blue": 0.8}}}

KEY_TAKEAWAYS = "Key Takeaways\n\n"
TAKEAWAY_BULLETS = "• \n• \n• \n\n"
ACTION_ITEMS = "Action Items\n\n"
ACTION_BULLETS = "• \n• \n\n"
SUMMARY_HEADER = "Professional Summary\n\n"
SOURCES_HEADER = "Sources\n\n"


def utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _insert(index: int, text: str) -> dict:
    return {"insertText": {"location": {"index": index}, "text": text}}


def _paragraph(start: int, end: int, style: str) -> dict:
    return {
        "updateParagraphStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "paragraphStyle": {"namedStyleType": style, "spaceBelow": SPACE_BELOW},
            "fields": "namedStyleType,spaceBelow",
        }
    }


def _link(start: int, end: int, url: str) -> dict:
    return {
        "updateTextStyle": {
            "range": {"startIndex": start, "endIndex": end},
            "textStyle": {
                "link": {"url": url},
                "fontSize": {"magnitude": 12, "unit": "PT"},
                "foregroundColor": LINK_COLOR,
            },
            "fields": "link,fontSize,foregroundColor",
        }
    }


class _DocWriter:
    """Accumulates requests while tracking the insertion cursor."""

    def __init__(self):
        self.index = 1
        self.requests: list[dict] = []

    def text(self, text: str) -> int:
        start = self.index
        self.requests.append(_insert(start, text))
        self.index += utf16_len(text)
        return start

    def heading(self, text: str, style: str = "HEADING_2") -> None:
        start = self.index
        self.requests.append(_insert(start, text))
        # the trailing blank line is left unstyled
        self.requests.append(_paragraph(start, start + utf16_len(text) - 1, style))
        self.index += utf16_len(text)

    def styled(self, text: str, style: str) -> None:
        start = self.index
        self.requests.append(_insert(start, text))
        self.requests.append(_paragraph(start, start + utf16_len(text), style))
        self.index += utf16_len(text)

    def link(self, label: str, url: str) -> None:
        label = label or url
        start = self.text(f"{label}\n")
        # Docs rejects the whole batch on an empty range
        if label:
            self.requests.append(_link(start, start + utf16_len(label), url))


def format_doc_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


def build_document_requests(summary: dict, today: Optional[date] = None) -> list[dict]:
    """batchUpdate requests for a person's meeting-notes document."""
    today = today or date.today()
    w = _DocWriter()

    w.styled(f"{summary['name']} {format_doc_date(today)} - Meeting Notes\n", "HEADING_1")

    w.heading(KEY_TAKEAWAYS)
    w.text(TAKEAWAY_BULLETS)

    w.heading(ACTION_ITEMS)
    w.text(ACTION_BULLETS)

    w.heading(SUMMARY_HEADER)
    w.styled(summary.get("summary", "") + "\n\n", "NORMAL_TEXT")

    w.heading(SOURCES_HEADER)
    for i, source in enumerate(summary.get("sources") or [], start=1):
        w.text(f"{i}. ")
        w.link(source["title"], source["url"])

    return w.requests


class DocsService:
    """Thin wrapper – delegates to Google Docs API or mock."""

    def __init__(self):
        self.mock_documents: dict[str, dict] = {}
        if settings.MOCK_GOOGLE:
            log.info("Docs running in MOCK mode")
            self._svc = None
        else:
            try:
                self._svc = build_service("docs", "v1")
            except RuntimeError as exc:
                if NOT_AUTHENTICATED in str(exc):
                    raise RuntimeError(
                        "Please ensure you are signed in to Google and have granted "
                        "the necessary permissions"
                    ) from exc
                raise

    def create_meeting_doc(self, summary: dict) -> str:
        title = f"Meeting Notes - {summary['name']}"
        requests = build_document_requests(summary)
        log.info("🚀 Creating meeting notes for %s", summary["name"])

        if self._svc is None:
            document_id = f"mock_{uuid.uuid4().hex[:10]}"
            self.mock_documents[document_id] = {"title": title, "requests": requests}
            log.info("MOCK created document %s", document_id)
            return f"mock://documents/{document_id}"

        try:
            doc = self._svc.documents().create(body={"title": title}).execute()
            document_id = doc["documentId"]
            log.info("📝 Document created with ID: %s", document_id)
            (
                self._svc.documents()
                .batchUpdate(documentId=document_id, body={"requests": requests})
                .execute()
            )
        except HttpError as exc:
            log.exception("create_meeting_doc failed")
            raise RuntimeError(f"Docs API error: {exc}") from exc

        url = DOC_URL.format(document_id=document_id)
        log.info("🔗 Document URL: %s", url)
        return url
