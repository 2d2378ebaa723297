"""Exa people search."""

from __future__ import annotations

from typing import Optional

import httpx

from backend.config import settings
from backend.utils.logger import get_logger

log = get_logger("services.search")

QUERY_TEMPLATE = "{name} professional background experience career"
RESULT_SUMMARY_QUERY = "Summarize this person's professional background and experience"


def build_search_body(name: str, num_results: int) -> dict:
    return {
        "query": QUERY_TEMPLATE.format(name=name),
        "numResults": num_results,
        "type": "keyword",
        "contents": {
            "text": True,
            "summary": {"query": RESULT_SUMMARY_QUERY},
        },
    }


def _to_result(raw: dict) -> dict:
    return {
        "title": raw.get("title") or raw.get("url", ""),
        "url": raw.get("url", ""),
        "published_date": raw.get("publishedDate"),
        "author": raw.get("author"),
        "summary": raw.get("summary") or "",
        "text": raw.get("text") or "",
    }


class PeopleSearchService:
    """
    Looks a person up on Exa.

    ``search_person`` never raises: failures come back on the ``error`` key
    so one bad lookup doesn't stop the rest of the attendees.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.EXA_API_KEY if api_key is None else api_key
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, transport=self._transport)

    async def search_person(self, name: str) -> dict:
        if not self.api_key:
            log.error("❌ Missing EXA_API_KEY")
            return {"name": name, "search_results": [], "error": "API key not configured"}

        body = build_search_body(name, settings.EXA_NUM_RESULTS)
        log.info("🔍 Searching Exa for: %s", name)
        log.debug("Query: %s", body["query"])

        try:
            async with self._client() as client:
                response = await client.post(
                    settings.EXA_SEARCH_URL,
                    headers={"x-api-key": self.api_key},
                    json=body,
                )
            if response.is_error:
                log.error("❌ Exa API %s for %s: %s", response.status_code, name, response.text)
                return {"name": name, "search_results": [], "error": f"Exa API error: {response.text}"}
            results = [_to_result(r) for r in response.json().get("results", [])]
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            # transport failures and bodies that aren't an Exa result object
            log.error("❌ Error making Exa API request for %s: %s", name, exc)
            return {"name": name, "search_results": [], "error": "Failed to make Exa API request"}

        log.info("✅ Received %d results for: %s", len(results), name)
        return {"name": name, "search_results": results, "error": None}

    async def search_all(self, names: list[str]) -> list[dict]:
        return [await self.search_person(name) for name in names]
