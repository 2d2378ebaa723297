"""
Tests for the summary prompt, the summarizer sub-agent and source tag linking.
"""

import pytest

from backend.agent import sub_agents
from backend.agent.sub_agents import (
    NO_RESULTS,
    build_summary_prompt,
    link_source_tags,
    summarize_person,
)
from conftest import SEARCH_RESULTS

JANE = {"name": "Jane Doe", "search_results": SEARCH_RESULTS["Jane Doe"], "error": None}
SOURCES = [
    {"title": "Jane Doe - Acme", "url": "https://acme.example/jane"},
    {"title": "Initech alumni", "url": "https://initech.example/alumni"},
]


@pytest.mark.unit
class TestPrompt:

    def test_sources_and_text_are_numbered(self):
        prompt = build_summary_prompt(JANE)

        assert (
            "[Source 1] Jane Doe - Acme (https://acme.example/jane)\n"
            "[Source 2] Initech alumni (https://initech.example/alumni)"
        ) in prompt
        assert (
            "[Source 1]\nJane leads the platform team at Acme.\n\n"
            "[Source 2]\nJane Doe was a staff engineer at Initech."
        ) in prompt
        assert "Their current role and company" in prompt


@pytest.mark.unit
@pytest.mark.asyncio
class TestSummarizePerson:

    async def test_summary_with_sources(self, fake_llm):
        summary = await summarize_person(JANE)

        assert summary["error"] is None
        assert summary["summary"].startswith("Jane leads platform at Acme [Source 1]")
        assert summary["sources"] == SOURCES
        system, user = fake_llm[0]
        assert system["role"] == "system"
        assert "meeting preparation" in system["content"]
        assert user["content"] == build_summary_prompt(JANE)

    async def test_no_results_skips_model(self, fake_llm):
        summary = await summarize_person({"name": "Ghost", "search_results": [], "error": None})

        assert summary == {"name": "Ghost", "summary": "", "sources": [], "error": NO_RESULTS}
        assert fake_llm == []

    async def test_search_error_skips_model(self, fake_llm):
        summary = await summarize_person(
            {"name": "Ghost", "search_results": [], "error": "Exa API error: boom"}
        )
        assert summary["error"] == NO_RESULTS
        assert fake_llm == []

    async def test_model_failure_is_captured(self, monkeypatch):
        def _boom(messages):
            raise RuntimeError("HuggingFace API error: rate limited")

        monkeypatch.setattr(sub_agents, "_call_llm", _boom)
        summary = await summarize_person(JANE)

        assert summary["summary"] == ""
        assert summary["error"] == "HuggingFace API error: rate limited"
        assert summary["sources"] == SOURCES

    async def test_empty_completion_is_an_error(self, monkeypatch):
        monkeypatch.setattr(sub_agents, "_call_llm", lambda messages: "")
        summary = await summarize_person(JANE)
        assert summary["error"] == "Empty response from language model"


@pytest.mark.unit
class TestLinkSourceTags:

    def test_tags_become_links(self):
        segments = link_source_tags("CEO [Source 1]. Ex-Initech [Source 2].", SOURCES)

        assert segments == [
            {"text": "CEO ", "url": None, "title": None},
            {"text": "[Source 1]", "url": "https://acme.example/jane", "title": "Jane Doe - Acme"},
            {"text": ". Ex-Initech ", "url": None, "title": None},
            {"text": "[Source 2]", "url": "https://initech.example/alumni", "title": "Initech alumni"},
            {"text": ".", "url": None, "title": None},
        ]

    def test_out_of_range_tags_stay_text(self):
        segments = link_source_tags("Claim [Source 3] and [Source 0].", SOURCES)
        assert segments == [{"text": "Claim [Source 3] and [Source 0].", "url": None, "title": None}]

    def test_repeated_and_adjacent_tags(self):
        segments = link_source_tags("[Source 1][Source 1]", SOURCES)
        assert [s["url"] for s in segments] == ["https://acme.example/jane"] * 2

    def test_no_sources(self):
        assert link_source_tags("Plain [Source 1]", []) == [
            {"text": "Plain [Source 1]", "url": None, "title": None},
        ]

    def test_empty_summary(self):
        assert link_source_tags("", SOURCES) == []
