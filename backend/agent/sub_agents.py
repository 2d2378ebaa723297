from __future__ import annotations

import asyncio
import re

from backend.config import settings
from backend.utils.logger import get_logger

log = get_logger("agent.sub_agents")

# ── HF Inference Client singleton ─────────────────────
_hf_client = None


def _get_hf_client():
    global _hf_client
    if _hf_client is None:
        from huggingface_hub import InferenceClient
        _hf_client = InferenceClient(
            model=settings.HF_MODEL,
            token=settings.HF_TOKEN or None,
        )
        log.info("HuggingFace InferenceClient ready: %s", settings.HF_MODEL)
    return _hf_client


def _call_llm(messages: list[dict]) -> str:
    """Chat completion against the configured HuggingFace model."""
    client = _get_hf_client()
    try:
        response = client.chat_completion(
            messages=messages,
            max_tokens=settings.SUMMARY_MAX_TOKENS,
            temperature=settings.SUMMARY_TEMPERATURE,
        )
    except Exception as exc:
        raise RuntimeError(f"HuggingFace API error: {exc}") from exc
    text = response.choices[0].message.content
    log.debug("HF chat response: %s", (text or "")[:200])
    return text.strip() if text else ""


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  SUMMARIZER SUB-AGENT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SYSTEM_PROMPT = (
    "You are a professional business analyst creating detailed summaries about "
    "people for meeting preparation. Include source references for all key information."
)

SUMMARY_PROMPT = """Please analyze the following text about a person and provide a professional summary. For each key point in your summary, reference the source by including a [Source X] tag, where X corresponds to the numbered source in the list below.

Focus on:
1. Their current role and company
2. Key previous experience and roles
3. Notable achievements and expertise
4. Educational background (if mentioned)
5. Any relevant projects or initiatives they're working on
6. Any interesting facts that will help in a meeting with this person

Format your response with inline source references like this example:
"John is currently the CEO of TechCorp [Source 1]. Previously, he worked at Google as a Senior Engineer [Source 2], where he led the development of..."

Here are the sources:
{sources}

Text to analyze:
{text}"""

NO_RESULTS = "No search results to summarize"


def build_summary_prompt(person: dict) -> str:
    results = person.get("search_results", [])
    sources = "\n".join(
        f"[Source {i}] {r['title']} ({r['url']})" for i, r in enumerate(results, start=1)
    )
    text = "\n\n".join(
        f"[Source {i}]\n{r['text']}" for i, r in enumerate(results, start=1)
    )
    return SUMMARY_PROMPT.format(sources=sources, text=text)


def _sources(person: dict) -> list[dict]:
    return [{"title": r["title"], "url": r["url"]} for r in person.get("search_results", [])]


async def summarize_person(person: dict) -> dict:
    """Ask the model for a source-tagged professional summary. Never raises."""
    name = person["name"]
    if person.get("error") or not person.get("search_results"):
        log.info("Skipping summary for %s: %s", name, person.get("error") or NO_RESULTS)
        return {"name": name, "summary": "", "sources": [], "error": NO_RESULTS}

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_summary_prompt(person)},
    ]
    log.info("🤖 Requesting summary for %s", name)
    try:
        summary = await asyncio.to_thread(_call_llm, messages)
    except Exception as exc:
        log.error("❌ Summary failed for %s: %s", name, exc)
        return {"name": name, "summary": "", "sources": _sources(person), "error": str(exc)}

    if not summary:
        return {"name": name, "summary": "", "sources": _sources(person),
                "error": "Empty response from language model"}

    log.info("✅ Received summary for %s", name)
    return {"name": name, "summary": summary, "sources": _sources(person), "error": None}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  SOURCE TAG LINKING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_SOURCE_TAG = re.compile(r"\[Source (\d+)\]")


def link_source_tags(summary: str, sources: list[dict]) -> list[dict]:
    """
    Split a summary into plain-text and link segments.

    ``[Source N]`` becomes a link to the N-th source (1-based). Tags that
    point past the end of ``sources`` are left as text.
    """
    segments: list[dict] = []
    buffer = ""
    pos = 0
    for m in _SOURCE_TAG.finditer(summary):
        n = int(m.group(1))
        if not 1 <= n <= len(sources):
            continue
        buffer += summary[pos:m.start()]
        if buffer:
            segments.append({"text": buffer, "url": None, "title": None})
            buffer = ""
        source = sources[n - 1]
        segments.append({"text": m.group(0), "url": source["url"], "title": source["title"]})
        pos = m.end()
    buffer += summary[pos:]
    if buffer:
        segments.append({"text": buffer, "url": None, "title": None})
    return segments
