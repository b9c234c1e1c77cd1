"""Founding year and company-history snippets."""

from __future__ import annotations

import re
from datetime import datetime

from lead_pipeline.extract import patterns
from lead_pipeline.models import HistorySnippet

MAX_SNIPPETS = 5
_SNIPPET_CHARS = 300
_EARLIEST_YEAR = 1800

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def extract_founded_year(
    text: str, current_year: int | None = None,
) -> tuple[int | None, str | None]:
    """Founding year and the phrase it was read from.

    Phrasings are tried in order: "founded/established/since YYYY",
    "N years in business", "celebrating N years", "family owned since YYYY".
    """
    year_now = current_year or datetime.now().year

    for match in patterns.FOUNDED_YEAR.finditer(text):
        year = int(match.group(1))
        if _EARLIEST_YEAR <= year <= year_now:
            return year, match.group(0)

    for regex in (patterns.YEARS_IN_BUSINESS, patterns.ANNIVERSARY):
        for match in regex.finditer(text):
            years = int(match.group(1))
            if 0 < years < 200:
                return year_now - years, match.group(0)

    for match in patterns.FAMILY_OWNED.finditer(text):
        if match.group(1):
            year = int(match.group(1))
            if _EARLIEST_YEAR <= year <= year_now:
                return year, match.group(0)

    return None, None


def extract_history_snippets(text: str, source_url: str) -> list[HistorySnippet]:
    """Sentences that talk about the company's past (max 5)."""
    snippets = []
    for sentence in _SENTENCE_SPLIT.split(text):
        sentence = sentence.strip()
        if len(sentence) <= 20:
            continue
        lower = sentence.lower()
        if any(kw in lower for kw in patterns.HISTORY_KEYWORDS) or patterns.GENERATION_BUSINESS.search(sentence):
            snippets.append(HistorySnippet(text=sentence[:_SNIPPET_CHARS], source_url=source_url))
        if len(snippets) >= MAX_SNIPPETS:
            break
    return snippets
