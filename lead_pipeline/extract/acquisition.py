"""Ownership-change signals (acquisitions, sales, mergers, rebrands)."""

from __future__ import annotations

from lead_pipeline.extract import patterns
from lead_pipeline.models import AcquisitionSignal

MAX_SIGNALS = 10
_CONTEXT_CHARS = 50

_SIGNAL_PATTERNS = (
    (patterns.ACQUIRED, "acquired"),
    (patterns.SOLD_TO, "sold"),
    (patterns.MERGER, "merger"),
    (patterns.NEW_OWNERSHIP, "new_ownership"),
    (patterns.REBRANDED, "rebranded"),
)


def extract_acquisition_signals(text: str, source_url: str) -> list[AcquisitionSignal]:
    """Typed ownership-change mentions, each with a nearby year if one is stated."""
    signals = []
    for regex, signal_type in _SIGNAL_PATTERNS:
        for match in regex.finditer(text):
            start = max(0, match.start() - _CONTEXT_CHARS)
            context = text[start:match.end() + _CONTEXT_CHARS]
            year = patterns.YEAR_MENTION.search(context)
            signals.append(AcquisitionSignal(
                text=match.group(0).strip(),
                signal_type=signal_type,
                date_mentioned=year.group(1) if year else None,
                source_url=source_url,
            ))
    return signals[:MAX_SIGNALS]


def summarize_signals(signals: list[AcquisitionSignal]) -> str | None:
    """One-line ownership note from the first signal."""
    if not signals:
        return None
    first = signals[0]
    if first.date_mentioned:
        return f"{first.text} ({first.date_mentioned})"
    return first.text
