"""Person-name validation and normalisation for team extraction."""

from __future__ import annotations

import re

from lead_pipeline.extract.first_names import FIRST_NAMES

# Capitalised words that routinely sit next to each other on business sites
# without being a person's name.
NAME_BLACKLIST = frozenset({
    "home", "business", "service", "services", "company", "inc", "llc", "corp",
    "the", "and", "for", "our", "your", "with", "from", "that", "this", "have",
    "been", "was", "are", "were", "being",
    "colorado", "california", "texas", "florida", "new", "york", "chicago", "los", "angeles",
    "property", "properties", "real", "estate", "construction", "plumbing", "heating",
    "cooling", "electric", "electrical", "roofing", "painting", "cleaning", "maintenance",
    "repair", "repairs",
    "give", "giving", "providing", "offers", "offer", "plugin", "website", "contact", "about",
    "concerns", "concern", "regarding", "information", "details", "more", "learn", "read",
    "click", "here", "page", "site", "web", "online", "today", "now", "call", "email",
    "north", "south", "east", "west", "central", "metro", "area", "region", "county", "city",
})

_NAME_PART = re.compile(r"^[a-zA-Z][a-zA-Z'\-]+$")


def is_valid_person_name(name: str) -> bool:
    """Return True if ``name`` plausibly names a real person.

    Requires 2-4 parts, a known first name, no blacklisted part, letter-only
    parts (initials excepted) and a last name of at least two characters.
    """
    parts = name.strip().split()
    if len(parts) < 2 or len(parts) > 4:
        return False

    if parts[0].lower() not in FIRST_NAMES:
        return False

    if any(part.lower() in NAME_BLACKLIST for part in parts):
        return False

    for part in parts:
        if len(part) <= 2:
            continue  # initials like "J." or "A"
        if not _NAME_PART.match(part):
            return False

    return len(parts[-1]) >= 2


def _normalize_part(part: str) -> str:
    if len(part) <= 2:
        return part.upper()
    if "'" in part:
        before, _, after = part.partition("'")
        return before[:1].upper() + before[1:].lower() + "'" + after[:1].upper() + after[1:].lower()
    lower = part.lower()
    if lower.startswith("mc") and len(part) > 3:
        return "Mc" + part[2].upper() + part[3:].lower()
    if lower.startswith("mac") and len(part) > 4:
        return "Mac" + part[3].upper() + part[4:].lower()
    return part[:1].upper() + part[1:].lower()


def normalize_name(name: str) -> str:
    """Title-case a name ("joe o'brien" -> "Joe O'Brien", "j." -> "J.")."""
    return " ".join(_normalize_part(p) for p in name.strip().split())
