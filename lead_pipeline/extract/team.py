"""Team members, new-hire mentions and headcount estimates."""

from __future__ import annotations

import logging
from collections import Counter

from lead_pipeline.extract import patterns
from lead_pipeline.extract.names import is_valid_person_name, normalize_name
from lead_pipeline.models import NewHireMention, TeamMember

logger = logging.getLogger(__name__)

MAX_TEAM_MEMBERS = 20
MAX_NEW_HIRES = 10
_HEADCOUNT_MIN = 2
_HEADCOUNT_MAX = 10000


def is_team_page(url: str) -> bool:
    return bool(patterns.TEAM_PAGE_URL.search(url))


def extract_team_members(
    text: str, source_url: str, lines: list[str] | None = None,
) -> list[TeamMember]:
    """People named next to a job title, plus bare names on team pages.

    ``lines`` are the page's individual text blocks (headings, captions);
    on a team-like URL each block that is exactly a valid name becomes a
    ``Team Member``.
    """
    members: list[TeamMember] = []
    seen: set[str] = set()

    for match in patterns.TEAM_MEMBER_WITH_TITLE.finditer(text):
        name, title = match.group(1).strip(), match.group(2).strip()
        if not is_valid_person_name(name):
            continue
        key = name.lower()
        if key not in seen:
            seen.add(key)
            members.append(TeamMember(name=name, title=title, source_url=source_url))

    if lines and is_team_page(source_url):
        for line in lines:
            match = patterns.STANDALONE_NAME.match(line.strip())
            if not match or not is_valid_person_name(match.group(1)):
                continue
            name = normalize_name(match.group(1))
            key = name.lower()
            if key not in seen:
                seen.add(key)
                members.append(TeamMember(name=name, title="Team Member", source_url=source_url))

    result = members[:MAX_TEAM_MEMBERS]
    if result:
        logger.debug(
            "Found %d team members: %s", len(result),
            ", ".join(f"{m.name} ({m.title})" for m in result[:3]),
        )
    return result


def dedupe_team_members(members: list[TeamMember]) -> list[TeamMember]:
    seen: set[str] = set()
    unique = []
    for member in members:
        key = member.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(member)
    return unique[:MAX_TEAM_MEMBERS]


def extract_new_hires(text: str, source_url: str) -> list[NewHireMention]:
    mentions = []
    for match in patterns.NEW_HIRE.finditer(text):
        context = match.group(0).strip()
        if 10 < len(context) < 200:
            mentions.append(NewHireMention(text=context, source_url=source_url))
    return mentions[:MAX_NEW_HIRES]


def extract_headcount(text: str) -> tuple[int | None, str | None]:
    """Best employee-count estimate in ``text`` and the phrase it came from.

    Every phrasing contributes candidates; the most frequently stated count
    wins, ties going to the larger number. Ranges count as their upper bound.
    """
    candidates: list[tuple[int, str]] = []

    for regex in (
        patterns.HEADCOUNT_DIRECT,
        patterns.HEADCOUNT_TEAM_OF,
        patterns.HEADCOUNT_EMPLOYS,
        patterns.HEADCOUNT_OVER,
        patterns.HEADCOUNT_PERSON_TEAM,
    ):
        for match in regex.finditer(text):
            count = int(match.group(1))
            if _HEADCOUNT_MIN <= count <= _HEADCOUNT_MAX:
                candidates.append((count, match.group(0).strip()))

    for match in patterns.HEADCOUNT_RANGE.finditer(text):
        low, high = int(match.group(1)), int(match.group(2))
        if _HEADCOUNT_MIN <= high <= _HEADCOUNT_MAX and high > low:
            candidates.append((high, match.group(0).strip()))

    if not candidates:
        return None, None

    frequency = Counter(count for count, _ in candidates)
    best_count, best_source = max(candidates, key=lambda c: (frequency[c[0]], c[0]))
    logger.debug("Headcount ~%d from %r", best_count, best_source)
    return best_count, best_source
