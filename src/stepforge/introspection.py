"""List and search registered step patterns."""

from __future__ import annotations

from stepforge.models import PatternSummary, RankedPatternSummary
from stepforge.registry import PatternRegistry, RegisteredPattern

NO_DESCRIPTION = "No description available"

# Relevance weights per field; independent matches add up.
PATTERN_WEIGHT = 10
TAG_WEIGHT = 5
DESCRIPTION_WEIGHT = 3


def _summarize(entry: RegisteredPattern) -> PatternSummary:
    d = entry.descriptor
    return PatternSummary(
        key=entry.key,
        pattern=d.pattern,
        kind=d.kind,
        params=d.params,
        tags=d.tags,
        description=d.description or NO_DESCRIPTION,
        example=d.example,
    )


def list_patterns(registry: PatternRegistry) -> list[PatternSummary]:
    """Summaries of every registered pattern, in priority order."""
    return [_summarize(e) for e in registry.entries()]


def filter_by_tag(registry: PatternRegistry, tag: str) -> list[PatternSummary]:
    wanted = tag.lower()
    return [s for s in list_patterns(registry) if any(t.lower() == wanted for t in s.tags)]


def score(entry: RegisteredPattern, query: str) -> tuple[int, tuple[str, ...]]:
    """Relevance of ``entry`` for a lower-cased query, and the fields that hit.

    A key hit makes the pattern a result without adding to its relevance.
    """
    d = entry.descriptor
    total = 0
    matched: list[str] = []
    if query in d.pattern.lower():
        total += PATTERN_WEIGHT
        matched.append("pattern")
    if any(query in tag.lower() for tag in d.tags):
        total += TAG_WEIGHT
        matched.append("tags")
    if d.description and query in d.description.lower():
        total += DESCRIPTION_WEIGHT
        matched.append("description")
    if query in entry.key.lower():
        matched.append("key")
    return total, tuple(matched)


def search(registry: PatternRegistry, query: str) -> list[RankedPatternSummary]:
    """Rank patterns against a free-text query.

    Case-insensitive substring matching against the pattern source, tags,
    description and key; whitespace in the query is significant. Results are
    sorted by descending relevance; ties keep registry order.
    """
    if not query.strip():
        return []
    needle = query.lower()

    results: list[RankedPatternSummary] = []
    for entry in registry.entries():
        total, matched = score(entry, needle)
        if matched:
            results.append(RankedPatternSummary(
                summary=_summarize(entry),
                relevance=total,
                matched_on=matched,
            ))
    return sorted(results, key=lambda r: -r.relevance)
