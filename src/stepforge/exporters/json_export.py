"""JSON export for step pattern catalogs."""

from __future__ import annotations

import json
from typing import Iterable

from stepforge.models import PatternSummary, RankedPatternSummary


def export_json(
    summaries: Iterable[PatternSummary | RankedPatternSummary],
    indent: int = 2,
) -> str:
    """Export pattern summaries (or search hits) as a JSON list."""
    return json.dumps([s.to_dict() for s in summaries], indent=indent)
