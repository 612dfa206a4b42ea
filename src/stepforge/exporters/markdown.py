"""Markdown reference documentation for step pattern catalogs."""

from __future__ import annotations

from typing import Iterable

from stepforge.models import PatternSummary, StepKind


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def export_markdown(summaries: Iterable[PatternSummary], title: str = "Step patterns") -> str:
    """Render a table per kind listing each pattern's example and description."""
    grouped: dict[StepKind, list[PatternSummary]] = {kind: [] for kind in StepKind}
    for summary in summaries:
        grouped[summary.kind].append(summary)

    lines = [f"# {title}", ""]
    for kind, items in grouped.items():
        if not items:
            continue
        lines.append(f"## {kind.keyword.value} ({kind.value.lower()})")
        lines.append("")
        lines.append("| Key | Example | Description | Tags |")
        lines.append("|-----|---------|-------------|------|")
        for s in items:
            example = f"`{_cell(s.example)}`" if s.example else ""
            lines.append(
                f"| {s.key} | {example} | {_cell(s.description)} | {', '.join(s.tags)} |"
            )
        lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"
