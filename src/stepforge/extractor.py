"""Pull step sentences out of Gherkin-style feature scripts.

Line classes (informal):
    step        := INDENT KEYWORD WS text
    KEYWORD     := 'Given' | 'When' | 'Then' | 'And' | 'But' | '*'
    header      := INDENT SECTION ':' text?
    doc_string  := FENCE content* FENCE      (attached to the previous step)
    table_row   := INDENT '|' cell ('|' cell)* '|'?
    comment     := INDENT '#' text
    tag_line    := INDENT '@' text

Anything else (feature descriptions, stray text) is skipped.
"""

from __future__ import annotations

import logging
import re

from stepforge.models import ExtractedStep, StepKeyword

logger = logging.getLogger(__name__)

STEP_LINE = re.compile(r"^\s*(Given|When|Then|And|But|\*)\s+(.+?)\s*$")
HEADER_LINE = re.compile(
    r"^\s*(Feature|Rule|Background|Scenario Outline|Scenario Template|Scenario|"
    r"Example|Examples|Scenarios):\s*(.*)$"
)
FENCE = re.compile(r'^(\s*)("""|```)')
CELL_SPLIT = re.compile(r"(?<!\\)\|")

PRIMARY = {
    "Given": StepKeyword.GIVEN,
    "When": StepKeyword.WHEN,
    "Then": StepKeyword.THEN,
}
EXAMPLE_SECTIONS = ("Examples", "Scenarios")


def parse_table_row(line: str) -> list[str]:
    """Split a ``| a | b |`` row into stripped cells."""
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|") and not stripped.endswith("\\|"):
        stripped = stripped[:-1]
    return [cell.strip().replace("\\|", "|") for cell in CELL_SPLIT.split(stripped)]


class StepExtractor:
    """Scans a feature script line by line."""

    def __init__(self, content: str) -> None:
        self.lines = content.splitlines()
        self.steps: list[ExtractedStep] = []
        self.scenario: str | None = None
        self.primary: StepKeyword | None = None
        # step that trailing doc strings and table rows belong to
        self.current: ExtractedStep | None = None

    def extract(self) -> list[ExtractedStep]:
        i = 0
        while i < len(self.lines):
            line = self.lines[i]
            stripped = line.strip()

            if not stripped or stripped.startswith("#") or stripped.startswith("@"):
                i += 1
                continue

            fence = FENCE.match(line)
            if fence:
                i = self._read_doc_string(i, fence.group(1), fence.group(2))
                continue

            if stripped.startswith("|"):
                self._attach_row(stripped)
                i += 1
                continue

            header = HEADER_LINE.match(line)
            if header:
                self._enter_section(header.group(1), header.group(2).strip())
                i += 1
                continue

            step = STEP_LINE.match(line)
            if step:
                self._add_step(step.group(1), step.group(2), stripped, i + 1)

            i += 1
        return self.steps

    def _enter_section(self, section: str, title: str) -> None:
        # outline example rows are data and never attach to a step
        self.current = None
        if section in EXAMPLE_SECTIONS:
            return
        self.primary = None
        if section in ("Feature", "Rule"):
            self.scenario = None
        else:
            self.scenario = title or section

    def _add_step(self, keyword: str, text: str, original: str, line_number: int) -> None:
        if keyword in PRIMARY:
            kind = PRIMARY[keyword]
            self.primary = kind
        else:
            # And / But / * continue the previous primary keyword
            kind = self.primary or StepKeyword.GIVEN
        step = ExtractedStep(
            kind=kind,
            text=text.strip(),
            original=original,
            keyword=keyword,
            line_number=line_number,
            scenario=self.scenario,
        )
        self.steps.append(step)
        self.current = step

    def _attach_row(self, row: str) -> None:
        if self.current is not None:
            self.current.table.append(parse_table_row(row))

    def _read_doc_string(self, start: int, margin: str, delimiter: str) -> int:
        """Attach a fenced doc string to the last step; returns the next index."""
        end = start + 1
        while end < len(self.lines):
            if self.lines[end].strip().startswith(delimiter):
                break
            end += 1
        else:
            logger.warning("Unclosed doc string at line %d; skipping fence", start + 1)
            return start + 1

        content: list[str] = []
        for raw in self.lines[start + 1:end]:
            content.append(raw[len(margin):] if raw.startswith(margin) else raw.lstrip())
        if self.current is not None:
            self.current.doc_string = "\n".join(content)
        return end + 1


def extract_steps(content: str) -> list[ExtractedStep]:
    """Extract the ordered step sentences of a feature script."""
    return StepExtractor(content).extract()
