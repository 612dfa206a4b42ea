"""Core data models for stepforge."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class StepKeyword(Enum):
    """Primary step keyword a step definition is bound under."""

    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"

    @property
    def decorator(self) -> str:
        return self.value.lower()


class StepKind(Enum):
    """What a pattern describes: a precondition, a stimulus or an outcome."""

    SETUP = "Setup"
    ACTION = "Action"
    ASSERTION = "Assertion"

    @property
    def keyword(self) -> StepKeyword:
        return _KIND_KEYWORDS[self]

    @classmethod
    def parse(cls, value: StepKind | str) -> StepKind:
        """Accept a kind or keyword name, case-insensitively."""
        if isinstance(value, StepKind):
            return value
        lowered = str(value).strip().lower()
        for kind in cls:
            if lowered in (kind.value.lower(), kind.keyword.value.lower()):
                return kind
        raise ValueError(
            f"Invalid step kind: {value!r} "
            f"(expected one of: setup, action, assertion, given, when, then)"
        )


_KIND_KEYWORDS = {
    StepKind.SETUP: StepKeyword.GIVEN,
    StepKind.ACTION: StepKeyword.WHEN,
    StepKind.ASSERTION: StepKeyword.THEN,
}


class _ChoiceEnum(Enum):
    @classmethod
    def parse(cls, value: Any) -> Any:
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == str(value).strip().lower():
                return member
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid {cls.__name__}: {value!r} (expected one of: {choices})")


class OutputTarget(_ChoiceEnum):
    """Declaration syntax the generated step definitions are wrapped in."""

    BEHAVE = "behave"
    PYTEST_BDD = "pytest-bdd"
    PLAIN = "plain"


class ExecutionTarget(_ChoiceEnum):
    """Code idiom generator functions emit."""

    PLAYWRIGHT = "playwright"
    COMPONENT = "component"


@dataclass(frozen=True)
class GenerationOptions:
    """Validated generation settings."""

    output_target: OutputTarget = OutputTarget.BEHAVE
    execution_target: ExecutionTarget = ExecutionTarget.PLAYWRIGHT
    group_by_kind: bool = False

    @classmethod
    def from_values(
        cls,
        output_target: OutputTarget | str | None = None,
        execution_target: ExecutionTarget | str | None = None,
        group_by_kind: bool = False,
    ) -> GenerationOptions:
        """Build options from raw values. ``None`` selects the default."""
        return cls(
            output_target=(
                OutputTarget.parse(output_target)
                if output_target is not None
                else OutputTarget.BEHAVE
            ),
            execution_target=(
                ExecutionTarget.parse(execution_target)
                if execution_target is not None
                else ExecutionTarget.PLAYWRIGHT
            ),
            group_by_kind=bool(group_by_kind),
        )


Captures = tuple[str | None, ...]
Generator = Callable[[Captures, GenerationOptions], str]


@dataclass(frozen=True)
class PatternDescriptor:
    """One recognized phrasing family and the generator that implements it."""

    pattern: str
    kind: StepKind
    generate: Generator
    params: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    description: str = ""
    example: str = ""
    imports: tuple[str, ...] = ()


@dataclass
class ExtractedStep:
    """A step sentence pulled out of a feature script."""

    kind: StepKeyword
    text: str
    original: str
    keyword: str
    line_number: int
    scenario: str | None = None
    doc_string: str | None = None
    table: list[list[str]] = field(default_factory=list)


@dataclass
class GeneratedStep:
    """A step and its formatted step definition."""

    kind: StepKeyword
    text: str
    original: str
    line_number: int
    definition: str
    key: str | None = None
    error: str | None = None

    @property
    def matched(self) -> bool:
        return self.key is not None and self.error is None


@dataclass
class FeatureSteps:
    """Step definitions for a whole feature, grouped by keyword."""

    given: list[GeneratedStep] = field(default_factory=list)
    when: list[GeneratedStep] = field(default_factory=list)
    then: list[GeneratedStep] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)

    def bucket(self, kind: StepKeyword) -> list[GeneratedStep]:
        return {
            StepKeyword.GIVEN: self.given,
            StepKeyword.WHEN: self.when,
            StepKeyword.THEN: self.then,
        }[kind]

    def all_steps(self) -> list[GeneratedStep]:
        """All steps in original document order."""
        steps = self.given + self.when + self.then
        return sorted(steps, key=lambda s: s.line_number)

    @property
    def unmatched(self) -> list[GeneratedStep]:
        return [s for s in self.all_steps() if not s.matched]


@dataclass(frozen=True)
class PatternSummary:
    """Read-only view of a registered pattern for tooling and docs."""

    key: str
    pattern: str
    kind: StepKind
    params: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    description: str = ""
    example: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "pattern": self.pattern,
            "type": self.kind.keyword.value,
            "kind": self.kind.value,
            "params": list(self.params),
            "tags": list(self.tags),
            "description": self.description,
            "example": self.example,
        }


@dataclass(frozen=True)
class RankedPatternSummary:
    """A search hit with its relevance score."""

    summary: PatternSummary
    relevance: int
    matched_on: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return self.summary.key

    def to_dict(self) -> dict[str, Any]:
        data = self.summary.to_dict()
        data["relevance"] = self.relevance
        data["matched_on"] = list(self.matched_on)
        return data


@dataclass
class ProjectConfig:
    """Project configuration for stepforge."""

    version: str = "0.1.0"
    output_target: str = OutputTarget.BEHAVE.value
    execution_target: str = ExecutionTarget.PLAYWRIGHT.value
    group_by_kind: bool = False
    features_dir: str = "features"
    steps_dir: str = "features/steps"
    pattern_files: list[str] = field(default_factory=list)

    def options(self) -> GenerationOptions:
        """Validated generation options for this project."""
        return GenerationOptions.from_values(
            output_target=self.output_target,
            execution_target=self.execution_target,
            group_by_kind=self.group_by_kind,
        )
