"""Project step patterns declared in YAML catalogs.

A catalog is a mapping with a ``steps`` list::

    steps:
      - key: open-team-dashboard
        pattern: 'I open the dashboard for team "([^"]*)"'
        kind: setup
        params: [team]
        template: 'context.page.goto("/teams/" + {team!r})'
        templates:
          component: 'context.router.push("/teams/" + {team!r})'

Templates are ``str.format`` strings over the declared params. A capture that
did not participate in the match renders as ``""``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from string import Formatter
from typing import Any

import yaml

from stepforge.models import (
    Captures,
    ExecutionTarget,
    GenerationOptions,
    PatternDescriptor,
    StepKind,
)
from stepforge.registry import PatternRegistry, RegistrationError

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("key", "pattern", "kind", "template")


class PatternFileError(ValueError):
    """Raised when a pattern catalog cannot be loaded."""


@dataclass(frozen=True)
class TemplateGenerator:
    """Generator that renders a format template over named captures."""

    params: tuple[str, ...]
    template: str
    overrides: dict[ExecutionTarget, str] = field(default_factory=dict)

    def __call__(self, captures: Captures, options: GenerationOptions) -> str:
        values = {name: value or "" for name, value in zip(self.params, captures)}
        template = self.overrides.get(options.execution_target, self.template)
        return template.format(**values)


def _fields(template: str) -> set[str]:
    names: set[str] = set()
    for _, name, _, _ in Formatter().parse(template):
        if name is not None:
            names.add(name.split(".")[0].split("[")[0])
    return names


def _str_list(entry: dict[str, Any], name: str, where: str) -> tuple[str, ...]:
    value = entry.get(name, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PatternFileError(f"{where}: '{name}' must be a list of strings")
    return tuple(value)


def _check_template(template: Any, params: tuple[str, ...], where: str) -> str:
    if not isinstance(template, str) or not template.strip():
        raise PatternFileError(f"{where}: template must be a non-empty string")
    try:
        names = _fields(template)
    except ValueError as exc:
        raise PatternFileError(f"{where}: malformed template: {exc}") from exc
    unknown = sorted(n for n in names if n not in params)
    if unknown:
        raise PatternFileError(
            f"{where}: template uses undeclared param(s) {unknown}; declared: {list(params)}"
        )
    return template


def _build_descriptor(entry: Any, where: str) -> tuple[str, PatternDescriptor]:
    if not isinstance(entry, dict):
        raise PatternFileError(f"{where}: expected a mapping")
    missing = [k for k in REQUIRED_KEYS if k not in entry]
    if missing:
        raise PatternFileError(f"{where}: missing required key(s): {', '.join(missing)}")

    key = str(entry["key"])
    where = f"{where} ({key})"
    try:
        kind = StepKind.parse(entry["kind"])
    except ValueError as exc:
        raise PatternFileError(f"{where}: {exc}") from exc

    params = _str_list(entry, "params", where)
    template = _check_template(entry["template"], params, where)

    overrides: dict[ExecutionTarget, str] = {}
    targets = entry.get("templates", {}) or {}
    if not isinstance(targets, dict):
        raise PatternFileError(f"{where}: 'templates' must be a mapping")
    for target, text in targets.items():
        try:
            execution_target = ExecutionTarget.parse(target)
        except ValueError as exc:
            raise PatternFileError(f"{where}: {exc}") from exc
        overrides[execution_target] = _check_template(text, params, where)

    descriptor = PatternDescriptor(
        pattern=str(entry["pattern"]),
        kind=kind,
        generate=TemplateGenerator(params=params, template=template, overrides=overrides),
        params=params,
        tags=_str_list(entry, "tags", where),
        description=str(entry.get("description", "")),
        example=str(entry.get("example", "")),
        imports=_str_list(entry, "imports", where),
    )
    return key, descriptor


def load_pattern_file(path: Path) -> list[tuple[str, PatternDescriptor]]:
    """Load and validate a YAML pattern catalog."""
    try:
        raw = yaml.safe_load(path.read_text())
    except OSError as exc:
        raise PatternFileError(f"Cannot read pattern file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise PatternFileError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("steps"), list):
        raise PatternFileError(f"Invalid pattern file {path}: expected a mapping with a 'steps' list")

    items: list[tuple[str, PatternDescriptor]] = []
    seen: set[str] = set()
    for index, entry in enumerate(raw["steps"]):
        key, descriptor = _build_descriptor(entry, f"{path}: steps[{index}]")
        if key in seen:
            raise PatternFileError(f"{path}: duplicate step key '{key}'")
        seen.add(key)
        items.append((key, descriptor))
    return items


def register_pattern_file(registry: PatternRegistry, path: Path) -> int:
    """Register a catalog's patterns after those already registered.

    Returns the number of patterns registered.
    """
    items = load_pattern_file(path)
    for key, descriptor in items:
        try:
            registry.register(key, descriptor)
        except RegistrationError as exc:
            raise PatternFileError(f"{path}: {exc}") from exc
    logger.info("Loaded %d step pattern(s) from %s", len(items), path)
    return len(items)
