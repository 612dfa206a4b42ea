"""Resolve step sentences to registered patterns and render their bodies."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from stepforge.formatter import quote, single_line
from stepforge.models import Captures, GenerationOptions, PatternDescriptor
from stepforge.registry import PatternRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepMatch:
    """The first pattern that matched a step, with its capture groups."""

    key: str
    descriptor: PatternDescriptor
    captures: Captures


@dataclass(frozen=True)
class BodyResult:
    """A rendered implementation body and where it came from."""

    body: str
    key: str | None = None
    error: str | None = None


def resolve(registry: PatternRegistry, step_text: str) -> StepMatch | None:
    """Find the first registered pattern found anywhere in ``step_text``."""
    for entry in registry.entries():
        match = entry.regex.search(step_text)
        if match:
            return StepMatch(key=entry.key, descriptor=entry.descriptor, captures=match.groups())
    return None


def fallback_body(step_text: str) -> str:
    """Body for a step no pattern recognizes; fails when executed."""
    return (
        f"# No step pattern matched: {single_line(step_text)}\n"
        f"raise NotImplementedError({quote('Step not implemented: ' + step_text)})"
    )


def _failed_body(key: str, step_text: str, error: str) -> str:
    return (
        f"# Generator '{key}' failed: {single_line(error)}\n"
        f"raise NotImplementedError({quote('Step generation failed: ' + step_text)})"
    )


def render_body(
    registry: PatternRegistry,
    step_text: str,
    options: GenerationOptions,
) -> BodyResult:
    """Generate the implementation body for one step.

    Failures are confined to the returned body: an unmatched step or a
    generator error becomes a stub that raises when the test runs.
    """
    found = resolve(registry, step_text)
    if found is None:
        logger.debug("No step pattern matched: %r", step_text)
        return BodyResult(body=fallback_body(step_text))

    try:
        body = found.descriptor.generate(found.captures, options)
        if not isinstance(body, str) or not body.strip():
            raise ValueError("generator returned an empty body")
    except Exception as exc:  # generator plugins are contained per step
        error = f"{type(exc).__name__}: {exc}"
        logger.warning("Generator '%s' failed for step %r: %s", found.key, step_text, error)
        return BodyResult(body=_failed_body(found.key, step_text, error), key=found.key, error=error)

    return BodyResult(body=body, key=found.key)
