"""Turn step sentences and feature scripts into step definition code."""

from __future__ import annotations

from stepforge.dispatcher import render_body
from stepforge.extractor import extract_steps
from stepforge.formatter import (
    declaration_separator,
    file_header,
    format_step,
    has_placeholders,
)
from stepforge.models import (
    FeatureSteps,
    GeneratedStep,
    GenerationOptions,
    StepKeyword,
)
from stepforge.registry import PatternRegistry

GROUP_ORDER = (StepKeyword.GIVEN, StepKeyword.WHEN, StepKeyword.THEN)


def _generate(
    registry: PatternRegistry,
    step_text: str,
    options: GenerationOptions,
    keyword: StepKeyword | None,
) -> tuple[str, str | None, str | None]:
    result = render_body(registry, step_text, options)
    if keyword is None:
        descriptor = registry.get(result.key) if result.key else None
        keyword = descriptor.kind.keyword if descriptor else StepKeyword.WHEN
    definition = format_step(result.body, keyword, step_text, options.output_target)
    return definition, result.key, result.error


def generate_step_definition(
    registry: PatternRegistry,
    step_text: str,
    options: GenerationOptions | None = None,
    keyword: StepKeyword | None = None,
) -> str:
    """Generate one formatted step definition.

    Without an explicit ``keyword`` the matched pattern's kind decides it;
    unmatched steps are declared under ``When``.
    """
    definition, _, _ = _generate(registry, step_text, options or GenerationOptions(), keyword)
    return definition


def generate_feature_steps(
    registry: PatternRegistry,
    content: str,
    options: GenerationOptions | None = None,
) -> FeatureSteps:
    """Generate definitions for every step of a feature script."""
    options = options or GenerationOptions()
    result = FeatureSteps()
    for step in extract_steps(content):
        definition, key, error = _generate(registry, step.text, options, step.kind)
        result.bucket(step.kind).append(GeneratedStep(
            kind=step.kind,
            text=step.text,
            original=step.original,
            line_number=step.line_number,
            definition=definition,
            key=key,
            error=error,
        ))
        descriptor = registry.get(key) if key else None
        if descriptor:
            for line in descriptor.imports:
                if line not in result.imports:
                    result.imports.append(line)
    return result


def _ordered(steps: FeatureSteps, group_by_kind: bool) -> list[GeneratedStep]:
    if group_by_kind:
        return [s for kind in GROUP_ORDER for s in steps.bucket(kind)]
    return steps.all_steps()


def render_file(steps: FeatureSteps, filename: str, options: GenerationOptions | None = None) -> str:
    """Build a step definitions module from already generated steps.

    Declarations keep document order unless ``group_by_kind`` is set. A step
    repeated with the same keyword and text is declared once.
    """
    options = options or GenerationOptions()
    seen: set[tuple[StepKeyword, str]] = set()
    definitions: list[str] = []
    for step in _ordered(steps, options.group_by_kind):
        if (step.kind, step.text) in seen:
            continue
        seen.add((step.kind, step.text))
        definitions.append(step.definition)

    separator = declaration_separator(options.output_target)
    outline = any(has_placeholders(s.text) for s in steps.all_steps())
    header = file_header(filename, options, steps.imports, outline_steps=outline)
    if not definitions:
        return header
    return header.rstrip("\n") + separator + separator.join(definitions) + "\n"


def assemble_file(
    registry: PatternRegistry,
    content: str,
    filename: str,
    options: GenerationOptions | None = None,
) -> str:
    """Generate a complete step definitions module for a feature script."""
    options = options or GenerationOptions()
    return render_file(generate_feature_steps(registry, content, options), filename, options)


generate_step_definitions_file = assemble_file
