"""StepCompiler: the generation API bound to one pattern registry."""

from __future__ import annotations

from stepforge import assembler, introspection
from stepforge.dispatcher import StepMatch, resolve
from stepforge.extractor import extract_steps
from stepforge.models import (
    ExtractedStep,
    FeatureSteps,
    GenerationOptions,
    PatternSummary,
    RankedPatternSummary,
    StepKeyword,
)
from stepforge.registry import PatternRegistry


class StepCompiler:
    """Compiles step sentences and feature scripts against a registry."""

    def __init__(
        self,
        registry: PatternRegistry,
        options: GenerationOptions | None = None,
    ) -> None:
        self.registry = registry
        self.options = options or GenerationOptions()

    def resolve(self, step_text: str) -> StepMatch | None:
        return resolve(self.registry, step_text)

    def generate_step_definition(
        self,
        step_text: str,
        options: GenerationOptions | None = None,
        keyword: StepKeyword | None = None,
    ) -> str:
        return assembler.generate_step_definition(
            self.registry, step_text, options or self.options, keyword
        )

    def generate_feature_steps(
        self, content: str, options: GenerationOptions | None = None
    ) -> FeatureSteps:
        return assembler.generate_feature_steps(self.registry, content, options or self.options)

    def generate_step_definitions_file(
        self,
        content: str,
        filename: str,
        options: GenerationOptions | None = None,
    ) -> str:
        return assembler.assemble_file(
            self.registry, content, filename, options or self.options
        )

    def render_steps_file(
        self,
        steps: FeatureSteps,
        filename: str,
        options: GenerationOptions | None = None,
    ) -> str:
        return assembler.render_file(steps, filename, options or self.options)

    def extract_steps(self, content: str) -> list[ExtractedStep]:
        return extract_steps(content)

    def get_available_step_patterns(self) -> list[PatternSummary]:
        return introspection.list_patterns(self.registry)

    def search_step_generators(self, query: str) -> list[RankedPatternSummary]:
        return introspection.search(self.registry, query)

    def filter_patterns_by_tag(self, tag: str) -> list[PatternSummary]:
        return introspection.filter_by_tag(self.registry, tag)
