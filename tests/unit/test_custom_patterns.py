"""Unit tests for stepforge.custom_patterns."""

from pathlib import Path

import pytest

from stepforge.custom_patterns import (
    PatternFileError,
    TemplateGenerator,
    load_pattern_file,
    register_pattern_file,
)
from stepforge.dispatcher import render_body
from stepforge.models import ExecutionTarget, GenerationOptions, StepKind
from stepforge.registry import PatternRegistry
from stepforge.wiring import build_registry


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "patterns.yaml"
    path.write_text(text)
    return path


class TestLoadPatternFile:
    def test_loads_descriptors(self, pattern_catalog: Path) -> None:
        items = load_pattern_file(pattern_catalog)
        assert [key for key, _ in items] == ["open-team-dashboard", "archive-project"]
        descriptor = items[0][1]
        assert descriptor.kind is StepKind.SETUP
        assert descriptor.params == ("team",)
        assert descriptor.tags == ("custom", "navigation")
        assert descriptor.example == 'I open the dashboard for team "core"'
        assert items[1][1].kind is StepKind.ACTION

    def test_template_renders_per_target(self, pattern_catalog: Path) -> None:
        generate = load_pattern_file(pattern_catalog)[0][1].generate
        assert generate(("core",), GenerationOptions()) == "context.page.goto(\"/teams/\" + 'core')"
        component = GenerationOptions(execution_target=ExecutionTarget.COMPONENT)
        assert generate(("core",), component) == "context.router.push(\"/teams/\" + 'core')"

    def test_missing_capture_renders_empty(self) -> None:
        generate = TemplateGenerator(params=("a", "b"), template="x = {a!r} + {b!r}")
        assert generate(("1", None), GenerationOptions()) == "x = '1' + ''"

    @pytest.mark.parametrize("content, message", [
        ("steps: [\n", "Invalid YAML"),
        ("- just a list\n", "expected a mapping with a 'steps' list"),
        ("steps:\n  - key: x\n", "missing required key"),
        (
            "steps:\n  - {key: x, pattern: x, kind: sideways, template: pass}\n",
            "Invalid step kind",
        ),
        (
            "steps:\n  - {key: x, pattern: x, kind: when, template: '{who}'}\n",
            "undeclared param",
        ),
        (
            "steps:\n  - {key: x, pattern: x, kind: when, template: 'pass', templates: {selenium: 'pass'}}\n",
            "Invalid ExecutionTarget",
        ),
        (
            "steps:\n  - {key: x, pattern: x, kind: when, template: 'pass', tags: oops}\n",
            "'tags' must be a list of strings",
        ),
        (
            "steps:\n  - {key: x, pattern: a, kind: when, template: pass}\n"
            "  - {key: x, pattern: b, kind: when, template: pass}\n",
            "duplicate step key 'x'",
        ),
        ("steps:\n  - {key: x, pattern: x, kind: when, template: '{'}\n", "malformed template"),
    ])
    def test_invalid_files(self, tmp_path: Path, content: str, message: str) -> None:
        with pytest.raises(PatternFileError, match=message):
            load_pattern_file(_write(tmp_path, content))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PatternFileError, match="Cannot read"):
            load_pattern_file(tmp_path / "nope.yaml")


class TestRegisterPatternFile:
    def test_registers_after_existing(self, pattern_catalog: Path) -> None:
        registry = PatternRegistry()
        registry.register("first", load_pattern_file(pattern_catalog)[1][1])
        count = register_pattern_file(registry, pattern_catalog)
        assert count == 2
        assert registry.keys() == ["first", "open-team-dashboard", "archive-project"]

    def test_bad_regex_reported_with_path(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "steps:\n  - {key: x, pattern: '(', kind: when, template: pass}\n")
        with pytest.raises(PatternFileError, match="Invalid regex for 'x'"):
            register_pattern_file(PatternRegistry(), path)

    def test_builtins_take_priority(self, pattern_catalog: Path) -> None:
        registry = build_registry([pattern_catalog])
        assert registry.keys()[-2:] == ["open-team-dashboard", "archive-project"]
        result = render_body(registry, 'I open the dashboard for team "core"', GenerationOptions())
        assert result.key == "open-team-dashboard"
        assert result.body == "context.page.goto(\"/teams/\" + 'core')"

    def test_relative_paths_resolve_against_project_root(self, pattern_catalog: Path) -> None:
        registry = build_registry([pattern_catalog.name], project_root=pattern_catalog.parent)
        assert "archive-project" in registry
