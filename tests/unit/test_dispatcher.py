"""Unit tests for stepforge.dispatcher."""

import logging

import pytest

from stepforge.dispatcher import fallback_body, render_body, resolve
from stepforge.models import ExecutionTarget, GenerationOptions, PatternDescriptor, StepKind
from stepforge.registry import PatternRegistry


def _registry(*items: tuple[str, PatternDescriptor]) -> PatternRegistry:
    registry = PatternRegistry()
    registry.register_many(items)
    return registry


def _echo(captures, options):  # type: ignore[no-untyped-def]
    return f"seen = {captures!r}"


def _boom(captures, options):  # type: ignore[no-untyped-def]
    raise RuntimeError("generator exploded")


def _target(captures, options):  # type: ignore[no-untyped-def]
    return f"target = {options.execution_target.value!r}"


class TestResolve:
    def test_first_match_wins(self) -> None:
        registry = _registry(
            ("specific", PatternDescriptor(r'I click the "Submit" button', StepKind.ACTION, _echo)),
            ("generic", PatternDescriptor(r'I click the "([^"]*)"', StepKind.ACTION, _echo, params=("x",))),
        )
        match = resolve(registry, 'I click the "Submit" button')
        assert match is not None
        assert match.key == "specific"

    def test_generic_catches_the_rest(self) -> None:
        registry = _registry(
            ("specific", PatternDescriptor(r'I click the "Submit" button', StepKind.ACTION, _echo)),
            ("generic", PatternDescriptor(r'I click the "([^"]*)"', StepKind.ACTION, _echo, params=("x",))),
        )
        match = resolve(registry, 'I click the "Cancel" button')
        assert match is not None
        assert match.key == "generic"
        assert match.captures == ("Cancel",)

    def test_unanchored_and_case_insensitive(self) -> None:
        registry = _registry(("wave", PatternDescriptor("I wave", StepKind.ACTION, _echo)))
        assert resolve(registry, "then i WAVE goodbye") is not None

    def test_optional_group_is_none(self) -> None:
        registry = _registry((
            "login",
            PatternDescriptor(r'logged in(?: as "([^"]*)")?', StepKind.SETUP, _echo, params=("who",)),
        ))
        match = resolve(registry, "the user is logged in")
        assert match is not None
        assert match.captures == (None,)

    def test_no_match(self) -> None:
        assert resolve(PatternRegistry(), "anything") is None


class TestRenderBody:
    def test_passes_captures_and_options(self) -> None:
        registry = _registry(
            ("target", PatternDescriptor("where", StepKind.ACTION, _target)),
        )
        options = GenerationOptions(execution_target=ExecutionTarget.COMPONENT)
        result = render_body(registry, "where am I", options)
        assert result.body == "target = 'component'"
        assert result.key == "target"
        assert result.error is None

    def test_unmatched_step_falls_back(self) -> None:
        result = render_body(PatternRegistry(), "I juggle", GenerationOptions())
        assert result.key is None
        assert "I juggle" in result.body
        assert 'raise NotImplementedError("Step not implemented: I juggle")' in result.body
        compile(result.body, "<test>", "exec")

    def test_generator_error_is_contained(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = _registry(("boom", PatternDescriptor("explode", StepKind.ACTION, _boom)))
        with caplog.at_level(logging.WARNING, logger="stepforge.dispatcher"):
            result = render_body(registry, "explode now", GenerationOptions())
        assert result.key == "boom"
        assert result.error == "RuntimeError: generator exploded"
        assert "# Generator 'boom' failed: RuntimeError: generator exploded" in result.body
        assert "Step generation failed: explode now" in result.body
        assert "generator exploded" in caplog.text
        compile(result.body, "<test>", "exec")

    @pytest.mark.parametrize("body", ["", "   \n", None])
    def test_empty_body_is_an_error(self, body: object) -> None:
        registry = _registry((
            "empty", PatternDescriptor("nothing", StepKind.ACTION, lambda c, o: body),
        ))
        result = render_body(registry, "nothing", GenerationOptions())
        assert result.error is not None
        assert "NotImplementedError" in result.body

    def test_fallback_body_survives_quotes_and_newlines(self) -> None:
        body = fallback_body('say "hi"\nthen leave')
        assert body.splitlines()[0] == '# No step pattern matched: say "hi" then leave'
        compile(body, "<test>", "exec")
