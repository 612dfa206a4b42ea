"""Wrap generated step bodies in the syntax of an output target."""

from __future__ import annotations

import re
from typing import Iterable

from stepforge.models import ExecutionTarget, GenerationOptions, OutputTarget, StepKeyword

INDENT = "    "

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def quote(value: str) -> str:
    """Render ``value`` as a double-quoted Python string literal."""
    parts: list[str] = []
    for char in value:
        if char in _ESCAPES:
            parts.append(_ESCAPES[char])
        elif ord(char) < 32 or ord(char) == 127:
            parts.append(f"\\x{ord(char):02x}")
        else:
            parts.append(char)
    return '"' + "".join(parts) + '"'


PLACEHOLDER = re.compile(r"<([^<>\s][^<>\n]*)>")


def has_placeholders(step_text: str) -> bool:
    """Whether ``step_text`` is a Scenario Outline step with ``<name>`` slots."""
    return PLACEHOLDER.search(step_text) is not None


def step_regex(step_text: str) -> str:
    """Anchored regex that matches exactly ``step_text``.

    Outline placeholders match any value, since runners substitute the
    Examples row before looking a step up.
    """
    parts: list[str] = []
    pos = 0
    for match in PLACEHOLDER.finditer(step_text):
        parts.append(re.escape(step_text[pos:match.start()]))
        parts.append("(?:.+)")
        pos = match.end()
    parts.append(re.escape(step_text[pos:]))
    return "^" + "".join(parts) + "$"


def single_line(text: str) -> str:
    return " ".join(text.splitlines())


def indent(body: str, prefix: str = INDENT) -> str:
    return "\n".join(prefix + line if line.strip() else "" for line in body.split("\n"))


def format_step(
    body: str,
    keyword: StepKeyword,
    step_text: str,
    output_target: OutputTarget = OutputTarget.BEHAVE,
) -> str:
    """Wrap ``body`` in a step declaration for ``output_target``."""
    body = body.strip("\n")
    if not body.strip():
        body = "pass"

    if output_target is OutputTarget.BEHAVE:
        return (
            f"@{keyword.decorator}({quote(step_regex(step_text))})\n"
            f"def step_impl(context):\n"
            f"{indent(body)}"
        )

    if output_target is OutputTarget.PYTEST_BDD:
        if has_placeholders(step_text):
            name = f"parsers.re({quote(step_regex(step_text))})"
        else:
            name = quote(step_text)
        return (
            f"@{keyword.decorator}({name})\n"
            f"def _(context):\n"
            f"{indent(body)}"
        )

    return f"# {keyword.value}: {single_line(step_text)}\n{body}"


def declaration_separator(output_target: OutputTarget) -> str:
    """Blank lines placed between two declarations."""
    if output_target is OutputTarget.PLAIN:
        return "\n\n"
    return "\n\n\n"


def file_header(
    filename: str,
    options: GenerationOptions,
    extra_imports: Iterable[str] = (),
    outline_steps: bool = False,
) -> str:
    """Module docstring, imports and target setup for a generated file.

    ``outline_steps`` adds the pytest-bdd ``parsers`` import that placeholder
    declarations use.
    """
    source = filename.replace("\\", "/").replace('"', "'")
    lines = [
        f'"""Step definitions generated from {source}.',
        "",
        "DO NOT EDIT - this file is regenerated by stepforge.",
        f"Output target: {options.output_target.value}, "
        f"execution target: {options.execution_target.value}",
        '"""',
        "",
    ]

    playwright = options.execution_target is ExecutionTarget.PLAYWRIGHT
    stdlib = set(extra_imports)
    third_party: list[str] = []
    setup: list[str] = []

    if options.output_target is OutputTarget.BEHAVE:
        third_party.append("from behave import given, then, use_step_matcher, when")
        setup.append('use_step_matcher("re")')
    elif options.output_target is OutputTarget.PYTEST_BDD:
        third_party.append("import pytest")
        parsers = "parsers, " if outline_steps else ""
        third_party.append(f"from pytest_bdd import given, {parsers}scenarios, then, when")
        if source.endswith(".feature"):
            setup.extend([f"scenarios({quote(source)})", "", ""])
        setup.append("@pytest.fixture")
        if playwright:
            stdlib.add("from types import SimpleNamespace")
            setup.extend([
                "def context(page):",
                f"{INDENT}return SimpleNamespace(page=page)",
            ])
        else:
            setup.extend([
                "def context(component_harness):",
                f"{INDENT}return component_harness",
            ])

    if playwright:
        third_party.append("from playwright.sync_api import expect")

    if stdlib:
        lines.extend(sorted(stdlib, key=lambda s: (s.startswith("from "), s)))
        lines.append("")
    if third_party:
        lines.extend(sorted(third_party, key=lambda s: (s.startswith("from "), s)))
        lines.append("")
    if setup:
        lines.append("")
        lines.extend(setup)

    return "\n".join(lines).rstrip("\n") + "\n"
