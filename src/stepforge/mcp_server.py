"""FastMCP server exposing stepforge tools to coding agents."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from stepforge.compiler import StepCompiler
from stepforge.config import is_initialized, load_config
from stepforge.extractor import extract_steps
from stepforge.models import (
    ExtractedStep,
    FeatureSteps,
    GeneratedStep,
    GenerationOptions,
    ProjectConfig,
    StepKeyword,
)
from stepforge.wiring import build_compiler

mcp = FastMCP("stepforge")


# --- Serialization helpers ---


def _serialize_extracted(step: ExtractedStep) -> dict[str, Any]:
    return {
        "kind": step.kind.value,
        "text": step.text,
        "original": step.original,
        "keyword": step.keyword,
        "line": step.line_number,
        "scenario": step.scenario,
        "doc_string": step.doc_string,
        "table": step.table,
    }


def _serialize_generated(step: GeneratedStep) -> dict[str, Any]:
    return {
        "kind": step.kind.value,
        "text": step.text,
        "line": step.line_number,
        "key": step.key,
        "matched": step.matched,
        "error": step.error,
        "definition": step.definition,
    }


def _serialize_feature_steps(steps: FeatureSteps) -> dict[str, Any]:
    return {
        "given": [_serialize_generated(s) for s in steps.given],
        "when": [_serialize_generated(s) for s in steps.when],
        "then": [_serialize_generated(s) for s in steps.then],
        "imports": steps.imports,
        "unmatched": [s.text for s in steps.unmatched],
    }


# --- Tool implementation functions (testable without MCP) ---


def _project_config(project_root: str | None) -> ProjectConfig:
    if project_root and is_initialized(Path(project_root)):
        return load_config(Path(project_root))
    return ProjectConfig()


def _setup(
    project_root: str | None,
    output_target: str | None,
    execution_target: str | None,
    group_by_kind: bool | None = None,
) -> tuple[StepCompiler, GenerationOptions]:
    """Compiler for the project plus options with per-call overrides applied."""
    config = _project_config(project_root)
    compiler = build_compiler(config, Path(project_root) if project_root else None)
    options = GenerationOptions.from_values(
        output_target=output_target or config.output_target,
        execution_target=execution_target or config.execution_target,
        group_by_kind=config.group_by_kind if group_by_kind is None else group_by_kind,
    )
    return compiler, options


def _read_source(content: str | None, file_path: str | None) -> str | None:
    if file_path:
        return Path(file_path).read_text()
    return content


def _generate_step(
    text: str,
    keyword: str | None = None,
    output_target: str | None = None,
    execution_target: str | None = None,
    project_root: str | None = None,
) -> dict[str, Any]:
    if not text or not text.strip():
        return {"error": "Provide a non-empty step 'text'"}
    try:
        compiler, options = _setup(project_root, output_target, execution_target)
        step_keyword = StepKeyword(keyword.capitalize()) if keyword else None
    except ValueError as e:
        return {"error": str(e)}
    match = compiler.resolve(text)
    return {
        "text": text,
        "key": match.key if match else None,
        "matched": match is not None,
        "definition": compiler.generate_step_definition(text, options, step_keyword),
    }


def _generate_feature_steps(
    content: str | None = None,
    file_path: str | None = None,
    output_target: str | None = None,
    execution_target: str | None = None,
    project_root: str | None = None,
) -> dict[str, Any]:
    source = _read_source(content, file_path)
    if source is None:
        return {"error": "Provide either 'content' or 'file_path'"}
    try:
        compiler, options = _setup(project_root, output_target, execution_target)
    except ValueError as e:
        return {"error": str(e)}
    return _serialize_feature_steps(compiler.generate_feature_steps(source, options))


def _generate_steps_file(
    content: str | None = None,
    file_path: str | None = None,
    filename: str | None = None,
    output_target: str | None = None,
    execution_target: str | None = None,
    group_by_kind: bool | None = None,
    project_root: str | None = None,
) -> dict[str, Any]:
    source = _read_source(content, file_path)
    if source is None:
        return {"error": "Provide either 'content' or 'file_path'"}
    name = filename or (Path(file_path).name if file_path else "steps.feature")
    try:
        compiler, options = _setup(project_root, output_target, execution_target, group_by_kind)
    except ValueError as e:
        return {"error": str(e)}
    steps = compiler.generate_feature_steps(source, options)
    return {
        "filename": name,
        "code": compiler.render_steps_file(steps, name, options),
        "step_count": len(steps.all_steps()),
        "unmatched": [s.text for s in steps.unmatched],
    }


def _extract_feature_steps(
    content: str | None = None, file_path: str | None = None,
) -> dict[str, Any]:
    source = _read_source(content, file_path)
    if source is None:
        return {"error": "Provide either 'content' or 'file_path'"}
    steps = extract_steps(source)
    return {
        "step_count": len(steps),
        "steps": [_serialize_extracted(s) for s in steps],
    }


def _list_step_patterns(
    tag: str | None = None, project_root: str | None = None,
) -> dict[str, Any]:
    try:
        compiler, _ = _setup(project_root, None, None)
    except ValueError as e:
        return {"error": str(e)}
    if tag:
        summaries = compiler.filter_patterns_by_tag(tag)
    else:
        summaries = compiler.get_available_step_patterns()
    return {
        "pattern_count": len(summaries),
        "patterns": [s.to_dict() for s in summaries],
    }


def _search_step_patterns(
    query: str, limit: int = 10, project_root: str | None = None,
) -> dict[str, Any]:
    try:
        compiler, _ = _setup(project_root, None, None)
    except ValueError as e:
        return {"error": str(e)}
    hits = compiler.search_step_generators(query)
    return {
        "query": query,
        "total": len(hits),
        "results": [h.to_dict() for h in hits[:limit]],
    }


# --- MCP tool registrations ---


@mcp.tool()
def generate_step(
    text: str,
    keyword: str | None = None,
    output_target: str | None = None,
    execution_target: str | None = None,
    project_root: str | None = None,
) -> dict:
    """Generate the step definition for one step sentence.

    Args:
        keyword: "given", "when" or "then"; defaults to the matched pattern's kind.
        output_target: "behave", "pytest-bdd" or "plain".
        execution_target: "playwright" or "component".
    """
    return _generate_step(text, keyword, output_target, execution_target, project_root)


@mcp.tool()
def generate_feature_steps(
    content: str | None = None,
    file_path: str | None = None,
    output_target: str | None = None,
    execution_target: str | None = None,
    project_root: str | None = None,
) -> dict:
    """Generate step definitions for every step of a feature, grouped by keyword."""
    return _generate_feature_steps(content, file_path, output_target, execution_target, project_root)


@mcp.tool()
def generate_steps_file(
    content: str | None = None,
    file_path: str | None = None,
    filename: str | None = None,
    output_target: str | None = None,
    execution_target: str | None = None,
    group_by_kind: bool | None = None,
    project_root: str | None = None,
) -> dict:
    """Generate a complete step definitions module for a feature.

    Returns the module source and the steps no pattern recognized.
    """
    return _generate_steps_file(
        content, file_path, filename, output_target, execution_target, group_by_kind, project_root,
    )


@mcp.tool()
def extract_feature_steps(content: str | None = None, file_path: str | None = None) -> dict:
    """List the steps of a feature with their resolved Given/When/Then kind."""
    return _extract_feature_steps(content, file_path)


@mcp.tool()
def list_step_patterns(tag: str | None = None, project_root: str | None = None) -> dict:
    """List registered step patterns in match priority order, optionally by tag."""
    return _list_step_patterns(tag, project_root)


@mcp.tool()
def search_step_patterns(query: str, limit: int = 10, project_root: str | None = None) -> dict:
    """Search step patterns by pattern text, tag, description or key.

    Results are ranked by relevance, most relevant first.
    """
    return _search_step_patterns(query, limit, project_root)


def main() -> None:
    mcp.run()
