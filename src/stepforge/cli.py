"""Click CLI entry point for stepforge."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from stepforge import __version__
from stepforge.compiler import StepCompiler
from stepforge.config import (
    detect_execution_target,
    detect_output_target,
    is_initialized,
    load_config,
    save_config,
)
from stepforge.custom_patterns import PatternFileError
from stepforge.exporters import export_json, export_markdown
from stepforge.extractor import extract_steps
from stepforge.models import (
    ExecutionTarget,
    GenerationOptions,
    OutputTarget,
    ProjectConfig,
    StepKeyword,
)
from stepforge.wiring import build_compiler

OUTPUT_TARGETS = [t.value for t in OutputTarget]
EXECUTION_TARGETS = [t.value for t in ExecutionTarget]


@click.group()
@click.version_option(version=__version__, prog_name="stepforge")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """stepforge: turn Given/When/Then steps into step definition code."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _project_config(project_root: Path) -> ProjectConfig:
    if is_initialized(project_root):
        return load_config(project_root)
    return ProjectConfig()


def _compiler(ctx: click.Context, project_root: Path, config: ProjectConfig) -> StepCompiler:
    """Build the compiler once per invocation; catalog errors end the command."""
    if "compiler" not in ctx.obj:
        try:
            ctx.obj["compiler"] = build_compiler(config, project_root)
        except PatternFileError as e:
            raise click.ClickException(str(e)) from e
    return ctx.obj["compiler"]


def _options(
    config: ProjectConfig,
    output_target: str | None,
    execution_target: str | None,
    group_by_kind: bool | None = None,
) -> GenerationOptions:
    """CLI flags override the project config, which overrides the defaults."""
    try:
        return GenerationOptions.from_values(
            output_target=output_target or config.output_target,
            execution_target=execution_target or config.execution_target,
            group_by_kind=config.group_by_kind if group_by_kind is None else group_by_kind,
        )
    except ValueError as e:
        raise click.ClickException(f"{e} (check .stepforge/config.json)") from e


def _target_options(func):  # type: ignore[no-untyped-def]
    func = click.option(
        "--execution-target", type=click.Choice(EXECUTION_TARGETS), default=None,
        help="Code idiom for step bodies",
    )(func)
    func = click.option(
        "--output-target", type=click.Choice(OUTPUT_TARGETS), default=None,
        help="Step declaration syntax",
    )(func)
    return func


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Initialize a project for stepforge."""
    project_root = Path.cwd()
    already = is_initialized(project_root)

    if already:
        click.echo("Warning: Project is already initialized. Updating configuration.")
        config = load_config(project_root)
    else:
        config = ProjectConfig()

    config.output_target = detect_output_target(project_root)
    config.execution_target = detect_execution_target(project_root)
    click.echo(f"Detected output target: {config.output_target}")
    click.echo(f"Detected execution target: {config.execution_target}")

    features_dir = project_root / config.features_dir
    features_dir.mkdir(parents=True, exist_ok=True)
    config_path = save_config(config, project_root)

    if already:
        click.echo("Configuration updated. Existing feature files preserved.")
    else:
        click.echo("Initialized stepforge project.")
        click.echo(f"  Created: {features_dir}/")
        click.echo(f"  Config:  {config_path}")


@cli.command()
@click.argument("text")
@click.option(
    "--keyword", type=click.Choice(["given", "when", "then"], case_sensitive=False),
    default=None, help="Declare under this keyword instead of the pattern's kind",
)
@_target_options
@click.pass_context
def step(
    ctx: click.Context,
    text: str,
    keyword: str | None,
    output_target: str | None,
    execution_target: str | None,
) -> None:
    """Generate the step definition for one step sentence."""
    project_root = Path.cwd()
    config = _project_config(project_root)
    options = _options(config, output_target, execution_target)
    compiler = _compiler(ctx, project_root, config)

    step_keyword = StepKeyword(keyword.capitalize()) if keyword else None
    click.echo(compiler.generate_step_definition(text, options, step_keyword))
    if compiler.resolve(text) is None:
        click.echo(f"Warning: no step pattern matched: {text}", err=True)


@cli.command()
@click.argument("feature", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def extract(feature: str, as_json: bool) -> None:
    """List the steps of a feature file with their resolved keyword."""
    steps = extract_steps(Path(feature).read_text())
    if as_json:
        import json as json_mod

        data = [
            {
                "line": s.line_number,
                "kind": s.kind.value,
                "keyword": s.keyword,
                "text": s.text,
                "scenario": s.scenario,
                "doc_string": s.doc_string,
                "table": s.table,
            }
            for s in steps
        ]
        click.echo(json_mod.dumps(data, indent=2))
        return

    if not steps:
        click.echo("No steps found.")
        return
    for s in steps:
        click.echo(f"{s.line_number:>5}  {s.kind.value:<5}  {s.text}")
    click.echo(f"\n{len(steps)} step(s)")


def _steps_filename(feature: Path, options: GenerationOptions) -> str:
    if options.output_target is OutputTarget.PYTEST_BDD:
        return f"test_{feature.stem}_steps.py"
    return f"{feature.stem}_steps.py"


@cli.command()
@click.argument("features", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--stdout", "to_stdout", is_flag=True, default=False, help="Print instead of writing files")
@_target_options
@click.option(
    "--group-by-kind/--document-order", default=None,
    help="Group declarations as Given, When, Then",
)
@click.pass_context
def generate(
    ctx: click.Context,
    features: tuple[str, ...],
    to_stdout: bool,
    output_target: str | None,
    execution_target: str | None,
    group_by_kind: bool | None,
) -> None:
    """Generate step definition modules for feature files."""
    project_root = Path.cwd()
    config = _project_config(project_root)
    options = _options(config, output_target, execution_target, group_by_kind)

    if features:
        paths = [Path(f) for f in features]
    else:
        paths = sorted((project_root / config.features_dir).glob("*.feature"))
    if not paths:
        click.echo(f"No feature files found in {config.features_dir}/.")
        return

    compiler = _compiler(ctx, project_root, config)
    steps_dir = project_root / config.steps_dir
    total_unmatched = 0

    for feature in paths:
        content = feature.read_text()
        target = steps_dir / _steps_filename(feature, options)
        source = os.path.relpath(feature.resolve(), steps_dir.resolve())
        steps = compiler.generate_feature_steps(content, options)
        code = compiler.render_steps_file(steps, source, options)
        unmatched = steps.unmatched
        total_unmatched += len(unmatched)

        if to_stdout:
            click.echo(code)
        else:
            steps_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(code)
            click.echo(f"Wrote {target} ({len(steps.all_steps())} step(s))")

        for s in unmatched:
            reason = "generator failed" if s.error else "no pattern"
            click.echo(f"  ? {feature.name}:{s.line_number} {s.text} ({reason})", err=True)

    if total_unmatched:
        click.echo(f"{total_unmatched} step(s) need a pattern or a manual implementation.", err=True)


@cli.command()
@click.option("--tag", default=None, help="Only patterns with this tag")
@click.option(
    "--format", "fmt", type=click.Choice(["table", "json", "markdown"]), default="table",
)
@click.pass_context
def patterns(ctx: click.Context, tag: str | None, fmt: str) -> None:
    """List registered step patterns in match priority order."""
    project_root = Path.cwd()
    compiler = _compiler(ctx, project_root, _project_config(project_root))
    if tag:
        summaries = compiler.filter_patterns_by_tag(tag)
    else:
        summaries = compiler.get_available_step_patterns()

    if fmt == "json":
        click.echo(export_json(summaries))
        return
    if fmt == "markdown":
        click.echo(export_markdown(summaries), nl=False)
        return

    if not summaries:
        click.echo("No patterns found.")
        return
    for s in summaries:
        click.echo(f"{s.key:<40} {s.kind.keyword.value:<5}  {s.example}")
    click.echo(f"\n{len(summaries)} pattern(s)")


@cli.command()
@click.argument("query")
@click.option("--limit", type=int, default=10, show_default=True)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int, as_json: bool) -> None:
    """Search step patterns by pattern text, tag, description or key."""
    project_root = Path.cwd()
    compiler = _compiler(ctx, project_root, _project_config(project_root))
    hits = compiler.search_step_generators(query)[:limit]

    if as_json:
        click.echo(export_json(hits))
        return
    if not hits:
        click.echo(f"No patterns match '{query}'.")
        return
    for h in hits:
        click.echo(f"{h.relevance:>3}  {h.key:<40} {', '.join(h.matched_on)}")
        if h.summary.example:
            click.echo(f"     e.g. {h.summary.example}")
