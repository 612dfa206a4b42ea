"""Application wiring: build the registry and compiler once at startup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from stepforge.compiler import StepCompiler
from stepforge.custom_patterns import register_pattern_file
from stepforge.generators import register_builtin_steps
from stepforge.models import ProjectConfig
from stepforge.registry import PatternRegistry

logger = logging.getLogger(__name__)


def build_registry(
    pattern_files: Iterable[str | Path] = (),
    project_root: Path | None = None,
) -> PatternRegistry:
    """A fresh registry holding the built-in patterns, then project catalogs."""
    registry = PatternRegistry()
    register_builtin_steps(registry)
    for pattern_file in pattern_files:
        path = Path(pattern_file)
        if project_root is not None and not path.is_absolute():
            path = project_root / path
        register_pattern_file(registry, path)
    logger.info("Initialized %d step generators", len(registry))
    return registry


def build_compiler(
    config: ProjectConfig | None = None,
    project_root: Path | None = None,
) -> StepCompiler:
    """A compiler configured from ``config`` (defaults when ``None``)."""
    config = config or ProjectConfig()
    registry = build_registry(config.pattern_files, project_root)
    return StepCompiler(registry, config.options())
