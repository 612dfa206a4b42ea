"""Configuration management for stepforge projects."""

from __future__ import annotations

import json
import re
from pathlib import Path

from stepforge.models import ExecutionTarget, OutputTarget, ProjectConfig

STEPFORGE_DIR = ".stepforge"
CONFIG_FILE = "config.json"

IN_PROCESS_STACKS = ("fastapi", "starlette", "flask", "django", "httpx")


def _config_path(project_root: Path) -> Path:
    return project_root / STEPFORGE_DIR / CONFIG_FILE


def save_config(config: ProjectConfig, project_root: Path) -> Path:
    """Save project config to .stepforge/config.json. Returns the config path."""
    stepforge_dir = project_root / STEPFORGE_DIR
    stepforge_dir.mkdir(parents=True, exist_ok=True)
    path = _config_path(project_root)
    data = {
        "version": config.version,
        "output_target": config.output_target,
        "execution_target": config.execution_target,
        "group_by_kind": config.group_by_kind,
        "features_dir": config.features_dir,
        "steps_dir": config.steps_dir,
        "pattern_files": config.pattern_files,
    }
    path.write_text(json.dumps(data, indent=2, default=str) + "\n")
    return path


def load_config(project_root: Path) -> ProjectConfig:
    """Load project config from .stepforge/config.json."""
    path = _config_path(project_root)
    if not path.exists():
        raise FileNotFoundError(f"No config found at {path}")
    data = json.loads(path.read_text())
    defaults = ProjectConfig()
    return ProjectConfig(
        version=data.get("version", defaults.version),
        output_target=data.get("output_target", defaults.output_target),
        execution_target=data.get("execution_target", defaults.execution_target),
        group_by_kind=data.get("group_by_kind", defaults.group_by_kind),
        features_dir=data.get("features_dir", defaults.features_dir),
        steps_dir=data.get("steps_dir", defaults.steps_dir),
        pattern_files=data.get("pattern_files", []),
    )


def _dependency_text(project_root: Path) -> str:
    """Lower-cased contents of the files that declare Python dependencies."""
    candidates = [project_root / "pyproject.toml", project_root / "setup.cfg"]
    candidates.extend(sorted(project_root.glob("requirements*.txt")))
    return "\n".join(p.read_text().lower() for p in candidates if p.is_file())


def _declares(text: str, package: str) -> bool:
    return re.search(rf"(?<![\w-]){re.escape(package)}(?![\w-])", text) is not None


def detect_output_target(project_root: Path) -> str:
    """Detect which BDD runner the project's step definitions are for."""
    text = _dependency_text(project_root)
    if _declares(text, "pytest-bdd") or _declares(text, "pytest_bdd"):
        return OutputTarget.PYTEST_BDD.value
    return OutputTarget.BEHAVE.value


def detect_execution_target(project_root: Path) -> str:
    """Detect whether generated steps should drive a browser or the app in process."""
    text = _dependency_text(project_root)
    if _declares(text, "playwright") or _declares(text, "pytest-playwright"):
        return ExecutionTarget.PLAYWRIGHT.value
    if any(_declares(text, name) for name in IN_PROCESS_STACKS):
        return ExecutionTarget.COMPONENT.value
    return ExecutionTarget.PLAYWRIGHT.value


def is_initialized(project_root: Path) -> bool:
    """Check if the project is initialized for stepforge."""
    return _config_path(project_root).exists()


def ensure_initialized(project_root: Path) -> ProjectConfig:
    """Ensure the project is initialized. Raises if not."""
    if not is_initialized(project_root):
        raise RuntimeError(
            "Project is not initialized. Run `stepforge init` first."
        )
    return load_config(project_root)
