"""Small helpers shared by the built-in generator modules."""

from __future__ import annotations

import re

from stepforge.formatter import quote
from stepforge.models import ExecutionTarget, GenerationOptions

__all__ = ["browser", "first", "json_path", "kebab_case", "page_path", "quote"]


def first(*values: str | None) -> str:
    """First non-empty capture; alternation groups leave the others ``None``."""
    for value in values:
        if value:
            return value.strip()
    return ""


def browser(options: GenerationOptions) -> bool:
    return options.execution_target is ExecutionTarget.PLAYWRIGHT


def kebab_case(text: str) -> str:
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", text.strip())
    return re.sub(r"[^a-zA-Z0-9]+", "-", text).strip("-").lower()


def page_path(name: str) -> str:
    """Route for a page named in prose: ``"User Profile"`` -> ``/user-profile``."""
    if name.startswith("/"):
        return name
    slug = kebab_case(name)
    if slug in ("", "home", "index", "main"):
        return "/"
    return "/" + slug


def json_path(expression: str, path: str) -> str:
    """Index ``expression`` by a dotted property path (``user.name``)."""
    for part in path.split("."):
        if part.isdigit():
            expression += f"[{part}]"
        else:
            expression += f"[{quote(part)}]"
    return expression
