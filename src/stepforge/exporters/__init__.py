"""Exports of the step pattern catalog."""

from stepforge.exporters.json_export import export_json
from stepforge.exporters.markdown import export_markdown

__all__ = ["export_json", "export_markdown"]
