"""Report export formats."""

from repo_transfer.export.json import export_json, render_json
from repo_transfer.export.yaml import export_yaml, render_yaml

__all__ = ["export_json", "export_yaml", "render_json", "render_yaml"]
