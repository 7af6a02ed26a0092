"""YAML export of repository reports and target capabilities."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel


def render_yaml(data: BaseModel | list[BaseModel]) -> str:
    if isinstance(data, BaseModel):
        payload = data.model_dump(mode="json")
    else:
        payload = [item.model_dump(mode="json") for item in data]
    return yaml.dump(payload, default_flow_style=False, sort_keys=False)


def export_yaml(data: BaseModel | list[BaseModel], output_path: Path) -> None:
    """Export a report (or a list of reports) as YAML."""
    output_path.write_text(render_yaml(data))
