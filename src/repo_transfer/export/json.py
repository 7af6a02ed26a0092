"""JSON export of repository reports and target capabilities."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel


def render_json(data: BaseModel | list[BaseModel]) -> str:
    if isinstance(data, BaseModel):
        return data.model_dump_json(indent=2)
    return json.dumps([item.model_dump(mode="json") for item in data], indent=2)


def export_json(data: BaseModel | list[BaseModel], output_path: Path) -> None:
    """Export a report (or a list of reports) as JSON."""
    output_path.write_text(render_json(data) + "\n")
