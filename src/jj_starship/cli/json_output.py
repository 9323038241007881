"""JSON output utilities for machine-parseable resolver output."""

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from jj_starship.cli.output import machine_output
from jj_starship.core.vcs.types import ChangeCentricStatus, ResolverResult


def _serialize_for_json(obj: Any) -> Any:
    """Recursively serialize special types for JSON.

    Handles Path, Enum, and dataclass instances.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable version of the object
    """
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return _serialize_for_json(asdict(obj))
    if isinstance(obj, dict):
        return {key: _serialize_for_json(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize_for_json(item) for item in obj]
    return obj


def result_to_dict(result: ResolverResult) -> dict[str, Any]:
    """Convert a ResolverResult to a JSON-ready dict.

    The status variant is tagged with its backend so consumers can tell the
    two shapes apart.
    """
    data = _serialize_for_json(result)
    data["status"]["variant"] = (
        "change-centric" if isinstance(result.status, ChangeCentricStatus) else "classic"
    )
    return data


def emit_json(data: dict[str, Any]) -> None:
    """Output JSON data to stdout for machine consumption.

    Args:
        data: Dictionary to serialize as JSON
    """
    serialized = _serialize_for_json(data)
    json_str = json.dumps(serialized, indent=2, ensure_ascii=False)
    machine_output(json_str)
