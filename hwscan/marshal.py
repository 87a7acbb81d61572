"""Serialisation of discovery results to JSON and YAML strings."""

from __future__ import annotations

import json
from typing import Any, Optional

import yaml

from hwscan.context import Context


def _warn(ctx: Optional[Context], msg: str, err: Exception) -> None:
    if ctx is not None:
        ctx.warn(msg, err)


def safe_yaml(ctx: Optional[Context], obj: Any) -> str:
    """Return obj as YAML, or an empty string after warning on failure."""
    try:
        data = json.loads(json.dumps(obj))
    except (TypeError, ValueError) as err:
        _warn(ctx, "error marshalling JSON: %s", err)
        return ""
    try:
        return yaml.safe_dump(
            data, sort_keys=True, default_flow_style=False, indent=4, allow_unicode=True
        )
    except yaml.YAMLError as err:
        _warn(ctx, "error marshalling YAML: %s", err)
        return ""


def safe_json(ctx: Optional[Context], obj: Any, indent: bool = False) -> str:
    """Return obj as JSON, compact or indented by two spaces."""
    try:
        if indent:
            return json.dumps(obj, indent=2, ensure_ascii=False)
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as err:
        _warn(ctx, "error marshalling JSON: %s", err)
        return ""