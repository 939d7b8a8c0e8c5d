"""JSON safety helpers."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
import json
from pathlib import Path
from typing import Any


def make_json_safe(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return make_json_safe(asdict(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): make_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [make_json_safe(v) for v in value]
    return value


def json_dumps_safe(value: Any, **kwargs) -> str:
    return json.dumps(make_json_safe(value), **kwargs)


def parse_json_object(text: str | None) -> dict | None:
    """Parse the first JSON object in model output, fenced in ```json blocks or bare."""
    if not text:
        return None
    candidate = text.strip()
    if "```" in candidate:
        start = candidate.find("```")
        end = candidate.find("```", start + 3)
        block = candidate[start + 3 : end if end != -1 else None]
        if block.lstrip().lower().startswith("json"):
            block = block.lstrip()[4:]
        candidate = block.strip()
    try:
        parsed = json.loads(candidate)
    except ValueError:
        first = candidate.find("{")
        last = candidate.rfind("}")
        if first == -1 or last <= first:
            return None
        try:
            parsed = json.loads(candidate[first : last + 1])
        except ValueError:
            return None
    return parsed if isinstance(parsed, dict) else None
