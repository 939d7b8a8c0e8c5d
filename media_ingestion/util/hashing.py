"""Derived-id helpers."""

from __future__ import annotations

import uuid


def stable_uuid(text: str) -> str:
    """Deterministic UUID for an arbitrary string (same input, same id across runs)."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, text))
