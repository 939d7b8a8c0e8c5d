"""Subtitle and caption parsing into plain transcript text."""

from __future__ import annotations

import json
import re

from media_ingestion.errors import ConversionError


CUE_INDEX = re.compile(r"^\d+$")
TAGS = re.compile(r"<[^>]+>")
WHITESPACE = re.compile(r"\s+")
HEADER_BLOCKS = ("WEBVTT", "NOTE", "STYLE", "REGION")


def parse_subtitles(content: str) -> str:
    """Plain text of an SRT or WebVTT document: cue numbers, timings and markup removed."""
    lines: list[str] = []
    blocks = re.split(r"\r?\n\s*\r?\n", content.strip().lstrip("\ufeff"))
    for block in blocks:
        block_lines = [raw.strip() for raw in block.splitlines() if raw.strip()]
        if not block_lines or block_lines[0].startswith(HEADER_BLOCKS):
            continue
        timing = next((i for i, line in enumerate(block_lines) if "-->" in line), None)
        if timing is not None:
            # cue numbers and cue identifiers sit above the timing line
            block_lines = block_lines[timing + 1 :]
        else:
            block_lines = [line for line in block_lines if not CUE_INDEX.match(line)]
        lines.extend(TAGS.sub("", line) for line in block_lines)
    return WHITESPACE.sub(" ", " ".join(lines)).strip()


def parse_json3_captions(content: str) -> str:
    """Plain text of YouTube json3 auto captions (``events[].segs[].utf8``)."""
    try:
        payload = json.loads(content)
    except ValueError as exc:
        raise ConversionError("Unable to parse captions") from exc
    events = payload.get("events") if isinstance(payload, dict) else None
    if not isinstance(events, list):
        raise ConversionError("Unexpected caption format")
    parts = []
    for event in events:
        for seg in event.get("segs") or []:
            parts.append(seg.get("utf8", ""))
    return WHITESPACE.sub(" ", "".join(parts)).strip()


def parse_captions(content: str, ext: str | None) -> str:
    if (ext or "").lower() == "json3" or content.lstrip().startswith("{"):
        return parse_json3_captions(content)
    return parse_subtitles(content)
