"""Token trimming and the summary prompt."""

from __future__ import annotations

import logging

import tiktoken

from media_ingestion.heads.base import Summary
from media_ingestion.util.json import parse_json_object


logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"

SUMMARY_PROMPT = """Please generate a concise summary for the following text:

Text: \"\"\"
{text}
\"\"\"

Respond with a JSON object in the following format:
```json
{{
  "title": "Generated Title",
  "summary": "Generated summary and/or description of the text"
}}
```"""


def trim_tokens(text: str, max_tokens: int, encoding_name: str = DEFAULT_ENCODING) -> str:
    if max_tokens <= 0:
        return ""
    encoding = tiktoken.get_encoding(encoding_name)
    tokens = encoding.encode(text, disallowed_special=())
    if len(tokens) <= max_tokens:
        return text
    logger.debug("Trimming summary input from %d to %d tokens", len(tokens), max_tokens)
    # keeps the last max_tokens tokens
    return encoding.decode(tokens[-max_tokens:])


def build_summary_prompt(text: str) -> str:
    return SUMMARY_PROMPT.format(text=text)


def parse_summary(response: str | None) -> Summary:
    parsed = parse_json_object(response)
    if not parsed:
        logger.warning("Summary response was not a JSON object")
        return Summary()
    return Summary(
        title=str(parsed.get("title") or "").strip(),
        description=str(parsed.get("summary") or parsed.get("description") or "").strip(),
    )
