"""HTML to text normalization."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup


BLANK_LINES = re.compile(r"\n\s*\n+")


def html_to_text(html: str | None) -> str | None:
    if not html:
        return None
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n").strip()
    return BLANK_LINES.sub("\n\n", text) or None
