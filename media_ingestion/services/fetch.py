"""Resource fetching over HTTP(S) or from local paths."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from media_ingestion.errors import ResourceUnavailableError


logger = logging.getLogger(__name__)


def local_path_for(url: str) -> Path | None:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme in ("http", "https"):
        return None
    # bare paths and Windows drive letters
    if not parsed.scheme or len(parsed.scheme) == 1:
        return Path(url)
    return None


class HttpFetcher:
    def __init__(self, timeout: float = 30.0, session: requests.Session | None = None, chunk_size: int = 1024 * 1024) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.chunk_size = chunk_size

    def fetch(self, url: str) -> bytes:
        local = local_path_for(url)
        if local is not None:
            try:
                return local.read_bytes()
            except OSError as exc:
                raise ResourceUnavailableError(f"Cannot read {local}: {exc}") from exc
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ResourceUnavailableError(f"Failed to fetch {url}: {exc}") from exc
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.content

    def fetch_text(self, url: str) -> str:
        data = self.fetch(url)
        for encoding in ("utf-8", "cp1252"):
            try:
                return data.decode(encoding)
            except UnicodeDecodeError:
                continue
        return data.decode("utf-8", errors="replace")

    def is_reachable(self, url: str) -> bool:
        local = local_path_for(url)
        if local is not None:
            return local.exists()
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException:
            logger.debug("HEAD failed for %s", url, exc_info=True)
            return False
        return response.ok

    def download_to(self, url: str, path: Path) -> Path:
        """Stream a remote resource to ``path``; a partial file is removed on failure."""
        path.parent.mkdir(parents=True, exist_ok=True)
        local = local_path_for(url)
        try:
            if local is not None:
                path.write_bytes(local.read_bytes())
                return path
            with self.session.get(url, timeout=self.timeout, stream=True) as response:
                response.raise_for_status()
                with path.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            handle.write(chunk)
        except (OSError, requests.RequestException) as exc:
            path.unlink(missing_ok=True)
            raise ResourceUnavailableError(f"Failed to download {url}: {exc}") from exc
        return path
