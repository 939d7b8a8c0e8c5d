"""On-disk store for downloaded video and extracted audio files."""

from __future__ import annotations

from pathlib import Path
import os


class MediaStore:
    def __init__(self, root: str) -> None:
        self.root = Path(root)

    def path_for(self, media_id: str, ext: str) -> Path:
        ext = ext.lower()
        if not ext.startswith("."):
            ext = f".{ext}"
        return self.root / media_id[:2] / f"{media_id}{ext}"

    def exists(self, media_id: str, ext: str) -> bool:
        path = self.path_for(media_id, ext)
        return path.exists() and path.stat().st_size > 0

    def prepare(self, media_id: str, ext: str) -> Path:
        path = self.path_for(media_id, ext)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def ensure_root(self) -> None:
        os.makedirs(self.root, exist_ok=True)
