"""Video metadata and media download through yt-dlp."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Callable, Union
from urllib.parse import unquote, urlparse

import yt_dlp
from yt_dlp.utils import DownloadError

from media_ingestion.errors import ResourceUnavailableError
from media_ingestion.services.fetch import HttpFetcher


logger = logging.getLogger(__name__)

VIDEO_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/best[ext=mp4]/best"
VIDEO_EXTS = {".mp4", ".mkv", ".webm", ".mov", ".m4v"}


@dataclass(frozen=True)
class VideoInfo:
    title: str = ""
    channel: str = ""
    description: str = ""
    webpage_url: str = ""
    subtitles: dict = field(default_factory=dict)
    automatic_captions: dict = field(default_factory=dict)
    categories: list = field(default_factory=list)

    @classmethod
    def from_ytdlp(cls, info: dict) -> "VideoInfo":
        return cls(
            title=info.get("title") or "",
            channel=info.get("channel") or info.get("uploader") or "",
            description=info.get("description") or "",
            webpage_url=info.get("webpage_url") or "",
            subtitles=info.get("subtitles") or {},
            automatic_captions=info.get("automatic_captions") or {},
            categories=list(info.get("categories") or []),
        )


def is_direct_mp4(url: str) -> bool:
    return url.endswith(".mp4") or ".mp4?" in url


class YtDlpResolver:
    def __init__(
        self,
        fetcher: HttpFetcher,
        subtitle_language: str = "en",
        socket_timeout: float = 30.0,
        ffmpeg_location: Union[str, Callable[[], str], None] = None,
    ) -> None:
        self.fetcher = fetcher
        self.subtitle_language = subtitle_language
        self.socket_timeout = socket_timeout
        self.ffmpeg_location = ffmpeg_location

    def _options(self, **extra) -> dict:
        opts = {
            "quiet": True,
            "no_warnings": True,
            "noprogress": True,
            "noplaylist": True,
            "socket_timeout": self.socket_timeout,
        }
        location = self.ffmpeg_location() if callable(self.ffmpeg_location) else self.ffmpeg_location
        if location:
            opts["ffmpeg_location"] = location
        opts.update(extra)
        return opts

    def fetch_info(self, url: str) -> VideoInfo:
        if is_direct_mp4(url):
            if self.fetcher.is_reachable(url):
                name = Path(unquote(urlparse(url).path)).name
                return VideoInfo(title=name, webpage_url=url)
            logger.info("Direct MP4 not reachable, falling back to yt-dlp: %s", url)
        opts = self._options(
            skip_download=True,
            writesubtitles=True,
            writeautomaticsub=True,
            subtitleslangs=[self.subtitle_language],
        )
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except DownloadError as exc:
            raise ResourceUnavailableError(f"Failed to fetch video information: {exc}") from exc
        if not info:
            raise ResourceUnavailableError(f"No video information for {url}")
        return VideoInfo.from_ytdlp(info)

    def download(self, url: str, output_path: Path) -> Path:
        """Download the video to ``output_path``, reusing an existing download."""
        if output_path.exists() and output_path.stat().st_size > 0:
            logger.debug("Reusing downloaded media %s", output_path)
            return output_path
        if is_direct_mp4(url):
            return self.fetcher.download_to(url, output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        opts = self._options(
            format=VIDEO_FORMAT,
            merge_output_format="mp4",
            outtmpl=str(output_path.with_suffix("")) + ".%(ext)s",
        )
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except DownloadError as exc:
            raise ResourceUnavailableError(f"Failed to download video: {exc}") from exc
        if not output_path.exists():
            candidates = [
                p for p in output_path.parent.glob(f"{output_path.stem}.*")
                if p.suffix.lower() in VIDEO_EXTS
            ]
            if not candidates:
                raise ResourceUnavailableError(f"Download produced no video file for {url}")
            candidates[0].replace(output_path)
        return output_path
