"""Video extraction: metadata, transcript acquisition and the durable video cache."""

from __future__ import annotations

from concurrent import futures
import logging
import re
import time
from typing import Protocol

from media_ingestion.errors import ResourceUnavailableError, ServiceNotFoundError
from media_ingestion.heads.base import (
    SOURCE_VIDEO,
    SOURCE_VIMEO,
    SOURCE_YOUTUBE,
    MediaRecord,
    Transcriber,
)
from media_ingestion.normalize.captions import parse_captions, parse_subtitles
from media_ingestion.queue.extraction import ExtractionQueue
from media_ingestion.services.fetch import HttpFetcher
from media_ingestion.services.transcode import Transcoder
from media_ingestion.services.ytdlp import VideoInfo, YtDlpResolver, is_direct_mp4
from media_ingestion.storage.media_store import MediaStore
from media_ingestion.util.hashing import stable_uuid


logger = logging.getLogger(__name__)

CACHE_PREFIX = "content/video"
NO_LYRICS = "No lyrics available."
TRANSCRIPTION_FAILED = "Transcription failed"

YOUTUBE_HOSTS = ("youtube.com", "youtu.be")
VIMEO_HOSTS = ("vimeo.com",)
YOUTUBE_ID = re.compile(
    r"(?:youtu\.be/|youtube\.com(?:/embed/|/v/|/shorts/|/watch\?v=|/watch\?.+&v=))([^/&?#]+)"
)

SUBTITLE_EXTS = ("srt", "vtt")
CAPTION_EXTS = ("json3", "srt", "vtt")


class CacheStore(Protocol):
    def get(self, key: str) -> dict | None:
        ...

    def set(self, key: str, value: dict) -> None:
        ...


def pick_track(tracks: list[dict] | None, preferred_exts: tuple[str, ...]) -> dict | None:
    if not tracks:
        return None
    for ext in preferred_exts:
        for track in tracks:
            if track.get("ext") == ext and track.get("url"):
                return track
    return next((track for track in tracks if track.get("url")), None)


class VideoService:
    def __init__(
        self,
        resolver: YtDlpResolver,
        fetcher: HttpFetcher,
        transcoder: Transcoder,
        media_store: MediaStore,
        transcriber: Transcriber | None = None,
        cache_store: CacheStore | None = None,
        queue: ExtractionQueue | None = None,
        job_timeout: float | None = None,
        subtitle_language: str = "en",
    ) -> None:
        self.resolver = resolver
        self.fetcher = fetcher
        self.transcoder = transcoder
        self.media_store = media_store
        self.transcriber = transcriber
        self.cache_store = cache_store
        self.queue = queue or ExtractionQueue(name="video")
        self.job_timeout = job_timeout
        self.subtitle_language = subtitle_language

    def is_video_url(self, url: str) -> bool:
        lowered = url.lower()
        return any(host in lowered for host in YOUTUBE_HOSTS + VIMEO_HOSTS) or is_direct_mp4(lowered)

    def source_for(self, url: str) -> str:
        lowered = url.lower()
        if any(host in lowered for host in YOUTUBE_HOSTS):
            return SOURCE_YOUTUBE
        if any(host in lowered for host in VIMEO_HOSTS):
            return SOURCE_VIMEO
        return SOURCE_VIDEO

    def get_video_id(self, url: str) -> str:
        match = YOUTUBE_ID.search(url)
        return stable_uuid(match.group(1) if match else url)

    def process_video(self, url: str, timeout: float | None = None) -> MediaRecord:
        """Queue the extraction and wait for it; raises whatever the job raised."""
        key = self.get_video_id(url)
        job = self.queue.submit(key, lambda: self._process_video_from_url(url))
        try:
            return job.result(timeout=timeout if timeout is not None else self.job_timeout)
        except futures.TimeoutError:
            # unstarted jobs with no other waiter are dropped; a running one still fills the cache
            if self.queue.abandon(job):
                logger.warning("Cancelled queued video job %s after timeout", url)
            raise

    def close(self) -> None:
        self.queue.stop()

    def _process_video_from_url(self, url: str) -> MediaRecord:
        video_id = self.get_video_id(url)
        cache_key = f"{CACHE_PREFIX}/{video_id}"
        if self.cache_store is not None:
            cached = self.cache_store.get(cache_key)
            if cached:
                logger.info("Returning cached video %s", video_id)
                return MediaRecord.from_dict(cached)

        logger.info("Cache miss, processing video %s", url)
        info = self.resolver.fetch_info(url)
        transcript = self.get_transcript(url, info)
        failed = transcript == TRANSCRIPTION_FAILED
        record = MediaRecord(
            id=video_id,
            url=url,
            title=info.title or "Video Attachment",
            source=info.channel or self.source_for(url),
            description=info.description or "A video attachment",
            text=transcript or "Video content not available",
            degraded=failed,
        )
        # an empty transcription is retried on the next request
        if self.cache_store is not None and not failed:
            self.cache_store.set(cache_key, record.to_dict())
        return record

    def get_transcript(self, url: str, info: VideoInfo) -> str:
        lang = self.subtitle_language
        subtitle = pick_track(info.subtitles.get(lang), SUBTITLE_EXTS)
        if subtitle:
            logger.info("Manual subtitles found")
            return parse_subtitles(self.fetcher.fetch_text(subtitle["url"]))

        caption = pick_track(info.automatic_captions.get(lang), CAPTION_EXTS)
        if caption:
            logger.info("Automatic captions found")
            return parse_captions(self.fetcher.fetch_text(caption["url"]), caption.get("ext"))

        if "Music" in info.categories:
            logger.info("Music video detected, no lyrics available")
            return NO_LYRICS

        logger.info("No subtitles or captions found, falling back to audio transcription")
        return self.transcribe_audio(url)

    def transcribe_audio(self, url: str) -> str:
        if self.transcriber is None:
            raise ServiceNotFoundError("Transcription")
        video_id = self.get_video_id(url)
        audio_path = self.media_store.path_for(video_id, "mp3")
        if not self.media_store.exists(video_id, "mp3"):
            video_path = self.media_store.prepare(video_id, "mp4")
            self.resolver.download(url, video_path)
            self.media_store.prepare(video_id, "mp3")
            try:
                self.transcoder.strip_audio(video_path, audio_path)
            except Exception:
                audio_path.unlink(missing_ok=True)
                raise
        try:
            audio = audio_path.read_bytes()
        except OSError as exc:
            raise ResourceUnavailableError(f"Cannot read extracted audio {audio_path}: {exc}") from exc
        logger.info("Starting transcription of %s (%d bytes)", audio_path.name, len(audio))
        started = time.monotonic()
        transcript = self.transcriber.transcribe(audio, filename=audio_path.name)
        logger.info("Transcription completed in %.1f seconds", time.monotonic() - started)
        # extracted audio stays in the media store for later requests
        return transcript or TRANSCRIPTION_FAILED
