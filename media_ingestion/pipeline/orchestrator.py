"""Attachment manager: cache, classification, dispatch and top-level degradation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
import logging
from typing import Iterable, Mapping

from media_ingestion.config import AppConfig
from media_ingestion.db.repo import SqlCacheStore
from media_ingestion.db.session import make_engine
from media_ingestion.errors import ServiceNotFoundError
from media_ingestion.heads.audio_video import AudioVideoHead
from media_ingestion.heads.base import (
    SOURCE_AUDIO,
    SOURCE_DOCUMENT,
    SOURCE_GENERIC,
    SOURCE_IMAGE,
    SOURCE_PLAINTEXT,
    SOURCE_VIDEO,
    AttachmentRef,
    Head,
    MediaRecord,
    degraded_record,
)
from media_ingestion.heads.document import DocumentHead
from media_ingestion.heads.generic import GenericHead
from media_ingestion.heads.image import ImageHead
from media_ingestion.heads.plaintext import PlaintextHead
from media_ingestion.heads.video import VideoHead, VideoProcessor
from media_ingestion.normalize.documents import DocumentConverter
from media_ingestion.pipeline.cache import ResourceCache
from media_ingestion.pipeline.router import HandlerKind, classify, sniff_content_type
from media_ingestion.queue.extraction import ExtractionQueue
from media_ingestion.services.fetch import HttpFetcher
from media_ingestion.services.openai_services import (
    OpenAIClientProvider,
    OpenAIImageDescriber,
    OpenAISummarizer,
    OpenAITranscriber,
)
from media_ingestion.services.transcode import Transcoder
from media_ingestion.services.video import VideoService
from media_ingestion.services.ytdlp import YtDlpResolver
from media_ingestion.storage.media_store import MediaStore
from media_ingestion.util.hashing import stable_uuid


logger = logging.getLogger(__name__)

# (title, source, description, label) used when a head raises instead of degrading
_FALLBACKS = {
    HandlerKind.DOCUMENT: ("Document Attachment (conversion failed)", SOURCE_DOCUMENT,
                           "A document that could not be converted to text", "document"),
    HandlerKind.PLAINTEXT: ("Plaintext Attachment (retrieval failed)", SOURCE_PLAINTEXT,
                            "A plaintext document that could not be retrieved", "plaintext"),
    HandlerKind.AUDIO_VIDEO: ("Audio/Video Attachment", SOURCE_AUDIO,
                              "An audio/video attachment (transcription failed)", "audio/video"),
    HandlerKind.IMAGE: ("Image Attachment", SOURCE_IMAGE,
                        "An image attachment (recognition failed)", "image"),
    HandlerKind.VIDEO: ("Video Attachment", SOURCE_VIDEO,
                        "A video attachment (transcription failed)", "video"),
    HandlerKind.GENERIC: ("Generic Attachment", SOURCE_GENERIC,
                          "A generic attachment (processing failed)", "generic"),
}


def fallback_record(kind: HandlerKind, attachment: AttachmentRef) -> MediaRecord:
    title, source, description, label = _FALLBACKS[kind]
    return degraded_record(
        attachment,
        title=title,
        source=source,
        description=description,
        label=label,
        include_content_type=True,
    )


class AttachmentManager:
    def __init__(
        self,
        heads: Mapping[HandlerKind, Head],
        video_service: VideoProcessor | None = None,
        cache: ResourceCache | None = None,
        max_parallel: int = 4,
    ) -> None:
        self.heads = dict(heads)
        self.video_service = video_service
        self.cache = cache if cache is not None else ResourceCache()
        self.max_parallel = max(1, max_parallel)

    def classify(self, attachment: AttachmentRef) -> HandlerKind:
        is_video_url = self.video_service.is_video_url if self.video_service is not None else None
        return classify(attachment.content_type, attachment.url, is_video_url)

    def process(self, attachment: AttachmentRef) -> MediaRecord:
        """Never raises; failures come back as degraded records."""
        cached = self.cache.get(attachment.url)
        if cached is not None:
            logger.debug("Resource cache hit: %s", attachment.url)
            return cached
        if not attachment.content_type:
            guessed = sniff_content_type(attachment.url)
            if guessed:
                attachment = replace(attachment, content_type=guessed)
        try:
            kind = self.classify(attachment)
        except Exception:
            logger.exception("Classification failed for %s", attachment.url)
            kind = HandlerKind.GENERIC
        return self._dispatch(kind, attachment)

    def process_attachments(self, attachments: Iterable[AttachmentRef]) -> list[MediaRecord]:
        """Process a batch in parallel; results keep input order."""
        attachments = list(attachments)
        if not attachments:
            return []
        workers = min(self.max_parallel, len(attachments))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="attachment") as pool:
            return list(pool.map(self.process, attachments))

    def process_video(self, url: str, attachment_id: str | None = None) -> MediaRecord:
        if attachment_id is None:
            attachment_id = stable_uuid(url)
        attachment = AttachmentRef(id=attachment_id, url=url)
        cached = self.cache.get(url)
        if cached is not None:
            return cached
        return self._dispatch(HandlerKind.VIDEO, attachment)

    def close(self) -> None:
        if self.video_service is not None and hasattr(self.video_service, "close"):
            self.video_service.close()

    def _dispatch(self, kind: HandlerKind, attachment: AttachmentRef) -> MediaRecord:
        head = self.heads.get(kind)
        logger.info("Processing %s as %s", attachment.url, kind.value)
        try:
            if head is None:
                raise ServiceNotFoundError(kind.value)
            record = head.process(attachment)
        except Exception:
            logger.exception("Head failed: %s", kind.value)
            return fallback_record(kind, attachment)
        self.cache.set(attachment.url, record)
        return record


def build_manager(config: AppConfig) -> AttachmentManager:
    """Wire the production services from configuration."""
    fetcher = HttpFetcher(timeout=config.http_timeout)
    summarizer = transcriber = describer = None
    if config.openai_api_key:
        clients = OpenAIClientProvider(config.openai_api_key, timeout=config.http_timeout * 2)
        summarizer = OpenAISummarizer(clients, model=config.summary_model)
        transcriber = OpenAITranscriber(clients, model=config.transcription_model)
        describer = OpenAIImageDescriber(clients, model=config.vision_model)
    else:
        logger.warning("OPENAI_API_KEY not set; summaries, transcription and image descriptions are disabled")

    transcoder = Transcoder(timeout=config.transcode_timeout, temp_dir=config.temp_dir)
    media_store = MediaStore(config.storage_root)
    media_store.ensure_root()
    cache_store = SqlCacheStore.from_engine(make_engine(config.db_url), ttl_seconds=config.video_cache_ttl)
    resolver = YtDlpResolver(
        fetcher,
        subtitle_language=config.subtitle_language,
        socket_timeout=config.http_timeout,
        ffmpeg_location=lambda: transcoder.ffmpeg_exe,
    )
    video_service = VideoService(
        resolver=resolver,
        fetcher=fetcher,
        transcoder=transcoder,
        media_store=media_store,
        transcriber=transcriber,
        cache_store=cache_store,
        queue=ExtractionQueue(name="video"),
        job_timeout=config.video_job_timeout,
        subtitle_language=config.subtitle_language,
    )
    heads: dict[HandlerKind, Head] = {
        HandlerKind.DOCUMENT: DocumentHead(fetcher, DocumentConverter(), summarizer, config.summary_max_input_tokens),
        HandlerKind.PLAINTEXT: PlaintextHead(fetcher, summarizer, config.summary_max_input_tokens),
        HandlerKind.AUDIO_VIDEO: AudioVideoHead(
            fetcher, transcoder, transcriber, summarizer, config.summary_max_input_tokens
        ),
        HandlerKind.IMAGE: ImageHead(describer),
        HandlerKind.VIDEO: VideoHead(video_service, timeout=config.video_job_timeout),
        HandlerKind.GENERIC: GenericHead(),
    }
    return AttachmentManager(
        heads,
        video_service=video_service,
        cache=ResourceCache(config.cache_max_entries),
        max_parallel=config.max_parallel,
    )
