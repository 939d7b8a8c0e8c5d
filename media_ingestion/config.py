"""Configuration loading for the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class AppConfig:
    db_url: str
    storage_root: str
    log_level: str = "INFO"
    log_file: str | None = None
    openai_api_key: str | None = None
    summary_model: str = "gpt-4o-mini"
    vision_model: str = "gpt-4o-mini"
    transcription_model: str = "whisper-1"
    summary_max_input_tokens: int = 100000
    http_timeout: float = 30.0
    transcode_timeout: float = 600.0
    video_job_timeout: float | None = 1800.0
    subtitle_language: str = "en"
    temp_dir: str | None = None
    cache_max_entries: int | None = None
    video_cache_ttl: float | None = None
    max_parallel: int = 4


def _optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


def load_config() -> AppConfig:
    return AppConfig(
        db_url=os.getenv("MEDIA_INGEST_DB_URL", "sqlite:///media_ingest.db"),
        storage_root=os.getenv("MEDIA_INGEST_STORAGE_ROOT", "./content_cache"),
        log_level=os.getenv("MEDIA_INGEST_LOG_LEVEL", "INFO"),
        log_file=os.getenv("MEDIA_INGEST_LOG_FILE") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        summary_model=os.getenv("MEDIA_INGEST_SUMMARY_MODEL", "gpt-4o-mini"),
        vision_model=os.getenv("MEDIA_INGEST_VISION_MODEL", "gpt-4o-mini"),
        transcription_model=os.getenv("MEDIA_INGEST_TRANSCRIPTION_MODEL", "whisper-1"),
        summary_max_input_tokens=int(os.getenv("MEDIA_INGEST_SUMMARY_MAX_INPUT_TOKENS", "100000")),
        http_timeout=float(os.getenv("MEDIA_INGEST_HTTP_TIMEOUT", "30")),
        transcode_timeout=float(os.getenv("MEDIA_INGEST_TRANSCODE_TIMEOUT", "600")),
        video_job_timeout=_optional_float(os.getenv("MEDIA_INGEST_VIDEO_JOB_TIMEOUT", "1800")),
        subtitle_language=os.getenv("MEDIA_INGEST_SUBTITLE_LANGUAGE", "en"),
        temp_dir=os.getenv("MEDIA_INGEST_TEMP_DIR") or None,
        cache_max_entries=_optional_int(os.getenv("MEDIA_INGEST_CACHE_MAX_ENTRIES")),
        video_cache_ttl=_optional_float(os.getenv("MEDIA_INGEST_VIDEO_CACHE_TTL")),
        max_parallel=int(os.getenv("MEDIA_INGEST_MAX_PARALLEL", "4")),
    )
