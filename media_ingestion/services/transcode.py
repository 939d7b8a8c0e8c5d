"""Audio extraction from audio/video containers with ffmpeg."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import subprocess
import tempfile

from imageio_ffmpeg import get_ffmpeg_exe

from media_ingestion.errors import ConversionError


logger = logging.getLogger(__name__)


class Transcoder:
    def __init__(self, timeout: float | None = 600.0, temp_dir: str | None = None, ffmpeg_exe: str | None = None) -> None:
        self.timeout = timeout
        self.temp_dir = temp_dir
        self._ffmpeg_exe = ffmpeg_exe

    @property
    def ffmpeg_exe(self) -> str:
        if self._ffmpeg_exe is None:
            self._ffmpeg_exe = get_ffmpeg_exe()
        return self._ffmpeg_exe

    def strip_audio(self, input_path: Path, output_path: Path) -> Path:
        """Drop the video stream and re-encode the audio track as MP3."""
        cmd = [
            self.ffmpeg_exe,
            "-y",
            "-i",
            str(input_path),
            "-vn",
            "-acodec",
            "libmp3lame",
            str(output_path),
        ]
        try:
            proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise ConversionError(f"ffmpeg timed out after {self.timeout}s on {input_path.name}") from exc
        except OSError as exc:
            raise ConversionError(f"Cannot run ffmpeg: {exc}") from exc
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "ignore").strip()
            raise ConversionError(f"ffmpeg failed ({proc.returncode}): {stderr[-500:]}")
        logger.debug("Extracted audio %s -> %s", input_path, output_path)
        return output_path

    def extract_audio(self, data: bytes, suffix: str = ".mp4") -> bytes:
        """Audio bytes of an in-memory container; both temp files are gone on return or raise."""
        input_path = self._temp_path(suffix)
        output_path: Path | None = None
        try:
            output_path = self._temp_path(".mp3")
            input_path.write_bytes(data)
            self.strip_audio(input_path, output_path)
            return output_path.read_bytes()
        finally:
            for path in (input_path, output_path):
                if path is None:
                    continue
                try:
                    path.unlink(missing_ok=True)
                except OSError:
                    logger.warning("Could not remove temp file %s", path, exc_info=True)

    def _temp_path(self, suffix: str) -> Path:
        handle, name = tempfile.mkstemp(suffix=suffix, prefix="media_", dir=self.temp_dir)
        os.close(handle)
        return Path(name)
