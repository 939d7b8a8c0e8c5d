"""OpenAI-backed summarizer, transcriber and image describer."""

from __future__ import annotations

import base64
import json
import logging
import mimetypes
from typing import Optional

from openai import OpenAI, OpenAIError

from media_ingestion.errors import ExternalServiceError, ServiceNotFoundError
from media_ingestion.heads.base import Summary
from media_ingestion.services.fetch import local_path_for
from media_ingestion.services.summary import build_summary_prompt, parse_summary, trim_tokens


logger = logging.getLogger(__name__)

IMAGE_PROMPT = (
    "Describe this image for someone who cannot see it. "
    "Respond with pure JSON only: "
    '{"title": "<short title, at most 8 words>", "description": "<one or two sentences>"}'
)


class OpenAIClientProvider:
    """Lazily builds one OpenAI client so constructing services never needs the key."""

    def __init__(self, api_key: str | None, timeout: float = 60.0) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self._client: Optional[OpenAI] = None

    def get(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                logger.error("OPENAI_API_KEY is not set; OpenAI services are unavailable.")
                raise ServiceNotFoundError("OpenAI")
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client


class OpenAISummarizer:
    def __init__(self, clients: OpenAIClientProvider, model: str = "gpt-4o-mini") -> None:
        self.clients = clients
        self.model = model

    def summarize(self, text: str, max_input_tokens: int) -> Summary:
        prompt = build_summary_prompt(trim_tokens(text, max_input_tokens))
        try:
            response = self.clients.get().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            raise ExternalServiceError(f"Summarization failed: {exc}") from exc
        return parse_summary(response.choices[0].message.content)


class OpenAITranscriber:
    def __init__(self, clients: OpenAIClientProvider, model: str = "whisper-1") -> None:
        self.clients = clients
        self.model = model

    def transcribe(self, audio: bytes, filename: str = "audio.mp3") -> str:
        if not audio:
            raise ExternalServiceError("Cannot transcribe empty audio")
        try:
            result = self.clients.get().audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
            )
        except OpenAIError as exc:
            raise ExternalServiceError(f"Transcription failed: {exc}") from exc
        return (result.text or "").strip()


class OpenAIImageDescriber:
    def __init__(self, clients: OpenAIClientProvider, model: str = "gpt-4o-mini") -> None:
        self.clients = clients
        self.model = model

    def describe(self, image_url: str) -> Summary:
        image_url = as_image_url(image_url)
        try:
            response = self.clients.get().chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": IMAGE_PROMPT},
                            {"type": "image_url", "image_url": {"url": image_url}},
                        ],
                    }
                ],
                temperature=0,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            raise ExternalServiceError(f"Image description failed: {exc}") from exc
        content = response.choices[0].message.content
        try:
            parsed = json.loads(content or "")
        except ValueError as exc:
            raise ExternalServiceError("Image description was not valid JSON") from exc
        if not isinstance(parsed, dict):
            raise ExternalServiceError("Image description was not a JSON object")
        return Summary(
            title=str(parsed.get("title") or "").strip(),
            description=str(parsed.get("description") or "").strip(),
        )


def as_image_url(url: str) -> str:
    """Local images are sent inline as a base64 data URL."""
    local = local_path_for(url)
    if local is None:
        return url
    mime, _ = mimetypes.guess_type(str(local))
    try:
        raw = local.read_bytes()
    except OSError as exc:
        raise ExternalServiceError(f"Cannot read image {local}: {exc}") from exc
    encoded = base64.b64encode(raw).decode("utf-8")
    return f"data:{mime or 'image/jpeg'};base64,{encoded}"
