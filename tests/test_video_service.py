from concurrent import futures
import threading

import pytest

from media_ingestion.db.repo import SqlCacheStore
from media_ingestion.db.session import make_engine
from media_ingestion.errors import ExternalServiceError, ServiceNotFoundError
from media_ingestion.heads.video import VideoHead
from media_ingestion.pipeline.orchestrator import AttachmentManager
from media_ingestion.pipeline.router import HandlerKind
from media_ingestion.services.transcode import Transcoder
from media_ingestion.services.video import NO_LYRICS, TRANSCRIPTION_FAILED, VideoService
from media_ingestion.services.ytdlp import VideoInfo, YtDlpResolver
from media_ingestion.storage.media_store import MediaStore

URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

SRT = """1
00:00:01,000 --> 00:00:02,000
Never gonna <i>give</i> you up

2
00:00:02,500 --> 00:00:04,000
Never gonna let you down
"""

JSON3 = '{"events": [{"segs": [{"utf8": "auto "}, {"utf8": "captions"}]}, {"tStartMs": 5}]}'


class FakeResolver:
    def __init__(self, info):
        self.info = info
        self.info_calls = 0
        self.downloads = []

    def fetch_info(self, url):
        self.info_calls += 1
        return self.info

    def download(self, url, output_path):
        self.downloads.append(url)
        output_path.write_bytes(b"mp4 data")
        return output_path


class FakeFetcher:
    def __init__(self, texts):
        self.texts = texts

    def fetch_text(self, url):
        return self.texts[url]


class FakeTranscriber:
    def __init__(self, text="spoken words", error=None):
        self.text = text
        self.error = error
        self.calls = 0

    def transcribe(self, audio, filename="audio.mp3"):
        self.calls += 1
        if self.error:
            raise self.error
        return self.text


class CopyTranscoder(Transcoder):
    def __init__(self):
        super().__init__(ffmpeg_exe="ffmpeg")
        self.calls = 0

    def strip_audio(self, input_path, output_path):
        self.calls += 1
        output_path.write_bytes(b"mp3:" + input_path.read_bytes())
        return output_path


@pytest.fixture
def make_service(tmp_path):
    services = []

    def factory(info, texts=None, transcriber=None, cache_store=None):
        service = VideoService(
            resolver=FakeResolver(info),
            fetcher=FakeFetcher(texts or {}),
            transcoder=CopyTranscoder(),
            media_store=MediaStore(str(tmp_path / "media")),
            transcriber=transcriber,
            cache_store=cache_store,
            job_timeout=10,
        )
        services.append(service)
        return service

    yield factory
    for service in services:
        service.close()


def test_manual_subtitles_take_priority(make_service):
    info = VideoInfo(
        title="Song",
        channel="Rick",
        subtitles={"en": [{"ext": "srt", "url": "subs"}]},
        automatic_captions={"en": [{"ext": "json3", "url": "auto"}]},
    )
    transcriber = FakeTranscriber()
    service = make_service(info, {"subs": SRT, "auto": JSON3}, transcriber)
    record = service.process_video(URL)
    assert record.text == "Never gonna give you up Never gonna let you down"
    assert record.title == "Song"
    assert record.source == "Rick"
    assert record.id == service.get_video_id(URL)
    assert transcriber.calls == 0


def test_automatic_captions_used_without_subtitles(make_service):
    info = VideoInfo(title="Clip", automatic_captions={"en": [{"ext": "vtt", "url": "v"}, {"ext": "json3", "url": "j"}]})
    service = make_service(info, {"j": JSON3})
    record = service.process_video(URL)
    assert record.text == "auto captions"
    assert record.source == "YouTube"


def test_music_without_captions_has_no_lyrics(make_service):
    transcriber = FakeTranscriber()
    service = make_service(VideoInfo(title="Track", categories=["Music"]), transcriber=transcriber)
    assert service.process_video(URL).text == NO_LYRICS
    assert transcriber.calls == 0
    assert service.resolver.downloads == []


def test_falls_back_to_audio_transcription(make_service):
    transcriber = FakeTranscriber("spoken words")
    service = make_service(VideoInfo(title="Talk", description="A talk"), transcriber=transcriber)
    record = service.process_video(URL)
    assert record.text == "spoken words"
    assert record.description == "A talk"
    assert service.resolver.downloads == [URL]
    assert service.transcoder.calls == 1
    video_id = service.get_video_id(URL)
    assert service.media_store.exists(video_id, "mp3")

    # extracted audio is reused
    assert service.transcribe_audio(URL) == "spoken words"
    assert service.resolver.downloads == [URL]
    assert service.transcoder.calls == 1


def test_empty_transcript_is_degraded_and_not_persisted(make_service):
    store = SqlCacheStore.from_engine(make_engine("sqlite://"))
    service = make_service(VideoInfo(), transcriber=FakeTranscriber(""), cache_store=store)
    record = service.process_video(URL)
    assert record.text == TRANSCRIPTION_FAILED
    assert record.title == "Video Attachment"
    assert record.degraded
    assert store.get(f"content/video/{service.get_video_id(URL)}") is None


def test_missing_transcriber_fails_the_job(make_service):
    service = make_service(VideoInfo(title="Talk"))
    with pytest.raises(ServiceNotFoundError):
        service.process_video(URL)


def test_durable_cache_survives_new_service(make_service):
    store = SqlCacheStore.from_engine(make_engine("sqlite://"))
    info = VideoInfo(title="Cached", subtitles={"en": [{"ext": "srt", "url": "subs"}]})
    first = make_service(info, {"subs": SRT}, cache_store=store)
    record = first.process_video(URL)

    second = make_service(info, {}, cache_store=store)
    assert second.process_video(URL) == record
    assert second.resolver.info_calls == 0


def test_transcription_error_degrades_through_manager(make_service):
    service = make_service(VideoInfo(title="Talk"), transcriber=FakeTranscriber(error=ExternalServiceError("boom")))
    manager = AttachmentManager({HandlerKind.VIDEO: VideoHead(service)}, video_service=service)
    record = manager.process_video(URL)
    assert record.source == "Video"
    assert "(transcription failed)" in record.description
    assert record.degraded
    assert record.title and record.text


def test_unrecognized_url_returns_placeholder_without_queueing(make_service):
    service = make_service(VideoInfo(title="unused"))
    manager = AttachmentManager({HandlerKind.VIDEO: VideoHead(service)}, video_service=service)
    record = manager.process_video("https://example.com/not-a-video")
    assert record.text == "Video content not available"
    assert service.resolver.info_calls == 0
    assert service.queue.stats()["completed"] == 0


def test_timed_out_waiting_job_is_cancelled(make_service):
    service = make_service(VideoInfo(title="Track", categories=["Music"]))
    gate = threading.Event()
    service.queue.submit("blocker", lambda: gate.wait(5))
    with pytest.raises(futures.TimeoutError):
        service.process_video(URL, timeout=0.05)
    gate.set()
    service.queue.submit("after", lambda: None).result(timeout=5)
    assert service.resolver.info_calls == 0


class DirectFetcher:
    def __init__(self):
        self.downloads = []

    def is_reachable(self, url):
        return True

    def download_to(self, url, path):
        self.downloads.append(url)
        path.write_bytes(b"mp4 data")
        return path


def test_direct_mp4_url_is_processed_without_ytdlp(tmp_path):
    url = "https://cdn.example.com/media/clip.mp4"
    fetcher = DirectFetcher()
    transcriber = FakeTranscriber("direct words")
    service = VideoService(
        resolver=YtDlpResolver(fetcher, ffmpeg_location="ffmpeg"),
        fetcher=fetcher,
        transcoder=CopyTranscoder(),
        media_store=MediaStore(str(tmp_path / "media")),
        transcriber=transcriber,
        job_timeout=10,
    )
    manager = AttachmentManager({HandlerKind.VIDEO: VideoHead(service)}, video_service=service)
    try:
        assert service.is_video_url(url)
        record = manager.process_video(url)
    finally:
        manager.close()
    assert record.title == "clip.mp4"
    assert record.text == "direct words"
    assert record.source == "Video"
    assert fetcher.downloads == [url]
