from media_ingestion.services.video import VideoService
from media_ingestion.util.hashing import stable_uuid


def _service() -> VideoService:
    return VideoService(resolver=None, fetcher=None, transcoder=None, media_store=None)


def test_stable_uuid_deterministic():
    first = stable_uuid("https://example.com/a")
    second = stable_uuid("https://example.com/a")
    assert first == second
    assert first != stable_uuid("https://example.com/b")


def test_video_id_shared_across_youtube_url_forms():
    service = _service()
    long_form = service.get_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ")
    short_form = service.get_video_id("https://youtu.be/dQw4w9WgXcQ")
    with_params = service.get_video_id("https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ")
    assert long_form == short_form == with_params


def test_video_id_distinct_for_other_hosts():
    service = _service()
    first = service.get_video_id("https://vimeo.com/1")
    second = service.get_video_id("https://vimeo.com/2")
    assert first and second and first != second
