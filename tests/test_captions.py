import pytest

from media_ingestion.errors import ConversionError
from media_ingestion.normalize.captions import parse_captions, parse_json3_captions, parse_subtitles

VTT = """WEBVTT
Kind: captions
Language: en

00:00:00.000 --> 00:00:01.500
<v Speaker>Hello there</v>

NOTE this is a comment

00:00:01.500 --> 00:00:03.000
General Kenobi
"""


def test_parse_vtt_drops_headers_timings_and_tags():
    assert parse_subtitles(VTT) == "Hello there General Kenobi"


def test_parse_srt_with_bom_and_crlf():
    srt = "\ufeff1\r\n00:00:01,000 --> 00:00:02,000\r\nFirst line\r\n\r\n2\r\n00:00:02,000 --> 00:00:03,000\r\nSecond line\r\n"
    assert parse_subtitles(srt) == "First line Second line"


def test_parse_json3_joins_segments():
    content = '{"events": [{"segs": [{"utf8": "one "}, {"utf8": "two"}]}, {"segs": [{"utf8": "\\nthree"}]}]}'
    assert parse_json3_captions(content) == "one two three"


def test_parse_json3_rejects_bad_payload():
    with pytest.raises(ConversionError):
        parse_json3_captions("not json")
    with pytest.raises(ConversionError):
        parse_json3_captions('{"no_events": true}')


def test_parse_captions_picks_parser_by_extension():
    assert parse_captions('{"events": [{"segs": [{"utf8": "hi"}]}]}', "json3") == "hi"
    assert parse_captions(VTT, "vtt") == "Hello there General Kenobi"


def test_cue_text_starting_with_note_is_kept():
    vtt = "WEBVTT\n\n00:00:00.000 --> 00:00:02.000\nNOTE the date\nand the time\n\nNOTE\nreal comment\n"
    assert parse_subtitles(vtt) == "NOTE the date and the time"


def test_cue_identifiers_are_dropped():
    vtt = "WEBVTT\n\nintro\n00:00:00.000 --> 00:00:02.000\nWelcome\n\noutro\n00:00:02.000 --> 00:00:04.000\n42\n"
    assert parse_subtitles(vtt) == "Welcome 42"
