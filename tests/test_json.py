from media_ingestion.heads.base import MediaRecord
from media_ingestion.services.summary import build_summary_prompt, parse_summary
from media_ingestion.util.json import json_dumps_safe, parse_json_object


def test_parse_fenced_json():
    text = 'Here you go:\n```json\n{"title": "T", "summary": "S"}\n```'
    assert parse_json_object(text) == {"title": "T", "summary": "S"}


def test_parse_bare_json_with_chatter():
    assert parse_json_object('Sure! {"title": "T"} Hope that helps.') == {"title": "T"}


def test_parse_non_object_is_none():
    assert parse_json_object("[1, 2]") is None
    assert parse_json_object("no json here") is None
    assert parse_json_object(None) is None


def test_parse_summary_accepts_summary_or_description():
    assert parse_summary('{"title": " Q3 ", "summary": "Results"}').description == "Results"
    summary = parse_summary('{"title": "Q3", "description": "Results"}')
    assert (summary.title, summary.description) == ("Q3", "Results")


def test_parse_summary_of_garbage_is_empty():
    summary = parse_summary("the model refused")
    assert summary.title == "" and summary.description == ""


def test_summary_prompt_embeds_text():
    assert "Quarterly results" in build_summary_prompt("Quarterly results")


def test_json_dumps_record():
    record = MediaRecord(id="a", url="u", title="t", source="s", description="d", text="x")
    assert '"degraded": false' in json_dumps_safe(record)
