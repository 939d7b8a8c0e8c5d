from types import SimpleNamespace

import pytest

from media_ingestion.services.openai_services import OpenAISummarizer
from media_ingestion.services.summary import trim_tokens


class WordEncoding:
    def encode(self, text, disallowed_special=()):
        return text.split(" ")

    def decode(self, tokens):
        return " ".join(tokens)


@pytest.fixture
def word_tokens(monkeypatch):
    monkeypatch.setattr("media_ingestion.services.summary.tiktoken.get_encoding", lambda name: WordEncoding())


def test_text_within_budget_is_unchanged(word_tokens):
    assert trim_tokens("one two three", 3) == "one two three"
    assert trim_tokens("one two", 10) == "one two"


def test_text_over_budget_keeps_the_tail(word_tokens):
    assert trim_tokens("one two three four five", 2) == "four five"


def test_zero_budget_is_empty(word_tokens):
    assert trim_tokens("one two", 0) == ""
    assert trim_tokens("one two", -1) == ""


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClients:
    def __init__(self, completions):
        self.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    def get(self):
        return self.client


def test_summarizer_sends_trimmed_text(word_tokens):
    completions = FakeCompletions('{"title": "Tail", "summary": "Last words"}')
    summarizer = OpenAISummarizer(FakeClients(completions), model="test-model")
    summary = summarizer.summarize("alpha beta gamma delta", 2)
    assert (summary.title, summary.description) == ("Tail", "Last words")
    prompt = completions.requests[0]["messages"][0]["content"]
    assert "gamma delta" in prompt
    assert "alpha" not in prompt
    assert completions.requests[0]["model"] == "test-model"
