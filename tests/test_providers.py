from types import SimpleNamespace

import pytest

from riddler.core.transcript import Role, Turn
from riddler.providers import openai_chat
from riddler.providers.openai_chat import OpenAIChatProvider, OpenRouterProvider
from riddler.providers.providers import ServiceError, build_messages


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


class FakeOpenAI:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False
        FakeOpenAI.instances.append(self)

    def close(self):
        self.closed = True


def _response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


@pytest.fixture(autouse=True)
def fake_openai(monkeypatch):
    FakeOpenAI.instances = []
    monkeypatch.setattr(openai_chat, "OpenAI", FakeOpenAI)
    return FakeOpenAI


HISTORY = (Turn(Role.USER, "riddle me"), Turn(Role.ASSISTANT, "What is light as a feather?"))


def test_build_messages_replays_history():
    messages = build_messages("be mystical", "XYZ", HISTORY)
    assert messages == [
        {"role": "system", "content": "be mystical"},
        {"role": "user", "content": "riddle me"},
        {"role": "assistant", "content": "What is light as a feather?"},
        {"role": "user", "content": "XYZ"},
    ]
    assert build_messages(None, "hi", ())[0] == {"role": "user", "content": "hi"}


def test_complete_sends_full_conversation():
    provider = OpenAIChatProvider(api_key="sk-test", preamble="guardian", model="gpt-4o", temperature=0.9)
    client = FakeOpenAI.instances[-1]
    client.completions.response = _response("breath")

    assert provider.complete("Here is the user's answer: breath", HISTORY) == "breath"
    sent = client.completions.kwargs
    assert sent["model"] == "gpt-4o"
    assert sent["temperature"] == 0.9
    assert len(sent["messages"]) == 4
    assert sent["messages"][0]["role"] == "system"


def test_api_errors_become_service_errors():
    provider = OpenAIChatProvider(api_key="sk-test")
    FakeOpenAI.instances[-1].completions.error = ConnectionError("network down")
    with pytest.raises(ServiceError, match="network down"):
        provider.complete("hi", ())


def test_missing_content_is_service_error():
    provider = OpenAIChatProvider(api_key="sk-test")
    FakeOpenAI.instances[-1].completions.response = _response(None)
    with pytest.raises(ServiceError):
        provider.complete("hi", ())


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ServiceError, match="OPENAI_API_KEY"):
        OpenAIChatProvider()


def test_openrouter_defaults(monkeypatch):
    monkeypatch.delenv("OPENROUTER_APP_NAME", raising=False)
    monkeypatch.delenv("OPENROUTER_SITE_URL", raising=False)
    with OpenRouterProvider(api_key="or-test", app_name="Riddler", site_url="https://example.org") as provider:
        client = FakeOpenAI.instances[-1]
        assert provider.base_url == "https://openrouter.ai/api/v1"
        assert client.kwargs["default_headers"] == {"X-Title": "Riddler", "HTTP-Referer": "https://example.org"}
    assert client.closed
