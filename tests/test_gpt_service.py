import json

import httpx
import pytest

from scattered_lights import gpt_service
from scattered_lights.emotions import EMOTION_KEYS


@pytest.fixture()
def llm(monkeypatch):
    """Fake OpenRouter: records request bodies, replies with queued content."""
    calls = []
    replies = []

    def fake_post(self, url, headers=None, json=None):
        calls.append({"url": url, "headers": headers, "json": json})
        status, content = replies.pop(0) if replies else (200, "")
        request = httpx.Request("POST", url)
        if status != 200:
            return httpx.Response(status, text="upstream error", request=request)
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]}, request=request)

    monkeypatch.setattr(gpt_service, "OPENROUTER_API_KEY", "test-key")
    monkeypatch.setattr(httpx.Client, "post", fake_post)
    return calls, replies


def test_no_api_key_uses_fallbacks(monkeypatch) -> None:
    monkeypatch.setattr(gpt_service, "OPENROUTER_API_KEY", "")
    with pytest.raises(gpt_service.LLMUnavailable):
        gpt_service.chat_completion([{"role": "user", "content": "hi"}])

    assert gpt_service.generate_coach_reply("inner_child", "hello") == gpt_service.COACH_FALLBACK
    assert gpt_service.generate_journal_insight("Today was fine") == gpt_service.INSIGHT_FALLBACK
    assert gpt_service.score_emotions("I feel great") == {key: 0 for key in EMOTION_KEYS}


def test_coach_reply_sends_prompt_history_and_context(llm) -> None:
    calls, replies = llm
    replies.append((200, "Let's breathe together."))
    history = [
        {"role": "user", "content": "x" * 200},
        {"role": "assistant", "content": "I hear you."},
    ]

    reply = gpt_service.generate_coach_reply("shadow_self", "What now?", history, "CHAKRA CONTEXT")

    assert reply == "Let's breathe together."
    sent = calls[0]["json"]
    assert sent["temperature"] == 0.6
    system = sent["messages"][0]["content"]
    assert system.startswith(gpt_service.COACH_PROMPTS["shadow_self"])
    assert "CHAKRA CONTEXT" in system
    assert "USER: " + "x" * 150 + "..." in system
    assert sent["messages"][-1] == {"role": "user", "content": "What now?"}
    assert calls[0]["headers"]["Authorization"] == "Bearer test-key"


def test_coach_reply_falls_back_on_http_error(llm) -> None:
    _, replies = llm
    replies.append((500, None))
    assert gpt_service.generate_coach_reply("integration", "hi") == gpt_service.COACH_FALLBACK


def test_unknown_coach_type_gets_default_prompt() -> None:
    assert gpt_service.coach_system_prompt("astrologer") == gpt_service.DEFAULT_COACH_PROMPT
    assert gpt_service.coach_temperature("astrologer") == 0.7


def test_journal_insight_parses_insight_line(llm) -> None:
    calls, replies = llm
    replies.append((200, "Sure!\nInsight: You are showing up for yourself."))

    insight = gpt_service.generate_journal_insight("Walked today", ["Felt tired"])

    assert insight == "You are showing up for yourself."
    prompt = calls[0]["json"]["messages"][1]["content"]
    assert "1. Felt tired" in prompt
    assert "Current entry:\nWalked today" in prompt


def test_score_emotions_normalizes_model_json(llm) -> None:
    calls, replies = llm
    replies.append((200, json.dumps({"joy": 80, "fear": 120, "anger": "n/a"})))

    scores = gpt_service.score_emotions("Such a bright day")

    assert scores["joy"] == 80
    assert scores["fear"] == 100
    assert scores["anger"] == 0
    assert set(scores) == set(EMOTION_KEYS)
    assert calls[0]["json"]["response_format"] == {"type": "json_object"}


def test_score_emotions_handles_bad_json_and_empty_text(llm) -> None:
    calls, replies = llm
    replies.append((200, "not json at all"))
    assert gpt_service.score_emotions("Something") == {key: 0 for key in EMOTION_KEYS}
    assert gpt_service.score_emotions("   ") == {key: 0 for key in EMOTION_KEYS}
    assert len(calls) == 1


def test_score_emotions_survives_overflowing_numbers(llm) -> None:
    _, replies = llm
    replies.append((200, '{"joy": 1e400, "fear": -1e400, "peace": Infinity}'))

    scores = gpt_service.score_emotions("Everything at once")

    assert scores["joy"] == 100
    assert scores["fear"] == 0
    assert scores["peace"] == 100
