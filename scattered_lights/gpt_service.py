# gpt_service.py
import json
import logging
import os

import httpx
from dotenv import load_dotenv

from scattered_lights.emotions import EMOTION_KEYS, empty_emotions, normalize_emotions

# Load local .env (in production, env vars are injected automatically)
load_dotenv()

log = logging.getLogger(__name__)

# --- OpenRouter config ---
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_MODEL = os.getenv(
    "OPENROUTER_MODEL",
    "meta-llama/llama-3.1-8b-instruct:free",
)
API_URL = os.getenv("OPENROUTER_API_URL", "https://openrouter.ai/api/v1/chat/completions")

# Optional: helps OpenRouter attribute traffic
PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL", "")

COACH_FALLBACK = "I'm having trouble connecting at the moment. Please try again in a little while."
INSIGHT_FALLBACK = "Your entry has been saved. Keep journaling daily for best results."

COACH_PROMPTS = {
    "inner_child": (
        "You are a compassionate, intuitive Inner Child Healing coach. "
        "Help users reconnect with and heal their inner child using empathy and "
        "trauma-informed techniques like visualization, journaling, and self-soothing. "
        "Ask thoughtful questions about childhood experiences and suggest gentle healing activities. "
        "Keep a warm, nurturing tone and avoid clinical language."
    ),
    "shadow_self": (
        "You are an insightful, non-judgmental Shadow Work coach. "
        "Help users identify and integrate disowned aspects of themselves through self-inquiry. "
        "Guide them to recognize projection, triggers, and patterns, and suggest exercises like "
        "journaling, dream analysis, and trigger exploration. Be direct and compassionate."
    ),
    "higher_self": (
        "You are a wise, spiritual Higher Self coach. "
        "Help users connect with their highest potential and inner wisdom through mindfulness, "
        "purpose exploration, and intuition development. Help them access their own guidance "
        "rather than creating dependency."
    ),
    "integration": (
        "You are a practical, holistic Integration coach. "
        "Help users apply spiritual and psychological insights in everyday life. "
        "Suggest concrete practices and small, consistent steps rather than overwhelming transformations."
    ),
}

DEFAULT_COACH_PROMPT = (
    "You are a supportive coach specializing in personal growth and spiritual development. "
    "Provide thoughtful, compassionate guidance tailored to the user's needs."
)

COACH_TEMPERATURES = {
    "inner_child": 0.7,
    "shadow_self": 0.6,
    "higher_self": 0.8,
    "integration": 0.5,
}

JOURNAL_SYSTEM_PROMPT = (
    "You are a warm, trauma-informed wellness guide. "
    "Be concise, kind, and practical. Never diagnose. "
    "Acknowledge feelings, reflect themes, and suggest one gentle action."
)


class LLMUnavailable(Exception):
    pass


def coach_system_prompt(coach_type):
    return COACH_PROMPTS.get(coach_type, DEFAULT_COACH_PROMPT)


def coach_temperature(coach_type):
    return COACH_TEMPERATURES.get(coach_type, 0.7)


def _headers():
    return {
        "Authorization": f"Bearer {OPENROUTER_API_KEY}",
        "Content-Type": "application/json",
        "HTTP-Referer": PUBLIC_APP_URL,
        "X-Title": "Scattered Lights",
    }


def chat_completion(messages, max_tokens=400, temperature=0.7, json_mode=False):
    """POST a chat-completions request and return the reply text.

    Raises LLMUnavailable when no API key is configured; HTTP and parsing
    errors propagate to the caller.
    """
    if not OPENROUTER_API_KEY:
        raise LLMUnavailable("OPENROUTER_API_KEY is not set")

    body = {
        "model": OPENROUTER_MODEL,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}

    with httpx.Client(timeout=30) as client:
        resp = client.post(API_URL, headers=_headers(), json=body)
        log.info("LLM status: %s", resp.status_code)
        resp.raise_for_status()
        data = resp.json()

    return data["choices"][0]["message"]["content"].strip()


def _history_block(history):
    lines = []
    for msg in history:
        if msg.get("role") not in ("user", "assistant"):
            continue
        content = msg.get("content") or ""
        if len(content) > 150:
            content = content[:150] + "..."
        lines.append(f"{msg['role'].upper()}: {content}")
    return "\n".join(lines)


def generate_coach_reply(coach_type, message, history=None, chakra_context=None):
    """Reply from the selected coach, or a fixed apology when the LLM fails."""
    history = history or []
    system = coach_system_prompt(coach_type)
    if chakra_context:
        system += "\n\n" + chakra_context
    summary = _history_block(history)
    if summary:
        system += (
            "\n\nHere is the conversation history with this user:\n"
            f"{summary}\n\n"
            "Use this history to provide more personalized and contextual responses."
        )

    messages = [{"role": "system", "content": system}]
    messages.extend(
        {"role": m["role"], "content": m.get("content") or ""}
        for m in history
        if m.get("role") in ("user", "assistant")
    )
    messages.append({"role": "user", "content": message})

    try:
        reply = chat_completion(messages, max_tokens=800, temperature=coach_temperature(coach_type))
        return reply or COACH_FALLBACK
    except LLMUnavailable as e:
        log.warning("Coach reply skipped: %s", e)
    except httpx.HTTPStatusError as e:
        log.error("Coach HTTP error: %s", e.response.text[:800])
    except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
        log.exception("Coach LLM error: %s", e)
    return COACH_FALLBACK


def _build_history_block(history_texts):
    """Turn recent entries into a compact block for context."""
    if not history_texts:
        return "No prior journal entries."
    lines = [f"{i}. {txt}" for i, txt in enumerate(history_texts, start=1)]
    return "Recent journal notes (oldest->newest):\n" + "\n".join(lines)


def generate_journal_insight(entry_text, history_texts=None):
    user_prompt = (
        f"{_build_history_block(history_texts or [])}\n\n"
        f"Current entry:\n{entry_text}\n\n"
        "Please respond in exactly one line:\n"
        "Insight: <one warm, specific sentence>"
    )
    messages = [
        {"role": "system", "content": JOURNAL_SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]
    try:
        content = chat_completion(messages, max_tokens=200)
    except LLMUnavailable as e:
        log.warning("Journal insight skipped: %s", e)
        return INSIGHT_FALLBACK
    except httpx.HTTPStatusError as e:
        log.error("Journal insight HTTP error: %s", e.response.text[:800])
        return INSIGHT_FALLBACK
    except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
        log.exception("Journal insight LLM error: %s", e)
        return INSIGHT_FALLBACK

    for line in content.splitlines():
        if line.strip().lower().startswith("insight:"):
            return line.split(":", 1)[1].strip() or INSIGHT_FALLBACK
    lines = content.splitlines()
    return lines[0].strip() if lines and lines[0].strip() else INSIGHT_FALLBACK


def score_emotions(text):
    """0-100 scores for the standard emotions; all zeros on any failure."""
    if not text or not text.strip():
        return empty_emotions()

    prompt = (
        "Analyze the following text for emotional tones. Score each emotion on a scale "
        "from 0 to 100, where 0 means not present and 100 means extremely intense.\n\n"
        f"Text: {json.dumps(text)}\n\n"
        f"Return only a JSON object with the numeric keys: {', '.join(EMOTION_KEYS)}."
    )
    try:
        content = chat_completion(
            [{"role": "user", "content": prompt}],
            max_tokens=200,
            temperature=0.2,
            json_mode=True,
        )
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            return empty_emotions()
        return normalize_emotions({k: parsed.get(k, 0) for k in EMOTION_KEYS})
    except LLMUnavailable as e:
        log.warning("Emotion scoring skipped: %s", e)
        return empty_emotions()
    except httpx.HTTPStatusError as e:
        log.error("Emotion scoring HTTP error: %s", e.response.text[:800])
        return empty_emotions()
    except (httpx.HTTPError, KeyError, IndexError, ValueError, ArithmeticError) as e:
        log.exception("Emotion scoring error: %s", e)
        return empty_emotions()
