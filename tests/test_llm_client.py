"""Tests for the vendor adapters behind `app.llm.service.invoke`."""

import logging

import pytest
import requests

from app.core.contracts import AIProvider, ChatMessage
from app.llm import client
from app.llm.provider_config import PERPLEXITY_ONLINE_MODEL, SINGLE_BLOB_MAX_OUTPUT_TOKENS
from app.llm.service import invoke


MESSAGES = [
    ChatMessage(role="system", content="You are a prompt engineer."),
    ChatMessage(role="user", content="a blog post about cats"),
]


def chat_payload(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def gemini_payload(text, finish_reason="STOP"):
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": finish_reason}
        ]
    }


# =========================================================
# SUCCESS PATHS
# =========================================================

@pytest.mark.parametrize(
    "provider, payload, expected_url",
    [
        (AIProvider.OPENAI_GPT4O, chat_payload("openai text"), "https://api.openai.com/v1/chat/completions"),
        (
            AIProvider.CLAUDE_HAIKU,
            {"content": [{"type": "text", "text": "claude text"}]},
            "https://api.anthropic.com/v1/messages",
        ),
        (
            AIProvider.GEMINI_2_5_FLASH,
            gemini_payload("gemini text"),
            "https://generativelanguage.googleapis.com/v1/models/gemini-2.5-flash:generateContent",
        ),
        (AIProvider.PERPLEXITY_SONAR, chat_payload("perplexity text"), "https://api.perplexity.ai/chat/completions"),
        (AIProvider.XAI_GROK_2, chat_payload("grok text"), "https://api.x.ai/v1/chat/completions"),
    ],
)
def test_each_family_returns_content(fake_post, provider, payload, expected_url):
    fake_post.respond(200, payload)

    outcome = invoke(provider, "secret", MESSAGES)

    assert outcome.error is None
    assert outcome.ok
    assert outcome.content.endswith("text")
    assert fake_post.last["url"] == expected_url
    assert fake_post.last["timeout"] > 0


def test_chat_completions_payload_and_bearer_auth(fake_post):
    fake_post.respond(200, chat_payload("ok"))

    invoke(AIProvider.OPENAI_GPT35_TURBO, "sk-test", MESSAGES)

    call = fake_post.last
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["json"] == {
        "model": "gpt-3.5-turbo",
        "messages": [
            {"role": "system", "content": "You are a prompt engineer."},
            {"role": "user", "content": "a blog post about cats"},
        ],
        "temperature": 0.7,
        "max_tokens": 2000,
    }


def test_system_separated_hoists_system_prompt(fake_post):
    fake_post.respond(200, {"content": [{"text": "ok"}]})

    invoke(AIProvider.CLAUDE_SONNET_4, "claude-key", MESSAGES)

    call = fake_post.last
    assert call["headers"]["x-api-key"] == "claude-key"
    assert call["headers"]["anthropic-version"] == "2023-06-01"
    assert "Authorization" not in call["headers"]
    assert call["json"]["system"] == "You are a prompt engineer."
    assert call["json"]["messages"] == [{"role": "user", "content": "a blog post about cats"}]
    assert call["json"]["model"] == "claude-sonnet-4-20250514"
    assert call["json"]["max_tokens"] == 2000


def test_system_separated_without_system_message_sends_empty_system(fake_post):
    fake_post.respond(200, {"content": [{"text": "ok"}]})

    invoke(AIProvider.CLAUDE_OPUS, "k", [ChatMessage(role="user", content="hi")])

    assert fake_post.last["json"]["system"] == ""


def test_single_blob_flattens_messages_and_uses_query_key(fake_post):
    fake_post.respond(200, gemini_payload("ok"))

    invoke(AIProvider.GEMINI_2_0_FLASH, "gem-key", MESSAGES)

    call = fake_post.last
    assert call["params"] == {"key": "gem-key"}
    assert "Authorization" not in call["headers"]
    assert call["json"]["contents"] == [
        {"parts": [{"text": "system: You are a prompt engineer.\n\nuser: a blog post about cats"}]}
    ]
    assert call["json"]["generationConfig"] == {
        "temperature": 0.7,
        "maxOutputTokens": SINGLE_BLOB_MAX_OUTPUT_TOKENS,
    }


def test_fixed_model_ignores_requested_tier(fake_post):
    fake_post.respond(200, chat_payload("ok"))

    client.FixedModelChatAdapter().send("pplx", "some-other-model", MESSAGES)

    assert fake_post.last["json"]["model"] == PERPLEXITY_ONLINE_MODEL
    assert fake_post.last["headers"]["Authorization"] == "Bearer pplx"


# =========================================================
# SINGLE-BLOB DEFENSIVE CHAIN
# =========================================================

def test_single_blob_empty_candidates_is_error(fake_post):
    fake_post.respond(200, {"candidates": []})

    outcome = invoke(AIProvider.GEMINI_2_5_PRO, "k", MESSAGES)

    assert outcome.content == ""
    assert outcome.error == client.GEMINI_NO_CANDIDATES_ERROR


def test_single_blob_missing_candidates_key_is_error(fake_post):
    fake_post.respond(200, {"promptFeedback": {"blockReason": "SAFETY"}})

    outcome = invoke(AIProvider.GEMINI_2_5_PRO, "k", MESSAGES)

    assert outcome.error == client.GEMINI_NO_CANDIDATES_ERROR


def test_single_blob_token_limit_has_distinct_error(fake_post):
    fake_post.respond(200, {"candidates": [{"finishReason": "MAX_TOKENS", "content": {"role": "model"}}]})

    outcome = invoke(AIProvider.GEMINI_2_5_PRO, "k", MESSAGES)

    assert outcome.content == ""
    assert outcome.error == client.GEMINI_TOKEN_LIMIT_ERROR
    assert outcome.error != client.GEMINI_NO_CANDIDATES_ERROR
    assert "API yanıtı geçersiz" not in outcome.error


def test_single_blob_missing_parts_reports_finish_reason(fake_post):
    fake_post.respond(200, {"candidates": [{"finishReason": "SAFETY", "content": {"parts": []}}]})

    outcome = invoke(AIProvider.GEMINI_2_5_FLASH_LITE, "k", MESSAGES)

    assert outcome.error == "API yanıtı geçersiz (SAFETY)"


def test_single_blob_missing_content_without_reason(fake_post):
    fake_post.respond(200, {"candidates": [{}]})

    outcome = invoke(AIProvider.GEMINI_2_5_FLASH_LITE, "k", MESSAGES)

    assert outcome.error == "API yanıtı geçersiz (unknown reason)"


# =========================================================
# HTTP AND TRANSPORT FAILURES
# =========================================================

@pytest.mark.parametrize(
    "provider, generic",
    [
        (AIProvider.OPENAI_GPT4, "OpenAI API error"),
        (AIProvider.CLAUDE_HAIKU, "Claude API error"),
        (AIProvider.GEMINI_2_0_FLASH_LITE, "Gemini API error"),
        (AIProvider.PERPLEXITY_SONAR, "Perplexity API error"),
        (AIProvider.XAI_GROK_BETA, "xAI API error"),
    ],
)
def test_non_2xx_uses_vendor_message_or_generic(fake_post, provider, generic):
    fake_post.respond(401, {"error": {"message": "Incorrect API key provided"}})
    outcome = invoke(provider, "bad", MESSAGES)
    assert outcome.content == ""
    assert outcome.error == "Incorrect API key provided"

    fake_post.respond(500, {"unexpected": True})
    outcome = invoke(provider, "bad", MESSAGES)
    assert outcome.error == generic

    fake_post.respond(502, raise_on_json=True)
    outcome = invoke(provider, "bad", MESSAGES)
    assert outcome.error == generic


def test_transport_error_becomes_outcome(fake_post):
    fake_post.exception = requests.exceptions.ConnectionError("connection refused")

    outcome = invoke(AIProvider.OPENAI_GPT4O, "k", MESSAGES)

    assert outcome.content == ""
    assert outcome.error == "OpenAI request failed (ConnectionError)"


def test_timeout_becomes_outcome(fake_post):
    fake_post.exception = requests.exceptions.ReadTimeout("read timed out")

    outcome = invoke(AIProvider.CLAUDE_HAIKU, "k", MESSAGES)

    assert "timed out" in outcome.error


def test_success_status_with_non_json_body(fake_post):
    fake_post.respond(200, raise_on_json=True)

    outcome = invoke(AIProvider.XAI_GROK_2, "k", MESSAGES)

    assert outcome.error == "xAI returned a non-JSON response"


def test_success_status_with_unexpected_shape(fake_post):
    fake_post.respond(200, {"choices": []})

    outcome = invoke(AIProvider.OPENAI_GPT4O, "k", MESSAGES)

    assert outcome.content == ""
    assert outcome.error == "OpenAI response format unexpected"


def test_success_status_with_null_content(fake_post):
    fake_post.respond(200, chat_payload(None))

    outcome = invoke(AIProvider.OPENAI_GPT4O, "k", MESSAGES)

    assert outcome.error == "OpenAI response missing content"


def test_single_blob_connection_error_keeps_api_key_out_of_error_and_logs(fake_post, caplog):
    url = "https://generativelanguage.googleapis.com/v1/models/gemini-2.5-flash:generateContent?key=SECRET-KEY-123"
    fake_post.exception = requests.exceptions.ConnectionError(
        f"HTTPSConnectionPool: Max retries exceeded with url: {url}"
    )

    with caplog.at_level(logging.DEBUG):
        outcome = invoke(AIProvider.GEMINI_2_5_FLASH, "SECRET-KEY-123", MESSAGES)

    assert outcome.error == "Gemini request failed (ConnectionError)"
    assert "SECRET-KEY-123" not in outcome.error
    assert "SECRET-KEY-123" not in caplog.text
