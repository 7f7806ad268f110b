"""Vendor-specific transport adapters for LLM requests.

Architectural role:
    Translates a vendor-neutral `ChatMessage` sequence into each vendor family's
    wire format, executes the HTTP call, and normalizes the reply into a
    `ProviderOutcome`. `app.llm.service.invoke` selects the adapter through
    `ADAPTERS` using the family resolved in `provider_config`.

Model invocation flow:
    `service.invoke` -> `ADAPTERS[family].send(api_key, model, messages)` ->
    `_post_json` -> family-specific `extract_content` -> `ProviderOutcome`.

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with
    `PROVIDER_TIMEOUT_SECONDS`.

Failure handling model:
    Adapters do not raise. Transport errors, timeouts, non-2xx statuses, non-JSON
    bodies, and payloads missing the expected fields are converted into
    `ProviderOutcome.error` with a readable description. For non-2xx statuses the
    vendor's own `error.message` is used when the body carries one.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests

from app.core.contracts import ChatMessage, ProviderOutcome
from app.llm.provider_config import (
    ANTHROPIC_URL,
    ANTHROPIC_VERSION,
    CHAT_COMPLETIONS,
    CHAT_COMPLETIONS_ALT,
    FIXED_MODEL,
    GEMINI_URL_TEMPLATE,
    MAX_TOKENS,
    OPENAI_URL,
    PERPLEXITY_ONLINE_MODEL,
    PERPLEXITY_URL,
    PROVIDER_TIMEOUT_SECONDS,
    SINGLE_BLOB,
    SINGLE_BLOB_MAX_OUTPUT_TOKENS,
    SYSTEM_SEPARATED,
    TEMPERATURE,
    XAI_URL,
)


logger = logging.getLogger(__name__)

GEMINI_NO_CANDIDATES_ERROR = "API yanıt vermedi"
GEMINI_TOKEN_LIMIT_ERROR = "Token limiti aşıldı. Lütfen daha kısa bir prompt deneyin."
GEMINI_INVALID_RESPONSE_ERROR = "API yanıtı geçersiz ({reason})"


class AdapterError(RuntimeError):
    """Raised inside an adapter and converted to an error outcome by `send`."""


class ProviderAdapter(Protocol):
    """Common capability implemented by every vendor family."""

    family: str

    def send(self, api_key: str, model: str, messages: Sequence[ChatMessage]) -> ProviderOutcome:
        ...


def _as_wire_messages(messages: Sequence[ChatMessage]) -> List[Dict[str, str]]:
    return [{"role": m.role, "content": m.content} for m in messages]


def _vendor_error_message(response) -> Optional[str]:
    """Return `error.message` from a vendor error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return None

    if not isinstance(body, dict):
        return None

    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _post_json(
    vendor: str,
    url: str,
    payload: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """POST a JSON payload and return the decoded JSON body.

    Raises:
        AdapterError: on transport failure, timeout, non-2xx status, or a body
            that is not a JSON object.
    """
    request_headers = {"Content-Type": "application/json"}
    if headers:
        request_headers.update(headers)

    try:
        response = requests.post(
            url,
            headers=request_headers,
            params=params,
            json=payload,
            timeout=PROVIDER_TIMEOUT_SECONDS,
        )
    except requests.exceptions.Timeout as err:
        raise AdapterError(
            f"{vendor} request timed out after {PROVIDER_TIMEOUT_SECONDS:g}s"
        ) from err
    except requests.exceptions.RequestException as err:
        # Exception text embeds the request URL, which carries the Gemini key.
        raise AdapterError(f"{vendor} request failed ({type(err).__name__})") from err

    if not 200 <= response.status_code < 300:
        message = _vendor_error_message(response) or f"{vendor} API error"
        logger.warning("%s returned HTTP %s: %s", vendor, response.status_code, message)
        raise AdapterError(message)

    try:
        data = response.json()
    except ValueError as err:
        raise AdapterError(f"{vendor} returned a non-JSON response") from err

    if not isinstance(data, dict):
        raise AdapterError(f"{vendor} response format unexpected")
    return data


class _BaseAdapter:
    family = ""
    vendor = "provider"

    def send(self, api_key: str, model: str, messages: Sequence[ChatMessage]) -> ProviderOutcome:
        try:
            data = self.request(api_key, model, messages)
            content = self.extract_content(data)
        except AdapterError as err:
            return ProviderOutcome.failure(str(err))
        except (KeyError, IndexError, TypeError, AttributeError):
            logger.exception("%s response parsing failed", self.vendor)
            return ProviderOutcome.failure(f"{self.vendor} response format unexpected")

        if not isinstance(content, str) or not content:
            return ProviderOutcome.failure(f"{self.vendor} response missing content")
        return ProviderOutcome(content=content)

    def request(self, api_key: str, model: str, messages: Sequence[ChatMessage]) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_content(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError


# =========================================================
# CHAT-COMPLETIONS FAMILIES
# =========================================================

class ChatCompletionsAdapter(_BaseAdapter):
    """OpenAI chat-completions: bearer auth, `choices[0].message.content`."""

    family = CHAT_COMPLETIONS
    vendor = "OpenAI"
    url = OPENAI_URL

    def wire_model(self, model: str) -> str:
        return model

    def request(self, api_key, model, messages):
        payload = {
            "model": self.wire_model(model),
            "messages": _as_wire_messages(messages),
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
        }
        headers = {"Authorization": f"Bearer {api_key}"}
        return _post_json(self.vendor, self.url, payload, headers=headers)

    def extract_content(self, data):
        return data["choices"][0]["message"]["content"]


class FixedModelChatAdapter(ChatCompletionsAdapter):
    """Perplexity: chat-completions shape, one hardcoded online model."""

    family = FIXED_MODEL
    vendor = "Perplexity"
    url = PERPLEXITY_URL

    def wire_model(self, model: str) -> str:
        return PERPLEXITY_ONLINE_MODEL


class AlternateChatAdapter(ChatCompletionsAdapter):
    """xAI: chat-completions shape on the xAI endpoint."""

    family = CHAT_COMPLETIONS_ALT
    vendor = "xAI"
    url = XAI_URL


# =========================================================
# SYSTEM-PROMPT-SEPARATED FAMILY
# =========================================================

class SystemSeparatedAdapter(_BaseAdapter):
    """Anthropic Messages API: system prompt hoisted to a top-level field."""

    family = SYSTEM_SEPARATED
    vendor = "Claude"

    def request(self, api_key, model, messages):
        system_prompt = next((m.content for m in messages if m.role == "system"), "")
        conversation = [m for m in messages if m.role != "system"]

        payload = {
            "model": model,
            "system": system_prompt,
            "messages": _as_wire_messages(conversation),
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        return _post_json(self.vendor, ANTHROPIC_URL, payload, headers=headers)

    def extract_content(self, data):
        return data["content"][0]["text"]


# =========================================================
# SINGLE-BLOB FAMILY
# =========================================================

def flatten_messages(messages: Sequence[ChatMessage]) -> str:
    """Render a conversation as one `role: content` text blob."""
    return "\n\n".join(f"{m.role}: {m.content}" for m in messages)


class SingleBlobAdapter(_BaseAdapter):
    """Gemini `generateContent`: whole conversation sent as one text part.

    This vendor returns 200 responses without candidates, truncated by the
    token budget, or without content parts; each case gets its own error.
    """

    family = SINGLE_BLOB
    vendor = "Gemini"

    def request(self, api_key, model, messages):
        payload = {
            "contents": [{"parts": [{"text": flatten_messages(messages)}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": SINGLE_BLOB_MAX_OUTPUT_TOKENS,
            },
        }
        url = GEMINI_URL_TEMPLATE.format(model=model)
        return _post_json(self.vendor, url, payload, params={"key": api_key})

    def extract_content(self, data):
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            logger.error("Invalid Gemini response - no candidates: %s", json.dumps(data))
            raise AdapterError(GEMINI_NO_CANDIDATES_ERROR)

        candidate = candidates[0]
        if not isinstance(candidate, dict):
            logger.error("Invalid Gemini candidate: %s", json.dumps(data))
            raise AdapterError(GEMINI_INVALID_RESPONSE_ERROR.format(reason="unknown reason"))

        finish_reason = candidate.get("finishReason")
        if finish_reason == "MAX_TOKENS":
            logger.error("Gemini hit MAX_TOKENS limit")
            raise AdapterError(GEMINI_TOKEN_LIMIT_ERROR)

        content = candidate.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            logger.error("Invalid Gemini response structure: %s", json.dumps(data))
            raise AdapterError(
                GEMINI_INVALID_RESPONSE_ERROR.format(reason=finish_reason or "unknown reason")
            )

        return parts[0].get("text")


ADAPTERS: Dict[str, ProviderAdapter] = {
    adapter.family: adapter
    for adapter in (
        ChatCompletionsAdapter(),
        SystemSeparatedAdapter(),
        SingleBlobAdapter(),
        FixedModelChatAdapter(),
        AlternateChatAdapter(),
    )
}
