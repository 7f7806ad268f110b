"""Provider/runtime configuration for the LLM layer.

Architectural role:
    Centralizes vendor endpoints, sampling defaults, transport timeout, and the
    resolution table that maps every `AIProvider` identifier to exactly one
    (vendor family, wire model) pair. Consumed by `app.llm.client` (endpoints,
    sampling) and `app.llm.service` (resolution).

Vendor families:
    - `chat_completions`: OpenAI chat-completions shape, bearer auth.
    - `system_separated`: Anthropic Messages shape, system prompt hoisted.
    - `single_blob`: Gemini `generateContent`, messages flattened to one text.
    - `fixed_model`: Perplexity, chat-completions shape with one online model.
    - `chat_completions_alt`: xAI, chat-completions shape on its own endpoint.

Determinism:
    Values are resolved at import time from the process environment (after
    `load_dotenv()`). API keys are never configured here; they arrive with each
    request.

Failure behavior:
    `resolve_provider` raises `UnknownProviderError` for identifiers outside the
    table. The service layer converts that into an error outcome.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from app.core.contracts import AIProvider
from app.core.errors import UnknownProviderError

load_dotenv()


# Upper bound for each vendor round trip; vendor APIs can hang indefinitely.
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "60"))

# Sampling defaults shared by every family.
TEMPERATURE = 0.7
MAX_TOKENS = 2000
# Gemini output budget; thinking models spend part of it before answering.
SINGLE_BLOB_MAX_OUTPUT_TOKENS = 8000


# Vendor endpoints.
OPENAI_URL = "https://api.openai.com/v1/chat/completions"

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1/models/"
    "{model}:generateContent"
)

PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"
PERPLEXITY_ONLINE_MODEL = "llama-3.1-sonar-small-128k-online"

XAI_URL = "https://api.x.ai/v1/chat/completions"


CHAT_COMPLETIONS = "chat_completions"
SYSTEM_SEPARATED = "system_separated"
SINGLE_BLOB = "single_blob"
FIXED_MODEL = "fixed_model"
CHAT_COMPLETIONS_ALT = "chat_completions_alt"


@dataclass(frozen=True)
class ProviderRoute:
    """Resolved dispatch target for one provider identifier."""

    family: str
    model: str
    display_name: str


# Single source of truth for identifier -> (family, model). Adding a model is one
# row here; adding a vendor is one adapter in `client.py` plus its rows.
PROVIDER_TABLE = {
    AIProvider.OPENAI_GPT4O: ProviderRoute(CHAT_COMPLETIONS, "gpt-4o", "OpenAI GPT-4o"),
    AIProvider.OPENAI_GPT4_TURBO: ProviderRoute(CHAT_COMPLETIONS, "gpt-4-turbo", "OpenAI GPT-4 Turbo"),
    AIProvider.OPENAI_GPT4: ProviderRoute(CHAT_COMPLETIONS, "gpt-4", "OpenAI GPT-4"),
    AIProvider.OPENAI_GPT35_TURBO: ProviderRoute(CHAT_COMPLETIONS, "gpt-3.5-turbo", "OpenAI GPT-3.5 Turbo"),

    AIProvider.CLAUDE_SONNET_4: ProviderRoute(SYSTEM_SEPARATED, "claude-sonnet-4-20250514", "Claude Sonnet 4"),
    AIProvider.CLAUDE_SONNET_35: ProviderRoute(SYSTEM_SEPARATED, "claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet"),
    AIProvider.CLAUDE_OPUS: ProviderRoute(SYSTEM_SEPARATED, "claude-3-opus-20240229", "Claude 3 Opus"),
    AIProvider.CLAUDE_HAIKU: ProviderRoute(SYSTEM_SEPARATED, "claude-3-haiku-20240307", "Claude 3 Haiku"),

    AIProvider.GEMINI_2_5_PRO: ProviderRoute(SINGLE_BLOB, "gemini-2.5-pro", "Google Gemini 2.5 Pro"),
    AIProvider.GEMINI_2_5_FLASH: ProviderRoute(SINGLE_BLOB, "gemini-2.5-flash", "Google Gemini 2.5 Flash"),
    AIProvider.GEMINI_2_5_FLASH_LITE: ProviderRoute(SINGLE_BLOB, "gemini-2.5-flash-lite", "Google Gemini 2.5 Flash Lite"),
    AIProvider.GEMINI_2_5_FLASH_TTS: ProviderRoute(SINGLE_BLOB, "gemini-2.5-flash-tts", "Google Gemini 2.5 Flash TTS"),
    AIProvider.GEMINI_2_0_FLASH: ProviderRoute(SINGLE_BLOB, "gemini-2.0-flash", "Google Gemini 2.0 Flash"),
    AIProvider.GEMINI_2_0_FLASH_LITE: ProviderRoute(SINGLE_BLOB, "gemini-2.0-flash-lite", "Google Gemini 2.0 Flash Lite"),
    AIProvider.GEMINI_2_0_FLASH_EXP: ProviderRoute(SINGLE_BLOB, "gemini-2.0-flash-exp", "Google Gemini 2.0 Flash Experimental"),
    AIProvider.GEMINI_2_0_FLASH_LIVE: ProviderRoute(SINGLE_BLOB, "gemini-2.0-flash-live", "Google Gemini 2.0 Flash Live"),
    AIProvider.GEMINI_2_5_FLASH_LIVE: ProviderRoute(SINGLE_BLOB, "gemini-2.5-flash-live", "Google Gemini 2.5 Flash Live"),
    AIProvider.GEMINI_2_5_FLASH_NATIVE_AUDIO_DIALOG: ProviderRoute(
        SINGLE_BLOB, "gemini-2.5-flash-native-audio-dialog", "Google Gemini 2.5 Flash Native Audio"
    ),
    AIProvider.GEMINI_ROBOTICS_ER_1_5_PREVIEW: ProviderRoute(
        SINGLE_BLOB, "gemini-robotics-er-1.5-preview", "Google Gemini Robotics ER 1.5"
    ),
    AIProvider.LEARNLM_2_0_FLASH_EXPERIMENTAL: ProviderRoute(
        SINGLE_BLOB, "learnlm-2.0-flash-experimental", "Google LearnLM 2.0 Flash"
    ),

    AIProvider.PERPLEXITY_SONAR: ProviderRoute(FIXED_MODEL, PERPLEXITY_ONLINE_MODEL, "Perplexity Sonar"),

    AIProvider.XAI_GROK_2: ProviderRoute(CHAT_COMPLETIONS_ALT, "grok-2-1212", "xAI Grok-2"),
    AIProvider.XAI_GROK_BETA: ProviderRoute(CHAT_COMPLETIONS_ALT, "grok-beta", "xAI Grok Beta"),
}


def resolve_provider(provider_id) -> ProviderRoute:
    """Resolve a provider identifier (enum member or raw string) to its route.

    Args:
        provider_id: `AIProvider` member or its string value.

    Returns:
        The `ProviderRoute` registered for the identifier.

    Raises:
        UnknownProviderError: identifier is not part of the closed set.
    """
    try:
        key = AIProvider(provider_id)
    except ValueError as err:
        raise UnknownProviderError(f"Unsupported AI provider: {provider_id}") from err

    route = PROVIDER_TABLE.get(key)
    if route is None:
        raise UnknownProviderError(f"Unsupported AI provider: {provider_id}")
    return route
