"""Request/response data contracts shared by the HTTP layer, engine, and adapters.

Architectural role:
    Defines the structural schemas that validate inbound JSON bodies and type the
    outbound results of both generation operations. The same definitions are used
    by `app.api.http_api` (validation + serialization), `app.core.engine`
    (typed inputs/outputs), and `app.llm` (message and outcome types).

Wire naming:
    External JSON keys keep the browser client's camelCase names (`userPrompt`,
    `ai1Provider`, `processingTime`, ...). Python attributes use snake_case and are
    bound through pydantic aliases; `populate_by_name` allows either form on input.
    Always serialize with `by_alias=True` when producing wire payloads.

Lifecycle:
    Every object here is request-scoped. Nothing is persisted or shared across
    requests.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Role = Literal["system", "user", "assistant"]
Mode = Literal["quick", "detailed"]


# =========================================================
# PROVIDER IDENTIFIERS
# =========================================================

class AIProvider(str, Enum):
    """Closed set of selectable provider/model pairings.

    Values are the exact identifiers sent by the browser client. The
    (vendor family, wire model) mapping lives in `app.llm.provider_config`.
    """

    OPENAI_GPT4O = "openai-gpt4o"
    OPENAI_GPT4_TURBO = "openai-gpt4-turbo"
    OPENAI_GPT4 = "openai-gpt4"
    OPENAI_GPT35_TURBO = "openai-gpt35-turbo"
    CLAUDE_SONNET_4 = "claude-sonnet-4"
    CLAUDE_SONNET_35 = "claude-sonnet-35"
    CLAUDE_OPUS = "claude-opus"
    CLAUDE_HAIKU = "claude-haiku"
    GEMINI_2_5_PRO = "gemini-2-5-pro"
    GEMINI_2_5_FLASH = "gemini-2-5-flash"
    GEMINI_2_5_FLASH_LITE = "gemini-2-5-flash-lite"
    GEMINI_2_5_FLASH_TTS = "gemini-2-5-flash-tts"
    GEMINI_2_0_FLASH = "gemini-2-0-flash"
    GEMINI_2_0_FLASH_LITE = "gemini-2-0-flash-lite"
    GEMINI_2_0_FLASH_EXP = "gemini-2-0-flash-exp"
    GEMINI_2_0_FLASH_LIVE = "gemini-2-0-flash-live"
    GEMINI_2_5_FLASH_LIVE = "gemini-2-5-flash-live"
    GEMINI_2_5_FLASH_NATIVE_AUDIO_DIALOG = "gemini-2-5-flash-native-audio-dialog"
    GEMINI_ROBOTICS_ER_1_5_PREVIEW = "gemini-robotics-er-1-5-preview"
    LEARNLM_2_0_FLASH_EXPERIMENTAL = "learnlm-2-0-flash-experimental"
    PERPLEXITY_SONAR = "perplexity-sonar"
    XAI_GROK_2 = "xai-grok-2"
    XAI_GROK_BETA = "xai-grok-beta"


# =========================================================
# ADAPTER-LEVEL TYPES
# =========================================================

@dataclass(frozen=True)
class ChatMessage:
    """One vendor-neutral conversation turn.

    `system` turns carry orchestration instructions, `user` turns carry the
    task payload.
    """

    role: Role
    content: str


@dataclass(frozen=True)
class ProviderOutcome:
    """Normalized result of a single adapter invocation.

    Exactly one field is authoritative: when `error` is set the call failed and
    `content` must be ignored.
    """

    content: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> "ProviderOutcome":
        return cls(content="", error=message or "Unknown provider error")


# =========================================================
# WIRE MODELS
# =========================================================

class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class QuestionsRequest(_WireModel):
    """Body of `POST /api/generate-questions`."""

    user_prompt: str = Field(alias="userPrompt", min_length=1)
    provider_id: AIProvider = Field(alias="ai1Provider")
    api_key: str = Field(alias="ai1ApiKey")


class AnsweredQuestion(_WireModel):
    id: str
    question: str
    answer: str


class PromptRequest(_WireModel):
    """Body of `POST /api/generate-prompts`.

    `questions` is accepted for either mode; the engine decides whether it is
    used (see `app.prompting.prompt_builder.build_context_block`).
    """

    user_prompt: str = Field(alias="userPrompt", min_length=1)
    mode: Mode
    questions: Optional[List[AnsweredQuestion]] = None
    draft_provider_id: AIProvider = Field(alias="ai1Provider")
    draft_api_key: str = Field(alias="ai1ApiKey")
    optimize_provider_id: AIProvider = Field(alias="ai2Provider")
    optimize_api_key: str = Field(alias="ai2ApiKey")


class QuestionsResult(_WireModel):
    """Questions returned by the model, passed through as parsed.

    Items are expected to look like `{"id": ..., "question": ...}` but neither
    the count nor the item fields are enforced; that contract lives in the
    instruction text sent to the model.
    """

    questions: List[Dict[str, Any]]


class PromptMetadata(_WireModel):
    draft_provider_id: str = Field(alias="ai1Provider")
    optimize_provider_id: str = Field(alias="ai2Provider")
    processing_time_seconds: float = Field(alias="processingTime")
    mode: Mode


class PromptResult(_WireModel):
    option1: str
    option2: str
    metadata: PromptMetadata


class ErrorResponse(_WireModel):
    error: str
