"""Failure taxonomy for the generation pipeline.

Propagation model:
    Adapters never raise; they return `ProviderOutcome.error`. The engine turns an
    adapter error or an unparseable model reply into one of the exceptions below,
    and `app.api.http_api` maps every `PipelineError` to HTTP 500 using
    `user_message`. Nothing here is retried.
"""


class PipelineError(Exception):
    """Base class for terminal failures of a generation operation."""

    user_message = "Generation failed"


class ProviderFailure(PipelineError):
    """An adapter call returned an error outcome.

    Attributes:
        stage: Pipeline stage that issued the call (`questions`, `draft`,
            `optimize`).
        provider_id: Provider identifier the caller selected for that stage.
        detail: Adapter error text, unmodified.
    """

    def __init__(self, stage: str, provider_id: str, detail: str):
        self.stage = stage
        self.provider_id = provider_id
        self.detail = detail
        super().__init__(f"{stage} stage failed on {provider_id}: {detail}")

    @property
    def user_message(self) -> str:
        return (
            f"{self.provider_id} API hatası: {self.detail}. "
            "Lütfen API anahtarınızı kontrol edin."
        )


class MalformedAIResponse(PipelineError):
    """The model replied successfully but no usable JSON object was found."""

    user_message = "Invalid AI response format"

    def __init__(self, detail: str = "no JSON object in model reply"):
        self.detail = detail
        super().__init__(detail)


class UnknownProviderError(LookupError):
    """Provider identifier is not present in the resolution table."""
