"""Uniform provider invocation entrypoint.

Architectural role:
    The only function orchestration code calls to reach a model. Resolves the
    provider identifier to its (family, model) route, dispatches to the family
    adapter in `app.llm.client`, and returns a `ProviderOutcome`.

Model call flow:
    engine -> `invoke(provider_id, api_key, messages)` -> `resolve_provider` ->
    `ADAPTERS[family].send(...)`.

Failure handling:
    No-throw boundary. Unknown identifiers and any unexpected exception escaping
    an adapter are converted into error outcomes and logged.

Side effects:
    One blocking HTTP round trip per call; one log line per call. API keys are
    never logged.
"""

import logging
import time
from typing import Sequence

from app.core.contracts import ChatMessage, ProviderOutcome
from app.core.errors import UnknownProviderError
from app.llm.client import ADAPTERS
from app.llm.provider_config import resolve_provider


logger = logging.getLogger(__name__)

UNSUPPORTED_PROVIDER_ERROR = "Unsupported AI provider"


def invoke(provider_id, api_key: str, messages: Sequence[ChatMessage]) -> ProviderOutcome:
    """Send one conversation to the selected provider.

    Args:
        provider_id: `AIProvider` member or its string value.
        api_key: Caller-supplied credential for that provider.
        messages: Ordered conversation; `system` turns carry instructions.

    Returns:
        `ProviderOutcome` with `content` on success or `error` on any failure.
    """
    try:
        route = resolve_provider(provider_id)
    except UnknownProviderError:
        logger.warning("Rejected unknown provider id %r", provider_id)
        return ProviderOutcome.failure(UNSUPPORTED_PROVIDER_ERROR)

    adapter = ADAPTERS.get(route.family)
    if adapter is None:
        logger.error("No adapter registered for family %s", route.family)
        return ProviderOutcome.failure(UNSUPPORTED_PROVIDER_ERROR)

    started = time.perf_counter()
    try:
        outcome = adapter.send(api_key, route.model, list(messages))
    except Exception as err:
        logger.exception("Adapter %s raised unexpectedly", route.family)
        outcome = ProviderOutcome.failure(str(err) or type(err).__name__)

    elapsed = time.perf_counter() - started
    if outcome.ok:
        logger.info(
            "provider=%s family=%s model=%s elapsed=%.2fs status=ok",
            getattr(provider_id, "value", provider_id), route.family, route.model, elapsed,
        )
    else:
        logger.warning(
            "provider=%s family=%s model=%s elapsed=%.2fs status=error error=%s",
            getattr(provider_id, "value", provider_id), route.family, route.model, elapsed, outcome.error,
        )
    return outcome
