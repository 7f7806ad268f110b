"""Core orchestration for question generation and two-stage prompt generation.

Architectural role:
    Implements the two operations exposed over HTTP (and the CLI). Each one
    composes instruction templates from `app.prompting.prompt_builder`, calls
    `app.llm.service.invoke` one or two times, extracts the JSON object from the
    model reply, and assembles the typed result.

Control-flow model:
    generate_questions:
        1. Build `[system, user]` question-generation messages.
        2. Invoke the selected provider once.
        3. Extract the greedy JSON span and return its `questions` list as-is.
    generate_prompts:
        1. Start the wall-clock timer.
        2. Render the answered-question context block (detailed mode only).
        3. Draft stage on `ai1`; its reply text becomes the optimize input.
        4. Optimize stage on `ai2`; reply must hold `option1` and `option2`.
        5. Attach metadata with elapsed seconds.

Concurrency:
    Adapter calls are blocking and run through `asyncio.to_thread`. The optimize
    call is only issued after the draft outcome is known. No state is shared
    between invocations.

Error handling strategy:
    An adapter error ends the operation with `ProviderFailure`; an unusable reply
    ends it with `MalformedAIResponse`. Nothing is retried and no partial result
    is returned.
"""

import asyncio
import logging
import time

from app.core.contracts import (
    PromptMetadata,
    PromptRequest,
    PromptResult,
    QuestionsRequest,
    QuestionsResult,
)
from app.core.errors import MalformedAIResponse, ProviderFailure
from app.core.json_extraction import extract_json_object
from app.llm.service import invoke
from app.prompting.prompt_builder import (
    build_context_block,
    build_draft_messages,
    build_optimize_messages,
    build_questions_messages,
)


logger = logging.getLogger(__name__)

QUESTIONS_STAGE = "questions"
DRAFT_STAGE = "draft"
OPTIMIZE_STAGE = "optimize"


async def _call_provider(stage: str, provider_id, api_key: str, messages) -> str:
    """Run one adapter call off the event loop and return its content.

    Raises:
        ProviderFailure: the outcome carried an error.
    """
    outcome = await asyncio.to_thread(invoke, provider_id, api_key, messages)

    if not outcome.ok:
        provider_label = getattr(provider_id, "value", provider_id)
        logger.error("%s stage failed on %s: %s", stage, provider_label, outcome.error)
        raise ProviderFailure(stage, provider_label, outcome.error)

    return outcome.content


# =========================================================
# QUESTION GENERATION
# =========================================================

async def generate_questions(request: QuestionsRequest) -> QuestionsResult:
    """Ask the selected model for clarifying questions about a prompt idea.

    Returns:
        `QuestionsResult` holding the model's list unmodified; count and item
        fields are not checked.

    Raises:
        ProviderFailure: provider call failed.
        MalformedAIResponse: no JSON object, or no `questions` list of objects.
    """
    messages = build_questions_messages(request.user_prompt)
    reply = await _call_provider(QUESTIONS_STAGE, request.provider_id, request.api_key, messages)

    parsed = extract_json_object(reply)
    questions = parsed.get("questions")
    if not isinstance(questions, list) or not all(isinstance(q, dict) for q in questions):
        logger.warning("Question reply has no usable 'questions' list")
        raise MalformedAIResponse("reply has no 'questions' list")

    return QuestionsResult(questions=questions)


# =========================================================
# PROMPT GENERATION (DRAFT -> OPTIMIZE)
# =========================================================

async def generate_prompts(request: PromptRequest) -> PromptResult:
    """Produce two optimized prompt variants through draft and optimize stages.

    Important behavior:
        - The context block is identical in both stage system prompts.
        - A draft-stage failure means the optimize provider is never called.

    Raises:
        ProviderFailure: draft or optimize provider call failed.
        MalformedAIResponse: optimize reply lacks non-empty `option1`/`option2`.
    """
    started = time.perf_counter()

    context_block = build_context_block(request.mode, request.questions)

    draft = await _call_provider(
        DRAFT_STAGE,
        request.draft_provider_id,
        request.draft_api_key,
        build_draft_messages(request.user_prompt, context_block),
    )

    reply = await _call_provider(
        OPTIMIZE_STAGE,
        request.optimize_provider_id,
        request.optimize_api_key,
        build_optimize_messages(draft, context_block),
    )

    variations = extract_json_object(reply)
    option1 = variations.get("option1")
    option2 = variations.get("option2")
    if not isinstance(option1, str) or not option1 or not isinstance(option2, str) or not option2:
        logger.warning("Optimize reply missing option1/option2")
        raise MalformedAIResponse("reply lacks 'option1' and 'option2'")

    elapsed = time.perf_counter() - started
    logger.info(
        "Generated prompts mode=%s draft=%s optimize=%s in %.2fs",
        request.mode,
        request.draft_provider_id.value,
        request.optimize_provider_id.value,
        elapsed,
    )

    return PromptResult(
        option1=option1,
        option2=option2,
        metadata=PromptMetadata(
            draft_provider_id=request.draft_provider_id.value,
            optimize_provider_id=request.optimize_provider_id.value,
            processing_time_seconds=round(elapsed, 3),
            mode=request.mode,
        ),
    )
