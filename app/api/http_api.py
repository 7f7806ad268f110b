"""
HTTP API adapter for the prompt generation engine.

Architectural role:
- Expose the two generation operations used by the browser client.
- Enforce adapter-level input validation with the shared pydantic contracts.
- Apply the per-client rate governor before any model call.
- Delegate generation work to `app.core.engine`.
- Map engine failures to the `{error: string}` response contract.

Endpoint responsibilities:
- `GET /api/providers`: list the selectable provider identifiers.
- `POST /api/generate-questions`: validate, invoke question generation.
- `POST /api/generate-prompts`: validate, invoke draft -> optimize generation.

API request lifecycle (generation routes):
1. `check_rate_limit` dependency (429 when over the window limit).
2. Parse request JSON and validate it against the route contract.
3. Call the engine operation.
4. Serialize the result with wire (camelCase) field names.

Error handling strategy:
- Invalid JSON or contract violations -> HTTP 400 `{error}` with the detail.
- `ProviderFailure` -> HTTP 500 `{error}` naming the provider and hinting at the
  API key.
- `MalformedAIResponse` -> HTTP 500 `{error: "Invalid AI response format"}`.
- Rate limit -> HTTP 429 `{error}` with `Retry-After`.
- Other exceptions follow FastAPI default exception handling.

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Emits debug prints only when `DEBUG == "true"`; API keys are never printed.
"""

from dotenv import load_dotenv

load_dotenv()

import json
import logging
import os

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.api.rate_limit import RateLimitExceeded, check_rate_limit
from app.core import engine
from app.core.contracts import ErrorResponse, PromptRequest, QuestionsRequest
from app.core.errors import PipelineError
from app.llm.provider_config import PROVIDER_TABLE

logger = logging.getLogger(__name__)

app = FastAPI()
# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"


# ============================================================
# Error Responses
# ============================================================

def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


def format_validation_error(err: ValidationError) -> str:
    """Flatten pydantic errors into `field: message` pairs."""
    parts = []
    for item in err.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "body"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(429, str(exc), headers={"Retry-After": str(exc.retry_after)})


async def parse_body(request: Request, contract):
    """Decode and validate a JSON body.

    Returns:
        `(model, None)` on success or `(None, JSONResponse)` with HTTP 400.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None, error_response(400, "Invalid JSON body")

    try:
        return contract.model_validate(body), None
    except ValidationError as err:
        detail = format_validation_error(err)
        logger.info("Rejected %s body: %s", request.url.path, detail)
        return None, error_response(400, detail)


# ============================================================
# Provider Catalogue
# ============================================================

@app.get("/api/providers")
def list_providers():
    """Return selectable provider identifiers with display metadata."""
    return {
        "providers": [
            {
                "id": provider.value,
                "name": route.display_name,
                "family": route.family,
                "model": route.model,
            }
            for provider, route in PROVIDER_TABLE.items()
        ]
    }


# ============================================================
# Question Generation
# ============================================================

@app.post("/api/generate-questions", dependencies=[Depends(check_rate_limit)])
async def generate_questions(request: Request):
    """
    Generate clarifying questions for detailed mode.

    Response formatting:
    - 200 `{questions: [{id, question}, ...]}` exactly as the model produced it.
    """
    data, failure = await parse_body(request, QuestionsRequest)
    if failure is not None:
        return failure

    if DEBUG:
        print("\n==== API DEBUG: generate-questions ====")
        print("Provider:", data.provider_id.value)
        print("User prompt:", data.user_prompt)

    try:
        result = await engine.generate_questions(data)
    except PipelineError as err:
        logger.error("Question generation failed: %s", err)
        return error_response(500, err.user_message)

    return result.model_dump(by_alias=True)


# ============================================================
# Prompt Generation
# ============================================================

@app.post("/api/generate-prompts", dependencies=[Depends(check_rate_limit)])
async def generate_prompts(request: Request):
    """
    Generate two optimized prompt variants (quick or detailed mode).

    Response formatting:
    - 200 `{option1, option2, metadata: {ai1Provider, ai2Provider,
      processingTime, mode}}`.
    """
    data, failure = await parse_body(request, PromptRequest)
    if failure is not None:
        return failure

    if DEBUG:
        print("\n==== API DEBUG: generate-prompts ====")
        print("Mode:", data.mode)
        print("Draft provider:", data.draft_provider_id.value)
        print("Optimize provider:", data.optimize_provider_id.value)
        print("Answered questions:", len(data.questions or []))

    try:
        result = await engine.generate_prompts(data)
    except PipelineError as err:
        logger.error("Prompt generation failed: %s", err)
        return error_response(500, err.user_message)

    return result.model_dump(by_alias=True)
