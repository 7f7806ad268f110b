"""Greedy JSON-object extraction from free-text model replies.

Models are instructed to answer with JSON only, but several vendors wrap the
object in prose or code fences. The reply is therefore scanned for the span from
the first `{` to the last `}` and that span is parsed.

Known fragility:
    A reply containing two separate objects, or prose with braces after the
    object, yields a span that is not valid JSON and is reported as malformed.
"""

import json
import re
from typing import Any, Dict

from app.core.errors import MalformedAIResponse


JSON_SPAN_PATTERN = re.compile(r"\{[\s\S]*\}")


def find_json_span(text: str) -> str | None:
    """Return the greedy `{...}` span of `text`, or `None` when absent."""
    if not text:
        return None
    match = JSON_SPAN_PATTERN.search(text)
    if not match:
        return None
    return match.group(0)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the greedy JSON span of a model reply.

    Raises:
        MalformedAIResponse: no span, or the span is not valid JSON.
    """
    span = find_json_span(text)
    if span is None:
        raise MalformedAIResponse("no JSON object in model reply")

    try:
        parsed = json.loads(span)
    except json.JSONDecodeError as err:
        raise MalformedAIResponse(f"JSON parse failed: {err.msg}") from err
    except RecursionError as err:
        raise MalformedAIResponse("JSON nesting too deep") from err

    return parsed
