"""Core orchestration package.

Architectural role:
    Exposes the generation layer that sits between API/CLI entrypoints and the
    LLM adapters.

Composition:
    - `engine`: question generation and draft -> optimize prompt generation.
    - `contracts`: request/response schemas shared with the API and adapters.
    - `errors`: failure taxonomy raised by the engine.
    - `json_extraction`: greedy JSON-object extraction from model replies.

Determinism and side effects:
    Package import itself is side-effect free. Network side effects happen only
    inside `engine` operations through `app.llm.service.invoke`.
"""
