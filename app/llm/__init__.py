"""LLM access package.

Architectural role:
    Provides provider configuration, vendor transport adapters, and the uniform
    invocation entrypoint used by the generation engine.

Module split:
    - `provider_config`: endpoints, sampling defaults, provider resolution table.
    - `client`: one adapter per vendor family, wire formats and response parsing.
    - `service`: `invoke`, the no-throw dispatch boundary.
"""
