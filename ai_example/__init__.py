"""TongYi AI example controller.

Architectural role:
    Exposes DashScope (TongYi / Qwen) capabilities as thin HTTP endpoints.

Package split:
    - `llm`: provider configuration and the DashScope HTTP transport.
    - `prompting`: prompt templates and bundled context documents.
    - `services`: one `TongYiService` implementation per capability.
    - `api`: FastAPI adapter, request validation, and process entrypoint.
"""
