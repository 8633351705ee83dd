"""Capability services package.

Scope:
    One `TongYiService` implementation per DashScope capability, plus the
    qualifier registry the HTTP adapter resolves them from at startup.

Non-goals:
    - No HTTP request parsing or validation (see `ai_example.api`).
    - No retry/backoff around provider calls.
"""
