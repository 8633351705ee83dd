"""DashScope access package.

Architectural role:
    Provides provider configuration and the transport client used by the
    capability services to call the DashScope platform.

Module split:
    - `provider_config`: environment-driven endpoints, model names, key lookup.
    - `client`: HTTP transport, SSE streaming, and async-task polling.
"""
