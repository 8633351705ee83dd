"""
Process entrypoint for the TongYi AI example controller.

Startup sequence:
1. Configure root logging at `LOG_LEVEL`.
2. Build every capability service once (`create_app`).
3. Serve the application with uvicorn on `HOST`:`PORT`.

Run with `ai-example` (console script) or `python -m ai_example.api.main`.
"""

import logging

import uvicorn

from ai_example.api.http_api import create_app
from ai_example.llm.provider_config import HOST, LOG_LEVEL, PORT


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(), host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
