"""Plain and streaming completion service (`/ai/example`, `/ai/stream`)."""

import logging
from typing import Dict

from ai_example.services.base import TongYiService


logger = logging.getLogger(__name__)


class TongYiSimpleService(TongYiService):

    def completion(self, message: str) -> str:
        return self.client.chat([{"role": "user", "content": message}])

    def stream_completion(self, message: str) -> Dict[str, str]:
        """Consume the streamed reply and return it keyed by the prompt.

        Each delta is logged at DEBUG as it arrives; the caller gets the
        concatenated text once the stream ends.
        """
        parts = []
        for delta in self.client.stream_chat([{"role": "user", "content": message}]):
            logger.debug("stream delta: %r", delta)
            parts.append(delta)

        return {message: "".join(parts)}
