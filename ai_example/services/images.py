"""Image synthesis service (`/ai/img`).

Processing flow:
    1. Build a text-to-image payload from the prompt and configured model/size.
    2. Submit an async synthesis task.
    3. Poll the task until completion (see `DashScopeClient.wait_for_task`).
    4. Map each successful result url to an `ImageGeneration`.

Error handling strategy:
    - Task failure or timeout raises `TaskFailedError` from the client.
    - A finished task without any image url raises `DashScopeError`.
    - Partial failures (some results carrying `code`/`message`) are dropped from
      `results` and counted in `metadata["failed"]`.
"""

import logging

from ai_example.llm import provider_config as config
from ai_example.llm.client import DashScopeError
from ai_example.services.base import TongYiService
from ai_example.services.models import ImageGeneration, ImageResponse


logger = logging.getLogger(__name__)


class TongYiImagesService(TongYiService):

    def __init__(self, client, model: str = config.IMAGE_MODEL, size: str = config.IMAGE_SIZE, n: int = 1):
        super().__init__(client)
        self.model = model
        self.size = size
        self.n = n

    def gen_img(self, img_prompt: str) -> ImageResponse:
        payload = {
            "model": self.model,
            "input": {"prompt": img_prompt},
            "parameters": {"size": self.size, "n": self.n},
        }

        output = self.client.run_task(config.ENDPOINTS["image_synthesis"], payload)

        results = []
        failed = 0
        for item in output.get("results") or []:
            if item.get("url"):
                results.append(ImageGeneration(url=item["url"]))
            else:
                failed += 1
                logger.warning("Image result failed: %s", item.get("message") or item.get("code"))

        if not results:
            raise DashScopeError("DASHSCOPE IMAGE TASK FINISHED WITHOUT IMAGE URL")

        return ImageResponse(
            results=results,
            metadata={
                "task_id": output.get("task_id"),
                "model": self.model,
                "task_metrics": output.get("task_metrics", {}),
                "failed": failed,
            },
        )
