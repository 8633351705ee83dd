"""Text embedding service (`/ai/textEmbedding`).

Providers:
    - `dashscope` (default): remote embeddings endpoint via `DashScopeClient.embed`.
    - `local`: a shared `SentenceTransformer` instance, loaded once on first use.
      CUDA is used only when enough free VRAM is available; otherwise CPU.

`torch` and `sentence_transformers` are imported lazily so the remote provider
does not need them installed (`pip install .[local-embeddings]`).
"""

import logging
import os
import threading
from typing import List

from ai_example.llm import provider_config as config
from ai_example.services.base import TongYiService


logger = logging.getLogger(__name__)

_model = None
_model_lock = threading.Lock()


def has_enough_vram(min_required_mb: int = 800) -> bool:
    """Return whether CUDA is available with more than `min_required_mb` free."""
    import torch

    if not torch.cuda.is_available():
        return False

    free_mem, _ = torch.cuda.mem_get_info()
    free_mb = free_mem / 1024 / 1024

    logger.info("Free VRAM: %.0f MB", free_mb)

    return free_mb > min_required_mb


def get_model(model_name: str = config.LOCAL_EMBED_MODEL):
    """Load and cache the shared local embedding model.

    Concurrent first calls from the request threadpool load the model once;
    the lock is held for the whole load.

    Side effects:
        Sets `CUDA_VISIBLE_DEVICES=""` when falling back to CPU.
    """
    global _model

    if _model is not None:
        return _model

    with _model_lock:
        if _model is not None:
            return _model

        logger.info("Loading embedding model %s", model_name)

        try:
            use_gpu = has_enough_vram()
        except ImportError:
            use_gpu = False

        if not use_gpu:
            os.environ["CUDA_VISIBLE_DEVICES"] = ""

        from sentence_transformers import SentenceTransformer

        device = "cuda" if use_gpu else "cpu"
        logger.info("Loading embeddings on %s", device.upper())

        _model = SentenceTransformer(model_name, device=device)
        return _model


class TongYiTextEmbeddingService(TongYiService):

    def __init__(self, client, provider: str = config.EMBEDDING_PROVIDER, model: str = config.EMBEDDING_MODEL):
        super().__init__(client)
        if provider not in ("dashscope", "local"):
            raise ValueError(f"Unknown embedding provider: {provider}")
        self.provider = provider
        self.model = model

    def text_embedding(self, text: str) -> List[float]:
        if self.provider == "local":
            vector = get_model().encode([text], normalize_embeddings=True)[0]
            return [float(x) for x in vector]

        return self.client.embed([text], model=self.model)[0]
