"""Provider/runtime configuration for the DashScope layer.

Architectural role:
    Centralizes endpoint, model, and credential lookup for `ai_example.llm.client`
    and the capability services in `ai_example.services`.

Determinism:
    Deterministic for a fixed process environment and key file. Values are resolved
    at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None` and turned into a
    `DashScopeError` by the client on first use.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Native API root (async tasks, multimodal generation) and OpenAI-compatible root.
DASHSCOPE_BASE_URL = os.getenv("DASHSCOPE_BASE_URL", "https://dashscope.aliyuncs.com/api/v1")
DASHSCOPE_COMPATIBLE_URL = os.getenv(
    "DASHSCOPE_COMPATIBLE_URL",
    "https://dashscope.aliyuncs.com/compatible-mode/v1",
)
DASHSCOPE_KEY_FILE = os.getenv("DASHSCOPE_KEY_FILE", "config/dashscope.key")

# Model routing controls, one per capability.
CHAT_MODEL = os.getenv("CHAT_MODEL", "qwen-plus")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "wanx-v1")
IMAGE_SIZE = os.getenv("IMAGE_SIZE", "1024*1024")
SPEECH_MODEL = os.getenv("SPEECH_MODEL", "qwen-tts")
SPEECH_VOICE = os.getenv("SPEECH_VOICE", "Cherry")
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "paraformer-v2")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-v3")

# "dashscope" calls the remote embeddings endpoint, "local" uses sentence-transformers.
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "dashscope").lower()
LOCAL_EMBED_MODEL = os.getenv("LOCAL_EMBED_MODEL", "intfloat/multilingual-e5-small")

# Endpoint paths relative to the roots above.
ENDPOINTS = {
    "chat": "/chat/completions",
    "embeddings": "/embeddings",
    "image_synthesis": "/services/aigc/text2image/image-synthesis",
    "speech_synthesis": "/services/aigc/multimodal-generation/generation",
    "transcription": "/services/audio/asr/transcription",
    "tasks": "/tasks/",
}

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "120"))
TASK_POLL_INTERVAL = float(os.getenv("TASK_POLL_INTERVAL", "2"))
TASK_TIMEOUT = float(os.getenv("TASK_TIMEOUT", "300"))

AUDIO_OUTPUT_DIR = os.getenv("AUDIO_OUTPUT_DIR", "output/audio")

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def load_key(path=DASHSCOPE_KEY_FILE):
    """Load the DashScope API key from environment override or key file.

    Resolution order:
        1. `DASHSCOPE_API_KEY` environment variable.
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path with no env override returns `None`.
        - Missing or empty file returns `None`.
    """
    env_value = os.getenv("DASHSCOPE_API_KEY")
    if env_value:
        return env_value
    if not path or not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
