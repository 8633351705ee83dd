"""
HTTP API adapter for the TongYi capability services.

Architectural role:
- Expose one GET route per capability under the `/ai` prefix.
- Resolve each route's service by qualifier from `app.state.services`.
- Translate the transcription route's validation and wrapped failures to HTTP.

Endpoint responsibilities:
- `/example`, `/audio/speech`, `/audio/transcription`: text/plain responses.
- `/stream`, `/output`, `/prompt-tmpl`, `/roles`, `/stuff`, `/img`,
  `/textEmbedding`: JSON responses.

Input validation behavior:
- Only `/audio/transcription` validates its input (`is_valid_audio_url`).
  Rejected URLs -> HTTP 400 before the service is called.
- Every other parameter is passed through unchanged; absent or empty parameters take
  the documented default.

Error handling strategy:
- Transcription service failures are logged and re-raised as
  `TranscriptionFailedError` (cause chained) -> HTTP 500.
- Failures on all other routes are not wrapped here and follow FastAPI
  default exception handling.

Cross-origin:
- `CORSMiddleware` is installed for all routes (`CORS_ALLOW_ORIGINS`).
"""

import logging
from typing import Dict, List, Mapping

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import TypeAdapter, ValidationError

from ai_example.api.validation import (
    InvalidAudioUrlError,
    TranscriptionFailedError,
    is_valid_audio_url,
)
from ai_example.llm.provider_config import CORS_ALLOW_ORIGINS
from ai_example.services import registry
from ai_example.services.base import TongYiService
from ai_example.services.models import ActorsFilms, AssistantMessage, Completion, ImageResponse


logger = logging.getLogger(__name__)

# ============================================================
# Parameter defaults
# ============================================================

DEFAULT_MESSAGE = "Tell me a joke"
DEFAULT_STREAM_MESSAGE = "请告诉我西红柿炖牛腩怎么做？"
DEFAULT_ACTOR = "Jeff Bridges"
DEFAULT_ADJECTIVE = "funny"
DEFAULT_TOPIC = "cows"
DEFAULT_ROLES_MESSAGE = (
    "Tell me about three famous pirates from the Golden Age of Piracy and why they did.  "
    "Write at least a sentence for each pirate."
)
DEFAULT_NAME = "bot"
DEFAULT_VOICE = "pirate"
DEFAULT_STUFF_MESSAGE = (
    "Which athletes won the mixed doubles gold medal in curling at the 2022 Winter Olympics?"
)
DEFAULT_IMG_PROMPT = "Painting a picture of blue water and blue sky."
DEFAULT_SPEECH_PROMPT = "你好，Spring Cloud Alibaba AI 框架！"
DEFAULT_AUDIO_URL = (
    "https://dashscope.oss-cn-beijing.aliyuncs.com/samples/audio/paraformer/realtime_asr_example.wav"
)
DEFAULT_EMBEDDING_TEXT = "Spring Cloud Alibaba AI 框架！"


# ============================================================
# Service resolution
# ============================================================

def service(qualifier: str):
    """Build a dependency returning the startup-built service for `qualifier`."""

    def resolve(request: Request) -> TongYiService:
        return request.app.state.services[qualifier]

    return resolve


# ============================================================
# Transcription guard
# ============================================================

def transcribe(transcription_service: TongYiService, url: str) -> str:
    """Validate `url`, then delegate to the transcription service.

    Raises:
        InvalidAudioUrlError: `url` is not `https?://.+\\.wav`; no call is made.
        TranscriptionFailedError: the service raised; the original error is
            available as `__cause__`.
    """
    if not is_valid_audio_url(url):
        raise InvalidAudioUrlError()

    try:
        return transcription_service.audio_transcription(url)
    except Exception as err:
        logger.error("Failed to transcribe audio: %s", err)
        raise TranscriptionFailedError() from err


# ============================================================
# Parameter fallback
# ============================================================
# A parameter sent empty (`?message=`) takes its default, same as one left out.

_FLAG = TypeAdapter(bool)


def or_default(value: str | None, default: str) -> str:
    """Return `value`, or `default` when it is missing or empty."""
    return value or default


def parse_flag(name: str, value: str | None, default: bool) -> bool:
    """Parse a boolean query value; missing or empty means `default`.

    Raises:
        HTTPException: 422 when a non-empty value is not a boolean.
    """
    if not value:
        return default
    try:
        return _FLAG.validate_python(value)
    except ValidationError as err:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid boolean value for '{name}': {value!r}",
        ) from err


# ============================================================
# Routes
# ============================================================

router = APIRouter(prefix="/ai")


@router.get("/example", response_class=PlainTextResponse)
def completion(
    message: str | None = Query(None, description=f"Defaults to {DEFAULT_MESSAGE!r}"),
    svc: TongYiService = Depends(service(registry.SIMPLE)),
):
    """Complete `message` and return the reply as plain text."""
    return svc.completion(or_default(message, DEFAULT_MESSAGE))


@router.get("/stream", response_model=Dict[str, str])
def stream_completion(
    message: str | None = Query(None, description=f"Defaults to {DEFAULT_STREAM_MESSAGE!r}"),
    svc: TongYiService = Depends(service(registry.SIMPLE)),
):
    """Stream a completion of `message` and return `{message: full_text}`."""
    return svc.stream_completion(or_default(message, DEFAULT_STREAM_MESSAGE))


@router.get("/output", response_model=ActorsFilms)
def generate_output(
    actor: str | None = Query(None, description=f"Defaults to {DEFAULT_ACTOR!r}"),
    svc: TongYiService = Depends(service(registry.OUTPUT_PARSE)),
):
    """Return five films for `actor` as structured output."""
    return svc.gen_output_parse(or_default(actor, DEFAULT_ACTOR))


@router.get("/prompt-tmpl", response_model=AssistantMessage)
def prompt_template(
    adjective: str | None = Query(None, description=f"Defaults to {DEFAULT_ADJECTIVE!r}"),
    topic: str | None = Query(None, description=f"Defaults to {DEFAULT_TOPIC!r}"),
    svc: TongYiService = Depends(service(registry.PROMPT_TEMPLATE)),
):
    """Tell a joke rendered from the `adjective`/`topic` template."""
    return svc.gen_prompt_templates(
        or_default(adjective, DEFAULT_ADJECTIVE),
        or_default(topic, DEFAULT_TOPIC),
    )


@router.get("/roles", response_model=AssistantMessage)
def roles(
    message: str | None = Query(None, description="Defaults to a question about famous pirates"),
    name: str | None = Query(None, description=f"Defaults to {DEFAULT_NAME!r}"),
    voice: str | None = Query(None, description=f"Defaults to {DEFAULT_VOICE!r}"),
    svc: TongYiService = Depends(service(registry.ROLES)),
):
    """Answer `message` as an assistant called `name` speaking like a `voice`."""
    return svc.gen_role(
        or_default(message, DEFAULT_ROLES_MESSAGE),
        or_default(name, DEFAULT_NAME),
        or_default(voice, DEFAULT_VOICE),
    )


@router.get("/stuff", response_model=Completion)
def stuff(
    message: str | None = Query(None, description="Defaults to a 2022 Olympic curling question"),
    stuffit: str | None = Query(None, description="Inject the curling document; defaults to false"),
    svc: TongYiService = Depends(service(registry.STUFF)),
):
    """Answer `message`, optionally with the bundled document as context."""
    return svc.stuff_completion(
        or_default(message, DEFAULT_STUFF_MESSAGE),
        parse_flag("stuffit", stuffit, False),
    )


@router.get("/img", response_model=ImageResponse)
def gen_img(
    prompt: str | None = Query(None, description=f"Defaults to {DEFAULT_IMG_PROMPT!r}"),
    svc: TongYiService = Depends(service(registry.IMAGES)),
):
    """Generate images for `prompt`."""
    return svc.gen_img(or_default(prompt, DEFAULT_IMG_PROMPT))


@router.get("/audio/speech", response_class=PlainTextResponse)
def gen_audio(
    prompt: str | None = Query(None, description=f"Defaults to {DEFAULT_SPEECH_PROMPT!r}"),
    svc: TongYiService = Depends(service(registry.AUDIO_SIMPLE)),
):
    """Synthesize speech for `prompt` and return the saved file path."""
    return svc.gen_audio(or_default(prompt, DEFAULT_SPEECH_PROMPT))


@router.get("/audio/transcription", response_class=PlainTextResponse, status_code=200)
def audio_transcription(
    url: str | None = Query(None, alias="audioUrls", description="Defaults to a sample .wav"),
    svc: TongYiService = Depends(service(registry.AUDIO_TRANSCRIPTION)),
):
    """Transcribe the `.wav` file at `audioUrls` to plain text."""
    return transcribe(svc, or_default(url, DEFAULT_AUDIO_URL))


@router.get("/textEmbedding", response_model=List[float])
def text_embedding(
    text: str | None = Query(None, description=f"Defaults to {DEFAULT_EMBEDDING_TEXT!r}"),
    svc: TongYiService = Depends(service(registry.TEXT_EMBEDDING)),
):
    """Return the embedding vector of `text`."""
    return svc.text_embedding(or_default(text, DEFAULT_EMBEDDING_TEXT))


# ============================================================
# Error translation
# ============================================================

async def invalid_audio_url_handler(request: Request, exc: InvalidAudioUrlError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def transcription_failed_handler(request: Request, exc: TranscriptionFailedError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# ============================================================
# Application factory
# ============================================================

def create_app(services: Mapping[str, TongYiService] | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        services: Qualifier -> service mapping. Built from
            `registry.SERVICE_REGISTRY` with a shared `DashScopeClient` when omitted.

    Raises:
        KeyError: a qualifier used by the routes has no service.
    """
    services = dict(services) if services is not None else registry.build_services()
    registry.check_services(services)

    app = FastAPI(title="TongYi AI Example", version="0.1.0")
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(InvalidAudioUrlError, invalid_audio_url_handler)
    app.add_exception_handler(TranscriptionFailedError, transcription_failed_handler)
    app.include_router(router)

    logger.debug("Registered services: %s", ", ".join(sorted(services)))
    return app
