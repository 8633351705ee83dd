"""Qualifier-to-implementation table for the capability services.

Every route asks for its service by qualifier name. The table is resolved once
at application startup by `build_services`; nothing is looked up per request
except the already-built instance.
"""

from typing import Dict, Mapping

from ai_example.llm.client import DashScopeClient
from ai_example.services.audio import TongYiAudioSimpleService, TongYiAudioTranscriptionService
from ai_example.services.base import TongYiService
from ai_example.services.embedding import TongYiTextEmbeddingService
from ai_example.services.images import TongYiImagesService
from ai_example.services.output_parse import TongYiOutputParseService
from ai_example.services.prompt_template import TongYiPromptTemplateService
from ai_example.services.roles import TongYiRolesService
from ai_example.services.simple import TongYiSimpleService
from ai_example.services.stuff import TongYiStuffService


SIMPLE = "tongYiSimpleServiceImpl"
OUTPUT_PARSE = "tongYiOutputParseServiceImpl"
PROMPT_TEMPLATE = "tongYiPromptTemplateServiceImpl"
ROLES = "tongYiRolesServiceImpl"
STUFF = "tongYiStuffServiceImpl"
IMAGES = "tongYiImagesServiceImpl"
AUDIO_SIMPLE = "tongYiAudioSimpleServiceImpl"
AUDIO_TRANSCRIPTION = "tongYiAudioTranscriptionServiceImpl"
TEXT_EMBEDDING = "tongYiTextEmbeddingServiceImpl"

SERVICE_REGISTRY: Dict[str, type] = {
    SIMPLE: TongYiSimpleService,
    OUTPUT_PARSE: TongYiOutputParseService,
    PROMPT_TEMPLATE: TongYiPromptTemplateService,
    ROLES: TongYiRolesService,
    STUFF: TongYiStuffService,
    IMAGES: TongYiImagesService,
    AUDIO_SIMPLE: TongYiAudioSimpleService,
    AUDIO_TRANSCRIPTION: TongYiAudioTranscriptionService,
    TEXT_EMBEDDING: TongYiTextEmbeddingService,
}


def build_services(
    client: DashScopeClient | None = None,
    registry: Mapping[str, type] = SERVICE_REGISTRY,
) -> Dict[str, TongYiService]:
    """Instantiate one service per qualifier, all sharing a single client."""
    client = client or DashScopeClient()
    return {qualifier: service_cls(client) for qualifier, service_cls in registry.items()}


def check_services(services: Mapping[str, TongYiService]) -> None:
    """Fail fast when a qualifier used by the routes has no implementation.

    Raises:
        KeyError: listing the missing qualifiers.
    """
    missing = sorted(set(SERVICE_REGISTRY) - set(services))
    if missing:
        raise KeyError(f"No service registered for qualifier(s): {', '.join(missing)}")
