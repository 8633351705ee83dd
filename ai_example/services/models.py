"""Response models returned by the capability services.

These are the JSON shapes the HTTP adapter serializes for the structured routes.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class AssistantMessage(BaseModel):
    """One assistant reply from the chat model."""

    content: str
    message_type: str = Field(default="ASSISTANT", alias="messageType")
    properties: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class Completion(BaseModel):
    """Plain completion text (stuff route)."""

    completion: str


class ActorsFilms(BaseModel):
    """Structured output of the filmography prompt."""

    actor: str
    movies: List[str]


class ImageGeneration(BaseModel):
    """One generated image reference."""

    url: str | None = None
    b64_json: str | None = Field(default=None, alias="b64Json")

    model_config = {"populate_by_name": True}


class ImageResponse(BaseModel):
    """All images produced by one synthesis task plus task metadata."""

    results: List[ImageGeneration]
    metadata: Dict[str, Any] = Field(default_factory=dict)
