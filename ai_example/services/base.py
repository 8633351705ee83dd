"""Shared capability interface for all TongYi services.

Architectural role:
    One interface, many implementations. The HTTP adapter holds one instance per
    qualifier (see `registry`) and calls only the method that instance implements.
    Methods that a concrete class does not override raise `NotImplementedError`.
"""

from typing import Dict, List

from ai_example.llm.client import DashScopeClient
from ai_example.services.models import ActorsFilms, AssistantMessage, Completion, ImageResponse


class TongYiService:
    """Base class for capability services bound to a `DashScopeClient`."""

    def __init__(self, client: DashScopeClient):
        self.client = client

    def _unsupported(self, operation: str):
        return NotImplementedError(f"{type(self).__name__} does not support {operation}")

    def completion(self, message: str) -> str:
        raise self._unsupported("completion")

    def stream_completion(self, message: str) -> Dict[str, str]:
        raise self._unsupported("stream_completion")

    def gen_output_parse(self, actor: str) -> ActorsFilms:
        raise self._unsupported("gen_output_parse")

    def gen_prompt_templates(self, adjective: str, topic: str) -> AssistantMessage:
        raise self._unsupported("gen_prompt_templates")

    def gen_role(self, message: str, name: str, voice: str) -> AssistantMessage:
        raise self._unsupported("gen_role")

    def stuff_completion(self, message: str, stuffit: bool) -> Completion:
        raise self._unsupported("stuff_completion")

    def gen_img(self, img_prompt: str) -> ImageResponse:
        raise self._unsupported("gen_img")

    def gen_audio(self, prompt: str) -> str:
        raise self._unsupported("gen_audio")

    def audio_transcription(self, url: str) -> str:
        raise self._unsupported("audio_transcription")

    def text_embedding(self, text: str) -> List[float]:
        raise self._unsupported("text_embedding")
