"""Structured output service (`/ai/output`).

Flow:
    actor -> filmography prompt with JSON-schema format instructions ->
    chat reply -> code-fence stripping -> `ActorsFilms` validation.
"""

import json
import re

from pydantic import ValidationError

from ai_example.prompting.templates import FILMOGRAPHY_TEMPLATE, FORMAT_INSTRUCTIONS, render
from ai_example.services.base import TongYiService
from ai_example.services.models import ActorsFilms


_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


class OutputParseError(ValueError):
    """Raised when the model reply does not validate as the requested structure."""


def format_instructions(model_cls) -> str:
    """Describe the JSON shape the model must return for `model_cls`."""
    schema = json.dumps(model_cls.model_json_schema(), indent=2)
    return render(FORMAT_INSTRUCTIONS, schema=schema)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, if the model added one anyway."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text


def parse_output(text: str, model_cls):
    try:
        return model_cls.model_validate_json(strip_code_fence(text))
    except ValidationError as err:
        raise OutputParseError(f"Model output is not a valid {model_cls.__name__}") from err


class TongYiOutputParseService(TongYiService):

    def gen_output_parse(self, actor: str) -> ActorsFilms:
        prompt = render(
            FILMOGRAPHY_TEMPLATE,
            actor=actor,
            format=format_instructions(ActorsFilms),
        )
        reply = self.client.chat([{"role": "user", "content": prompt}])
        return parse_output(reply, ActorsFilms)
