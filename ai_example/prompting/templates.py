"""Prompt templates used by the capability services.

This module only builds prompt strings from request parameters. Model invocation
and response shaping happen in `ai_example.services`.

Design constraints:
    - Deterministic construction for identical inputs.
    - User text is interpolated as a raw string, without escaping.
"""

from importlib import resources


# =========================================================
# PROMPT TEMPLATE ROUTE
# =========================================================

JOKE_TEMPLATE = "Tell me a {adjective} joke about {topic}."


# =========================================================
# ROLES ROUTE
# =========================================================
# System message sent ahead of the user's message.

ROLE_SYSTEM_TEMPLATE = (
    "You are a helpful AI assistant.\n"
    "You are an AI assistant that helps people find information.\n"
    "Your name is {name}\n"
    "You should reply to the user's request with your name and also in the style of a {voice}.\n"
)


# =========================================================
# OUTPUT PARSE ROUTE
# =========================================================

FILMOGRAPHY_TEMPLATE = (
    "Generate the filmography of 5 movies for {actor}.\n"
    "{format}"
)

FORMAT_INSTRUCTIONS = (
    "Your response should be in JSON format.\n"
    "Do not include any explanations, only provide a RFC8259 compliant JSON response "
    "following this format without deviation.\n"
    "Do not include markdown code blocks in your response.\n"
    "Here is the JSON Schema instance your output must adhere to:\n"
    "```{schema}```\n"
)


# =========================================================
# STUFF ROUTE
# =========================================================
# Context is empty unless the caller asks for the bundled document.

QA_TEMPLATE = (
    "Use the following pieces of context to answer the question at the end. "
    "If you don't know the answer, just say that you don't know, "
    "don't try to make up an answer.\n\n"
    "{context}\n\n"
    "Question: {question}\n"
    "Helpful Answer:"
)

CURLING_DOC = "wikipedia-curling.md"


def render(template: str, **values) -> str:
    """Fill a template's `{placeholders}` with the given values."""
    return template.format(**values)


def load_doc(name: str) -> str:
    """Read a bundled context document from `ai_example/prompting/docs`."""
    return resources.files("ai_example.prompting").joinpath("docs", name).read_text(encoding="utf-8")
