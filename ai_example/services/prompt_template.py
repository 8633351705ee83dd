"""Prompt template service (`/ai/prompt-tmpl`)."""

from ai_example.prompting.templates import JOKE_TEMPLATE, render
from ai_example.services.base import TongYiService
from ai_example.services.models import AssistantMessage


class TongYiPromptTemplateService(TongYiService):

    def gen_prompt_templates(self, adjective: str, topic: str) -> AssistantMessage:
        prompt = render(JOKE_TEMPLATE, adjective=adjective, topic=topic)
        reply = self.client.chat([{"role": "user", "content": prompt}])
        return AssistantMessage(content=reply)
