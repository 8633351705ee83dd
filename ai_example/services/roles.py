"""Role-based chat service (`/ai/roles`).

The persona is set with a system message rendered from `name` and `voice`; the
user's message follows unchanged.
"""

from ai_example.prompting.templates import ROLE_SYSTEM_TEMPLATE, render
from ai_example.services.base import TongYiService
from ai_example.services.models import AssistantMessage


class TongYiRolesService(TongYiService):

    def gen_role(self, message: str, name: str, voice: str) -> AssistantMessage:
        messages = [
            {"role": "system", "content": render(ROLE_SYSTEM_TEMPLATE, name=name, voice=voice)},
            {"role": "user", "content": message},
        ]
        reply = self.client.chat(messages)
        return AssistantMessage(content=reply, properties={"name": name, "voice": voice})
