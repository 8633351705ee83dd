"""Context-stuffing completion service (`/ai/stuff`).

With `stuffit=True` the bundled curling document is placed in the prompt as
context, so the model can answer a question past its training cutoff. With
`stuffit=False` the same template is sent with an empty context.
"""

from ai_example.prompting.templates import CURLING_DOC, QA_TEMPLATE, load_doc, render
from ai_example.services.base import TongYiService
from ai_example.services.models import Completion


class TongYiStuffService(TongYiService):

    def __init__(self, client, doc_name: str = CURLING_DOC):
        super().__init__(client)
        self.doc_name = doc_name

    def build_prompt(self, message: str, stuffit: bool) -> str:
        context = load_doc(self.doc_name) if stuffit else ""
        return render(QA_TEMPLATE, context=context, question=message)

    def stuff_completion(self, message: str, stuffit: bool) -> Completion:
        prompt = self.build_prompt(message, stuffit)
        reply = self.client.chat([{"role": "user", "content": prompt}])
        return Completion(completion=reply)
