"""Speech synthesis and audio transcription services.

Speech (`/ai/audio/speech`):
    prompt -> speech model -> audio url -> download -> file under
    `AUDIO_OUTPUT_DIR` named `<timestamp>-output.wav`. The file path is returned.

Transcription (`/ai/audio/transcription`):
    url -> async transcription task -> poll -> fetch each `transcription_url` ->
    transcript texts joined with newlines.

Error handling strategy:
    Client errors propagate unchanged. URL validation and error wrapping for the
    transcription route live in `ai_example.api.validation`.
"""

import logging
import os
import time

from ai_example.llm import provider_config as config
from ai_example.llm.client import DashScopeError
from ai_example.services.base import TongYiService


logger = logging.getLogger(__name__)


class TongYiAudioSimpleService(TongYiService):

    def __init__(
        self,
        client,
        model: str = config.SPEECH_MODEL,
        voice: str = config.SPEECH_VOICE,
        output_dir: str = config.AUDIO_OUTPUT_DIR,
    ):
        super().__init__(client)
        self.model = model
        self.voice = voice
        self.output_dir = output_dir

    def gen_audio(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "input": {"text": prompt, "voice": self.voice},
        }
        data = self.client.post_json(self.client.native_url(config.ENDPOINTS["speech_synthesis"]), payload)

        audio_url = ((data.get("output") or {}).get("audio") or {}).get("url")
        if not audio_url:
            raise DashScopeError("DASHSCOPE SPEECH RESPONSE MISSING AUDIO URL")

        audio = self.client.download(audio_url)

        os.makedirs(self.output_dir, exist_ok=True)
        path = os.path.join(self.output_dir, f"{int(time.time() * 1000)}-output.wav")
        with open(path, "wb") as f:
            f.write(audio)

        logger.info("Saved %d bytes of synthesized audio to %s", len(audio), path)
        return path


class TongYiAudioTranscriptionService(TongYiService):

    def __init__(self, client, model: str = config.TRANSCRIPTION_MODEL):
        super().__init__(client)
        self.model = model

    def audio_transcription(self, url: str) -> str:
        payload = {
            "model": self.model,
            "input": {"file_urls": [url]},
        }
        output = self.client.run_task(config.ENDPOINTS["transcription"], payload)

        texts = []
        for result in output.get("results") or []:
            if result.get("subtask_status", "SUCCEEDED") != "SUCCEEDED":
                raise DashScopeError(
                    f"DASHSCOPE TRANSCRIPTION SUBTASK {result.get('subtask_status')}"
                )

            transcription_url = result.get("transcription_url")
            if not transcription_url:
                continue

            transcription = self.client.get_json(transcription_url, authorized=False)
            for transcript in transcription.get("transcripts") or []:
                text = (transcript.get("text") or "").strip()
                if text:
                    texts.append(text)

        if not texts:
            raise DashScopeError("DASHSCOPE TRANSCRIPTION RETURNED NO TEXT")

        return "\n".join(texts)
