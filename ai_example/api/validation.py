"""Request validation and error types for the audio transcription route.

The accepted URL set is exactly `https?://.+\\.wav`, matched against the whole
string and case sensitive. Nothing else is normalized or checked.
"""

import re


AUDIO_URL_PATTERN = re.compile(r"https?://.+\.wav")


class InvalidAudioUrlError(ValueError):
    """Raised before any provider call when the audio URL is rejected."""

    def __init__(self, message: str = "Invalid URL provided."):
        super().__init__(message)


class TranscriptionFailedError(RuntimeError):
    """Wraps any failure of the transcription service; the cause is chained."""

    def __init__(self, message: str = "Failed to process audio transcription."):
        super().__init__(message)


def is_valid_audio_url(url: str) -> bool:
    return AUDIO_URL_PATTERN.fullmatch(url) is not None
