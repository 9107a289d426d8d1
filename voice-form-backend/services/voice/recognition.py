"""
Speech recognition engine state.

Transcription itself happens in the browser (Web Speech API); the backend
only tracks whether a recognition session is running so that a second one
cannot start on top of it.
"""

from utils.exceptions import RecognitionBusyError


class RecognitionEngine:
    """One engine per form session; at most one active recognition."""

    def __init__(self, lang: str = "en-US"):
        self.lang = lang
        self.active = False

    def start(self) -> None:
        if self.active:
            raise RecognitionBusyError(details={"lang": self.lang})
        self.active = True

    def stop(self) -> None:
        self.active = False
