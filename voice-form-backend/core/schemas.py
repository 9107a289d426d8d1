from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from config.constants import FALLBACK_CONFIDENCE


class FillInstruction(BaseModel):
    """
    Structured result of interpreting one voice transcript.

    ``action`` is normally replace / append / clear and ``type`` one of
    text / number / date / email, but neither is constrained: unknown
    actions are carried through and ignored when applied.
    """
    model_config = ConfigDict(extra="ignore")

    action: str = "replace"
    value: str = ""
    type: str = "text"
    confidence: float = 0.0
    error: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, value: Any) -> str:
        # Models answer numbers as JSON numbers
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @classmethod
    def fallback(cls, transcript: str, error: Optional[str] = None) -> "FillInstruction":
        """Degraded instruction: use the transcript verbatim."""
        return cls(
            action="replace",
            value=transcript or "",
            type="text",
            confidence=FALLBACK_CONFIDENCE,
            error=error,
        )

    @classmethod
    def missing_transcript(cls) -> "FillInstruction":
        return cls(
            action="replace",
            value="",
            type="text",
            confidence=0,
            error="Missing transcript",
        )


class VoiceAgentRequest(BaseModel):
    prompt: Optional[str] = None
    transcript: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    openaiConfigured: bool
