"""
Voice Agent Service

Maps a free-text transcript to a FillInstruction by asking an
OpenAI-compatible chat-completion model for a JSON action.

Every upstream or parsing failure is absorbed: the caller always receives
an instruction, degraded to "replace with the transcript" at confidence
0.5 when the model output cannot be used.

Usage:
    from services.ai.voice_agent import VoiceAgentService

    service = VoiceAgentService(api_key="sk-...")
    instruction = await service.interpret("add incorporated")
"""

import json
import time
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from config.constants import DEFAULT_MODEL_CONFIDENCE
from core.schemas import FillInstruction
from services.ai.prompts.fill_prompts import build_messages
from utils.exceptions import AIServiceError
from utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class VoiceAgentService:
    """
    Server side of the remote interpretation step.

    Args:
        api_key: OpenAI API key; without one every call degrades
        model: Chat-completion model name
        temperature: Sampling temperature
        max_tokens: Completion token cap
        base_url: Optional OpenAI-compatible endpoint
        client: Pre-built AsyncOpenAI client (tests inject a mock)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        max_tokens: int = 150,
        base_url: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = client
        if self.client is None and api_key:
            self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)

        if self.client is None:
            logger.warning("OPENAI_API_KEY not configured - voice commands fall back to raw transcripts")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def interpret(self, transcript: str, prompt: Optional[str] = None) -> FillInstruction:
        """
        Interpret one transcript.

        Args:
            transcript: Finalized speech transcript
            prompt: Optional system prompt replacing the default rules

        Returns:
            FillInstruction: Model instruction, or the degraded fallback
        """
        if not transcript:
            return FillInstruction.missing_transcript()

        logger.info(f"📝 Received transcript: {transcript}")

        try:
            output = await self._complete(transcript, prompt)
        except AIServiceError as e:
            logger.error(f"❌ OpenAI API error: {e.message}")
            return FillInstruction.fallback(transcript, error=e.message)

        logger.info(f"🤖 AI response: {output}")
        instruction = parse_model_output(output, transcript)
        logger.info(f"✅ Sending response: {instruction.model_dump(exclude_none=True)}")
        return instruction

    async def _complete(self, transcript: str, prompt: Optional[str]) -> str:
        if self.client is None:
            raise AIServiceError("OPENAI_API_KEY not configured", service="openai")

        start = time.perf_counter()
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(transcript, prompt),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except (openai.APIError, httpx.HTTPError) as e:
            log_api_call("OpenAI", "chat.completions", success=False, error=str(e))
            raise AIServiceError(str(e), service="openai") from e

        duration_ms = (time.perf_counter() - start) * 1000

        if not completion.choices:
            raise AIServiceError("AI returned no choices", service="openai")
        content = completion.choices[0].message.content
        if content is None:
            raise AIServiceError("AI returned empty response", service="openai")

        log_api_call("OpenAI", "chat.completions", success=True, duration_ms=duration_ms)
        return content.strip()


def parse_model_output(output: str, transcript: str) -> FillInstruction:
    """
    Turn raw model output into a FillInstruction.

    Missing keys are defaulted (action "replace", value = transcript, type
    "text", confidence 0.7). Output that is not a JSON object, or whose
    fields cannot be validated, yields the degraded fallback.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        logger.error(f"❌ JSON parse error: {e}")
        return FillInstruction.fallback(transcript)

    if not isinstance(data, dict):
        logger.error(f"❌ Model returned {type(data).__name__}, expected an object")
        return FillInstruction.fallback(transcript)

    if not data.get("action"):
        data["action"] = "replace"
    if "value" not in data:
        data["value"] = transcript
    if not data.get("type"):
        data["type"] = "text"
    if "confidence" not in data:
        data["confidence"] = DEFAULT_MODEL_CONFIDENCE

    try:
        return FillInstruction.model_validate(data)
    except ValidationError as e:
        logger.error(f"❌ Invalid instruction from model: {e.error_count()} error(s)")
        return FillInstruction.fallback(transcript)
