"""
Fill agents used by the Voice Command Interpreter.

    - VoiceAgentClient: POSTs the transcript to a remote /api/voice-agent
    - LocalVoiceAgent: calls VoiceAgentService in-process

Both honour the same contract: ``interpret`` never raises and falls back to
"replace with the transcript" at confidence 0.5 on any failure.
"""

from typing import Optional

import httpx

from core.schemas import FillInstruction
from services.ai.voice_agent import VoiceAgentService
from utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class VoiceAgentClient:
    """
    HTTP client for a remote voice agent endpoint.

    The response body is read whatever the status code: the endpoint's
    400 answer is itself a (confidence 0) instruction.

    Args:
        url: Full URL of the voice agent endpoint
        client: Shared AsyncClient; a short-lived one is used when omitted
    """

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._client = client

    async def interpret(self, transcript: str, prompt: Optional[str] = None) -> FillInstruction:
        payload = {"transcript": transcript}
        if prompt:
            payload["prompt"] = prompt

        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.url, json=payload)
            instruction = FillInstruction.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers both JSON decoding and pydantic validation
            logger.error(f"AI request failed: {e}")
            log_api_call("VoiceAgent", self.url, success=False, error=str(e))
            return FillInstruction.fallback(transcript)

        logger.info(f"🤖 AI response: {instruction.model_dump(exclude_none=True)}")
        return instruction


class LocalVoiceAgent:
    """In-process fill agent backed by VoiceAgentService."""

    def __init__(self, service: VoiceAgentService):
        self.service = service

    async def interpret(self, transcript: str, prompt: Optional[str] = None) -> FillInstruction:
        return await self.service.interpret(transcript, prompt)
