"""
Voice Agent Router

Relays free-text transcripts to the chat-completion model and returns a
structured fill instruction.

Endpoints:
    GET /api/health - Server status and upstream credential check
    POST /api/voice-agent - Interpret a transcript
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core.dependencies import get_voice_agent_service
from core.schemas import FillInstruction, HealthResponse, VoiceAgentRequest
from services.ai.voice_agent import VoiceAgentService
from utils.logging import get_logger
from utils.rate_limit import limiter, RATE_LIMITS

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Voice Agent"])


@router.get("/health", response_model=HealthResponse)
async def health(service: VoiceAgentService = Depends(get_voice_agent_service)):
    """Report that the server is up and whether an OpenAI key is configured."""
    return HealthResponse(
        status="ok",
        message="Voice AI server is running",
        openaiConfigured=service.is_configured,
    )


@router.post(
    "/voice-agent",
    summary="Interpret a voice transcript",
    responses={
        200: {
            "description": "Fill instruction (degraded to the raw transcript on upstream failure)",
            "content": {
                "application/json": {
                    "example": {
                        "action": "replace",
                        "value": "John Smith",
                        "type": "text",
                        "confidence": 0.95
                    }
                }
            }
        },
        400: {"description": "Missing transcript; body is a zero-confidence instruction"}
    }
)
@limiter.limit(RATE_LIMITS["voice"])
async def voice_agent(
    request: Request,
    payload: VoiceAgentRequest,
    service: VoiceAgentService = Depends(get_voice_agent_service),
):
    """
    Map a transcript to one of replace / append / clear.

    Upstream and parsing failures never surface as errors: the response is
    then {"action": "replace", "value": <transcript>, "type": "text",
    "confidence": 0.5} plus an "error" message.
    """
    if not payload.transcript:
        logger.warning("Voice agent called without a transcript")
        return JSONResponse(
            status_code=400,
            content=FillInstruction.missing_transcript().model_dump(),
        )

    instruction = await service.interpret(payload.transcript, payload.prompt)
    return instruction.model_dump(exclude_none=True)
