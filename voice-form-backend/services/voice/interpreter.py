"""
Voice Command Interpreter

Applies spoken commands to the region the user double-clicked.

State machine:
    idle -> listening      double-click captures the target region and
                           starts the recognition engine (dashed border
                           cue for 3 seconds)
    listening -> interpreting   first finalized transcript is sent to the
                                fill agent
    interpreting -> applying    instruction applied to the captured target
    applying -> idle

Recognition errors are logged and return the machine to idle without
touching the region; nothing retries automatically.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from config.constants import (
    CONFIDENCE_APPLY_THRESHOLD,
    LISTENING_BORDER,
    LISTENING_CUE_SECONDS,
    SUCCESS_FLASH_COLOR,
    SUCCESS_FLASH_SECONDS,
)
from core.schemas import FillInstruction
from services.form.regions import InteractionContext, TextRegion
from services.voice.recognition import RecognitionEngine
from utils.exceptions import RecognitionBusyError
from utils.logging import get_logger

logger = get_logger(__name__)


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    INTERPRETING = "interpreting"
    APPLYING = "applying"


class FillAgent(Protocol):
    """Anything that can turn a transcript into a FillInstruction."""

    async def interpret(self, transcript: str, prompt: Optional[str] = None) -> FillInstruction:
        ...


@dataclass
class VoiceResult:
    instruction: FillInstruction
    applied: bool
    region: TextRegion


def apply_instruction(region: TextRegion, instruction: FillInstruction) -> bool:
    """
    Mutate ``region`` according to ``instruction``.

    Only instructions with confidence strictly above the threshold are
    applied. Unknown actions and frozen regions are left untouched.

    Returns:
        bool: True if the region content was changed by an action
    """
    if instruction.confidence <= CONFIDENCE_APPLY_THRESHOLD:
        logger.info(f"Low confidence ({instruction.confidence}), {region.region_id} left unchanged")
        return False

    if region.frozen:
        logger.debug(f"Region {region.region_id} holds an image, instruction ignored")
        return False

    if instruction.action == "replace":
        region.set_text(instruction.value)
    elif instruction.action == "append":
        region.set_text(f"{region.text} {instruction.value}".strip())
    elif instruction.action == "clear":
        region.set_text("")
    else:
        logger.debug(f"Unknown action '{instruction.action}' ignored")
        return False

    return True


class VoiceCommandInterpreter:
    """
    Per-session voice input driver.

    Args:
        agent: Fill agent consulted for every transcript
        engine: Recognition engine of this session
        prompt: Default instruction prompt forwarded to the agent
    """

    def __init__(
        self,
        agent: FillAgent,
        engine: Optional[RecognitionEngine] = None,
        prompt: Optional[str] = None,
    ):
        self.agent = agent
        self.engine = engine or RecognitionEngine()
        self.prompt = prompt
        self.state = VoiceState.IDLE
        self.target: Optional[TextRegion] = None

    def start_listening(self, region: TextRegion, context: InteractionContext) -> bool:
        """Capture ``region`` and start recognition."""
        self.target = region
        try:
            self.engine.start()
        except RecognitionBusyError as e:
            logger.error(f"Voice input error: {e.message}")
            return False

        self.state = VoiceState.LISTENING
        region.show_cue(context, "border", LISTENING_BORDER, LISTENING_CUE_SECONDS)
        logger.info(f"🎤 Listening for {region.region_id}")
        return True

    async def handle_transcript(
        self,
        transcript: str,
        context: InteractionContext,
        prompt: Optional[str] = None,
    ) -> Optional[VoiceResult]:
        """
        Interpret a finalized transcript and apply it to the captured target.

        Returns:
            Optional[VoiceResult]: None when no region has been captured
        """
        target = self.target
        if target is None:
            logger.debug("Transcript received with no target region, ignoring")
            return None

        transcript = (transcript or "").strip()
        try:
            self.state = VoiceState.INTERPRETING
            instruction = await self.agent.interpret(transcript, prompt or self.prompt)

            self.state = VoiceState.APPLYING
            applied = apply_instruction(target, instruction)
            if applied:
                target.show_cue(context, "background-color", SUCCESS_FLASH_COLOR, SUCCESS_FLASH_SECONDS)
        finally:
            self.state = VoiceState.IDLE
            self.engine.stop()

        return VoiceResult(instruction=instruction, applied=applied, region=target)

    def handle_error(self, error: str) -> None:
        """Record an engine failure; the region is left as it was."""
        logger.error(f"Speech recognition error: {error}")
        self.state = VoiceState.IDLE
        self.engine.stop()
