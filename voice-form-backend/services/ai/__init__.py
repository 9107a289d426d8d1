# AI services module

from .voice_agent import VoiceAgentService, parse_model_output

__all__ = [
    "VoiceAgentService",
    "parse_model_output",
]
