"""
Core Module

Provides schemas and dependencies for the application.
"""

from .schemas import FillInstruction, VoiceAgentRequest, HealthResponse
from .dependencies import (
    get_voice_agent_service,
    get_session_store,
    get_initialized_services,
)

__all__ = [
    # Schemas
    "FillInstruction",
    "VoiceAgentRequest",
    "HealthResponse",
    # Dependencies
    "get_voice_agent_service",
    "get_session_store",
    "get_initialized_services",
]
