"""
FastAPI Dependencies Module

Provides dependency injection for services and shared state.
Service instances are singletons created lazily on first access.

Usage:
    from core.dependencies import get_session_store

    @router.get("/{session_id}")
    async def read(
        session_id: str,
        store: SessionStore = Depends(get_session_store)
    ):
        ...
"""

from typing import Any, Dict

from config.settings import settings
from utils.logging import get_logger

# Lazy imports to avoid circular dependencies
_voice_agent_service = None
_fill_agent = None
_session_store = None

logger = get_logger(__name__)


# =============================================================================
# Service Initialization
# =============================================================================

def _initialize_services() -> None:
    """
    Initialize all service singletons.

    Called lazily on first access to any service.
    Logs which fill agent the voice interpreter will use.
    """
    global _voice_agent_service, _fill_agent, _session_store

    from services.ai.voice_agent import VoiceAgentService
    from services.form.session import SessionStore
    from services.voice.agent_client import LocalVoiceAgent, VoiceAgentClient

    _voice_agent_service = VoiceAgentService(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        temperature=settings.OPENAI_TEMPERATURE,
        max_tokens=settings.OPENAI_MAX_TOKENS,
        base_url=settings.OPENAI_BASE_URL,
    )

    if settings.VOICE_AGENT_URL:
        logger.info(f"Voice commands interpreted remotely via {settings.VOICE_AGENT_URL}")
        _fill_agent = VoiceAgentClient(settings.VOICE_AGENT_URL)
    else:
        _fill_agent = LocalVoiceAgent(_voice_agent_service)

    _session_store = SessionStore(_fill_agent, ttl_minutes=settings.SESSION_TTL_MINUTES)

    logger.info("Services initialized successfully")


def _ensure_initialized() -> None:
    """Ensure services are initialized."""
    if _session_store is None:
        _initialize_services()


# =============================================================================
# Service Providers
# =============================================================================

def get_voice_agent_service():
    """
    Get VoiceAgentService singleton backing /api/voice-agent.

    Returns:
        VoiceAgentService: Chat-completion backed transcript interpreter
    """
    _ensure_initialized()
    return _voice_agent_service


def get_session_store():
    """
    Get the in-memory SessionStore singleton.

    Returns:
        SessionStore: Registry of uploaded forms
    """
    _ensure_initialized()
    return _session_store


def get_initialized_services() -> Dict[str, Any]:
    """Report which singletons exist, for the health endpoint."""
    return {
        "voice_agent": _voice_agent_service is not None,
        "fill_agent": type(_fill_agent).__name__ if _fill_agent is not None else None,
        "sessions": len(_session_store) if _session_store is not None else 0,
    }
