"""
Routers Module

API routers for the Voice Form Filler application.
"""

from .forms import router as forms_router
from .voice_agent import router as voice_agent_router

__all__ = ["forms_router", "voice_agent_router"]
