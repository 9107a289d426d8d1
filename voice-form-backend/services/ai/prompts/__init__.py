"""
Prompts Package

LLM prompt engineering for the voice fill agent.
"""

from services.ai.prompts.fill_prompts import (
    DEFAULT_FILL_PROMPT,
    build_messages,
)

__all__ = [
    'DEFAULT_FILL_PROMPT',
    'build_messages',
]
