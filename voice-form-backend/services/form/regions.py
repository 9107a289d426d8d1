"""
Editable Regions

Entities for the parts of an uploaded form a user can fill in, plus the
explicit interaction context and the event router that replace per-node
DOM listeners.

A region wraps one live BeautifulSoup tag. Two kinds exist:
    - TextRegion: a leaf converted into an editable blank (may later be
      frozen when an image is inserted into it)
    - ImageSlot: an <img> whose source can be replaced

Usage:
    router = RegionEventRouter()
    router.dispatch("focus", region, context)
"""

import asyncio
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Protocol

from bs4 import Tag

from config.constants import (
    ADDED_STYLES_ATTR,
    EDITABLE_CLASS,
    FOCUS_STYLES,
    IMAGE_ONERROR_SCRIPT,
    IMAGE_SLOT_ATTR,
    ORIGINAL_TEXT_ATTR,
    REGION_DEFAULT_STYLES,
    REGION_ID_ATTR,
)
from services.form.classifier import strip_placeholders
from services.form.styles import get_style, remove_styles, set_default_styles, set_style
from utils.exceptions import InvalidRegionEventError, RegionFrozenError
from utils.logging import get_logger

if TYPE_CHECKING:
    from services.voice.interpreter import VoiceCommandInterpreter

logger = get_logger(__name__)


class RegionKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class RegionState(str, Enum):
    LIVE = "live"
    FROZEN = "frozen"


# =============================================================================
# Effect Scheduling
# =============================================================================

class EffectScheduler(Protocol):
    """Runs a callback after a delay; used to revert visual cues."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        ...


class LoopScheduler:
    """Schedules cue reverts on the running asyncio loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Nothing renders between now and the delay without a loop
            logger.debug("No running event loop, reverting cue immediately")
            callback()
            return
        loop.call_later(delay, callback)


@dataclass
class InteractionContext:
    """
    Per-session interaction state handed to every region handler.

    Attributes:
        scheduler: Reverts transient visual cues
        focused: Region that currently has focus
        image_target: Region chosen to receive the next image
        voice: Voice interpreter bound to this session (None when voice
            input is unavailable)
    """
    scheduler: EffectScheduler = field(default_factory=LoopScheduler)
    focused: Optional["Region"] = None
    image_target: Optional["Region"] = None
    voice: Optional["VoiceCommandInterpreter"] = None


# =============================================================================
# Regions
# =============================================================================

class Region(ABC):
    """Common interface of everything the user can interact with."""

    kind: RegionKind

    def __init__(self, region_id: str, tag: Tag):
        self.region_id = region_id
        self.tag = tag
        self.converted = False

    @property
    def text(self) -> str:
        return self.tag.get_text()

    @property
    def frozen(self) -> bool:
        return False

    def on_focus(self, context: InteractionContext) -> None:
        pass

    def on_blur(self, context: InteractionContext) -> None:
        pass

    def on_activate_voice(self, context: InteractionContext) -> None:
        pass

    @abstractmethod
    def on_attach_image(self, context: InteractionContext) -> None:
        """Select this region as the target of the next image."""

    def on_click(self, context: InteractionContext) -> None:
        pass

    def show_cue(
        self,
        context: InteractionContext,
        name: str,
        value: str,
        seconds: float,
    ) -> None:
        """Apply an inline style and clear it again after ``seconds``."""
        set_style(self.tag, name, value)
        context.scheduler.call_later(seconds, lambda: set_style(self.tag, name, ""))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.region_id,
            "kind": self.kind.value,
            "text": self.text.strip(),
            "frozen": self.frozen,
        }


class TextRegion(Region):
    """A leaf node converted into an editable blank."""

    kind = RegionKind.TEXT

    def __init__(self, region_id: str, tag: Tag, original_text: str):
        super().__init__(region_id, tag)
        self.original_text = original_text
        self.state = RegionState.LIVE

    @classmethod
    def create(cls, tag: Tag) -> "TextRegion":
        return cls(f"editable-{uuid.uuid4().hex}", tag, tag.get_text())

    @property
    def frozen(self) -> bool:
        return self.state is RegionState.FROZEN

    def convert(self) -> bool:
        """
        Turn the tag into a live editable blank.

        Marks the tag, snapshots its original text and strips placeholder
        tokens from the visible content. Converting twice is a no-op.

        Returns:
            bool: True if the tag was converted by this call
        """
        if self.converted:
            return False

        tag = self.tag
        tag[REGION_ID_ATTR] = self.region_id
        tag["contenteditable"] = "true"
        classes = tag.get("class", [])
        if EDITABLE_CLASS not in classes:
            tag["class"] = [*classes, EDITABLE_CLASS]
        tag[ORIGINAL_TEXT_ATTR] = self.original_text

        added = set_default_styles(tag, REGION_DEFAULT_STYLES)
        if added:
            tag[ADDED_STYLES_ATTR] = " ".join(added)

        self._replace_content(strip_placeholders(self.original_text))
        self.converted = True
        return True

    def set_text(self, value: str) -> None:
        """Replace the region's content with plain text."""
        if self.frozen:
            raise RegionFrozenError(self.region_id)
        self._replace_content(value)

    def freeze(self) -> None:
        """Stop accepting text; clicks now replace the inserted image."""
        self.state = RegionState.FROZEN
        self.tag["contenteditable"] = "false"
        set_style(self.tag, "cursor", "pointer")

    def on_focus(self, context: InteractionContext) -> None:
        context.focused = self
        for name, value in FOCUS_STYLES.items():
            set_style(self.tag, name, value)

    def on_blur(self, context: InteractionContext) -> None:
        if context.focused is self:
            context.focused = None
        for name, value in FOCUS_STYLES.items():
            # Leave the success flash alone if it replaced the focus colour
            if get_style(self.tag, name) == value:
                set_style(self.tag, name, "")

    def on_activate_voice(self, context: InteractionContext) -> None:
        if self.frozen:
            logger.debug(f"Voice input ignored for frozen region {self.region_id}")
            return
        if context.voice is None:
            logger.debug("Voice input unavailable for this session")
            return
        context.voice.start_listening(self, context)

    def on_attach_image(self, context: InteractionContext) -> None:
        context.image_target = self

    def on_click(self, context: InteractionContext) -> None:
        if self.frozen:
            context.image_target = self

    def _replace_content(self, value: str) -> None:
        self.tag.clear()
        if value:
            self.tag.append(value)


class ImageSlot(Region):
    """An <img> element whose source the user can replace."""

    kind = RegionKind.IMAGE

    @classmethod
    def create(cls, tag: Tag) -> "ImageSlot":
        return cls(f"image-{uuid.uuid4().hex}", tag)

    def prepare(self) -> bool:
        """
        Attach the placeholder-on-error hook and click-to-replace affordance.

        Returns:
            bool: True if the image was prepared by this call
        """
        if self.converted:
            return False

        tag = self.tag
        tag[IMAGE_SLOT_ATTR] = self.region_id
        tag["onerror"] = IMAGE_ONERROR_SCRIPT

        added = set_default_styles(tag, {"max-width": "100%"})
        if not get_style(tag, "height") and not tag.get("height"):
            set_style(tag, "height", "auto")
            added.append("height")
        added += set_default_styles(tag, {"cursor": "pointer"})
        if added:
            tag[ADDED_STYLES_ATTR] = " ".join(added)

        self.converted = True
        return True

    def replace_source(self, data_url: str, alt: str) -> None:
        self.tag["src"] = data_url
        self.tag["alt"] = alt

    def on_attach_image(self, context: InteractionContext) -> None:
        context.image_target = self

    def on_click(self, context: InteractionContext) -> None:
        context.image_target = self


def strip_added_styles(tag: Tag) -> None:
    """Remove the inline styles recorded as added by the transformer."""
    added = tag.get(ADDED_STYLES_ATTR, "")
    if added:
        remove_styles(tag, added.split())
        del tag[ADDED_STYLES_ATTR]


# =============================================================================
# Event Routing
# =============================================================================

class RegionEventRouter:
    """Single dispatch point for DOM-style events on regions."""

    HANDLERS = {
        "focus": "on_focus",
        "blur": "on_blur",
        "dblclick": "on_activate_voice",
        "contextmenu": "on_attach_image",
        "click": "on_click",
    }

    def dispatch(self, event: str, region: Region, context: InteractionContext) -> None:
        handler_name = self.HANDLERS.get(event)
        if handler_name is None:
            raise InvalidRegionEventError(event)
        logger.debug(f"{event} -> {region.region_id}")
        getattr(region, handler_name)(context)
