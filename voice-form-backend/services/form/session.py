"""
Form Sessions

A session owns one uploaded Document together with its regions, the
uploaded image map and the interaction context. Sessions live in memory
only; a new upload into an existing session replaces all of it.

Usage:
    store = SessionStore(agent)
    session = store.create("order.html", soup)
    session.transform()
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from config.constants import EDITABLE_CLASS
from services.form.document import form_container
from services.form.images import ImageAttachmentHandler
from services.form.regions import EffectScheduler, InteractionContext, LoopScheduler, Region, TextRegion
from services.form.transformer import EditableTransformer
from services.voice.interpreter import FillAgent, VoiceCommandInterpreter
from utils.exceptions import RegionNotFoundError, SessionNotFoundError
from utils.logging import get_logger

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FormSession:
    session_id: str
    file_name: str
    soup: BeautifulSoup
    context: InteractionContext
    expires_at: datetime
    regions: Dict[str, Region] = field(default_factory=dict)
    image_map: Dict[str, str] = field(default_factory=dict)

    @property
    def container(self) -> Tag:
        return form_container(self.soup)

    @property
    def voice(self) -> VoiceCommandInterpreter:
        return self.context.voice

    @property
    def images(self) -> ImageAttachmentHandler:
        return ImageAttachmentHandler(self.image_map)

    def transform(self) -> List[Region]:
        return EditableTransformer(self.regions).transform(self.container)

    def region(self, region_id: str) -> Region:
        region = self.regions.get(region_id)
        if region is None:
            raise RegionNotFoundError(region_id)
        return region

    def text_region(self, region_id: str) -> TextRegion:
        region = self.region(region_id)
        if not isinstance(region, TextRegion):
            raise RegionNotFoundError(region_id, message="Region is not a text field")
        return region

    def editable_regions(self) -> List[TextRegion]:
        """Text regions in document order."""
        by_tag = {id(region.tag): region for region in self.regions.values() if isinstance(region, TextRegion)}
        ordered = []
        for tag in self.container.find_all(class_=EDITABLE_CLASS):
            region = by_tag.get(id(tag))
            if region is not None:
                ordered.append(region)
        return ordered


class SessionStore:
    """
    In-memory registry of form sessions.

    A session expires once it has gone unused for ``ttl_minutes``; every
    lookup extends it. Expired sessions are dropped on lookup and whenever
    a new session is created.

    Args:
        agent: Fill agent handed to every session's voice interpreter
        scheduler_factory: Builds the cue scheduler of a new session
        ttl_minutes: Idle lifetime of a session
    """

    SESSION_TTL_MINUTES = 30

    def __init__(
        self,
        agent: FillAgent,
        scheduler_factory: Callable[[], EffectScheduler] = LoopScheduler,
        ttl_minutes: Optional[int] = None,
    ):
        self.agent = agent
        self.scheduler_factory = scheduler_factory
        self.ttl = timedelta(minutes=ttl_minutes or self.SESSION_TTL_MINUTES)
        self._sessions: Dict[str, FormSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, file_name: str, soup: BeautifulSoup) -> FormSession:
        self.cleanup_expired()
        return self._open(str(uuid.uuid4()), file_name, soup)

    def replace(self, session_id: str, file_name: str, soup: BeautifulSoup) -> FormSession:
        """Swap in a new document; regions and image map start empty."""
        self.get(session_id)
        logger.info(f"Replacing document of session {session_id}")
        return self._open(session_id, file_name, soup)

    def get(self, session_id: str) -> FormSession:
        session = self._sessions.get(session_id)
        if session is not None and session.expires_at <= _now():
            del self._sessions[session_id]
            logger.info(f"Session {session_id} expired")
            session = None
        if session is None:
            raise SessionNotFoundError(session_id)
        session.expires_at = _now() + self.ttl
        return session

    def discard(self, session_id: str) -> Optional[FormSession]:
        return self._sessions.pop(session_id, None)

    def cleanup_expired(self) -> int:
        """Remove expired sessions. Returns count removed."""
        now = _now()
        expired = [
            sid for sid, session in self._sessions.items()
            if session.expires_at <= now
        ]

        for sid in expired:
            del self._sessions[sid]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")

        return len(expired)

    def _open(self, session_id: str, file_name: str, soup: BeautifulSoup) -> FormSession:
        context = InteractionContext(
            scheduler=self.scheduler_factory(),
            voice=VoiceCommandInterpreter(self.agent),
        )
        session = FormSession(
            session_id=session_id,
            file_name=file_name,
            soup=soup,
            context=context,
            expires_at=_now() + self.ttl,
        )
        self._sessions[session_id] = session
        return session
