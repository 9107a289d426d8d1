"""
Test Configuration

Pytest configuration and shared fixtures for all tests.
"""

import pytest
from typing import AsyncGenerator, Callable, List, Tuple
from unittest.mock import AsyncMock, MagicMock
from httpx import AsyncClient, ASGITransport

from core.schemas import FillInstruction
from services.form.document import form_container, parse_form_document
from services.form.regions import InteractionContext
from services.form.session import SessionStore
from services.voice.interpreter import VoiceCommandInterpreter


class ManualScheduler:
    """Collects cue reverts so tests decide when time passes."""

    def __init__(self):
        self.pending: List[Tuple[float, Callable[[], None]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay, callback))

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


@pytest.fixture
def sample_form_html() -> str:
    """Order form with blanks in paragraphs, spans and table cells."""
    return """<!DOCTYPE html>
<html>
<head><title>Order</title></head>
<body>
  <h1>Order Form</h1>
  <p>Company: ______</p>
  <p>Please review the order below.</p>
  <table>
    <tr><th>Item</th><th>Qty</th></tr>
    <tr><td>Widget</td><td></td></tr>
    <tr><td colspan="2">[Notes]</td></tr>
  </table>
  <div><span>Signature: ....</span></div>
  <img src="logo.png" alt="logo">
</body>
</html>"""


@pytest.fixture
def plain_form_html() -> str:
    """Form without tables."""
    return """<html><body>
  <p>Name: ______</p>
  <p>Email (enter)</p>
  <p>Thank you.</p>
</body></html>"""


@pytest.fixture
def sample_soup(sample_form_html):
    return parse_form_document(sample_form_html.encode("utf-8"), "order.html")


@pytest.fixture
def sample_container(sample_soup):
    return form_container(sample_soup)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_agent() -> Callable[..., MagicMock]:
    """Factory for fill agents answering the given instructions in order."""
    def _make(*instructions: FillInstruction) -> MagicMock:
        mock = MagicMock()
        mock.interpret = AsyncMock(side_effect=list(instructions))
        return mock
    return _make


@pytest.fixture
def agent() -> MagicMock:
    """Fill agent that always replaces with 'John Smith'."""
    mock = MagicMock()
    mock.interpret = AsyncMock(return_value=FillInstruction(
        action="replace", value="John Smith", type="text", confidence=0.95
    ))
    return mock


@pytest.fixture
def context(scheduler, agent) -> InteractionContext:
    return InteractionContext(scheduler=scheduler, voice=VoiceCommandInterpreter(agent))


@pytest.fixture
def store(agent, scheduler) -> SessionStore:
    return SessionStore(agent, scheduler_factory=lambda: scheduler)


@pytest.fixture
def openai_client() -> MagicMock:
    """AsyncOpenAI stand-in answering a replace instruction."""
    client = MagicMock()
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = (
        '{"action": "replace", "value": "John Smith", "type": "text", "confidence": 0.95}'
    )
    client.chat.completions.create = AsyncMock(return_value=completion)
    return client


@pytest.fixture
async def client(store, openai_client) -> AsyncGenerator[AsyncClient, None]:
    """Get async test client for API testing."""
    from main import app
    from core.dependencies import get_session_store, get_voice_agent_service
    from services.ai.voice_agent import VoiceAgentService
    from utils.rate_limit import limiter

    service = VoiceAgentService(client=openai_client)
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_voice_agent_service] = lambda: service
    limiter.enabled = False

    # Create test transport
    transport = ASGITransport(app=app)

    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    limiter.enabled = True
    app.dependency_overrides.clear()
