"""
Global test fixtures for makeitshorter.

Creates an isolated Flask app backed by a fake completion client, and a
scripted fake backend for the client-side Enhancer, so tests never hit
network APIs.
"""

from __future__ import annotations
import random
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List
import pytest

# ---------------------------------------------------------------------------
# Import target app
# ---------------------------------------------------------------------------
import sys
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app import create_app  # type: ignore
from service.enhancer import Enhancer  # type: ignore
from service.rewriter import Rewriter  # type: ignore

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeCompletions:
    """Stands in for OpenAI().chat.completions; replies are queued or raised."""

    def __init__(self):
        self.replies: List[Any] = []
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else "Subject: Hi\n\nok"
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


class ScriptedBackend:
    """
    Fake BackendClient. `replies` holds enhancedContent strings or exceptions,
    consumed one per enhance() call.
    """

    def __init__(self, replies=None, ai_enabled: bool = True, health_error: Exception | None = None):
        self.replies = list(replies or [])
        self.ai_enabled = ai_enabled
        self.health_error = health_error
        self.health_calls = 0
        self.payloads: List[Dict[str, Any]] = []

    def health(self) -> Dict[str, Any]:
        self.health_calls += 1
        if self.health_error:
            raise self.health_error
        return {"status": "ok", "timestamp": "2026-01-01T00:00:00+00:00", "aiEnabled": self.ai_enabled}

    def enhance(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.payloads.append(payload)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return {"enhancedContent": reply, "wordCount": len(reply.split())}


def words(n: int, word: str = "word") -> str:
    return " ".join([word] * n)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture()
def settings_override(tmp_path: Path) -> Dict[str, Any]:
    return {
        "OPENAI_API_KEY": "",
        "LOG_DIR": str(tmp_path / "logs"),
        "RATE_LIMIT_PER_MIN": 600,
        "RATE_LIMIT_BURST": 100,
    }


@pytest.fixture()
def app(settings_override, fake_openai):
    """Flask app (testing mode ON) with the fake completion client wired in."""
    flask_app = create_app(settings_override, rewriter=Rewriter(fake_openai))
    flask_app.config.update(TESTING=True)
    yield flask_app


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def disabled_client(settings_override):
    """App with no API key configured: AI integration disabled."""
    flask_app = create_app(settings_override)
    flask_app.config.update(TESTING=True)
    return flask_app.test_client()


@pytest.fixture()
def backend():
    return ScriptedBackend()


@pytest.fixture()
def enhancer(backend):
    return Enhancer(backend, rng=random.Random(7))
