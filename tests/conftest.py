import pytest
from fastapi.testclient import TestClient

import app.main as main
from app.services.canned_responder import CannedResponder
from app.services.conversation_store import ConversationStore
from app.services.kv_store import MemoryKeyValueStore
from app.services.metrics import Metrics
from tests.fakes import FailingKeyValueStore


@pytest.fixture
def memory_kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(memory_kv):
    return ConversationStore(memory_kv)


@pytest.fixture
def failing_store():
    return ConversationStore(FailingKeyValueStore())


@pytest.fixture
def unbound_store():
    return ConversationStore(None)


@pytest.fixture
def use_store(monkeypatch):
    """Install a ConversationStore into the app for the duration of a test."""
    def _use(conversation_store: ConversationStore) -> ConversationStore:
        monkeypatch.setattr(main, "conversation_store", conversation_store)
        return conversation_store
    return _use


@pytest.fixture
def client(monkeypatch, unbound_store):
    """Test client with no store bound, canned replies and fresh counters."""
    monkeypatch.setattr(main, "conversation_store", unbound_store)
    monkeypatch.setattr(main, "responder", CannedResponder())
    monkeypatch.setattr(main, "metrics", Metrics())
    monkeypatch.setattr(main, "FAILURE_VISIBILITY", "masked")
    return TestClient(main.app)
