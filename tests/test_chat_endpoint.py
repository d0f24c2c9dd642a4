"""Integration tests for the HTTP chat transport."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock, patch
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

ANSWER = "Staking PEPU earns rewards from the dashboard."


@pytest.fixture
def corpus_path(tmp_path):
    from models.chunk import Chunk
    from services.corpus_store import CorpusStore

    path = tmp_path / "processed_content.json"
    content = "Staking PEPU tokens earns rewards. Stake from the dashboard."
    CorpusStore(path).save_chunks([Chunk(
        url="https://guide.pepeunchained.com/staking",
        title="Staking",
        source_tag="guide",
        chunk_index=0,
        total_chunks=1,
        content=content,
        content_length=len(content),
    )])
    return path


def build_manager(corpus_path):
    from services.corpus_store import CorpusStore
    from services.retrieval_engine import RetrievalEngine
    from services.knowledge_agent import KnowledgeAgent
    from services.llm_client import LLMResponse
    from services.message_sink import CollectingSink
    from services.conversation_manager import ConversationManager
    from services.price_client import PriceFetchError

    llm = Mock()
    llm.generate = AsyncMock(return_value=LLMResponse(
        text=ANSWER,
        tokens_input=50,
        tokens_output=10,
        latency_ms=20,
        model_used="test-model",
    ))
    store = CorpusStore(corpus_path)
    return ConversationManager(
        agent=KnowledgeAgent(RetrievalEngine(store), llm),
        price_client=Mock(get_price=AsyncMock(side_effect=PriceFetchError("offline"))),
        corpus_store=store,
        sink=CollectingSink(),
    )


@pytest.fixture
def client(corpus_path):
    """Create a test client wired to a manager with a mocked model."""
    from main import app

    # Skip startup so no real Groq client is created
    with patch('main.startup_event'):
        client = TestClient(app)

        import main
        main.conversation_manager = build_manager(corpus_path)

        yield client


class TestChatEndpoint:
    """POST /chat."""

    def test_chat_returns_answer_and_offer(self, client):
        response = client.post("/chat", json={"session_id": "42", "text": "How do I stake?", "from_name": "ann"})

        assert response.status_code == 200
        data = response.json()
        assert data["session_id"] == "42"
        assert data["messages"] == [ANSWER, "Would you like to know more about staking?"]

    def test_follow_up_round_trip(self, client):
        client.post("/chat", json={"session_id": "42", "text": "How do I stake?"})

        response = client.post("/chat", json={"session_id": "42", "text": "yes"})

        assert response.status_code == 200
        assert response.json()["messages"] == [ANSWER]

    def test_command(self, client):
        response = client.post("/chat", json={"session_id": "42", "text": "/status"})

        assert response.status_code == 200
        assert "1 chunks loaded" in response.json()["messages"][0]

    def test_empty_text_rejected(self, client):
        response = client.post("/chat", json={"session_id": "42", "text": ""})
        assert response.status_code == 422

    def test_whitespace_text_rejected(self, client):
        response = client.post("/chat", json={"session_id": "42", "text": "   "})
        assert response.status_code == 400

    def test_missing_session_rejected(self, client):
        response = client.post("/chat", json={"text": "hello"})
        assert response.status_code == 422


class TestOtherEndpoints:
    """Health, status and session reset."""

    def test_root(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "pepu-knowledge-assistant"

    def test_status_ready(self, client):
        data = client.get("/status").json()
        assert data == {"ready": True, "chunks_loaded": 1, "detail": None}

    def test_status_without_corpus(self, client, tmp_path):
        import main
        main.conversation_manager = build_manager(tmp_path / "missing.json")

        data = client.get("/status").json()

        assert data["ready"] is False
        assert data["chunks_loaded"] == 0
        assert "No processed data found" in data["detail"]

    def test_reset_session(self, client):
        import main
        client.post("/chat", json={"session_id": "42", "text": "How do I stake?"})
        assert "42" in main.conversation_manager.sessions

        response = client.post("/sessions/42/reset")

        assert response.status_code == 200
        assert response.json() == {"session_id": "42", "reset": True}
        assert "42" not in main.conversation_manager.sessions
