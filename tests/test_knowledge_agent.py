"""Unit tests for KnowledgeAgent."""
import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from models.chunk import Chunk, ScoredChunk
from services.llm_client import LLMResponse
from services.knowledge_agent import KnowledgeAgent, AgentAnswer, NO_INFORMATION_ANSWER


def scored(url, content, score=1):
    chunk = Chunk(
        url=url,
        title="",
        source_tag="main",
        chunk_index=0,
        total_chunks=1,
        content=content,
        content_length=len(content),
    )
    return ScoredChunk(chunk=chunk, score=score)


@pytest.fixture
def retrieval_engine():
    engine = Mock()
    engine.retrieve = AsyncMock(return_value=[
        scored("https://guide.pepeunchained.com/bridge", "The bridge moves funds.", 3),
        scored("https://pepeunchained.com/", "Pepe Unchained has a bridge.", 1),
    ])
    return engine


@pytest.fixture
def llm():
    client = Mock()
    client.generate = AsyncMock(return_value=LLMResponse(
        text="Use the bridge.",
        tokens_input=10,
        tokens_output=4,
        latency_ms=12,
        model_used="llama-3.1-8b-instant",
    ))
    return client


class TestAnswer:
    """Retrieval-augmented answers."""

    def test_answer_uses_retrieved_chunks(self, retrieval_engine, llm):
        agent = KnowledgeAgent(retrieval_engine, llm, temperature=0.8, max_tokens=200)

        answer = asyncio.run(agent.answer("How do I bridge?", top_k=3))

        assert isinstance(answer, AgentAnswer)
        assert answer.text == "Use the bridge."
        assert answer.sources == ["https://guide.pepeunchained.com/bridge", "https://pepeunchained.com/"]
        retrieval_engine.retrieve.assert_awaited_once_with("How do I bridge?", 3)
        kwargs = llm.generate.call_args.kwargs
        assert "The bridge moves funds." in kwargs["prompt"]
        assert kwargs["temperature"] == 0.8
        assert kwargs["max_tokens"] == 200

    def test_no_chunks_skips_model(self, retrieval_engine, llm):
        retrieval_engine.retrieve.return_value = []
        agent = KnowledgeAgent(retrieval_engine, llm)

        answer = asyncio.run(agent.answer("Unrelated", top_k=2))

        assert answer.text == NO_INFORMATION_ANSWER
        assert answer.sources == []
        llm.generate.assert_not_called()


class TestFallback:
    """Answers composed without the language model."""

    def test_fallback_answer(self, retrieval_engine, llm):
        agent = KnowledgeAgent(retrieval_engine, llm)

        text = asyncio.run(agent.fallback_answer("bridge fees"))

        assert text == (
            "📚 *Answer from Knowledge Base*\n\n"
            "The bridge moves funds.\n\n"
            "*Source:* https://guide.pepeunchained.com/bridge\n\n"
            "*Additional Sources:*\n"
            "2. https://pepeunchained.com/\n"
        )
        # "bridge fees" is a medium question
        retrieval_engine.retrieve.assert_awaited_once_with("bridge fees", 2)
        llm.generate.assert_not_called()

    def test_fallback_without_chunks(self, retrieval_engine, llm):
        retrieval_engine.retrieve.return_value = []
        agent = KnowledgeAgent(retrieval_engine, llm)

        assert asyncio.run(agent.fallback_answer("bridge fees")) is None

    def test_fallback_truncates_main_chunk(self):
        text = KnowledgeAgent.compose_fallback([scored("https://pepeunchained.com/", "x" * 900)], char_budget=800)

        assert "x" * 800 + "...\n\n" in text
        assert "Additional Sources" not in text
