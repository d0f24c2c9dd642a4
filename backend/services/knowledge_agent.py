"""Answer questions from the knowledge base, with or without the language model."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from models.chunk import ScoredChunk
from services.query_classifier import QueryClassifier
from services.retrieval_engine import RetrievalEngine
from services.llm_client import LLMClient
from config import (
    GENERATION_MODEL,
    GENERATION_TEMPERATURE,
    GENERATION_MAX_TOKENS,
    FALLBACK_CHAR_BUDGET,
)

logger = logging.getLogger(__name__)

NO_INFORMATION_ANSWER = "I couldn't find relevant information in the knowledge base to answer this question."


@dataclass
class AgentAnswer:
    """An answer and where it came from."""
    query: str
    text: str
    sources: List[str] = field(default_factory=list)
    model: Optional[str] = None


class KnowledgeAgent:
    """Retrieval-augmented answering over the processed corpus."""

    def __init__(
        self,
        retrieval_engine: RetrievalEngine,
        llm_client: LLMClient,
        classifier: Optional[QueryClassifier] = None,
        model: str = GENERATION_MODEL,
        temperature: float = GENERATION_TEMPERATURE,
        max_tokens: int = GENERATION_MAX_TOKENS
    ):
        self.retrieval_engine = retrieval_engine
        self.llm_client = llm_client
        self.classifier = classifier or QueryClassifier()
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def answer(self, query: str, top_k: int) -> AgentAnswer:
        """
        Answer a question from the top ``top_k`` chunks.

        When nothing matches, a fixed "no information" answer is returned
        without calling the model.

        Raises:
            CorpusMissingError: If no processed corpus exists
            LLMClientError: If generation fails
        """
        chunks = await self.retrieval_engine.retrieve(query, top_k)

        if not chunks:
            logger.info(f"No relevant chunks for query: {query[:100]}")
            return AgentAnswer(query=query, text=NO_INFORMATION_ANSWER, model=self.model)

        prompt = LLMClient.build_prompt(query, chunks)
        response = await self.llm_client.generate(
            prompt=prompt,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )

        return AgentAnswer(
            query=query,
            text=response.text,
            sources=[scored.chunk.url for scored in chunks],
            model=response.model_used
        )

    async def fallback_answer(self, query: str, char_budget: int = FALLBACK_CHAR_BUDGET) -> Optional[str]:
        """
        Compose an answer straight from retrieval, for when generation is unavailable.

        Args:
            query: User question
            char_budget: Character cap for the main chunk's content

        Returns:
            Markdown answer built from the best chunk and its sources, or
            None when no chunk matches

        Raises:
            CorpusMissingError: If no processed corpus exists
        """
        classification = self.classifier.classify_query(query)
        chunks = await self.retrieval_engine.retrieve(query, classification.top_k)
        logger.info(f"[Fallback] Found {len(chunks)} relevant chunks", extra={"chunks_found": len(chunks)})

        if not chunks:
            return None

        return self.compose_fallback(chunks, char_budget)

    @staticmethod
    def compose_fallback(chunks: List[ScoredChunk], char_budget: int = FALLBACK_CHAR_BUDGET) -> str:
        main_chunk = chunks[0].chunk
        content = main_chunk.content
        if len(content) > char_budget:
            content = content[:char_budget] + "..."

        parts = [
            "📚 *Answer from Knowledge Base*\n\n",
            f"{content}\n\n",
            f"*Source:* {main_chunk.url}\n\n",
        ]

        if len(chunks) > 1:
            parts.append("*Additional Sources:*\n")
            for position, scored in enumerate(chunks[1:], start=2):
                parts.append(f"{position}. {scored.chunk.url}\n")

        return "".join(parts)
