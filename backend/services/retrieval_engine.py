"""Retrieval engine scoring corpus chunks by raw query term counts."""
import logging
from typing import List, Sequence

from models.chunk import Chunk, ScoredChunk
from services.corpus_store import CorpusStore

logger = logging.getLogger(__name__)

# Stripped from both ends of every query word, so "staking?" matches "staking"
TERM_PUNCTUATION = "?!.,;:"


class RetrievalEngine:
    """Select the top-K chunks for a query by lexical overlap."""

    def __init__(self, corpus_store: CorpusStore):
        """
        Initialize the retrieval engine.

        Args:
            corpus_store: Source of the chunk corpus
        """
        self.corpus_store = corpus_store
        logger.info("Initialized RetrievalEngine")

    async def retrieve(self, query: str, top_k: int = 2) -> List[ScoredChunk]:
        """
        Load the corpus and return the best matching chunks.

        Raises:
            CorpusMissingError: If no processed corpus exists
        """
        corpus = await self.corpus_store.load_chunks()
        return self.find_relevant(query, corpus, top_k)

    @staticmethod
    def query_terms(query: str) -> List[str]:
        """Lower-cased words of the query with edge punctuation removed."""
        words = (word.strip(TERM_PUNCTUATION) for word in query.lower().split())
        return [word for word in words if word]

    @staticmethod
    def score(terms: Sequence[str], content: str) -> int:
        """
        Sum substring occurrences of every term in the lower-cased content.

        Matching is not word-boundary aware: "stake" also counts inside
        "staked". Repeated terms are counted once per repetition.
        """
        content_lower = content.lower()
        return sum(content_lower.count(term) for term in terms)

    @classmethod
    def find_relevant(
        cls,
        query: str,
        corpus: Sequence[Chunk],
        top_k: int
    ) -> List[ScoredChunk]:
        """
        Score every chunk against the query.

        Args:
            query: User question
            corpus: Chunks in corpus order
            top_k: Maximum number of results

        Returns:
            Chunks with a positive score, highest first, ties kept in corpus
            order, at most ``top_k`` of them
        """
        terms = cls.query_terms(query)
        if not terms or top_k <= 0:
            return []

        scored = []
        for chunk in corpus:
            score = cls.score(terms, chunk.content)
            if score > 0:
                scored.append(ScoredChunk(chunk=chunk, score=score))

        # sorted() is stable, so equal scores keep corpus order
        ranked = sorted(scored, key=lambda item: item.score, reverse=True)[:top_k]

        logger.info(
            f"Retrieved {len(ranked)} of {len(scored)} matching chunks "
            f"(top score: {ranked[0].score if ranked else 0})"
        )
        return ranked
