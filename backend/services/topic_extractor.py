"""Topic extraction used to drive follow-up offers."""
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class TopicExtractor:
    """Derives a short topic label from a question and its answer."""

    # Most specific first
    KNOWN_TOPICS = (
        "pepuscan", "block explorer", "explorer", "scan",
        "staking", "bridge", "pump pad", "pumppad",
        "fees", "gas", "transactions", "wallet", "trading",
        "roadmap", "features", "ecosystem", "applications",
        "dex", "blockchain", "network",
    )

    # Generic topics get no follow-up on direct "how do I use" questions
    HOW_TO_SUPPRESSED = ("token", "dex", "blockchain")

    STOP_WORDS = frozenset({
        "what", "how", "when", "where", "why", "who", "is", "are", "does", "do", "can", "will",
        "tell", "me", "about", "more", "use", "the", "on",
    })
    GENERIC_WORDS = frozenset({"token", "dex", "blockchain", "network", "pepe", "unchained"})
    MIN_WORD_LENGTH = 4
    EDGE_PUNCTUATION = "?!.,;:\"'()"

    FOLLOW_UP_QUERIES = {
        "token": "What can I do with PEPU token?",
        "pepu": "What can I do with PEPU token?",
        "staking": "How do I stake PEPU tokens?",
        "bridge": "How do I bridge assets to Pepe Unchained?",
        "dex": "How do I use the DEX on Pepe Unchained?",
        "explorer": "What is PepuScan and how do I use it?",
        "pepuscan": "What is PepuScan and how do I use it?",
    }

    def extract_topic(self, query: str, answer: str) -> Optional[str]:
        """
        Find the topic of a question/answer pair.

        Known topics are searched in the query and the answer first; failing
        that, the first non-generic content word of the query is used.

        Args:
            query: The question that was answered
            answer: The answer text that was sent

        Returns:
            Lower-case topic label, or None when no follow-up should be offered
        """
        query_lower = query.lower()
        answer_lower = (answer or "").lower()

        for topic in self.KNOWN_TOPICS:
            if topic in query_lower or topic in answer_lower:
                if topic in self.HOW_TO_SUPPRESSED and "how do i use" in query_lower:
                    logger.debug(f"Suppressing generic topic {topic!r} for how-to question")
                    return None
                return topic

        return self._noun_fallback(query_lower)

    def _noun_fallback(self, query_lower: str) -> Optional[str]:
        for raw_word in query_lower.split():
            word = raw_word.strip(self.EDGE_PUNCTUATION)
            if word in self.STOP_WORDS or len(word) < self.MIN_WORD_LENGTH:
                continue
            if word in self.GENERIC_WORDS:
                continue
            return word
        return None

    def follow_up_query(self, topic: str) -> str:
        """The question to ask when the user accepts a follow-up offer."""
        return self.FOLLOW_UP_QUERIES.get(topic.lower(), f"Tell me more about {topic}")
