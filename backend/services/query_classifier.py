"""
Query Classifier for the knowledge assistant.

Pattern-based classification of chat messages. Every classifier is an ordered
table of ``(pattern, label)`` rules evaluated top to bottom; the first match
wins, so precedence is visible in the table itself.
"""

from dataclasses import dataclass
import logging
import re
from typing import Callable, Optional, Pattern, Sequence, Tuple

logger = logging.getLogger(__name__)

Rule = Tuple[Pattern, str]


@dataclass
class Classification:
    """
    Result of complexity classification.

    Attributes:
        category: "simple", "medium" or "complex"
        top_k: Number of chunks to retrieve for this category
        rule_triggered: Pattern that decided the category, or "default"
        reasoning: Human readable explanation for logs
    """
    category: str
    top_k: int
    rule_triggered: str = "default"
    reasoning: str = ""


def _first_match(rules: Sequence[Rule], text: str) -> Optional[Rule]:
    for pattern, label in rules:
        if pattern.search(text):
            return pattern, label
    return None


def _phrase_match(phrases: Sequence[str], text: str) -> bool:
    """Exact phrase, or the phrase followed by a space."""
    return any(text == phrase or text.startswith(phrase + " ") for phrase in phrases)


class QueryClassifier:
    """
    Deterministic classifier for complexity, intents and small talk.

    Complexity controls how many chunks are retrieved. Simple patterns are
    checked before complex ones, so "What is the difference..." style
    queries that also start with "what is" stay simple.
    """

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"

    TOP_K = {SIMPLE: 1, MEDIUM: 2, COMPLEX: 3}

    COMPLEXITY_RULES: Tuple[Rule, ...] = (
        (re.compile(r"^what is .+\??"), SIMPLE),
        (re.compile(r"^what'?s .+\?"), SIMPLE),
        (re.compile(r"^tell me about .+"), SIMPLE),
        (re.compile(r"^explain .+"), SIMPLE),
        (re.compile(r"^who is .+"), SIMPLE),
        (re.compile(r"^when is .+"), SIMPLE),
        (re.compile(r"^where is .+"), SIMPLE),
        (re.compile(r"how to .+"), COMPLEX),
        (re.compile(r"how does .+ work"), COMPLEX),
        (re.compile(r"what is the difference between"), COMPLEX),
        (re.compile(r"compare .+"), COMPLEX),
        (re.compile(r"why does .+"), COMPLEX),
        (re.compile(r"what are the steps"), COMPLEX),
        (re.compile(r"how do i .+"), COMPLEX),
    )

    # Greeting kinds
    GREETING = "greeting"
    THANKS = "thanks"
    FAREWELL = "farewell"
    SMALL_TALK = "small_talk"

    GREETING_PHRASES = (
        "hey", "hi", "hello", "hey there", "hi there", "heyy", "hii", "sup", "whats up", "yo"
    )
    THANKS_PATTERN = re.compile(r"^(thanks|thank you|thx|ty|appreciate it)\b")
    FAREWELL_PATTERN = re.compile(r"^(bye|goodbye|see ya|later|cya)\b")
    SMALL_TALK_PATTERN = re.compile(r"^(how are you|how'?s it going|what'?s up|wassup)\b")

    GREETING_RESPONSES = {
        GREETING: (
            "Hey! 👋\n\nI'm your Pepe Unchained assistant. Ask me anything about Pepe Unchained, like:\n"
            "• What is Pepe Unchained?\n• How do I stake tokens?\n• How to bridge funds?\n\n"
            "What would you like to know?"
        ),
        THANKS: "You're welcome! 😊\n\nFeel free to ask if you need anything else about Pepe Unchained!",
        FAREWELL: "See you later! 👋\n\nCome back anytime if you have questions about Pepe Unchained!",
        SMALL_TALK: (
            "I'm doing great, thanks for asking! 😊\n\n"
            "I'm here to help you learn about Pepe Unchained. What can I help you with today?"
        ),
    }

    # Intent vocabularies
    PRICE_KEYWORDS = (
        "price", "pric", "cost", "worth", "value",
        "market cap", "marketcap", "mc", "market capitalization",
        "volume", "liquidity", "trading", "chart",
    )
    PEPU_KEYWORDS = ("pepu", "pepe unchained", "token")
    TOKEN_KEYWORDS = ("token", "pepu", "price", "cost", "worth", "value", "trading", "market")

    YES_PHRASES = (
        "yes", "yeah", "yep", "yup", "sure", "ok", "okay", "yea", "ya", "definitely", "absolutely"
    )
    NO_PHRASES = ("no", "nope", "nah", "not really", "not interested")
    QUESTION_LEADS = (
        "what", "how", "when", "where", "why", "who", "tell me", "explain", "can you", "do you"
    )

    def __init__(self) -> None:
        self.greeting_rules: Tuple[Tuple[Callable[[str], bool], str], ...] = (
            (lambda text: _phrase_match(self.GREETING_PHRASES, text), self.GREETING),
            (lambda text: bool(self.THANKS_PATTERN.match(text)), self.THANKS),
            (lambda text: bool(self.FAREWELL_PATTERN.match(text)), self.FAREWELL),
            (lambda text: bool(self.SMALL_TALK_PATTERN.match(text)), self.SMALL_TALK),
        )

    def classify_query(self, query: str) -> Classification:
        """
        Classify query complexity.

        Args:
            query: User question string

        Returns:
            Classification with category and the matching retrieval depth
        """
        query_lower = query.lower().strip()
        matched = _first_match(self.COMPLEXITY_RULES, query_lower)

        if matched is None:
            logger.info(f"Classification: {self.MEDIUM} (default) - {query[:50]}")
            return Classification(
                category=self.MEDIUM,
                top_k=self.top_k_for(self.MEDIUM),
                rule_triggered="default",
                reasoning="Query matches no simple or complex pattern"
            )

        pattern, category = matched
        logger.info(f"Classification: {category} ({pattern.pattern}) - {query[:50]}")
        return Classification(
            category=category,
            top_k=self.top_k_for(category),
            rule_triggered=pattern.pattern,
            reasoning=f"Query matches {category} pattern {pattern.pattern!r}"
        )

    def top_k_for(self, category: str) -> int:
        return self.TOP_K.get(category, self.TOP_K[self.MEDIUM])

    def greeting_kind(self, text: str) -> Optional[str]:
        """Return the small-talk kind of a message, or None for real questions."""
        text_lower = text.lower().strip()
        for predicate, kind in self.greeting_rules:
            if predicate(text_lower):
                return kind
        return None

    def greeting_response(self, text: str) -> Optional[str]:
        kind = self.greeting_kind(text)
        return self.GREETING_RESPONSES[kind] if kind else None

    def is_price_question(self, text: str) -> bool:
        """Price vocabulary plus either a PEPU keyword or a "what"/"how much" question."""
        text_lower = text.lower()
        has_price_keyword = any(keyword in text_lower for keyword in self.PRICE_KEYWORDS)
        if not has_price_keyword:
            return False
        has_pepu_keyword = any(keyword in text_lower for keyword in self.PEPU_KEYWORDS)
        return has_pepu_keyword or "what" in text_lower or "how much" in text_lower

    def is_token_question(self, text: str) -> bool:
        text_lower = text.lower()
        return any(keyword in text_lower for keyword in self.TOKEN_KEYWORDS)

    def is_yes_response(self, text: str) -> bool:
        return _phrase_match(self.YES_PHRASES, text.lower().strip())

    def is_no_response(self, text: str) -> bool:
        return _phrase_match(self.NO_PHRASES, text.lower().strip())

    def is_new_question(self, text: str) -> bool:
        """A literal question mark, or an interrogative lead word."""
        text_lower = text.lower().strip()
        return "?" in text or text_lower.startswith(self.QUESTION_LEADS)
