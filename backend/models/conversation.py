"""Conversation data models."""
from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass
class ConversationContext:
    """Follow-up state for a single chat session."""
    last_topic: Optional[str] = None
    last_question: Optional[str] = None
    waiting_for_follow_up: bool = False
    asked_topics: Set[str] = field(default_factory=set)

    def copy(self) -> "ConversationContext":
        """Return an independent working copy."""
        return ConversationContext(
            last_topic=self.last_topic,
            last_question=self.last_question,
            waiting_for_follow_up=self.waiting_for_follow_up,
            asked_topics=set(self.asked_topics),
        )
