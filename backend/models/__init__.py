"""Data models for the Pepe Unchained Knowledge Assistant."""
from .document import Document
from .chunk import Chunk, ScoredChunk
from .conversation import ConversationContext
from .price import PriceSnapshot, normalize_price
from .api import ChatRequest, ChatResponse, StatusResponse

__all__ = [
    "Document",
    "Chunk",
    "ScoredChunk",
    "ConversationContext",
    "PriceSnapshot",
    "normalize_price",
    "ChatRequest",
    "ChatResponse",
    "StatusResponse",
]
