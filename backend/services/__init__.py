"""Services for the Pepe Unchained Knowledge Assistant."""
from .document_loader import DocumentLoader
from .chunking_engine import ChunkingEngine
from .corpus_store import CorpusStore, CorpusMissingError
from .retrieval_engine import RetrievalEngine
from .query_classifier import QueryClassifier, Classification
from .topic_extractor import TopicExtractor
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .price_client import PriceClient, PriceFetchError
from .knowledge_agent import KnowledgeAgent, AgentAnswer
from .session_store import SessionStore
from .message_sink import MessageSink, CollectingSink
from .conversation_manager import ConversationManager

__all__ = ['DocumentLoader', 'ChunkingEngine', 'CorpusStore', 'CorpusMissingError', 'RetrievalEngine', 'QueryClassifier', 'Classification', 'TopicExtractor', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'PriceClient', 'PriceFetchError', 'KnowledgeAgent', 'AgentAnswer', 'SessionStore', 'MessageSink', 'CollectingSink', 'ConversationManager']
