"""Main entry point for the Pepe Unchained Knowledge Assistant API."""
import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, LOG_LEVEL, LOG_FORMAT
from logger import setup_logging
from models.api import ChatRequest, ChatResponse, StatusResponse
from services.corpus_store import CorpusStore, CorpusMissingError
from services.retrieval_engine import RetrievalEngine
from services.llm_client import LLMClient
from services.price_client import PriceClient
from services.knowledge_agent import KnowledgeAgent
from services.message_sink import CollectingSink
from services.conversation_manager import ConversationManager

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Pepe Unchained Knowledge Assistant",
    description="Answers questions about Pepe Unchained from its websites",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
conversation_manager: ConversationManager = None


def build_conversation_manager() -> ConversationManager:
    """Wire the services together."""
    corpus_store = CorpusStore()
    retrieval_engine = RetrievalEngine(corpus_store)
    agent = KnowledgeAgent(retrieval_engine, LLMClient())
    return ConversationManager(
        agent=agent,
        price_client=PriceClient(),
        corpus_store=corpus_store,
        sink=CollectingSink()
    )


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global conversation_manager

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL)

    logger.info("Initializing knowledge assistant services...")

    try:
        conversation_manager = build_conversation_manager()
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Pepe Unchained Knowledge Assistant API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "pepu-knowledge-assistant",
        "version": "1.0.0"
    }


@app.post("/chat", response_model=ChatResponse)
async def chat_endpoint(request: ChatRequest) -> ChatResponse:
    """
    Handle one chat message and return every reply it produced.

    A message can produce several replies: an answer followed by a
    follow-up offer, or a fallback notice, the fallback answer and billing
    guidance.
    """
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Message text cannot be empty")

    sink = CollectingSink()
    await conversation_manager.handle(
        request.session_id,
        request.text,
        from_name=request.from_name,
        sink=sink
    )
    return ChatResponse(session_id=request.session_id, messages=sink.drain(request.session_id))


@app.get("/status", response_model=StatusResponse)
async def status_endpoint() -> StatusResponse:
    """Report how many chunks the knowledge base holds."""
    try:
        count = await conversation_manager.status()
    except CorpusMissingError as e:
        logger.warning(f"Status requested without a corpus: {e}")
        return StatusResponse(ready=False, chunks_loaded=0, detail=str(e))
    return StatusResponse(ready=True, chunks_loaded=count)


@app.post("/sessions/{session_id}/reset")
async def reset_session_endpoint(session_id: str):
    """Forget a session's conversation context."""
    conversation_manager.reset_session(session_id)
    return {"session_id": session_id, "reset": True}


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting knowledge assistant API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
