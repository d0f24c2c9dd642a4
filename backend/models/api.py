"""Request and response models for the HTTP transport."""
from typing import List, Optional
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """One inbound chat message."""
    session_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    from_name: Optional[str] = None


class ChatResponse(BaseModel):
    """Every message the assistant sent while handling the request."""
    session_id: str
    messages: List[str]


class StatusResponse(BaseModel):
    """Knowledge base readiness."""
    ready: bool
    chunks_loaded: int
    detail: Optional[str] = None
