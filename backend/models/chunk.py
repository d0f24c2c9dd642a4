"""Chunk data models."""
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Chunk:
    """A bounded segment of one document's cleaned text."""
    url: str
    title: str
    source_tag: str  # "guide" or "main"
    chunk_index: int
    total_chunks: int
    content: str
    content_length: int

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the field names used by the processed corpus file."""
        return {
            "url": self.url,
            "title": self.title,
            "sourceTag": self.source_tag,
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
            "content": self.content,
            "contentLength": self.content_length,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chunk":
        """Build a chunk from a corpus record. Older files store ``source``."""
        content = data["content"]
        return cls(
            url=data["url"],
            title=data.get("title", ""),
            source_tag=data.get("sourceTag", data.get("source", "main")),
            chunk_index=int(data.get("chunkIndex", 0)),
            total_chunks=int(data.get("totalChunks", 1)),
            content=content,
            content_length=int(data.get("contentLength", len(content))),
        )


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk with its lexical match score for one query."""
    chunk: Chunk
    score: int  # sum of query term occurrences, never negative
