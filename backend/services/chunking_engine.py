"""Chunking engine that splits cleaned page text into overlapping segments."""
import logging
import re
from typing import List

from models.document import Document
from models.chunk import Chunk
from config import CHUNK_SIZE, CHUNK_OVERLAP, MIN_CONTENT_LENGTH, GUIDE_HOST

logger = logging.getLogger(__name__)

# A run of non-terminators closed by one or more terminators, or the unterminated tail
SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+|[^.!?]+$")
DISALLOWED_CHARS = re.compile(r"[^\w\s.,!?;:()\-'\"]")
WHITESPACE = re.compile(r"\s+")


class ChunkingEngine:
    """Segments documents into retrievable chunks with provenance metadata."""

    def __init__(
        self,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
        min_content_length: int = MIN_CONTENT_LENGTH,
        guide_host: str = GUIDE_HOST
    ):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap hint in characters; carried over as
                ``chunk_overlap // 10`` trailing words of the previous chunk
            min_content_length: Cleaned pages shorter than this are skipped
            guide_host: Host whose pages are tagged as "guide"
        """
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_content_length = min_content_length
        self.guide_host = guide_host

    def chunk_documents(self, documents: List[Document]) -> List[Chunk]:
        """
        Clean and chunk documents into Chunk records.

        Args:
            documents: Scraped documents

        Returns:
            Chunks in document order, each document's chunks ordered by chunk_index
        """
        all_chunks = []

        for document in documents:
            cleaned = self.clean_text(document.raw_text)
            if len(cleaned) < self.min_content_length:
                logger.debug(f"Skipping {document.url}: only {len(cleaned)} characters after cleaning")
                continue

            pieces = self.chunk_text(cleaned, self.chunk_size, self.chunk_overlap)
            source_tag = self.source_tag(document.url)

            for idx, piece in enumerate(pieces):
                all_chunks.append(Chunk(
                    url=document.url,
                    title=document.title,
                    source_tag=source_tag,
                    chunk_index=idx,
                    total_chunks=len(pieces),
                    content=piece,
                    content_length=len(piece)
                ))

        logger.info(f"Created {len(all_chunks)} chunks from {len(documents)} documents")
        return all_chunks

    def source_tag(self, url: str) -> str:
        return "guide" if self.guide_host in url else "main"

    @staticmethod
    def clean_text(text: str) -> str:
        """Collapse whitespace and strip characters outside the plain-prose set."""
        if not text:
            return ""
        text = WHITESPACE.sub(" ", text)
        return DISALLOWED_CHARS.sub("", text).strip()

    @staticmethod
    def split_sentences(text: str) -> List[str]:
        """Split text into sentence-like units; the whole text when there are no terminators."""
        units = SENTENCE_PATTERN.findall(text)
        return units or [text]

    def chunk_text(
        self,
        text: str,
        max_size: int = CHUNK_SIZE,
        overlap: int = CHUNK_OVERLAP
    ) -> List[str]:
        """
        Accumulate sentence units into chunks of at most ``max_size`` characters.

        When the next unit would overflow a non-empty buffer, the buffer is
        closed and the next one is seeded with the last ``overlap // 10``
        words of the closed buffer followed by the overflowing unit. A unit
        that is larger than ``max_size`` on its own becomes its own chunk.

        Args:
            text: Cleaned text
            max_size: Maximum chunk length in characters
            overlap: Overlap hint in characters

        Returns:
            Trimmed chunk strings in reading order
        """
        if not text or not text.strip():
            return []

        overlap_words = overlap // 10
        chunks = []
        buffer = ""

        for unit in self.split_sentences(text):
            if len(buffer + unit) > max_size and buffer:
                chunks.append(buffer.strip())
                buffer = self._seed_buffer(buffer, unit, overlap_words, max_size)
            else:
                buffer += unit

        if buffer.strip():
            chunks.append(buffer.strip())

        return [c for c in chunks if c]

    @staticmethod
    def _seed_buffer(closed: str, unit: str, overlap_words: int, max_size: int) -> str:
        if overlap_words <= 0:
            return unit

        tail = " ".join(closed.split(" ")[-overlap_words:])
        seeded = f"{tail} {unit}"
        # Carrying the overlap must not push a chunk past max_size
        if len(seeded.strip()) > max_size:
            return unit
        return seeded
