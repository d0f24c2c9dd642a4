"""Processed corpus storage backed by a JSON file."""
import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from models.chunk import Chunk
from config import PROCESSED_DATA_FILE

logger = logging.getLogger(__name__)


class CorpusMissingError(Exception):
    """Raised when no processed corpus is available."""

    def __init__(self, path: Path, reason: str = "No processed data found"):
        self.path = path
        super().__init__(f"{reason}: {path}. Please run the scraper and processor first.")


class CorpusStore:
    """
    Ordered chunk collection loaded once and cached as an immutable tuple.

    Reprocessing goes through ``save_chunks`` which writes a new file and swaps
    the cached tuple in one assignment, so readers always see either the old
    or the new corpus.
    """

    def __init__(self, processed_file: Union[str, Path] = PROCESSED_DATA_FILE):
        """
        Initialize the corpus store.

        Args:
            processed_file: Path to the processed chunks JSON file
        """
        self.processed_file = Path(processed_file)
        self._chunks: Optional[Tuple[Chunk, ...]] = None

    async def load_chunks(self) -> Tuple[Chunk, ...]:
        """
        Return the corpus, reading it from disk on first use.

        Raises:
            CorpusMissingError: If the file is missing, unreadable or empty
        """
        if self._chunks is None:
            chunks = await asyncio.to_thread(self._read)
            self._chunks = chunks
            logger.info(f"Loaded {len(chunks)} chunks from {self.processed_file}")
        return self._chunks

    async def count(self) -> int:
        return len(await self.load_chunks())

    def reload(self) -> None:
        """Drop the cached corpus so the next load re-reads the file."""
        self._chunks = None

    def save_chunks(self, chunks: Iterable[Chunk]) -> int:
        """
        Replace the stored corpus.

        Args:
            chunks: The complete new corpus

        Returns:
            Number of chunks written
        """
        snapshot = tuple(chunks)
        self.processed_file.parent.mkdir(parents=True, exist_ok=True)

        payload = json.dumps([chunk.to_dict() for chunk in snapshot], indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.processed_file.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_path, self.processed_file)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        self._chunks = snapshot
        logger.info(f"Saved {len(snapshot)} chunks to {self.processed_file}")
        return len(snapshot)

    def _read(self) -> Tuple[Chunk, ...]:
        if not self.processed_file.exists():
            raise CorpusMissingError(self.processed_file)

        try:
            records = json.loads(self.processed_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading processed data: {e}")
            raise CorpusMissingError(self.processed_file, reason="Processed data is unreadable") from e

        if not records:
            raise CorpusMissingError(self.processed_file)

        try:
            return tuple(Chunk.from_dict(record) for record in records)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed chunk record in processed data: {e!r}")
            raise CorpusMissingError(self.processed_file, reason="Processed data is unreadable") from e
