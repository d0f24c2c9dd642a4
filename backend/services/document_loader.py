"""Document loading service for scraped web pages."""
import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from models.document import Document
from config import SCRAPED_DATA_FILE

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Loads scraped pages written by the scraper."""

    def __init__(self, scraped_file: Union[str, Path] = SCRAPED_DATA_FILE):
        """
        Initialize DocumentLoader.

        Args:
            scraped_file: Path to the JSON array of scraped pages
        """
        self.scraped_file = Path(scraped_file)

    def load_documents(self) -> List[Document]:
        """
        Load all scraped pages.

        Each record is expected to carry ``url``, ``title``, ``content`` and
        ``scrapedAt``. Records without a URL are skipped.

        Returns:
            List of Document objects, empty if the file is missing or unreadable
        """
        if not self.scraped_file.exists():
            logger.error(f"Scraped data file not found: {self.scraped_file}")
            return []

        try:
            records = json.loads(self.scraped_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading scraped data from {self.scraped_file}: {e}")
            return []

        if not isinstance(records, list):
            logger.error(f"Scraped data in {self.scraped_file} is not a list")
            return []

        documents = []
        for record in records:
            document = self._to_document(record)
            if document:
                documents.append(document)

        logger.info(f"Loaded {len(documents)} documents from {self.scraped_file}")
        return documents

    def _to_document(self, record: dict) -> Optional[Document]:
        if not isinstance(record, dict) or not record.get("url"):
            logger.warning("Skipping scraped record without a URL")
            return None

        return Document(
            url=record["url"],
            title=record.get("title") or "",
            raw_text=record.get("content") or record.get("rawText") or "",
            fetched_at=record.get("scrapedAt") or record.get("fetchedAt"),
        )
