"""Document data models."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Document:
    """A scraped web page, immutable once captured."""
    url: str
    title: str
    raw_text: str
    fetched_at: Optional[str] = None
