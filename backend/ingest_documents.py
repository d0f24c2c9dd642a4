"""
Document Ingestion Script for the Pepe Unchained Knowledge Assistant.

This script:
1. Loads scraped pages from the scraped content JSON file
2. Cleans and chunks them into overlapping segments
3. Replaces the processed corpus file

Usage:
    python ingest_documents.py [--input PATH] [--output PATH] [--max-size N] [--overlap N]
"""
import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from services.document_loader import DocumentLoader
from services.chunking_engine import ChunkingEngine
from services.corpus_store import CorpusStore
from models.chunk import Chunk
from config import SCRAPED_DATA_FILE, PROCESSED_DATA_FILE, CHUNK_SIZE, CHUNK_OVERLAP

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rebuild the processed knowledge base")
    parser.add_argument("--input", default=str(SCRAPED_DATA_FILE), help="Scraped content JSON file")
    parser.add_argument("--output", default=str(PROCESSED_DATA_FILE), help="Processed chunks JSON file")
    parser.add_argument("--max-size", type=int, default=CHUNK_SIZE, help="Maximum chunk size in characters")
    parser.add_argument("--overlap", type=int, default=CHUNK_OVERLAP, help="Chunk overlap hint in characters")
    return parser.parse_args(argv)


def ingest(
    input_path: str,
    output_path: str,
    max_size: int = CHUNK_SIZE,
    overlap: int = CHUNK_OVERLAP
) -> List[Chunk]:
    """
    Chunk scraped documents and replace the processed corpus.

    Returns:
        The chunks written, empty when there was nothing to process
    """
    documents = DocumentLoader(input_path).load_documents()
    if not documents:
        logger.error("No scraped data found. Please run the scraper first.")
        return []

    chunking_engine = ChunkingEngine(chunk_size=max_size, chunk_overlap=overlap)
    chunks = chunking_engine.chunk_documents(documents)
    if not chunks:
        logger.error("Scraped pages contained no usable text")
        return []

    CorpusStore(output_path).save_chunks(chunks)

    total_chars = sum(chunk.content_length for chunk in chunks)
    logger.info("=" * 60)
    logger.info("Processing Complete!")
    logger.info(f"Documents processed: {len(documents)}")
    logger.info(f"Total chunks: {len(chunks)}")
    logger.info(f"Total characters: {total_chars:,}")
    logger.info(f"Average chunk size: {round(total_chars / len(chunks))} characters")
    logger.info(f"Processed data saved to: {output_path}")
    logger.info("=" * 60)
    return chunks


def main(argv: Optional[List[str]] = None) -> int:
    """Main ingestion process."""
    args = parse_args(argv)
    try:
        chunks = ingest(args.input, args.output, args.max_size, args.overlap)
    except KeyboardInterrupt:
        logger.warning("Ingestion interrupted by user")
        return 1
    except Exception as e:
        logger.error(f"Ingestion failed: {str(e)}", exc_info=True)
        return 1
    return 0 if chunks else 1


if __name__ == "__main__":
    sys.exit(main())
