"""Tests for corpus persistence, scraped page loading and the ingest script."""
import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from models.chunk import Chunk
from services.corpus_store import CorpusStore, CorpusMissingError
from services.document_loader import DocumentLoader
import ingest_documents

BRIDGE_TEXT = "The bridge moves funds from Ethereum to Pepe Unchained. Bridge fees are low and transfers are fast."


def make_chunk(index, content="Some chunk content."):
    return Chunk(
        url="https://guide.pepeunchained.com/bridge",
        title="Bridge",
        source_tag="guide",
        chunk_index=index,
        total_chunks=2,
        content=content,
        content_length=len(content),
    )


class TestCorpusStore:
    """Saving, loading and error reporting."""

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "processed_content.json"
        chunks = [make_chunk(0, "First."), make_chunk(1, "Second.")]

        assert CorpusStore(path).save_chunks(chunks) == 2

        loaded = asyncio.run(CorpusStore(path).load_chunks())
        assert list(loaded) == chunks

    def test_file_uses_camel_case_fields(self, tmp_path):
        path = tmp_path / "processed_content.json"
        CorpusStore(path).save_chunks([make_chunk(0, "First.")])

        records = json.loads(path.read_text(encoding="utf-8"))
        assert records == [{
            "url": "https://guide.pepeunchained.com/bridge",
            "title": "Bridge",
            "sourceTag": "guide",
            "chunkIndex": 0,
            "totalChunks": 2,
            "content": "First.",
            "contentLength": 6,
        }]

    def test_legacy_source_field(self, tmp_path):
        path = tmp_path / "processed_content.json"
        path.write_text(json.dumps([{"url": "https://pepeunchained.com/", "source": "main", "content": "Hello there."}]))

        chunk = asyncio.run(CorpusStore(path).load_chunks())[0]

        assert chunk.source_tag == "main"
        assert chunk.content_length == len("Hello there.")
        assert chunk.chunk_index == 0

    def test_missing_file(self, tmp_path):
        store = CorpusStore(tmp_path / "missing.json")

        with pytest.raises(CorpusMissingError, match="No processed data found"):
            asyncio.run(store.load_chunks())

    def test_empty_file(self, tmp_path):
        path = tmp_path / "processed_content.json"
        path.write_text("[]")

        with pytest.raises(CorpusMissingError):
            asyncio.run(CorpusStore(path).count())

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "processed_content.json"
        path.write_text("{not json")

        with pytest.raises(CorpusMissingError, match="unreadable"):
            asyncio.run(CorpusStore(path).load_chunks())

    @pytest.mark.parametrize("records", [
        [{"title": "No url", "content": "Hello there."}],
        [{"url": "https://pepeunchained.com/"}],
        [{"url": "https://pepeunchained.com/", "content": "Hi.", "chunkIndex": "first"}],
        {"url": "https://pepeunchained.com/", "content": "Not a list."},
    ])
    def test_malformed_records(self, tmp_path, records):
        path = tmp_path / "processed_content.json"
        path.write_text(json.dumps(records))

        with pytest.raises(CorpusMissingError, match="unreadable"):
            asyncio.run(CorpusStore(path).load_chunks())

    def test_corpus_is_cached_until_reload(self, tmp_path):
        path = tmp_path / "processed_content.json"
        store = CorpusStore(path)
        store.save_chunks([make_chunk(0)])
        CorpusStore(path).save_chunks([make_chunk(0), make_chunk(1)])

        assert asyncio.run(store.count()) == 1
        store.reload()
        assert asyncio.run(store.count()) == 2

    def test_save_replaces_cached_corpus(self, tmp_path):
        store = CorpusStore(tmp_path / "processed_content.json")
        store.save_chunks([make_chunk(0)])
        store.save_chunks([make_chunk(0), make_chunk(1)])

        assert asyncio.run(store.count()) == 2
        assert list(tmp_path.glob("*.tmp")) == []


class TestDocumentLoader:
    """Reading the scraper's output."""

    def test_load_documents(self, tmp_path):
        path = tmp_path / "scraped_content.json"
        path.write_text(json.dumps([
            {"url": "https://pepeunchained.com/", "title": "Home", "content": "Hello", "scrapedAt": "2024-01-01T00:00:00Z"},
            {"title": "No url", "content": "Ignored"},
        ]))

        documents = DocumentLoader(path).load_documents()

        assert len(documents) == 1
        assert documents[0].url == "https://pepeunchained.com/"
        assert documents[0].raw_text == "Hello"
        assert documents[0].fetched_at == "2024-01-01T00:00:00Z"

    def test_missing_file(self, tmp_path):
        assert DocumentLoader(tmp_path / "missing.json").load_documents() == []

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "scraped_content.json"
        path.write_text(json.dumps({"url": "https://pepeunchained.com/"}))

        assert DocumentLoader(path).load_documents() == []


class TestIngest:
    """End-to-end processing from scraped pages to the corpus file."""

    @pytest.fixture
    def scraped_file(self, tmp_path):
        path = tmp_path / "scraped_content.json"
        path.write_text(json.dumps([
            {"url": "https://guide.pepeunchained.com/bridge", "title": "Bridge", "content": BRIDGE_TEXT},
            {"url": "https://pepeunchained.com/", "title": "Home", "content": "Too short."},
        ]))
        return path

    def test_ingest(self, scraped_file, tmp_path):
        output = tmp_path / "processed_content.json"

        chunks = ingest_documents.ingest(str(scraped_file), str(output))

        assert len(chunks) == 1
        assert chunks[0].source_tag == "guide"
        assert chunks[0].content == BRIDGE_TEXT
        assert asyncio.run(CorpusStore(output).count()) == 1

    def test_main_success(self, scraped_file, tmp_path):
        output = tmp_path / "processed_content.json"

        exit_code = ingest_documents.main([
            "--input", str(scraped_file),
            "--output", str(output),
            "--max-size", "60",
            "--overlap", "0",
        ])

        assert exit_code == 0
        records = json.loads(output.read_text(encoding="utf-8"))
        assert [record["content"] for record in records] == [
            "The bridge moves funds from Ethereum to Pepe Unchained.",
            "Bridge fees are low and transfers are fast.",
        ]
        assert {record["totalChunks"] for record in records} == {2}

    def test_main_without_scraped_data(self, tmp_path):
        exit_code = ingest_documents.main([
            "--input", str(tmp_path / "missing.json"),
            "--output", str(tmp_path / "processed_content.json"),
        ])

        assert exit_code == 1
        assert not (tmp_path / "processed_content.json").exists()
