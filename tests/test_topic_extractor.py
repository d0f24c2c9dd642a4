"""Unit tests for TopicExtractor."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from services.topic_extractor import TopicExtractor


class TestTopicExtractor:
    """Test suite for topic extraction."""

    @pytest.fixture
    def extractor(self):
        return TopicExtractor()

    def test_known_topic_in_query(self, extractor):
        topic = extractor.extract_topic("How do I bridge funds?", "You can move funds in a few clicks.")
        assert topic == "bridge"

    def test_known_topic_in_answer(self, extractor):
        topic = extractor.extract_topic("Where can I see my transfers", "Open the wallet app.")
        assert topic == "wallet"

    def test_most_specific_topic_wins(self, extractor):
        """PepuScan is listed before the generic explorer topic."""
        topic = extractor.extract_topic("Is there an explorer", "Yes, PepuScan is the block explorer.")
        assert topic == "pepuscan"

    def test_generic_topic_suppressed_for_how_do_i_use(self, extractor):
        """Direct how-to questions about generic concepts get no topic."""
        assert extractor.extract_topic("How do I use the dex?", "Open it and swap.") is None

    def test_generic_topic_kept_for_other_questions(self, extractor):
        assert extractor.extract_topic("Is there a dex", "Yes there is.") == "dex"

    def test_noun_fallback(self, extractor):
        """Without a known topic, the first non-generic content word is used."""
        topic = extractor.extract_topic("Tell me about airdrops?", "Airdrops happen sometimes.")
        assert topic == "airdrops"

    def test_noun_fallback_skips_generic_words(self, extractor):
        assert extractor.extract_topic("pepe unchained", "It is great.") is None

    def test_noun_fallback_skips_short_words(self, extractor):
        assert extractor.extract_topic("is it fun", "Yes.") is None

    def test_follow_up_queries(self, extractor):
        assert extractor.follow_up_query("bridge") == "How do I bridge assets to Pepe Unchained?"
        assert extractor.follow_up_query("staking") == "How do I stake PEPU tokens?"
        assert extractor.follow_up_query("pepuscan") == "What is PepuScan and how do I use it?"
        assert extractor.follow_up_query("roadmap") == "Tell me more about roadmap"
