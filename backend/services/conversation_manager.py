"""Conversation manager: per-session follow-up state machine for chat messages."""
import logging
from typing import Optional

from models.conversation import ConversationContext
from services.corpus_store import CorpusStore, CorpusMissingError
from services.knowledge_agent import KnowledgeAgent
from services.llm_client import LLMClient, LLMClientError
from services.message_sink import MessageSink
from services.price_client import (
    PriceClient,
    PriceFetchError,
    format_price_blurb,
    format_price_response,
)
from services.query_classifier import QueryClassifier
from services.session_store import SessionStore
from services.topic_extractor import TopicExtractor

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = """🤖 *Welcome to the Pepe Unchained AI Agent!*

I'm an AI assistant trained on information from:
• pepeunchained.com
• guide.pepeunchained.com

You can ask me anything about Pepe Unchained!

*Commands:*
/start - Show this welcome message
/help - Show help information
/status - Check if I'm ready to answer questions
/reset - Forget our conversation so far"""

HELP_MESSAGE = """*Pepe Unchained AI Agent Help*

Simply send me any question about Pepe Unchained and I'll answer from the knowledge base.

*Example questions:*
• What is Pepe Unchained?
• How does the token work?
• What are the features?
• Tell me about the roadmap"""

SETUP_MESSAGE = """📚 *Knowledge base not found!*

The bot needs the websites scraped and processed first.

Please scrape the sites, then run:
```
python backend/ingest_documents.py
```
Once complete, you can ask me questions again! 🚀"""

NO_THANKS_MESSAGE = "No problem! Ask me anything else about Pepe Unchained. 😊"
RESET_MESSAGE = "Conversation cleared. Ask me anything about Pepe Unchained!"
PRICE_ERROR_MESSAGE = (
    "❌ Sorry, I couldn't fetch the current PEPU price right now. "
    "Please try again later or check GeckoTerminal directly."
)
FALLBACK_NOTICE = (
    "💳 *Using Fallback Mode*\n\n"
    "The generation quota is exhausted. Here's an answer from the knowledge base:\n\n"
)
BILLING_HINT = "💡 *To enable AI responses:* check the billing and limits of your Groq account at https://console.groq.com"
QUOTA_MESSAGE = (
    "💳 *Generation Quota Exceeded*\n\n"
    "The language model quota for this bot has been used up.\n\n"
    "*To fix this:* check the billing and limits of your Groq account at https://console.groq.com\n\n"
    "Sorry, fallback mode also failed. Please set up billing to continue."
)
FOLLOW_UP_OFFER = "Would you like to know more about {topic}?"


class ConversationManager:
    """
    Decides what to send for each inbound chat message.

    Per session the manager is either idle or awaiting a reply to a
    follow-up offer. Each message is checked, in order, for: small talk,
    an accepted offer, a declined offer, a price question, and finally a
    knowledge question. Context changes are made on a working copy and
    committed once the turn has been answered; a failed turn leaves the
    stored context as it was.
    """

    # Topics too broad to offer again right after a question that named them
    GENERIC_TOPICS = ("token", "dex", "blockchain", "network")

    def __init__(
        self,
        agent: KnowledgeAgent,
        price_client: PriceClient,
        corpus_store: CorpusStore,
        sink: MessageSink,
        sessions: Optional[SessionStore] = None,
        classifier: Optional[QueryClassifier] = None,
        topic_extractor: Optional[TopicExtractor] = None
    ):
        self.agent = agent
        self.price_client = price_client
        self.corpus_store = corpus_store
        self.sink = sink
        self.sessions = sessions or SessionStore()
        self.classifier = classifier or QueryClassifier()
        self.topic_extractor = topic_extractor or TopicExtractor()
        logger.info("ConversationManager initialized")

    async def handle(
        self,
        session_id: str,
        text: str,
        from_name: Optional[str] = None,
        sink: Optional[MessageSink] = None
    ) -> None:
        """
        Handle one inbound message. Never raises.

        Args:
            session_id: Stable chat id
            text: Message text
            from_name: Display name of the sender, for logs
            sink: Transport to reply on (defaults to the manager's sink)
        """
        sink = sink or self.sink
        if not text or not text.strip():
            return

        async with self.sessions.locked(session_id):
            try:
                if text.startswith("/"):
                    await self._handle_command(session_id, text, sink)
                    return

                logger.info(f"Query from {from_name or 'unknown'}: {text}", extra={"session_id": session_id})
                await sink.notify_typing(session_id)
                await self._process_message(session_id, text, sink)
            except Exception as e:
                logger.error(f"Error processing message for {session_id}: {e}", exc_info=True)
                await self._send_safely(sink, session_id, self._generic_error(e))

    def reset_session(self, session_id: str) -> None:
        self.sessions.delete(session_id)

    async def status(self) -> int:
        """
        Number of chunks in the knowledge base.

        Raises:
            CorpusMissingError: If no processed corpus exists
        """
        return await self.corpus_store.count()

    async def _process_message(self, session_id: str, text: str, sink: MessageSink) -> None:
        context = self.sessions.get(session_id)

        greeting = self.classifier.greeting_response(text)
        if greeting:
            self.sessions.delete(session_id)
            await sink.send_message(session_id, greeting)
            return

        waiting = context is not None and context.waiting_for_follow_up

        if waiting and context.last_topic and self.classifier.is_yes_response(text):
            follow_up = self.topic_extractor.follow_up_query(context.last_topic)
            logger.info(f"Follow-up query: {follow_up}", extra={"session_id": session_id, "topic": context.last_topic})
            context.asked_topics.add(context.last_topic.lower())
            context.last_topic = None
            context.waiting_for_follow_up = False
            await self._answer(session_id, follow_up, context, sink)
            return

        if waiting and self.classifier.is_no_response(text):
            self.sessions.delete(session_id)
            await sink.send_message(session_id, NO_THANKS_MESSAGE)
            return

        if self.classifier.is_price_question(text):
            await self._send_price(session_id, sink)
            return

        if context is not None and self.classifier.is_new_question(text):
            logger.debug("New question, resetting topic context", extra={"session_id": session_id})
            context = None

        await self._answer(session_id, text, context or ConversationContext(), sink)

    async def _answer(
        self,
        session_id: str,
        query: str,
        context: ConversationContext,
        sink: MessageSink
    ) -> None:
        try:
            classification = self.classifier.classify_query(query)
            price_blurb = await self._price_blurb(query)
            answer = await self.agent.answer(query, classification.top_k)
        except Exception as e:
            await self._send_error(session_id, query, e, sink)
            return

        response_text = LLMClient.make_concise(answer.text)
        if price_blurb:
            response_text = f"{response_text}\n\n{price_blurb}"
        await sink.send_message(session_id, response_text)

        topic = self.topic_extractor.extract_topic(query, answer.text)
        if self.should_offer_follow_up(context, topic):
            context.last_topic = topic
            context.last_question = query
            context.waiting_for_follow_up = True
            self.sessions.set(session_id, context)
            logger.info(f"Offering follow-up on {topic}", extra={"session_id": session_id, "topic": topic})
            await sink.send_message(session_id, FOLLOW_UP_OFFER.format(topic=topic))
        else:
            self.sessions.delete(session_id)

    def should_offer_follow_up(self, context: ConversationContext, topic: Optional[str]) -> bool:
        """
        Offer a topic unless it is empty, the current topic, already offered
        and accepted in this session, or a generic topic the last question
        already named.
        """
        if not topic:
            return False
        topic_lower = topic.lower()
        if context.last_topic and topic_lower == context.last_topic.lower():
            return False
        if topic_lower in context.asked_topics:
            return False
        if (
            topic_lower in self.GENERIC_TOPICS
            and context.last_question
            and topic_lower in context.last_question.lower()
        ):
            return False
        return True

    async def _price_blurb(self, query: str) -> Optional[str]:
        if not self.classifier.is_token_question(query):
            return None
        try:
            return format_price_blurb(await self.price_client.get_price())
        except PriceFetchError as e:
            logger.warning(f"Continuing without price for token question: {e}")
            return None

    async def _send_price(self, session_id: str, sink: MessageSink) -> None:
        self.sessions.delete(session_id)
        try:
            snapshot = await self.price_client.get_price()
        except PriceFetchError as e:
            logger.error(f"Error fetching price: {e}", extra={"session_id": session_id})
            await sink.send_message(session_id, PRICE_ERROR_MESSAGE)
            return
        await sink.send_message(session_id, format_price_response(snapshot))

    async def _send_error(self, session_id: str, query: str, error: Exception, sink: MessageSink) -> None:
        """Report a failed answer. The stored context is left untouched."""
        if isinstance(error, LLMClientError) and error.is_quota_error:
            logger.warning("Quota error detected, trying fallback mode", extra={"session_id": session_id})
            fallback = None
            try:
                fallback = await self.agent.fallback_answer(query)
            except Exception as fallback_error:
                logger.error(f"Fallback error: {fallback_error}", exc_info=True)

            if fallback:
                await sink.send_message(session_id, FALLBACK_NOTICE)
                await sink.send_message(session_id, fallback)
                await sink.send_message(session_id, BILLING_HINT)
            else:
                await sink.send_message(session_id, QUOTA_MESSAGE)
            return

        if isinstance(error, CorpusMissingError):
            logger.error(f"Knowledge base missing: {error}", extra={"session_id": session_id})
            await sink.send_message(session_id, SETUP_MESSAGE)
            return

        logger.error(f"Error answering query: {error}", exc_info=error, extra={"session_id": session_id})
        await sink.send_message(session_id, self._generic_error(error))

    @staticmethod
    def _generic_error(error: Exception) -> str:
        return f"❌ Sorry, I encountered an error: {error}\n\nPlease try again or contact the administrator."

    async def _send_safely(self, sink: MessageSink, session_id: str, text: str) -> None:
        try:
            await sink.send_message(session_id, text)
        except Exception as e:
            logger.error(f"Could not deliver message to {session_id}: {e}", exc_info=True)

    async def _handle_command(self, session_id: str, text: str, sink: MessageSink) -> None:
        command = text.split()[0].split("@")[0].lower()

        if command == "/start":
            await sink.send_message(session_id, WELCOME_MESSAGE)
        elif command == "/help":
            await sink.send_message(session_id, HELP_MESSAGE)
        elif command == "/status":
            try:
                count = await self.status()
            except CorpusMissingError as e:
                logger.warning(f"Status requested without a corpus: {e}")
                await sink.send_message(session_id, SETUP_MESSAGE)
                return
            await sink.send_message(
                session_id,
                f"*Bot Status*\n\n✅ Bot is running\n📚 Knowledge base: {count} chunks loaded\n\nReady to answer questions! 🚀"
            )
        elif command == "/reset":
            self.reset_session(session_id)
            await sink.send_message(session_id, RESET_MESSAGE)
        else:
            logger.debug(f"Ignoring unknown command {command}")
