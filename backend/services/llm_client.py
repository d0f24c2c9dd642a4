"""LLM Client for Groq API integration."""
import re
import time
from dataclasses import dataclass
from typing import List, Optional, Dict, Any
from groq import AsyncGroq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from models.chunk import ScoredChunk
from config import (
    GROQ_API_KEY,
    GENERATION_MODEL,
    GENERATION_TEMPERATURE,
    GENERATION_MAX_TOKENS,
    PROMPT_CHUNK_CHAR_BUDGET,
)

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
QUOTA_MARKERS = ("quota", "429", "insufficient_quota")

DEFAULT_KNOWLEDGE = """IMPORTANT DEFAULT KNOWLEDGE ABOUT PEPE UNCHAINED:
- Pepe Unchained is an EVM (Ethereum Virtual Machine) compatible Layer 2 (L2) blockchain
- It has very low transaction fees compared to Ethereum mainnet
- It has fast transaction speeds
- PEPU is the native token of the Pepe Unchained network
- The network is designed for scalability and cost efficiency"""

SYSTEM_PROMPT = f"""You are a friendly and helpful assistant for Pepe Unchained. Answer questions naturally and conversationally, as if you're explaining to a friend. Use the provided context to give accurate answers. Be warm, engaging, and avoid sounding robotic or overly formal.

{DEFAULT_KNOWLEDGE}

Always remember these core facts about Pepe Unchained when answering questions."""

SENTENCE_SPLIT = re.compile(r"[.!?]+")


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)

    @property
    def is_quota_error(self) -> bool:
        """Quota or billing exhaustion, by code or by marker in the message."""
        if self.error.code == QUOTA_EXCEEDED:
            return True
        text = f"{self.error.message} {self.error.details.get('original_error', '')}".lower()
        return any(marker in text for marker in QUOTA_MARKERS)


class LLMClient:
    """Async client for interfacing with Groq API for text generation."""

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.client = AsyncGroq(api_key=self.api_key)
        logger.info("LLMClient initialized successfully")

    async def generate(
        self,
        prompt: str,
        model: str = GENERATION_MODEL,
        temperature: float = GENERATION_TEMPERATURE,
        max_tokens: int = GENERATION_MAX_TOKENS,
        system_prompt: str = SYSTEM_PROMPT
    ) -> LLMResponse:
        """
        Generate response using Groq API.

        Args:
            prompt: Complete prompt with context and query
            model: Model name
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            system_prompt: System message sent ahead of the prompt

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {model}")

            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt}
                ],
                max_tokens=max_tokens,
                temperature=temperature
            )

            latency_ms = int((time.time() - start_time) * 1000)
            text = response.choices[0].message.content or ""
            tokens_input = response.usage.prompt_tokens
            tokens_output = response.usage.completion_tokens

            logger.info(
                f"Generated response: model={model}, "
                f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
                f"latency={latency_ms}ms"
            )

            return LLMResponse(
                text=text,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                latency_ms=latency_ms,
                model_used=model
            )

        except RateLimitError as e:
            raise self._error(
                QUOTA_EXCEEDED,
                "Generation quota exceeded. Please check your plan and billing details.",
                model, start_time, e
            )

        except AuthenticationError as e:
            raise self._error(
                "AUTHENTICATION_ERROR",
                "Authentication failed. Please check your API key.",
                model, start_time, e
            )

        except APITimeoutError as e:
            raise self._error(
                "TIMEOUT_ERROR",
                "Request timed out. Please try again.",
                model, start_time, e
            )

        except APIError as e:
            raise self._error("API_ERROR", f"Groq API error: {str(e)}", model, start_time, e)

        except Exception as e:
            raise self._error(
                "UNKNOWN_ERROR",
                f"Unexpected error during generation: {str(e)}",
                model, start_time, e
            )

    @staticmethod
    def _error(code: str, message: str, model: str, start_time: float, exc: Exception) -> LLMClientError:
        latency_ms = int((time.time() - start_time) * 1000)
        error = LLMError(
            code=code,
            message=message,
            details={
                "model": model,
                "latency_ms": latency_ms,
                "original_error": str(exc),
                "error_type": type(exc).__name__
            }
        )
        logger.error(
            f"Generation failed: code={code}, model={model}, latency={latency_ms}ms, error={exc}",
            exc_info=True,
            extra={"error_code": code}
        )
        return LLMClientError(error)

    @staticmethod
    def build_prompt(
        query: str,
        retrieved_chunks: List[ScoredChunk],
        char_budget: int = PROMPT_CHUNK_CHAR_BUDGET
    ) -> str:
        """
        Build the user prompt from retrieved chunks.

        Args:
            query: User question
            retrieved_chunks: Chunks selected by the retriever
            char_budget: Per-chunk character cap

        Returns:
            Complete prompt string
        """
        context_parts = []
        for scored in retrieved_chunks:
            content = scored.chunk.content
            if len(content) > char_budget:
                content = content[:char_budget] + "..."
            context_parts.append(f"[{scored.chunk.url}]\n{content}\n\n")
        context = "".join(context_parts)

        return (
            f"Here's some information about Pepe Unchained:\n\n{context}\n\n"
            f"Based on this information, answer this question in a friendly, conversational way:\n\n{query}"
        )

    @staticmethod
    def make_concise(answer: str, max_sentences: int = 3) -> str:
        """Keep answers of more than two sentences to the first ``max_sentences``."""
        sentences = [s for s in SENTENCE_SPLIT.split(answer) if s.strip()]

        if len(sentences) <= 2:
            return answer.strip()

        concise = ". ".join(s.strip() for s in sentences[:max_sentences]).strip()
        return concise if concise.endswith(".") else concise + "."
