"""
GROQ SERVICE MODULE
===================

Inference-backed responder: sends the support-agent system prompt, the last few
history entries and the user's message to Groq (through LangChain) and returns
the model's text. Used by the chat handler when at least one GROQ_API_KEY is set.

ROUND-ROBIN API KEYS:
  - One ChatGroq client is built per key in GROQ_API_KEYS.
  - Each request uses the next client in order (class-level counter, shared by
    every GroqService instance in the process).
  - A failed call is not retried with another key: the reply falls back to the
    canned responder instead.

FALLBACK:
  If the call raises or the model returns empty text, generate() returns the
  CannedResponder's answer for the same message. Callers never see the error.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from langchain_groq import ChatGroq

from app.models import ChatMessage
from app.services.canned_responder import CannedResponder
from app.services.metrics import Metrics
from config import (
    GROQ_API_KEYS,
    GROQ_MODEL,
    MAX_RESPONSE_TOKENS,
    PROMPT_HISTORY_ENTRIES,
    SUPPORT_SYSTEM_PROMPT,
)

logger = logging.getLogger("assistant")


def escape_curly_braces(text: str) -> str:
    """Escape { and } so ChatPromptTemplate does not treat them as variables."""
    return text.replace("{", "{{").replace("}", "}}")


def _mask_key(key: str) -> str:
    return f"{key[:4]}...{key[-4:]}" if len(key) > 8 else "****"


class GroqService:
    """
    Builds the prompt and calls the next LLM client in round-robin order.
    llms can be any LangChain chat models (tests pass fakes).
    """

    _shared_key_index = 0

    def __init__(
        self,
        llms: Sequence[BaseChatModel],
        fallback: CannedResponder,
        metrics: Optional[Metrics] = None,
        history_entries: int = PROMPT_HISTORY_ENTRIES,
        key_labels: Optional[Sequence[str]] = None,
    ):
        if not llms:
            raise ValueError("GroqService needs at least one LLM client")
        self.llms = list(llms)
        self.fallback = fallback
        self.metrics = metrics
        self.history_entries = history_entries
        self.key_labels = list(key_labels) if key_labels else [f"client-{i + 1}" for i in range(len(self.llms))]
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", escape_curly_braces(SUPPORT_SYSTEM_PROMPT)),
            MessagesPlaceholder(variable_name="history"),
            ("human", "{question}"),
        ])

    @classmethod
    def from_api_keys(
        cls,
        api_keys: Sequence[str],
        fallback: CannedResponder,
        metrics: Optional[Metrics] = None,
    ) -> "GroqService":
        llms = [
            ChatGroq(
                api_key=key,
                model=GROQ_MODEL,
                max_tokens=MAX_RESPONSE_TOKENS,
                temperature=0.6,
            )
            for key in api_keys
        ]
        logger.info("Groq service using model %s with %d API key(s)", GROQ_MODEL, len(llms))
        return cls(llms, fallback, metrics=metrics, key_labels=[_mask_key(k) for k in api_keys])

    def _next_client_index(self) -> int:
        index = GroqService._shared_key_index % len(self.llms)
        GroqService._shared_key_index += 1
        return index

    def build_messages(self, question: str, history: Optional[List[ChatMessage]] = None) -> List[BaseMessage]:
        """System prompt, then the last history_entries messages, then the question."""
        recent = (history or [])[-self.history_entries:] if self.history_entries > 0 else []
        history_messages: List[BaseMessage] = []
        for entry in recent:
            if entry.role == "user":
                history_messages.append(HumanMessage(content=entry.content))
            else:
                history_messages.append(AIMessage(content=entry.content))
        return self.prompt.format_messages(history=history_messages, question=question)

    async def generate(
        self,
        message: str,
        history: Optional[List[ChatMessage]] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> str:
        messages = self.build_messages(message, history)
        index = self._next_client_index()
        started = time.perf_counter()
        try:
            response = await self.llms[index].ainvoke(messages)
        except Exception as e:
            logger.error("Groq call failed (key %s), using canned reply: %s", self.key_labels[index], e)
            return await self.fallback.generate(message, history, settings)
        finally:
            if self.metrics is not None:
                self.metrics.record_inference((time.perf_counter() - started) * 1000)

        content = response.content if isinstance(response.content, str) else ""
        if not content.strip():
            logger.warning("Groq returned an empty reply (key %s), using canned reply", self.key_labels[index])
            return await self.fallback.generate(message, history, settings)
        return content.strip()


def build_responder(metrics: Optional[Metrics] = None, api_keys: Optional[Sequence[str]] = None):
    """
    Pick the response strategy: GroqService when API keys are configured,
    CannedResponder otherwise.
    """
    keys = GROQ_API_KEYS if api_keys is None else api_keys
    canned = CannedResponder()
    if not keys:
        logger.warning("GROQ_API_KEY not set. Using canned responses only.")
        return canned
    return GroqService.from_api_keys(keys, canned, metrics=metrics)
