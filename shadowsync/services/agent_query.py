"""Answers free-text questions against a context summary of the stores.

The service never raises.  Every outcome is a displayable string, so the
chat transcript always gets an agent reply:

    no credential      -> "I cannot connect to the intelligence layer (Missing API Key)."
    provider error     -> "Error querying the agent."
    empty reply        -> "No response generated."

Successful answers are cached for a short TTL keyed on a hash of the
question and the context summary, so asking the same thing twice against
an unchanged memory does not cost a second LLM call.
"""

from __future__ import annotations

import hashlib

import structlog

from shadowsync.interfaces.cache_provider import ICacheProvider
from shadowsync.interfaces.llm_provider import ILLMProvider
from shadowsync.utils.errors import LLMError
from shadowsync.utils.logging import get_logger

MISSING_KEY_REPLY = "I cannot connect to the intelligence layer (Missing API Key)."
QUERY_ERROR_REPLY = "Error querying the agent."
EMPTY_REPLY = "No response generated."

logger: structlog.BoundLogger = get_logger(__name__)


class AgentQueryService:
    """Sends a user query plus the memory context to the LLM.

    Parameters
    ----------
    llm:
        LLM provider used for generating answers.
    cache:
        Optional cache provider to avoid re-asking identical questions.
    """

    _SYSTEM_PROMPT = (
        "You are ShadowSync, an AI with persistent distributed memory.\n"
        "Use the provided CONTEXT LOG to answer the user's query.\n"
        "If the answer isn't in the context, admit it but try to infer from what you know.\n"
        "Be concise, technical, and helpful."
    )

    def __init__(self, llm: ILLMProvider, cache: ICacheProvider | None = None) -> None:
        self._llm = llm
        self._cache = cache

    async def ask(self, query: str, context_summary: str) -> str:
        """Return the agent's answer to *query* given *context_summary*."""
        provider = self._llm.get_provider_name()
        if not self._llm.is_available():
            logger.warning("agent_query_unconfigured", provider=provider)
            return MISSING_KEY_REPLY

        cache_key = self._cache_key(query, context_summary)
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                logger.debug("agent_query_cache_hit", cache_key=cache_key)
                return str(cached)

        try:
            answer = await self._llm.complete(
                system_prompt=self._SYSTEM_PROMPT,
                user_prompt=self._build_user_prompt(query, context_summary),
            )
        except LLMError as exc:
            logger.error("agent_query_failed", provider=provider, error=str(exc))
            return QUERY_ERROR_REPLY
        except Exception as exc:
            logger.error(
                "agent_query_unexpected_error",
                provider=provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return QUERY_ERROR_REPLY

        answer = (answer or "").strip()
        if not answer:
            logger.warning("agent_query_empty_reply", provider=provider)
            return EMPTY_REPLY

        if self._cache is not None:
            await self._cache.set(cache_key, answer)

        logger.info("agent_query_answered", provider=provider, answer_length=len(answer))
        return answer

    @staticmethod
    def _build_user_prompt(query: str, context_summary: str) -> str:
        return f"CONTEXT LOG:\n{context_summary}\n\nUSER QUERY:\n{query}"

    @staticmethod
    def _cache_key(query: str, context_summary: str) -> str:
        raw = f"{query}\x00{context_summary}"
        return "agent:" + hashlib.sha256(raw.encode()).hexdigest()[:32]
