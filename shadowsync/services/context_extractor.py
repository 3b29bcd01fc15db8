"""LLM-backed extraction of structured context from free-form text.

The extractor asks the configured language model for a single JSON object
describing the entities in the input, the relationships between them, a
2D pseudo-embedding coordinate and a one-line summary.  The reply is parsed
defensively (markdown fences and surrounding prose are stripped) and
validated into a :class:`ProcessingResult`.

The extractor fails closed.  Every failure mode (no credential, provider
error, unparseable or invalid JSON) is logged and collapses to ``None``;
the orchestrator turns that into one failure event.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from pydantic import ValidationError

from shadowsync.interfaces.llm_provider import ILLMProvider
from shadowsync.models.extraction import ProcessingResult
from shadowsync.utils.errors import ExtractionError, LLMError
from shadowsync.utils.logging import get_logger

# Markdown code fences (```json ... ``` or ``` ... ```) that models wrap
# around JSON even in JSON mode.
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Low temperature keeps repeated extractions of the same text stable.
_EXTRACTION_TEMPERATURE = 0.1
_EXTRACTION_MAX_TOKENS = 1500


class ContextExtractor:
    """Turns raw text into a :class:`ProcessingResult` via an LLM.

    Parameters
    ----------
    llm_provider:
        The LLM backend used for the completion.
    """

    _SYSTEM_PROMPT = (
        "You are the extraction layer of the ShadowSync Context Engine. "
        "You read short pieces of user context and return structured knowledge "
        "for a knowledge graph and a 2D semantic map.\n\n"
        "Return ONLY a JSON object with exactly these keys:\n"
        "{\n"
        '  "entities": [{"name": "string", "type": "e.g. Person, Location, Concept, Event"}],\n'
        '  "relationships": [{"source": "must match an entity name", '
        '"target": "must match an entity name", '
        '"relation": "e.g. lives in, works on, happened at"}],\n'
        '  "vectorCoordinates": {"x": number, "y": number, '
        '"category": "high level cluster name"},\n'
        '  "summary": "one sentence"\n'
        "}\n\n"
        "Rules:\n"
        "- x and y are abstract coordinates between -100 and 100 chosen so that "
        "semantically similar inputs land close together.\n"
        "- Use an empty list when there are no entities or relationships.\n"
        "- Do not wrap the JSON in markdown and do not add commentary."
    )

    def __init__(self, llm_provider: ILLMProvider) -> None:
        self._llm = llm_provider
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def extract(self, text: str) -> ProcessingResult | None:
        """Extract entities, relationships, a coordinate and a summary.

        Returns
        -------
        ProcessingResult or None
            ``None`` when no LLM credential is configured, the provider
            call fails, or the reply cannot be parsed into the expected
            shape.
        """
        provider = self._llm.get_provider_name()
        if not self._llm.is_available():
            self._logger.error("extraction_unconfigured", provider=provider)
            return None

        self._logger.info("extraction_start", provider=provider, text_length=len(text))
        try:
            response = await self._llm.complete(
                system_prompt=self._SYSTEM_PROMPT,
                user_prompt=self._build_user_prompt(text),
                temperature=_EXTRACTION_TEMPERATURE,
                max_tokens=_EXTRACTION_MAX_TOKENS,
                json_mode=True,
            )
            result = self._to_result(self._parse_llm_response(response))
        except LLMError as exc:
            self._logger.error("extraction_provider_error", provider=provider, error=str(exc))
            return None
        except (ExtractionError, json.JSONDecodeError, ValidationError, ValueError) as exc:
            self._logger.error("extraction_parse_error", provider=provider, error=str(exc))
            return None
        except Exception as exc:
            self._logger.exception("extraction_unexpected_error", provider=provider, error=str(exc))
            return None

        self._logger.info(
            "extraction_complete",
            provider=provider,
            entities=len(result.entities),
            relationships=len(result.relationships),
            category=result.vector.category,
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _build_user_prompt(text: str) -> str:
        return (
            "Analyze this user input for the ShadowSync Context Engine.\n"
            "Extract key entities, relationships for a knowledge graph, and generate "
            "pseudo-vector coordinates (-100 to 100) based on semantic meaning.\n"
            f'Input: "{text}"'
        )

    @staticmethod
    def _parse_llm_response(response: str) -> dict[str, Any]:
        """Pull the JSON object out of *response*.

        Raises
        ------
        ExtractionError
            If the response is empty or not a JSON object.
        json.JSONDecodeError
            If the located text is not valid JSON.
        """
        text = response.strip()
        if not text:
            raise ExtractionError("LLM returned an empty response")

        fence_match = _JSON_FENCE_RE.search(text)
        if fence_match:
            text = fence_match.group(1).strip()

        if not text.startswith("{"):
            brace_start = text.find("{")
            brace_end = text.rfind("}")
            if brace_start == -1 or brace_end <= brace_start:
                raise ExtractionError("No JSON object found in LLM response")
            text = text[brace_start : brace_end + 1]

        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ExtractionError(f"Expected a JSON object, got {type(parsed).__name__}")
        return parsed

    @staticmethod
    def _to_result(data: dict[str, Any]) -> ProcessingResult:
        # The prompt asks for "vectorCoordinates"; accept "vector" as well.
        vector = data.get("vectorCoordinates", data.get("vector"))
        return ProcessingResult.model_validate(
            {
                "entities": data.get("entities"),
                "relationships": data.get("relationships"),
                "vector": vector,
                "summary": data.get("summary"),
            }
        )
