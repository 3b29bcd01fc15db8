"""Structured result returned by the context extraction step.

This is the boundary between "whatever JSON the LLM sent back" and typed
data.  Every field has a default so a partially filled reply still
validates: missing lists become empty, a missing coordinate becomes the
origin in the "General" category, a missing summary becomes "".
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Coordinates live in a nominal [-100, 100] square.
COORDINATE_LIMIT = 100.0


class ExtractedEntity(BaseModel):
    """An entity named in the input, with the LLM's free-text type label."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str = ""

    @field_validator("name", "type", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value


class ExtractedRelationship(BaseModel):
    """A relationship between two entity names."""

    model_config = ConfigDict(frozen=True)

    source: str = ""
    target: str = ""
    relation: str = ""

    @field_validator("source", "target", "relation", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value


class VectorCoordinate(BaseModel):
    """Pseudo-embedding position plus a high-level cluster name."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    category: str = "General"

    @field_validator("x", "y", mode="before")
    @classmethod
    def _clamp(cls, value: object) -> float:
        if value is None:
            return 0.0
        try:
            number = float(value)  # type: ignore[arg-type]
        except TypeError as exc:
            raise ValueError(f"coordinate is not a number: {value!r}") from exc
        return max(-COORDINATE_LIMIT, min(COORDINATE_LIMIT, number))

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> str:
        if value is None or not str(value).strip():
            return "General"
        return str(value)


class ProcessingResult(BaseModel):
    """Everything the extractor pulled out of one piece of text."""

    model_config = ConfigDict(frozen=True)

    entities: list[ExtractedEntity] = Field(default_factory=list)
    relationships: list[ExtractedRelationship] = Field(default_factory=list)
    vector: VectorCoordinate = Field(default_factory=VectorCoordinate)
    summary: str = ""

    @field_validator("entities", mode="after")
    @classmethod
    def _drop_nameless(cls, entities: list[ExtractedEntity]) -> list[ExtractedEntity]:
        # A node is keyed by its label; an entity without a name has none.
        return [e for e in entities if e.name.strip()]

    @field_validator("entities", "relationships", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("vector", mode="before")
    @classmethod
    def _none_to_origin(cls, value: object) -> object:
        return VectorCoordinate() if value is None else value

    @field_validator("summary", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> str:
        return "" if value is None else str(value)
