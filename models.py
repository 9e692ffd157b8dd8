"""
Schema for German legal search results.

Documents come from the rechtsinformationen.bund.de search API; every stage
of the query pipeline exchanges the models defined here.

Unified models for candidate terms, external documents and ranked results.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Request limits ────────────────────────────────────────────
DEFAULT_THRESHOLD = 0.3
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MIN_QUERY_LENGTH = 3


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class TermOrigin(str, Enum):
    LEGAL_REFERENCE = "legal-reference"
    CONCEPT_CORRECTION = "concept-correction"
    TRANSLATION = "translation"
    EXPANSION = "expansion"
    ORIGINAL = "original"


ORIGIN_PRIORITY = {
    TermOrigin.LEGAL_REFERENCE: Priority.HIGH,
    TermOrigin.CONCEPT_CORRECTION: Priority.MEDIUM,
    TermOrigin.TRANSLATION: Priority.LOW,
    TermOrigin.EXPANSION: Priority.LOW,
    TermOrigin.ORIGINAL: Priority.LOW,
}


class OutcomeStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


# ============================================================
# Query side
# ============================================================


class SearchRequest(BaseModel):
    """A single legal search request as received at the tool boundary."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(..., description="Natural-language query in German or English")
    threshold: float = Field(
        DEFAULT_THRESHOLD,
        description="Fuzzy match threshold 0.0-1.0; lower is stricter",
    )
    limit: int = Field(DEFAULT_LIMIT, description=f"Max results (max {MAX_LIMIT})")

    @field_validator("query", mode="before")
    @classmethod
    def validate_query(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("query must be a string")
        v = normalize_whitespace(v)
        if len(v) < MIN_QUERY_LENGTH:
            raise ValueError(f"query must have at least {MIN_QUERY_LENGTH} characters")
        return v

    @field_validator("threshold", mode="before")
    @classmethod
    def coerce_threshold(cls, v: Any) -> float:
        value = _to_float(v)
        if value is None:
            return DEFAULT_THRESHOLD
        return min(max(value, 0.0), 1.0)

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_limit(cls, v: Any) -> int:
        value = _to_float(v)
        if value is None:
            return DEFAULT_LIMIT
        return min(max(int(value), 1), MAX_LIMIT)


class CandidateTerm(BaseModel):
    """One search string derived from a query, tagged with where it came from."""

    model_config = ConfigDict(frozen=True)

    text: str
    origin: TermOrigin
    priority: Priority

    @classmethod
    def from_origin(cls, text: str, origin: TermOrigin) -> "CandidateTerm":
        return cls(text=normalize_whitespace(text), origin=origin, priority=ORIGIN_PRIORITY[origin])


# ============================================================
# Document side
# ============================================================


class TextMatch(BaseModel):
    """A highlighted excerpt returned by the search service."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field("", description="Category label, e.g. 'headline' or 'text'")
    text: str = Field("", description="Excerpt")
    location: Optional[str] = None

    @field_validator("name", "text", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ExternalDocument(BaseModel):
    """A legislation or case-law record as returned by the search API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    document_type: str = Field("", alias="@type", description="Legislation | CaseLaw")
    id: str = Field("", alias="@id", description="API path of the work")
    document_number: Optional[str] = Field(None, alias="documentNumber")
    eli: Optional[str] = None
    ecli: Optional[str] = None
    headline: Optional[str] = None
    name: Optional[str] = None
    abbreviation: Optional[str] = None
    alternate_name: Optional[str] = Field(None, alias="alternateName")
    legislation_date: Optional[str] = Field(None, alias="legislationDate")
    decision_date: Optional[str] = Field(None, alias="decisionDate")
    file_numbers: list[str] = Field(default_factory=list, alias="fileNumbers")
    court_name: Optional[str] = Field(None, alias="courtName")
    work_example_id: Optional[str] = Field(
        None, description="Expression-level API path from workExample['@id']"
    )
    text_matches: list[TextMatch] = Field(default_factory=list)

    @field_validator("file_numbers", mode="before")
    @classmethod
    def none_to_list(cls, v: Any) -> list:
        return v or []

    @classmethod
    def from_search_result(cls, result: dict) -> "ExternalDocument":
        """Build a document from one ``member`` entry of a search response."""
        if not isinstance(result, dict) or not isinstance(result.get("item"), dict):
            raise ValueError("search result has no 'item' object")
        item = dict(result["item"])
        work_example = item.get("workExample")
        if isinstance(work_example, dict):
            item["work_example_id"] = work_example.get("@id")
        item["text_matches"] = [
            m for m in (result.get("textMatches") or []) if isinstance(m, dict)
        ]
        return cls.model_validate(item)

    @property
    def identity_key(self) -> str:
        """Stable document identity; empty when the API supplied no identifier."""
        return self.document_number or self.id or self.eli or self.ecli or ""

    @property
    def title(self) -> str:
        return self.headline or self.name or ""

    @property
    def snippet_text(self) -> str:
        return " ".join(m.text for m in self.text_matches if m.text)

    @property
    def is_legislation(self) -> bool:
        return self.document_type == "Legislation"

    @property
    def date(self) -> Optional[str]:
        return self.legislation_date or self.decision_date

    @property
    def identifier(self) -> Optional[str]:
        return self.eli or self.ecli or self.document_number


class RankedResult(BaseModel):
    """A document together with the term that found it and its ranking score."""

    document: ExternalDocument
    term: CandidateTerm
    similarity: Optional[float] = Field(
        None, description="Fuzzy similarity in [0, 1], 1.0 = exact match"
    )

    @property
    def priority(self) -> Priority:
        return self.term.priority

    @property
    def confidence(self) -> int:
        """Similarity as a percentage, 0 when the result was never scored."""
        return round((self.similarity or 0.0) * 100)


class SearchOutcome(BaseModel):
    """Terminal state of one query: Found (>= 1 result) or NotFound."""

    status: OutcomeStatus
    query: str
    effective_query: str = Field(..., description="Query after English→German translation")
    results: list[RankedResult] = Field(default_factory=list)
    total_candidates: int = 0
    references: list[str] = Field(default_factory=list)
    corrected_terms: list[str] = Field(default_factory=list)
    explanations: list[str] = Field(default_factory=list)
    attempted_terms: list[CandidateTerm] = Field(default_factory=list)
    failed_terms: list[CandidateTerm] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status == OutcomeStatus.FOUND

    @property
    def translated(self) -> bool:
        return self.effective_query != self.query


# ============================================================
# Helper functions
# ============================================================


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def term_key(text: str) -> str:
    """Case-insensitive, whitespace-normalized key used to deduplicate terms."""
    return normalize_whitespace(text).casefold()


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        result = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result
