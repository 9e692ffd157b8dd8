"""
Query planning for federated German legal search.

Turns a raw query into prioritized candidate search terms:
- English → German translation
- legal reference extraction (high priority)
- misconception correction (medium priority)
- topic expansion and the query itself (low priority, fallback only)

Per-tier caps bound the number of external calls a single query can cause.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from models import CandidateTerm, Priority, TermOrigin, term_key
from query_pipeline.concept_mapping import ConceptMapping, map_concepts
from query_pipeline.reference_extraction import LegalReferences, extract_references
from query_pipeline.term_expansion import expand_terms
from query_pipeline.translation import translate

MIN_TERM_LENGTH = 3

TIER_CAPS = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 2,
}


@dataclass
class QueryPlan:
    query: str
    effective_query: str
    references: LegalReferences
    concepts: ConceptMapping
    expansions: list[str] = field(default_factory=list)
    terms: list[CandidateTerm] = field(default_factory=list)

    @property
    def translated(self) -> bool:
        return self.effective_query != self.query

    def tier(self, priority: Priority) -> list[CandidateTerm]:
        return [t for t in self.terms if t.priority == priority]

    @property
    def primary_terms(self) -> list[CandidateTerm]:
        """High then medium tier; always dispatched."""
        return self.tier(Priority.HIGH) + self.tier(Priority.MEDIUM)

    @property
    def fallback_terms(self) -> list[CandidateTerm]:
        """Low tier; dispatched only when the primary terms find nothing."""
        return self.tier(Priority.LOW)


def plan_query(query: str) -> QueryPlan:
    effective_query = translate(query)
    references = extract_references(effective_query)
    concepts = map_concepts(effective_query)
    expansions = expand_terms(effective_query)

    high: list[CandidateTerm] = [
        CandidateTerm.from_origin(ref, TermOrigin.LEGAL_REFERENCE)
        for ref in references.valid_references
    ]
    low: list[CandidateTerm] = []
    fallback_origin = TermOrigin.TRANSLATION if effective_query != query else TermOrigin.ORIGINAL
    low.append(CandidateTerm.from_origin(effective_query, fallback_origin))

    # Expansions that are themselves structured citations rank with the query's own references.
    for term in expansions:
        if extract_references(term).with_section:
            high.append(CandidateTerm.from_origin(term, TermOrigin.LEGAL_REFERENCE))
        else:
            low.append(CandidateTerm.from_origin(term, TermOrigin.EXPANSION))

    medium = [
        CandidateTerm.from_origin(term, TermOrigin.CONCEPT_CORRECTION)
        for term in concepts.corrected_terms
    ]

    return QueryPlan(
        query=query,
        effective_query=effective_query,
        references=references,
        concepts=concepts,
        expansions=expansions,
        terms=select_terms(high + medium + low),
    )


def select_terms(candidates: list[CandidateTerm]) -> list[CandidateTerm]:
    """Deduplicate, drop short terms, order by tier and apply the per-tier caps.

    A term seen twice keeps its first (highest-tier) occurrence.
    """
    seen: set[str] = set()
    by_tier: dict[Priority, list[CandidateTerm]] = {p: [] for p in TIER_CAPS}
    ordered = sorted(candidates, key=lambda t: -t.priority.rank)
    for term in ordered:
        key = term_key(term.text)
        if len(key) < MIN_TERM_LENGTH or key in seen:
            continue
        seen.add(key)
        by_tier[term.priority].append(term)

    selected: list[CandidateTerm] = []
    for priority, cap in TIER_CAPS.items():
        selected.extend(by_tier[priority][:cap])
    return selected
