"""
Query resolution pipeline for German federal legal search.

This package provides:
- Legal reference extraction (§ / Art. citations and statute names)
- Misconception correction and English → German translation
- Topic expansion into prioritized candidate terms
- Federated search over the rechtsinformationen.bund.de index
- Deduplication and fuzzy re-ranking of the merged results
"""

from .abbreviation_lookup import AbbreviationMatch, lookup_by_abbreviation
from .federated_search import FederatedSearcher, FederatedSearchResult
from .pipeline import resolve_query
from .query_planner import QueryPlan, plan_query
from .ranking import rank_results
from .reference_extraction import extract_legal_references, extract_references

__all__ = [
    "AbbreviationMatch",
    "FederatedSearchResult",
    "FederatedSearcher",
    "QueryPlan",
    "extract_legal_references",
    "extract_references",
    "lookup_by_abbreviation",
    "plan_query",
    "rank_results",
    "resolve_query",
]
