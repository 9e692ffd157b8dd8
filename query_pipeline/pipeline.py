"""
End-to-end resolution of one legal query.

States per query: planning (translate, extract, correct, expand) → searching
→ ranking → Found | NotFound. Low-tier terms are only searched when the
high and medium tiers produced no documents at all.
"""
from __future__ import annotations

import logging

from models import OutcomeStatus, SearchOutcome, SearchRequest
from query_pipeline.federated_search import FederatedSearcher
from query_pipeline.query_planner import plan_query
from query_pipeline.ranking import rank_results

logger = logging.getLogger(__name__)


def resolve_query(request: SearchRequest, searcher: FederatedSearcher) -> SearchOutcome:
    plan = plan_query(request.query)
    if plan.translated:
        logger.info("Translated query %r -> %r", plan.query, plan.effective_query)

    search = searcher.search(plan.primary_terms)
    if not search.results and plan.fallback_terms:
        logger.info("No documents for primary terms, searching %d fallback terms", len(plan.fallback_terms))
        search.extend(searcher.search(plan.fallback_terms))

    ranked = rank_results(search.results, request.query, request.threshold, request.limit)
    status = OutcomeStatus.FOUND if ranked else OutcomeStatus.NOT_FOUND
    logger.info(
        "Query %r: %s, %d results from %d candidates",
        request.query,
        status.value,
        len(ranked),
        len(search.results),
    )

    return SearchOutcome(
        status=status,
        query=request.query,
        effective_query=plan.effective_query,
        results=ranked,
        total_candidates=len(search.results),
        references=plan.references.valid_references,
        corrected_terms=plan.concepts.corrected_terms,
        explanations=plan.concepts.explanations,
        attempted_terms=search.attempted,
        failed_terms=search.failed,
    )
