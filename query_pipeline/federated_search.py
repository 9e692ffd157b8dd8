"""
Federated search: one external lookup per candidate term.

A failing term (network error, timeout, non-2xx, unreadable body) is logged
and skipped; it never aborts the batch. No retries are made. Terms of one tier
may be dispatched in parallel, but results are always collected in term order
so that ranking is deterministic.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol

from models import CandidateTerm, ExternalDocument, RankedResult
from rechtsinformationen_client import SearchServiceError

logger = logging.getLogger(__name__)

PER_TERM_RESULT_SIZE = 10


class DocumentSearchService(Protocol):
    """Anything with a document search; failures should raise ``SearchServiceError``."""

    def search_documents(self, term: str, size: int = PER_TERM_RESULT_SIZE) -> list[dict]:
        ...


@dataclass
class FederatedSearchResult:
    results: list[RankedResult] = field(default_factory=list)
    attempted: list[CandidateTerm] = field(default_factory=list)
    failed: list[CandidateTerm] = field(default_factory=list)

    def extend(self, other: "FederatedSearchResult") -> None:
        self.results.extend(other.results)
        self.attempted.extend(other.attempted)
        self.failed.extend(other.failed)


class FederatedSearcher:
    """Dispatch candidate terms to the document search service."""

    def __init__(
        self,
        service: DocumentSearchService,
        *,
        max_workers: int = 1,
        result_size: int = PER_TERM_RESULT_SIZE,
    ):
        self.service = service
        self.max_workers = max(1, max_workers)
        self.result_size = result_size

    def search(self, terms: list[CandidateTerm]) -> FederatedSearchResult:
        """Search every term; ``terms`` must already be tier-ordered and capped."""
        outcome = FederatedSearchResult()
        # Group consecutive terms of the same tier so fan-out never crosses a tier.
        tier_batches: list[list[CandidateTerm]] = []
        for term in terms:
            if tier_batches and tier_batches[-1][0].priority == term.priority:
                tier_batches[-1].append(term)
            else:
                tier_batches.append([term])

        for batch in tier_batches:
            for term, documents in zip(batch, self._dispatch(batch)):
                outcome.attempted.append(term)
                if documents is None:
                    outcome.failed.append(term)
                    continue
                outcome.results.extend(
                    RankedResult(document=doc, term=term) for doc in documents
                )
        logger.info(
            "Federated search: %d terms, %d failed, %d documents",
            len(outcome.attempted),
            len(outcome.failed),
            len(outcome.results),
        )
        return outcome

    def _dispatch(self, batch: list[CandidateTerm]) -> list[list[ExternalDocument] | None]:
        workers = min(self.max_workers, len(batch))
        if workers <= 1:
            return [self._search_term(term) for term in batch]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order regardless of completion order.
            return list(executor.map(self._search_term, batch))

    def _search_term(self, term: CandidateTerm) -> list[ExternalDocument] | None:
        logger.debug("Searching %r (%s, %s)", term.text, term.origin.value, term.priority.value)
        try:
            members = self.service.search_documents(term.text, size=self.result_size)
        except SearchServiceError as e:
            logger.warning("Search failed for %r, skipping: %s", term.text, e)
            return None
        except Exception as e:
            logger.warning("Unexpected error searching %r, skipping: %s", term.text, e, exc_info=True)
            return None

        documents: list[ExternalDocument] = []
        for member in members:
            try:
                documents.append(ExternalDocument.from_search_result(member))
            except ValueError as e:
                logger.warning("Skipping malformed result for %r: %s", term.text, e)
        return documents
