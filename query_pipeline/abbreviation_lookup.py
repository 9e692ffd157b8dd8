"""
Find a statute by its official abbreviation ("SGB I", "BGB", "GG").

The legislation index matches abbreviations loosely, so "SGB I" also returns
SGB II, SGB IX and friends. Every candidate is scored against the expected
full title and abbreviation; wrong Sozialgesetzbuch books are penalized.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Protocol

from models import ExternalDocument
from rechtsinformationen_client import SearchServiceError

logger = logging.getLogger(__name__)

LOOKUP_RESULT_SIZE = 20

FULL_NAMES = MappingProxyType({
    "GG": "Grundgesetz für die Bundesrepublik Deutschland",
    "BGB": "Bürgerliches Gesetzbuch",
    "STGB": "Strafgesetzbuch",
    "SGB I": "Sozialgesetzbuch Erstes Buch",
    "SGB II": "Sozialgesetzbuch Zweites Buch",
    "SGB III": "Sozialgesetzbuch Drittes Buch",
    "SGB IV": "Sozialgesetzbuch Viertes Buch",
    "SGB V": "Sozialgesetzbuch Fünftes Buch",
    "SGB VI": "Sozialgesetzbuch Sechstes Buch",
    "SGB VII": "Sozialgesetzbuch Siebtes Buch",
    "SGB VIII": "Sozialgesetzbuch Achtes Buch",
    "SGB IX": "Sozialgesetzbuch Neuntes Buch",
    "SGB X": "Sozialgesetzbuch Zehntes Buch",
    "SGB XI": "Sozialgesetzbuch Elftes Buch",
    "SGB XII": "Sozialgesetzbuch Zwölftes Buch",
    "SGB XIII": "Sozialgesetzbuch Dreizehntes Buch",
    "SGB XIV": "Sozialgesetzbuch Vierzehntes Buch",
})

SGB_BOOKS = ("I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X", "XI", "XII", "XIII", "XIV")


class LegislationSearchService(Protocol):
    def search_legislation(self, term: str, size: int = 10) -> list[dict]:
        ...


@dataclass(frozen=True)
class AbbreviationMatch:
    abbreviation: str
    document: ExternalDocument
    score: int
    exact: bool
    candidates: int


def normalize_abbreviation(abbreviation: str) -> str:
    return " ".join((abbreviation or "").split()).upper()


def _sgb_book(abbreviation: str) -> str:
    return abbreviation.replace("SGB", "", 1).strip()


def score_candidate(document: ExternalDocument, abbreviation: str) -> int:
    """Relevance of ``document`` for the normalized ``abbreviation``; may be negative."""
    score = 0
    title = document.title.upper()

    expected_title = FULL_NAMES.get(abbreviation)
    if expected_title and expected_title.upper() in title:
        score += 2000

    if document.abbreviation:
        item_abbr = normalize_abbreviation(document.abbreviation)
        if item_abbr == abbreviation:
            score += 1000
        elif abbreviation.startswith("SGB"):
            search_book = _sgb_book(abbreviation)
            item_book = _sgb_book(item_abbr)
            if search_book == item_book:
                score += 900
            elif abbreviation in item_abbr:
                # "SGB I" is a substring of "SGB IX"; a different book is a miss.
                if item_book in SGB_BOOKS:
                    score -= 500
                else:
                    score += 50
        elif abbreviation in item_abbr:
            score += 50

    if document.alternate_name:
        alt_name = normalize_abbreviation(document.alternate_name)
        if alt_name == abbreviation:
            score += 900
        elif abbreviation in alt_name:
            score += 40

    if abbreviation in title:
        score += 30
    if abbreviation.startswith("SGB") and "SOZIALGESETZBUCH" in title:
        score += 20

    year = (document.legislation_date or "")[:4]
    if year.isdigit() and int(year) > 2000:
        score += 10
    return score


def is_exact_match(document: ExternalDocument, abbreviation: str) -> bool:
    item_abbr = normalize_abbreviation(document.abbreviation or "")
    if item_abbr != abbreviation:
        return False
    if abbreviation.startswith("SGB"):
        return _sgb_book(item_abbr) == _sgb_book(abbreviation)
    return True


def lookup_by_abbreviation(
    service: LegislationSearchService, abbreviation: str
) -> Optional[AbbreviationMatch]:
    """Return the best-scoring statute for ``abbreviation``, or None."""
    normalized = normalize_abbreviation(abbreviation)
    if not normalized:
        raise ValueError("abbreviation must not be empty")

    queries: list[str] = []
    full_name = FULL_NAMES.get(normalized)
    if full_name:
        queries.extend([f'"{full_name}"', full_name])
    queries.extend([f'"{abbreviation}"', normalized, abbreviation])

    documents: list[ExternalDocument] = []
    seen: set[str] = set()
    for query in dict.fromkeys(queries):
        try:
            members = service.search_legislation(query, size=LOOKUP_RESULT_SIZE)
        except SearchServiceError as e:
            logger.warning("Legislation search failed for %r: %s", query, e)
            continue
        for member in members:
            try:
                document = ExternalDocument.from_search_result(member)
            except ValueError:
                continue
            key = document.identity_key
            if key and key in seen:
                continue
            seen.add(key)
            documents.append(document)

    if not documents:
        logger.info("No legislation found for abbreviation %r", abbreviation)
        return None

    scored = sorted(
        ((score_candidate(doc, normalized), doc) for doc in documents),
        key=lambda pair: -pair[0],
    )
    best_score, best = scored[0]
    if best_score < 0:
        logger.info("No candidate matches abbreviation %r (best score %d)", abbreviation, best_score)
        return None

    return AbbreviationMatch(
        abbreviation=abbreviation,
        document=best,
        score=best_score,
        exact=is_exact_match(best, normalized),
        candidates=len(documents),
    )
