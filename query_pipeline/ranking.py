"""
Deduplication and fuzzy re-ranking of federated search results.

Stages:
1. Stable sort by priority tier.
2. Deduplicate by document identity, keeping the highest-tier copy.
3. Weighted fuzzy match against the original query (title, snippet summary,
   snippet content). Tier stays the primary sort key; similarity orders
   documents within a tier.
4. If nothing passes the threshold, fall back to the tier-sorted documents
   with a low-confidence sentinel score instead of returning nothing.
5. Truncate to the requested limit.

Thresholds use fuzzy-search distance semantics (0 = exact, 1 = anything):
a document is a hit when ``1 - similarity <= threshold``.
"""
from __future__ import annotations

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from models import RankedResult

FIELD_WEIGHTS = (
    ("title", 0.4),
    ("summary", 0.4),
    ("content", 0.2),
)
SUMMARY_LENGTH = 300

# Legal text is verbose; stricter thresholds miss valid hits.
THRESHOLD_FLOOR = 0.6
# Hits weaker than this are treated as no match at all.
MAX_ACCEPTED_DISTANCE = 0.7
# Sentinel similarities for fallback results (poor matches vs. no matches).
POOR_MATCH_SIMILARITY = 0.15
NO_MATCH_SIMILARITY = 0.2


def deduplicate(results: list[RankedResult]) -> list[RankedResult]:
    seen: set[str] = set()
    unique: list[RankedResult] = []
    for result in results:
        key = result.document.identity_key
        # Documents without any identifier cannot be told apart; keep them all.
        if key and key in seen:
            continue
        seen.add(key)
        unique.append(result)
    return unique


def sort_by_priority(results: list[RankedResult]) -> list[RankedResult]:
    return sorted(results, key=lambda r: -r.priority.rank)


def similarity(query: str, result: RankedResult) -> float:
    """Weighted fuzzy similarity in [0, 1] over the non-empty document fields."""
    document = result.document
    content = document.snippet_text
    fields = {
        "title": document.title,
        "summary": content[:SUMMARY_LENGTH],
        "content": content,
    }
    total = 0.0
    weight_sum = 0.0
    for name, weight in FIELD_WEIGHTS:
        text = fields[name]
        if not text:
            continue
        score = fuzz.partial_ratio(query, text, processor=default_process) / 100.0
        total += weight * score
        weight_sum += weight
    if not weight_sum:
        return 0.0
    return round(total / weight_sum, 4)


def rank_results(
    results: list[RankedResult],
    query: str,
    threshold: float,
    limit: int,
) -> list[RankedResult]:
    candidates = deduplicate(sort_by_priority(results))
    if not candidates or limit < 1:
        return []

    effective_threshold = max(threshold, THRESHOLD_FLOOR)
    scored = [
        (r, similarity(query, r)) for r in candidates
    ]
    hits = [(r, s) for r, s in scored if 1.0 - s <= effective_threshold]
    good = [(r, s) for r, s in hits if 1.0 - s <= MAX_ACCEPTED_DISTANCE]

    if good:
        # sorted() is stable: equal tier and score keep dispatch order.
        good.sort(key=lambda pair: (-pair[0].priority.rank, -pair[1]))
        return [r.model_copy(update={"similarity": s}) for r, s in good[:limit]]

    sentinel = POOR_MATCH_SIMILARITY if hits else NO_MATCH_SIMILARITY
    return [r.model_copy(update={"similarity": sentinel}) for r in candidates[:limit]]
