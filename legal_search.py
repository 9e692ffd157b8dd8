"""
German Legal Search
===================

Resolves natural-language legal questions (German or English) against the
federal legal information portal rechtsinformationen.bund.de.

Architecture:
    query
        ↓ translate, extract § references, correct misconceptions, expand topics
    prioritized candidate terms (high / medium / low)
        ↓ one GET /v1/document per term
    merged documents
        ↓ deduplicate, tier sort, fuzzy re-rank
    Found | NotFound, rendered as markdown

Usage:
    legal-search "Termin beim Jobcenter verpasst Konsequenzen"
    legal-search "employee rights dismissal" --limit 5 -v
    legal-search --lookup "SGB I"
    legal-search --document /v1/legislation/eli/bund/bgbl-1/2006/s2748/2025-05-01/1/deu
    legal-search --legislation Elterngeld --in-force-from 2024-01-01
    legal-search --case-law Kündigungsschutz --court BAG --date-from 2020-01-01

Configuration (environment or .env):
    RECHTSINFO_BASE_URL     API host (default: testphase.rechtsinformationen.bund.de)
    RECHTSINFO_TIMEOUT      per-request timeout in seconds (default: 30)
    RECHTSINFO_MAX_WORKERS  parallel searches within one tier (default: 1)
    RECHTSINFO_USER_AGENT   User-Agent header
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
from typing import Any, Optional

import dotenv
from pydantic import ValidationError

# Environment must be populated before the client reads its configuration.
dotenv.load_dotenv()

from models import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    ExternalDocument,
    Priority,
    RankedResult,
    SearchOutcome,
    SearchRequest,
)
from query_pipeline.abbreviation_lookup import AbbreviationMatch, lookup_by_abbreviation
from query_pipeline.federated_search import FederatedSearcher
from query_pipeline.pipeline import resolve_query
from query_pipeline.reference_extraction import find_paragraph_mentions
from rechtsinformationen_client import (
    BASE_URL,
    DocumentAccessForbidden,
    DocumentPathError,
    RechtsinformationenClient,
    SearchServiceError,
)

logger = logging.getLogger("legal-search")

# ── Configuration ─────────────────────────────────────────────
MAX_WORKERS = int(os.environ.get("RECHTSINFO_MAX_WORKERS", "1"))
MAX_SUMMARY_LEN = 200
MAX_PARAGRAPH_MENTIONS = 3
COMMON_ABBREVIATIONS = "BEEG, BGB, SGB, StGB, ZPO"


class InvalidQueryError(ValueError):
    """The query is missing, not a string, or shorter than 3 characters."""


def intelligent_legal_search(
    arguments: dict[str, Any],
    client: Optional[RechtsinformationenClient] = None,
    *,
    max_workers: int = MAX_WORKERS,
) -> SearchOutcome:
    """Run the full pipeline for ``{"query": ..., "threshold"?: ..., "limit"?: ...}``."""
    try:
        request = SearchRequest(
            **{k: v for k, v in arguments.items() if k in ("query", "threshold", "limit") and v is not None}
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise InvalidQueryError(messages) from e

    searcher = FederatedSearcher(client or RechtsinformationenClient(), max_workers=max_workers)
    return resolve_query(request, searcher)


# ── Presentation ──────────────────────────────────────────────

def human_readable_url(document: ExternalDocument, base_url: str = BASE_URL) -> str:
    """Viewer URL for a document: API paths are not meant for browsers."""
    if document.is_legislation:
        path = document.work_example_id or document.id
        if "/v1/legislation/eli/" in path:
            return base_url + path.replace("/v1/legislation/", "/norms/", 1)
        return base_url + path.replace("/v1", "", 1)
    if document.ecli:
        return f"{base_url}/case-law/ecli/{document.ecli}"
    return base_url + document.id.replace("/v1", "", 1)


def classify_law_type(document: ExternalDocument) -> str:
    title = document.title.lower()
    abbr = (document.abbreviation or "").upper()

    if abbr == "GG" or "grundgesetz" in title:
        return "Grundgesetz (Constitutional Law)"
    if abbr.startswith("SGB") or "sozialgesetzbuch" in title:
        return "Sozialgesetzbuch (Social Code)"
    if abbr == "BGB" or "bürgerliches gesetzbuch" in title:
        return "Bürgerliches Gesetzbuch (Civil Code)"
    if abbr == "STGB" or "strafgesetzbuch" in title:
        return "Strafgesetzbuch (Criminal Code)"
    if "verordnung" in title:
        return "Verordnung (Regulation)"
    if "gesetz" in title:
        return "Bundesgesetz (Federal Law)"
    return document.document_type or "Legislation"


def confidence_label(confidence: int) -> str:
    if confidence >= 80:
        return "High"
    if confidence >= 60:
        return "Medium"
    if confidence >= 40:
        return "Low"
    return "Very Low"


def _truncate(text: str | None, max_len: int) -> str | None:
    if not text:
        return None
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def _format_result(index: int, result: RankedResult) -> str:
    doc = result.document
    title = doc.title or "Untitled Document"
    lines = [
        f"{index}. [{title}]({human_readable_url(doc)})",
        f"   **Confidence:** {confidence_label(result.confidence)} ({result.confidence}%)"
        f" | **Priority:** {result.priority.value}",
        f"   **Law Type:** {classify_law_type(doc)}",
        f"   **Date:** {doc.date or 'N/A'}",
        f'   **Found via:** "{result.term.text}"',
    ]
    if doc.court_name:
        lines.append(f"   **Court:** {doc.court_name}")
    if doc.file_numbers:
        lines.append(f"   **File Numbers:** {', '.join(doc.file_numbers)}")
    lines.append(f"   **ELI/ECLI:** {doc.identifier or 'N/A'}")
    if doc.abbreviation:
        lines.append(f"   **Abbreviation:** {doc.abbreviation}")
    paragraphs = find_paragraph_mentions(doc.snippet_text, MAX_PARAGRAPH_MENTIONS)
    if paragraphs:
        lines.append(f"   **Key Paragraphs:** {', '.join(paragraphs)}")
    summary = _truncate(doc.snippet_text, MAX_SUMMARY_LEN)
    lines.append(f"   **Summary:** {summary or 'No summary available'}")
    return "\n".join(lines)


def format_outcome(outcome: SearchOutcome) -> str:
    text = f'Intelligent Legal Search Results for "{outcome.query}"\n'
    if outcome.translated:
        text += f'Query translated from English: "{outcome.query}" → "{outcome.effective_query}"\n'

    if not outcome.found:
        direct = [t.text for t in outcome.attempted_terms if t.priority == Priority.LOW]
        text += "\nNo documents found despite trying:\n"
        text += f"• Legal references: {', '.join(outcome.references) or 'none detected'}\n"
        text += f"• Concept mappings: {', '.join(outcome.corrected_terms[:3]) or 'none'}\n"
        quoted = ", ".join('"%s"' % t for t in direct or [outcome.effective_query])
        text += f"• Direct search: {quoted}\n"
        if outcome.failed_terms:
            text += f"• Failed lookups: {', '.join(t.text for t in outcome.failed_terms)}\n"

        if re.search(r"§\s*\d+", outcome.effective_query):
            suggestions = ['Try searching for the law abbreviation (e.g., "BEEG", "BGB", "SGB")']
        else:
            suggestions = ['Try searching with specific § references if known (e.g., "§ 15 BEEG")']
        suggestions.append("Try broader search terms (e.g., just the law name or main topic)")
        suggestions.append(f"Try law abbreviations: {COMMON_ABBREVIATIONS}, etc.")
        text += "\nSuggestions:\n" + "\n".join(f"• {s}" for s in suggestions) + "\n"
        return text

    text += (
        f"\nFound {len(outcome.results)} documents from "
        f"{outcome.total_candidates} total\n"
    )
    strategy = ", ".join(
        f'"{t.text}" ({t.priority.value})' for t in outcome.attempted_terms
    )
    text += f"Search strategy: {strategy}\n"
    if outcome.explanations:
        text += "\nConcept corrections:\n"
        text += "\n".join(f"• {e}" for e in outcome.explanations) + "\n"
    text += "\n"
    text += "\n\n".join(
        _format_result(i, result) for i, result in enumerate(outcome.results, 1)
    )
    return text + "\n"


def format_abbreviation_match(abbreviation: str, match: Optional[AbbreviationMatch]) -> str:
    if match is None:
        return (
            f'No law found for abbreviation "{abbreviation}"\n\n'
            "Suggestions:\n"
            '• Check spelling (e.g., "SGB I" not "SGB 1")\n'
            "• Try the full law name instead\n"
            "• Common abbreviations: SGB I-XII, BGB, StGB, GG, AufenthG, KSchG, BEEG\n"
        )

    doc = match.document
    text = f"LAW FOUND BY ABBREVIATION: {abbreviation}\n"
    if not match.exact:
        text += (
            f'\nWARNING: Searched for "{abbreviation}" but found '
            f'"{doc.abbreviation or "Unknown"}". This may not be an exact match.\n'
        )
    text += (
        f"\n**Full Title:** [{doc.title or 'Untitled Document'}]({human_readable_url(doc)})\n"
        f"**Official Abbreviation:** {doc.abbreviation or 'N/A'}\n"
        f"**Law Type:** {classify_law_type(doc)}\n"
        f"**Date:** {doc.date or 'N/A'}\n"
        f"**ELI:** {doc.identifier or 'N/A'}\n"
        f"**Candidates considered:** {match.candidates}\n"
    )
    return text


def format_search_results(term: str, members: list[dict], case_law: bool = False) -> str:
    """Render a raw legislation or case-law search response."""
    documents = []
    for member in members:
        try:
            documents.append(ExternalDocument.from_search_result(member))
        except (ValueError, ValidationError) as e:
            logger.warning("Skipping malformed search result: %s", e)

    kind = "court decisions" if case_law else "German laws"
    if not documents:
        return f'No {kind} found matching "{term}"\n'

    entries = []
    for i, doc in enumerate(documents, 1):
        lines = [f"{i}. [{doc.title or 'Untitled Document'}]({human_readable_url(doc)})"]
        if case_law:
            lines.append(f"   **Court:** {doc.court_name or 'N/A'}")
            if doc.file_numbers:
                lines.append(f"   **File Numbers:** {', '.join(doc.file_numbers)}")
        else:
            lines.append(f"   **Law Type:** {classify_law_type(doc)}")
            if doc.abbreviation:
                lines.append(f"   **Abbreviation:** {doc.abbreviation}")
        lines.append(f"   **Date:** {doc.date or 'N/A'}")
        lines.append(f"   **{'ECLI' if case_law else 'ELI'}:** {doc.identifier or 'N/A'}")
        summary = _truncate(doc.snippet_text, MAX_SUMMARY_LEN)
        if summary:
            lines.append(f"   **Summary:** {summary}")
        entries.append("\n".join(lines))

    return f'Found {len(documents)} {kind} matching "{term}":\n\n' + "\n\n".join(entries) + "\n"


def _result_size(limit: Optional[str]) -> int:
    try:
        return min(max(int(float(limit)), 1), MAX_LIMIT)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT


# ── Main ──────────────────────────────────────────────────────

def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Search German federal law and case law")
    parser.add_argument("query", nargs="?", help="Legal question in German or English")
    parser.add_argument("--threshold", default=None, help="Fuzzy match threshold 0.0-1.0 (lower is stricter)")
    parser.add_argument("--limit", default=None, help="Max results (1-100)")
    parser.add_argument("--workers", type=int, default=MAX_WORKERS, help="Parallel searches per tier")
    parser.add_argument("--lookup", metavar="ABBR", help="Find a statute by abbreviation, e.g. 'SGB I'")
    parser.add_argument("--document", metavar="ID", help="Fetch a document by API path, URL or number")
    parser.add_argument("--legislation", metavar="TERM", help="Plain legislation search, no query pipeline")
    parser.add_argument("--in-force-from", metavar="DATE", help="With --legislation: in force on or after YYYY-MM-DD")
    parser.add_argument("--in-force-to", metavar="DATE", help="With --legislation: in force on or before YYYY-MM-DD")
    parser.add_argument("--case-law", metavar="TERM", help="Plain case-law search, no query pipeline")
    parser.add_argument("--court", help="With --case-law: court, e.g. BGH, BVerfG, BSG")
    parser.add_argument("--date-from", metavar="DATE", help="With --case-law: decided on or after YYYY-MM-DD")
    parser.add_argument("--date-to", metavar="DATE", help="With --case-law: decided on or before YYYY-MM-DD")
    parser.add_argument("--type", dest="decision_type", help="With --case-law: decision type, e.g. Urteil, Beschluss")
    parser.add_argument("--format", choices=["json", "html", "xml"], default="json")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    for noisy in ("urllib3", "charset_normalizer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    client = RechtsinformationenClient()

    if args.document:
        try:
            document = client.get_document(args.document, format=args.format)
        except DocumentAccessForbidden as e:
            print(f"Access forbidden (403) for document: {args.document}\nAPI URL attempted: {e.url}")
            return 1
        except (DocumentPathError, SearchServiceError) as e:
            print(f"Error: {e}")
            return 1
        if isinstance(document, str):
            print(document)
        else:
            print(json.dumps(document, indent=2, ensure_ascii=False))
        return 0

    if args.lookup:
        match = lookup_by_abbreviation(client, args.lookup)
        print(format_abbreviation_match(args.lookup, match))
        return 0 if match else 1

    if args.legislation or args.case_law:
        size = _result_size(args.limit)
        try:
            if args.case_law:
                members = client.search_case_law(
                    args.case_law,
                    size=size,
                    court=args.court,
                    date_from=args.date_from,
                    date_to=args.date_to,
                    document_type=args.decision_type,
                )
            else:
                members = client.search_legislation(
                    args.legislation,
                    size=size,
                    temporal_coverage_from=args.in_force_from,
                    temporal_coverage_to=args.in_force_to,
                )
        except SearchServiceError as e:
            print(f"Error: {e}")
            return 1
        text = format_search_results(args.case_law or args.legislation, members, case_law=bool(args.case_law))
        print(text)
        return 0 if members else 1

    if not args.query:
        parser.error("the following argument is required: query (unless --lookup, --document, --legislation or --case-law is used)")

    try:
        outcome = intelligent_legal_search(
            {"query": args.query, "threshold": args.threshold, "limit": args.limit},
            client,
            max_workers=args.workers,
        )
    except InvalidQueryError as e:
        parser.error(f"invalid query: {e}")

    print(format_outcome(outcome))
    return 0 if outcome.found else 1


if __name__ == "__main__":
    sys.exit(main())
