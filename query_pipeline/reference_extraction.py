"""
Legal reference extraction for German legal queries.

Extracts:
- Paragraph references (e.g., "§ 32 SGB II", "§ 558 BGB")
- Reverse-order references (e.g., "SGB X § 44")
- Constitutional articles (e.g., "Art. 3 GG", "Art. 8 EMRK")
- Bare statute abbreviations (e.g., "SGB II", "BGB"), which remain useful
  search terms even without a paragraph number
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

# Canonical spelling of every statute code the extractor recognises.
_STATUTE_CODES = (
    "SGB", "BGB", "StGB", "GG", "VwVfG", "BEEG", "EStG", "UStG", "HGB",
    "ZPO", "StPO", "KSchG", "BetrVG", "AufenthG", "BUrlG", "ArbZG",
)
_CANONICAL_CODE = {code.upper(): code for code in _STATUTE_CODES}

_SECTION_TOKEN = r"\d+[a-z]?"
# "SGB II", "SGB 2", "SGBX"; the book numeral is optional
_SGB_TOKEN = r"SGB(?:\s*(?:[IVX]{1,4}|\d{1,2}))?\b"
_OTHER_CODES = "|".join(
    sorted((c for c in _STATUTE_CODES if c != "SGB"), key=len, reverse=True)
)
_STATUTE_TOKEN = rf"(?:{_SGB_TOKEN}|(?:{_OTHER_CODES})\b)"

PARAGRAPH_PATTERN = re.compile(
    rf"§\s*(?P<section>{_SECTION_TOKEN})\s+(?P<law>{_STATUTE_TOKEN})",
    flags=re.IGNORECASE,
)

REVERSE_PARAGRAPH_PATTERN = re.compile(
    rf"\b(?P<law>{_STATUTE_TOKEN})\s*§\s*(?P<section>{_SECTION_TOKEN})\b",
    flags=re.IGNORECASE,
)

ARTICLE_PATTERN = re.compile(
    rf"\bArt\.?\s*(?P<section>{_SECTION_TOKEN})\s*(?P<law>GG|EMRK)\b",
    flags=re.IGNORECASE,
)

STATUTE_PATTERN = re.compile(rf"\b{_STATUTE_TOKEN}", flags=re.IGNORECASE)

# Paragraph mentions inside result snippets, e.g. "§ 32 Abs. 1"
_PARAGRAPH_MENTION_RE = re.compile(r"§\s*\d+[a-z]?(?:\s*(?:Abs\.?|Absatz)\s*\d+)?", re.IGNORECASE)


@dataclass(frozen=True)
class StatuteReference:
    raw: str
    law_code: str
    section: str | None
    kind: str  # paragraph | article | statute
    normalized: str


@dataclass(frozen=True)
class LegalReferences:
    references: list[StatuteReference] = field(default_factory=list)

    @property
    def valid_references(self) -> list[str]:
        return [r.normalized for r in self.references]

    @property
    def with_section(self) -> list[str]:
        return [r.normalized for r in self.references if r.section]


def extract_references(text: str) -> LegalReferences:
    """Find all structured citations and bare statute names in ``text``."""
    if not text:
        return LegalReferences()

    refs: list[StatuteReference] = []
    seen: set[str] = set()

    def _add(ref: StatuteReference) -> None:
        if ref.normalized in seen:
            return
        seen.add(ref.normalized)
        refs.append(ref)

    for pattern in (PARAGRAPH_PATTERN, REVERSE_PARAGRAPH_PATTERN):
        for match in pattern.finditer(text):
            law = normalize_law_code(match.group("law"))
            section = match.group("section").lower()
            _add(
                StatuteReference(
                    raw=match.group(0).strip(),
                    law_code=law,
                    section=section,
                    kind="paragraph",
                    normalized=f"§ {section} {law}",
                )
            )

    for match in ARTICLE_PATTERN.finditer(text):
        law = match.group("law").upper()
        section = match.group("section").lower()
        _add(
            StatuteReference(
                raw=match.group(0).strip(),
                law_code=law,
                section=section,
                kind="article",
                normalized=f"Art. {section} {law}",
            )
        )

    for match in STATUTE_PATTERN.finditer(text):
        law = normalize_law_code(match.group(0))
        _add(
            StatuteReference(
                raw=match.group(0).strip(),
                law_code=law,
                section=None,
                kind="statute",
                normalized=law,
            )
        )

    return LegalReferences(references=refs)


def extract_legal_references(text: str) -> list[str]:
    return extract_references(text).valid_references


def normalize_law_code(raw: str) -> str:
    """Canonical statute spelling: 'sgb  ii' -> 'SGB II', 'stgb' -> 'StGB'."""
    compact = re.sub(r"\s+", " ", raw.strip())
    upper = compact.upper()
    if upper.startswith("SGB"):
        book = upper[3:].strip()
        return f"SGB {book}" if book else "SGB"
    return _CANONICAL_CODE.get(upper, compact)


def find_paragraph_mentions(text: str, limit: int = 3) -> list[str]:
    """Unique '§ N' / '§ N Abs. M' mentions inside a snippet, in order of appearance."""
    mentions: list[str] = []
    for match in _PARAGRAPH_MENTION_RE.finditer(text or ""):
        mention = re.sub(r"\s+", " ", match.group(0).strip())
        if mention not in mentions:
            mentions.append(mention)
        if len(mentions) >= limit:
            break
    return mentions

