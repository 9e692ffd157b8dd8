"""
Topic-based expansion of German legal queries.

Adds the domain terms a lay query implies but rarely names, e.g. a missed
Jobcenter appointment is governed by § 32 SGB II (Meldeversäumnis).
"""
from __future__ import annotations

import re

# (trigger words, terms added when any trigger occurs)
TOPIC_EXPANSIONS = (
    (("jobcenter", "termin"), ("Meldeversäumnis", "SGB II 32", "§ 32 SGB II")),
    (("sanktion", "konsequenz"), ("Pflichtverletzung", "Minderung", "Bürgergeld")),
    (("bürgergeld", "arbeitslosengeld"), ("SGB II", "Leistung", "Bezug")),
)

# German compounds are long; only these are decomposed.
COMPOUND_MIN_LENGTH = 11
COMPOUND_MIN_STEM = 6
COMPOUND_SUFFIXES = ("antrag", "verfahren", "klage", "gesetz", "verordnung")

COMPOUND_TOPICS = (
    ("mieterhöhung", ("Mieterhöhung", "§ 558 BGB", "Miete")),
    ("kündigungsschutz", ("Kündigungsschutz", "KSchG", "Kündigung")),
    ("sozialhilfe", ("Sozialhilfe", "SGB XII", "§ 19 SGB XII")),
    ("elternzeit", ("Elternzeit", "BEEG", "§ 15 BEEG")),
)


def expand_terms(query: str) -> list[str]:
    lower_query = (query or "").lower()
    expansions: list[str] = []

    for triggers, terms in TOPIC_EXPANSIONS:
        if any(trigger in lower_query for trigger in triggers):
            expansions.extend(terms)

    for word in re.split(r"\s+", lower_query):
        word = word.strip(".,;:!?()\"'")
        if len(word) < COMPOUND_MIN_LENGTH:
            continue
        expansions.extend(decompose_compound(word))
        for marker, terms in COMPOUND_TOPICS:
            if marker in word:
                expansions.extend(terms)

    unique: list[str] = []
    for term in expansions:
        if term and term not in unique:
            unique.append(term)
    return unique


def decompose_compound(word: str) -> list[str]:
    """'mieterhöhungsantrag' -> ['Mieterhöhungs'], 'kündigungsschutzklage' -> ['Kündigungsschutz']."""
    stems = []
    lower = word.lower()
    for suffix in COMPOUND_SUFFIXES:
        if lower.endswith(suffix):
            stem = lower[: -len(suffix)]
            if len(stem) >= COMPOUND_MIN_STEM:
                stems.append(stem[:1].upper() + stem[1:])
    return stems
