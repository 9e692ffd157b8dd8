"""
Misconception correction for German legal queries.

Users frequently describe a remedy or procedure with lay wording that does not
appear in any statute ("Überprüfungsantrag", "Kündigung anfechten") or cite
the wrong paragraph for their problem. This module maps such phrasing onto the
statutory concepts that actually govern it, and explains every correction so
the caller can show why the search was redirected.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType

MIN_TERM_LENGTH = 3

# Long Sozialgesetzbuch names → abbreviations used by the index.
SGB_ALIASES = MappingProxyType({
    "sozialgesetzbuch erstes buch": ("SGB I", "SGB 1", "Sozialgesetzbuch (SGB) Erstes Buch"),
    "sozialgesetzbuch zweites buch": ("SGB II", "SGB 2", "Sozialgesetzbuch (SGB) Zweites Buch"),
    "sozialgesetzbuch drittes buch": ("SGB III", "SGB 3", "Sozialgesetzbuch (SGB) Drittes Buch"),
    "sozialgesetzbuch viertes buch": ("SGB IV", "SGB 4", "Sozialgesetzbuch (SGB) Viertes Buch"),
    "sozialgesetzbuch fünftes buch": ("SGB V", "SGB 5", "Sozialgesetzbuch (SGB) Fünftes Buch"),
    "sozialgesetzbuch sechstes buch": ("SGB VI", "SGB 6", "Sozialgesetzbuch (SGB) Sechstes Buch"),
    "sozialgesetzbuch siebtes buch": ("SGB VII", "SGB 7", "Sozialgesetzbuch (SGB) Siebtes Buch"),
    "sozialgesetzbuch achtes buch": ("SGB VIII", "SGB 8", "Sozialgesetzbuch (SGB) Achtes Buch"),
    "sozialgesetzbuch neuntes buch": ("SGB IX", "SGB 9", "Sozialgesetzbuch (SGB) Neuntes Buch"),
    "sozialgesetzbuch zehntes buch": ("SGB X", "SGB 10", "Sozialgesetzbuch (SGB) Zehntes Buch"),
    "sozialgesetzbuch elftes buch": ("SGB XI", "SGB 11", "Sozialgesetzbuch (SGB) Elftes Buch"),
    "sozialgesetzbuch zwölftes buch": ("SGB XII", "SGB 12", "Sozialgesetzbuch (SGB) Zwölftes Buch"),
})

# Lay or incorrect phrasing → the concepts that actually apply.
CONCEPT_MAP = MappingProxyType({
    # Administrative procedure
    "überprüfungsantrag": ("Widerspruch", "Überprüfung", "Nachprüfung", "Verwaltungsverfahren"),
    "überprüfung": ("Widerspruch", "Nachprüfung", "Verwaltungsverfahren"),
    "antrag überprüfung": ("Widerspruch", "Überprüfungsverfahren"),
    # Sozialgesetzbuch
    "arbeitslosengeld überprüfung": ("SGB III Widerspruch", "SGB II Widerspruch", "Bescheid Überprüfung"),
    "bürgergeld überprüfung": ("SGB II Widerspruch", "SGB II Bescheid", "Leistungsbescheid"),
    "hartz iv überprüfung": ("SGB II Widerspruch", "SGB II Bescheid"),
    # Administrative acts
    "verwaltungsakt überprüfung": ("Widerspruch", "Rücknahme", "Widerruf", "§ 44 SGB X", "§ 45 SGB X"),
    "bescheid überprüfung": ("Widerspruch", "Rücknahme", "Widerruf", "SGB X"),
    "bescheid korrigieren": ("Rücknahme", "Widerruf", "§ 44 SGB X", "§ 45 SGB X"),
    # Court procedure
    "gericht überprüfung": ("Klage", "Berufung", "Revision", "Rechtsmittel"),
    "urteil überprüfung": ("Berufung", "Revision", "Rechtsmittel"),
    # Jobcenter
    "jobcenter überprüfung": ("SGB II Widerspruch", "Leistungsbescheid", "§ 32 SGB II"),
    "sanktionen überprüfung": ("SGB II Widerspruch", "Sanktionsbescheid"),
    # Tenancy
    "miete überprüfung": ("Mieterhöhung", "Betriebskosten", "Mietminderung"),
    "mietvertrag überprüfung": ("Mietrecht", "BGB Miete"),
    "mieterhöhungsantrag": ("§ 558 BGB", "Mieterhöhung", "Kappungsgrenze", "Mietspiegel"),
    "miete erhöhen": ("§ 558 BGB", "Mieterhöhung", "Modernisierung"),
    # Employment
    "kündigungsschutzantrag": ("Kündigungsschutzklage", "§ 4 KSchG", "§ 13 KSchG", "Arbeitsgerichtliches Verfahren"),
    "kündigung anfechten": ("Kündigungsschutzklage", "KSchG", "Arbeitsgericht"),
    "entlassung überprüfung": ("Kündigungsschutzklage", "KSchG"),
    # Social assistance
    "sozialhilfeantrag": ("§ 19 SGB XII", "Hilfe zum Lebensunterhalt", "Grundsicherung", "Antragsverfahren SGB XII"),
    "grundsicherung antrag": ("SGB XII", "Hilfe zum Lebensunterhalt"),
    "sozialhilfe beantragen": ("§ 19 SGB XII", "Grundsicherung"),
    # Remedies in general
    "einspruch": ("Widerspruch", "Rechtsbehelf"),
    "beschwerde": ("Widerspruch", "Rechtsmittel"),
    "revision": ("Rechtsmittel", "Berufung"),
})


@dataclass(frozen=True)
class MisconceptionRule:
    """Fires when every marker pattern matches the lowercased query."""

    markers: tuple[str, ...]
    terms: tuple[str, ...]
    explanation: str

    def matches(self, lower_query: str) -> bool:
        return all(re.search(marker, lower_query) for marker in self.markers)


MISCONCEPTION_RULES = (
    MisconceptionRule(
        markers=(r"(?:§\s*44|paragraph\s+44)(?!\d)", r"\bsgb\s*(?:x|10)\b"),
        terms=("§ 44 SGB X Rücknahme", "Verwaltungsakt Rücknahme", "rechtswidriger Verwaltungsakt"),
        explanation='§ 44 SGB X is about "Rücknahme" (withdrawal) of unlawful administrative acts',
    ),
    MisconceptionRule(
        markers=(r"§\s*535(?!\d)", r"mieterhöhung"),
        terms=("§ 558 BGB", "Mieterhöhung", "Kappungsgrenze", "Mietspiegel"),
        explanation="§ 535 BGB defines basic rental duties. For rent increases, see § 558 BGB",
    ),
    MisconceptionRule(
        markers=(r"§\s*1(?!\d)", r"\bkschg\b", r"antrag"),
        terms=("Kündigungsschutzklage", "§ 4 KSchG", "§ 13 KSchG", "Arbeitsgericht"),
        explanation=(
            "§ 1 KSchG defines scope of protection. For dismissal procedures, "
            "see § 4 KSchG and court proceedings"
        ),
    ),
    MisconceptionRule(
        markers=(r"§\s*27(?!\d)", r"\bsgb\s*(?:xii|12)\b", r"antrag"),
        terms=("§ 19 SGB XII", "Hilfe zum Lebensunterhalt", "Grundsicherung"),
        explanation=(
            "§ 27 SGB XII is about care benefits. For general social assistance "
            "applications, see § 19 SGB XII"
        ),
    ),
)


@dataclass(frozen=True)
class ConceptMapping:
    corrected_terms: list[str] = field(default_factory=list)
    explanations: list[str] = field(default_factory=list)


def map_concepts(query: str) -> ConceptMapping:
    """Collect corrected search terms and explanations for ``query``."""
    lower_query = (query or "").lower()
    terms: list[str] = []
    explanations: list[str] = []

    for phrase, aliases in SGB_ALIASES.items():
        if phrase in lower_query:
            terms.extend(aliases)
            explanations.append(f'"{phrase}" expanded to: {", ".join(aliases)}')

    for concept, corrections in CONCEPT_MAP.items():
        if concept in lower_query:
            terms.extend(corrections)
            explanations.append(f'"{concept}" mapped to: {", ".join(corrections)}')

    for rule in MISCONCEPTION_RULES:
        if rule.matches(lower_query):
            terms.extend(rule.terms)
            explanations.append(rule.explanation)

    unique: list[str] = []
    for term in terms:
        if len(term) >= MIN_TERM_LENGTH and term not in unique:
            unique.append(term)
    return ConceptMapping(corrected_terms=unique, explanations=explanations)
