"""
English → German rewriting of legal queries.

The search index is German-only. Queries are first scanned for English legal
vocabulary; only if an indicator is present is the phrase table applied, so
German queries pass through untouched.
"""
from __future__ import annotations

import re
from types import MappingProxyType

ENGLISH_INDICATORS = (
    "employee", "employer", "employment", "dismissal", "termination", "firing",
    "data protection", "privacy", "rights", "law", "legal", "court", "decision",
    "company", "restructuring", "redundancy", "layoff", "unemployment",
    "social security", "benefits", "welfare", "pension", "insurance",
    "contract", "agreement", "obligation", "liability", "damages",
    "trademark", "copyright", "patent", "intellectual property",
    "rental", "tenant", "landlord", "lease", "housing",
    "protection", "compensation", "claim", "appeal", "hearing",
)

TRANSLATIONS = MappingProxyType({
    # Employment
    "employee rights": "Arbeitnehmerrechte",
    "employee": "Arbeitnehmer",
    "employer": "Arbeitgeber",
    "employment": "Beschäftigung",
    "dismissal": "Kündigung",
    "termination": "Kündigung",
    "firing": "Entlassung",
    "redundancy": "betriebsbedingte Kündigung",
    "layoff": "Entlassung",
    "company restructuring": "Betriebsumstrukturierung",
    "works council": "Betriebsrat",
    "participation": "Mitbestimmung",
    "protection": "Schutz",
    "dismissal protection": "Kündigungsschutz",
    # Data protection
    "data protection": "Datenschutz",
    "privacy": "Datenschutz",
    "personal data": "personenbezogene Daten",
    # Social security
    "social security": "Sozialversicherung",
    "unemployment benefits": "Arbeitslosengeld",
    "unemployment": "Arbeitslosigkeit",
    "benefits": "Leistungen",
    "welfare": "Sozialhilfe",
    "pension": "Rente",
    "insurance": "Versicherung",
    # Contracts
    "contract": "Vertrag",
    "agreement": "Vereinbarung",
    "obligation": "Verpflichtung",
    "liability": "Haftung",
    "damages": "Schadenersatz",
    "compensation": "Entschädigung",
    # Intellectual property
    "trademark": "Marke",
    "copyright": "Urheberrecht",
    "patent": "Patent",
    "intellectual property": "geistiges Eigentum",
    # Tenancy
    "rental": "Miete",
    "tenant": "Mieter",
    "landlord": "Vermieter",
    "lease": "Mietvertrag",
    "housing": "Wohnung",
    "rent increase": "Mieterhöhung",
    # Procedure
    "court": "Gericht",
    "decision": "Entscheidung",
    "judgment": "Urteil",
    "appeal": "Berufung",
    "hearing": "Anhörung",
    "claim": "Anspruch",
    "application": "Antrag",
    "proceeding": "Verfahren",
    # General
    "law": "Gesetz",
    "legal": "rechtlich",
    "rights": "Rechte",
    "federal": "Bundes",
    "regulation": "Verordnung",
    "administration": "Verwaltung",
    "authority": "Behörde",
})


def _compile_substitutions() -> tuple[tuple[re.Pattern[str], str], ...]:
    # Longest phrase first; sorted() is stable, so equal lengths keep table order.
    ordered = sorted(TRANSLATIONS.items(), key=lambda kv: -len(kv[0]))
    return tuple(
        (re.compile(rf"\b{re.escape(english)}\b", re.IGNORECASE), german)
        for english, german in ordered
    )


_SUBSTITUTIONS = _compile_substitutions()


def has_english_terms(query: str) -> bool:
    lower_query = (query or "").lower()
    return any(indicator in lower_query for indicator in ENGLISH_INDICATORS)


def translate(query: str) -> str:
    """Rewrite English legal vocabulary to German; return ``query`` unchanged otherwise."""
    if not has_english_terms(query):
        return query

    translated = query
    for pattern, german in _SUBSTITUTIONS:
        translated = pattern.sub(german, translated)
    return translated
