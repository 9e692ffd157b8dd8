"""Tests for misconception correction and Sozialgesetzbuch aliasing."""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from query_pipeline.concept_mapping import map_concepts


def test_ueberpruefungsantrag_maps_to_widerspruch():
    mapping = map_concepts("Überprüfungsantrag beim Jobcenter")
    assert mapping.corrected_terms == [
        "Widerspruch",
        "Überprüfung",
        "Nachprüfung",
        "Verwaltungsverfahren",
    ]
    assert len(mapping.explanations) == 2


def test_paragraph_44_sgb_x_explains_ruecknahme():
    mapping = map_concepts("Antrag nach § 44 SGB X")
    assert "§ 44 SGB X Rücknahme" in mapping.corrected_terms
    assert any("Rücknahme" in e for e in mapping.explanations)


def test_paragraph_44_rule_does_not_fire_for_other_book():
    mapping = map_concepts("§ 44 SGB XII Antrag")
    assert mapping.corrected_terms == []


def test_paragraph_44_rule_does_not_fire_for_440():
    mapping = map_concepts("§ 440 SGB X")
    assert "§ 44 SGB X Rücknahme" not in mapping.corrected_terms


def test_rent_increase_under_535_redirects_to_558():
    mapping = map_concepts("§ 535 BGB Mieterhöhung")
    assert "§ 558 BGB" in mapping.corrected_terms
    assert any("§ 558 BGB" in e for e in mapping.explanations)


def test_long_sgb_name_expands_to_abbreviation():
    mapping = map_concepts("Sozialgesetzbuch Zweites Buch Leistungen")
    assert "SGB II" in mapping.corrected_terms


def test_unrelated_query_has_no_corrections():
    mapping = map_concepts("Hausboot Liegeplatz Genehmigung")
    assert mapping.corrected_terms == []
    assert mapping.explanations == []
