from query_pipeline.reference_extraction import (
    extract_legal_references,
    extract_references,
    find_paragraph_mentions,
    normalize_law_code,
)


def test_extract_paragraph_reference_with_sgb_book():
    refs = extract_legal_references("§ 32 SGB II Meldeversäumnis")
    assert "§ 32 SGB II" in refs
    assert refs[0] == "§ 32 SGB II"


def test_extract_references_includes_bare_statute():
    refs = extract_legal_references("§ 32 SGB II Meldeversäumnis")
    assert "SGB II" in refs


def test_extract_reverse_order_reference():
    refs = extract_legal_references("Antrag nach SGB X § 44 gestellt")
    assert "§ 44 SGB X" in refs


def test_extract_article_reference_keeps_article_form():
    refs = extract_legal_references("Verstößt das gegen Art. 3 GG?")
    assert "Art. 3 GG" in refs
    assert "§ 3 GG" not in refs


def test_extract_canonical_statute_spelling():
    refs = extract_legal_references("Was regelt § 242 stgb?")
    assert "§ 242 StGB" in refs


def test_statute_inside_word_is_not_a_reference():
    assert extract_legal_references("Wohnung in Eggenfelden gesucht") == []


def test_extract_references_deduplicates_repeated_citations():
    refs = extract_legal_references("§ 558 BGB und nochmal § 558 BGB")
    assert refs.count("§ 558 BGB") == 1


def test_with_section_only_lists_sectioned_citations():
    refs = extract_references("§ 15 BEEG und das BGB")
    assert refs.with_section == ["§ 15 BEEG"]
    assert "BGB" in refs.valid_references


def test_extract_references_empty_text():
    assert extract_references("").references == []


def test_normalize_law_code():
    assert normalize_law_code("sgb  ii") == "SGB II"
    assert normalize_law_code("stgb") == "StGB"
    assert normalize_law_code("SGB") == "SGB"


def test_find_paragraph_mentions_unique_and_limited():
    text = "Nach § 32 Abs. 1 und § 32 Abs. 1 sowie § 31a und § 31b und § 7"
    mentions = find_paragraph_mentions(text, limit=3)
    assert mentions == ["§ 32 Abs. 1", "§ 31a", "§ 31b"]
