from query_pipeline.term_expansion import decompose_compound, expand_terms


def test_jobcenter_appointment_expands_to_meldeversaeumnis():
    terms = expand_terms("Termin beim Jobcenter verpasst")
    assert "Meldeversäumnis" in terms
    assert "§ 32 SGB II" in terms


def test_sanction_query_expands_to_buergergeld_terms():
    terms = expand_terms("Welche Sanktion droht?")
    assert terms == ["Pflichtverletzung", "Minderung", "Bürgergeld"]


def test_compound_decomposition_and_topic():
    terms = expand_terms("Mieterhöhungsantrag")
    assert terms == ["Mieterhöhungs", "Mieterhöhung", "§ 558 BGB", "Miete"]


def test_expansions_are_unique():
    terms = expand_terms("Jobcenter Termin Bürgergeld Arbeitslosengeld")
    assert len(terms) == len(set(terms))


def test_decompose_compound():
    assert decompose_compound("kündigungsschutzklage") == ["Kündigungsschutz"]
    assert decompose_compound("bauantrag") == []


def test_no_expansion_for_plain_citation():
    assert expand_terms("Was regelt § 242 StGB?") == []
