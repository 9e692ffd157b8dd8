from models import CandidateTerm, Priority, TermOrigin
from query_pipeline.query_planner import TIER_CAPS, plan_query, select_terms


def test_jobcenter_query_promotes_section_citation_to_high_tier():
    plan = plan_query("Termin Jobcenter verpassen Konsequenzen")
    high = [t.text for t in plan.tier(Priority.HIGH)]
    assert high == ["§ 32 SGB II"]
    assert plan.tier(Priority.HIGH)[0].origin == TermOrigin.LEGAL_REFERENCE


def test_query_itself_is_first_fallback_term():
    plan = plan_query("Termin Jobcenter verpassen Konsequenzen")
    fallback = plan.fallback_terms
    assert fallback[0].text == "Termin Jobcenter verpassen Konsequenzen"
    assert fallback[0].origin == TermOrigin.ORIGINAL
    assert len(fallback) <= TIER_CAPS[Priority.LOW]


def test_primary_terms_exclude_low_tier():
    plan = plan_query("Termin Jobcenter verpassen Konsequenzen")
    assert all(t.priority != Priority.LOW for t in plan.primary_terms)


def test_term_caps_three_high_two_medium():
    plan = plan_query("§ 1 BGB § 2 BGB § 3 BGB § 4 BGB Überprüfungsantrag")
    assert [t.text for t in plan.tier(Priority.HIGH)] == ["§ 1 BGB", "§ 2 BGB", "§ 3 BGB"]
    assert len(plan.tier(Priority.MEDIUM)) == 2
    assert plan.tier(Priority.MEDIUM)[0].text == "Widerspruch"


def test_terms_are_ordered_by_tier():
    plan = plan_query("§ 44 SGB X Überprüfungsantrag")
    ranks = [t.priority.rank for t in plan.terms]
    assert ranks == sorted(ranks, reverse=True)


def test_english_query_uses_translation_as_fallback_term():
    plan = plan_query("employee rights dismissal")
    assert plan.translated
    assert plan.effective_query == "Arbeitnehmerrechte Kündigung"
    assert plan.fallback_terms[0].origin == TermOrigin.TRANSLATION
    assert plan.fallback_terms[0].text == "Arbeitnehmerrechte Kündigung"


def test_select_terms_keeps_highest_tier_duplicate():
    terms = select_terms(
        [
            CandidateTerm.from_origin("widerspruch", TermOrigin.EXPANSION),
            CandidateTerm.from_origin("Widerspruch", TermOrigin.CONCEPT_CORRECTION),
        ]
    )
    assert len(terms) == 1
    assert terms[0].priority == Priority.MEDIUM


def test_select_terms_drops_short_terms():
    terms = select_terms([CandidateTerm.from_origin("ab", TermOrigin.EXPANSION)])
    assert terms == []
