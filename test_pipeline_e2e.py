import pytest

import legal_search
from models import OutcomeStatus, Priority, SearchRequest
from query_pipeline.federated_search import FederatedSearcher
from query_pipeline.pipeline import resolve_query
from rechtsinformationen_client import SearchServiceError

JOBCENTER_QUERY = "Termin Jobcenter verpassen Konsequenzen"


def _member(number: str, headline: str, snippet: str) -> dict:
    return {
        "item": {
            "@type": "Legislation",
            "@id": f"/v1/legislation/eli/bund/{number}",
            "documentNumber": number,
            "headline": headline,
            "abbreviation": "SGB II",
            "legislationDate": "2023-01-01",
        },
        "textMatches": [{"name": "text", "text": snippet}],
    }


class FakeClient:
    def __init__(self, responses=None, failing=()):
        self.responses = responses or {}
        self.failing = set(failing)
        self.calls = []

    def search_documents(self, term, size=10):
        self.calls.append(term)
        if term in self.failing:
            raise SearchServiceError("timeout")
        return self.responses.get(term, [])


MELDEVERSAEUMNIS = _member(
    "BJNR295500003",
    "Sozialgesetzbuch (SGB) Zweites Buch (II) - Bürgergeld",
    "§ 32 Meldeversäumnisse. Kommen Leistungsberechtigte trotz schriftlicher Belehrung einer Aufforderung nicht nach",
)


def test_jobcenter_query_finds_high_tier_result_first():
    client = FakeClient(responses={"§ 32 SGB II": [MELDEVERSAEUMNIS]})
    outcome = resolve_query(SearchRequest(query=JOBCENTER_QUERY), FederatedSearcher(client))

    assert outcome.status == OutcomeStatus.FOUND
    assert outcome.results[0].priority == Priority.HIGH
    assert outcome.results[0].term.text == "§ 32 SGB II"
    # primary tier produced documents, so no fallback terms were searched
    assert client.calls == ["§ 32 SGB II"]


def test_fallback_terms_searched_when_primary_tier_fails():
    client = FakeClient(
        responses={"Meldeversäumnis": [MELDEVERSAEUMNIS]},
        failing={"§ 32 SGB II"},
    )
    outcome = resolve_query(SearchRequest(query=JOBCENTER_QUERY), FederatedSearcher(client))

    assert outcome.found
    assert client.calls == ["§ 32 SGB II", JOBCENTER_QUERY, "Meldeversäumnis"]
    assert [t.text for t in outcome.failed_terms] == ["§ 32 SGB II"]
    assert outcome.results[0].priority == Priority.LOW


def test_no_candidates_is_not_found_with_attempted_terms():
    client = FakeClient()
    outcome = resolve_query(SearchRequest(query="Hausboot Liegeplatz Genehmigung"), FederatedSearcher(client))

    assert outcome.status == OutcomeStatus.NOT_FOUND
    assert outcome.results == []
    assert [t.text for t in outcome.attempted_terms] == ["Hausboot Liegeplatz Genehmigung"]


def test_all_terms_failing_is_not_found():
    client = FakeClient(failing={JOBCENTER_QUERY, "§ 32 SGB II", "Meldeversäumnis"})
    outcome = resolve_query(SearchRequest(query=JOBCENTER_QUERY), FederatedSearcher(client))

    assert not outcome.found
    assert len(outcome.failed_terms) == len(outcome.attempted_terms) == 3


def test_tool_boundary_coerces_string_parameters():
    client = FakeClient(responses={"§ 32 SGB II": [MELDEVERSAEUMNIS, _member("X2", "Zweites", "Text")]})
    outcome = legal_search.intelligent_legal_search(
        {"query": f"  {JOBCENTER_QUERY}  ", "threshold": "0.5", "limit": "1"},
        client,
    )
    assert outcome.query == JOBCENTER_QUERY
    assert len(outcome.results) == 1


@pytest.mark.parametrize("arguments", [{"query": "ab"}, {"query": "   "}, {"query": None}, {}, {"query": 42}])
def test_tool_boundary_rejects_invalid_query(arguments):
    with pytest.raises(legal_search.InvalidQueryError):
        legal_search.intelligent_legal_search(arguments, FakeClient())


def test_english_query_reports_translation():
    client = FakeClient(responses={"Arbeitnehmerrechte Kündigung": [MELDEVERSAEUMNIS]})
    outcome = legal_search.intelligent_legal_search({"query": "employee rights dismissal"}, client)
    assert outcome.translated
    assert outcome.effective_query == "Arbeitnehmerrechte Kündigung"
    assert outcome.found
