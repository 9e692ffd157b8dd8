from unittest.mock import MagicMock

import pytest
import requests

from rechtsinformationen_client import (
    DocumentAccessForbidden,
    DocumentPathError,
    RechtsinformationenClient,
    SearchServiceError,
    resolve_document_path,
)

BASE = "https://api.example.test"


def _response(status_code=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def _client(response=None, side_effect=None):
    session = MagicMock()
    if side_effect is not None:
        session.get.side_effect = side_effect
    else:
        session.get.return_value = response
    return RechtsinformationenClient(BASE, timeout=5, session=session), session


def test_search_documents_calls_document_endpoint():
    member = {"item": {"@type": "Legislation", "documentNumber": "A"}, "textMatches": []}
    client, session = _client(_response(payload={"member": [member]}))

    assert client.search_documents("§ 32 SGB II") == [member]
    session.get.assert_called_once_with(
        f"{BASE}/v1/document",
        timeout=5,
        params={"searchTerm": "§ 32 SGB II", "size": 10},
    )


def test_search_size_is_capped():
    client, session = _client(_response(payload={"member": []}))
    client.search_documents("BGB", size=500)
    assert session.get.call_args.kwargs["params"]["size"] == 100


def test_missing_member_is_empty_list():
    client, _ = _client(_response(payload={"totalItems": 0}))
    assert client.search_documents("BGB") == []


def test_non_dict_members_are_dropped():
    client, _ = _client(_response(payload={"member": ["junk", {"item": {}}]}))
    assert client.search_documents("BGB") == [{"item": {}}]


def test_http_error_raises_search_service_error():
    client, _ = _client(_response(status_code=503))
    with pytest.raises(SearchServiceError, match="503"):
        client.search_documents("BGB")


def test_timeout_raises_search_service_error():
    client, _ = _client(side_effect=requests.Timeout("read timed out"))
    with pytest.raises(SearchServiceError):
        client.search_documents("BGB")


def test_invalid_json_raises_search_service_error():
    client, _ = _client(_response(payload=ValueError("no json")))
    with pytest.raises(SearchServiceError):
        client.search_documents("BGB")


def test_search_legislation_filters():
    client, session = _client(_response(payload={"member": []}))
    client.search_legislation("Elterngeld", size=5, temporal_coverage_from="2020-01-01")
    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url == f"{BASE}/v1/legislation"
    assert params == {"searchTerm": "Elterngeld", "temporalCoverageFrom": "2020-01-01", "size": 5}


def test_search_case_law_filters():
    client, session = _client(_response(payload={"member": []}))
    client.search_case_law("Kündigung", court="BAG", document_type="Urteil")
    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url == f"{BASE}/v1/case-law"
    assert params == {"searchTerm": "Kündigung", "court": "BAG", "type": "Urteil", "size": 10}


def test_get_document_forbidden_carries_url():
    client, _ = _client(_response(status_code=403))
    with pytest.raises(DocumentAccessForbidden) as excinfo:
        client.get_document("/v1/case-law/KORE123")
    assert excinfo.value.url == f"{BASE}/v1/case-law/KORE123"


def test_get_document_html_returns_text():
    client, session = _client(_response(text="<html></html>"))
    assert client.get_document("KORE123", format="html") == "<html></html>"
    assert session.get.call_args.kwargs["headers"] == {"Accept": "text/html"}


def test_resolve_document_path():
    assert (
        resolve_document_path("https://testphase.rechtsinformationen.bund.de/norms/eli/bund/bgbl-1/2006/s2748/2025-05-01/1/deu")
        == "/v1/legislation/eli/bund/bgbl-1/2006/s2748/2025-05-01/1/deu"
    )
    assert resolve_document_path("/v1/case-law/KORE123") == "/v1/case-law/KORE123"
    assert resolve_document_path("eli/bund/bgbl-1/2006/s2748") == "/v1/legislation/eli/bund/bgbl-1/2006/s2748"
    assert resolve_document_path("KORE123") == "/v1/case-law/KORE123"


def test_resolve_document_path_rejects_ecli_urls():
    with pytest.raises(DocumentPathError):
        resolve_document_path("https://testphase.rechtsinformationen.bund.de/ecli/de/bgh/2023/010523")
    with pytest.raises(DocumentPathError):
        resolve_document_path("  ")
