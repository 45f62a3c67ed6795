import pytest

from paperdesk.api.routers.search import parse_path_filter
from paperdesk.core.exceptions import ValidationError

URL = "/api/v1/projects/p1/search"


@pytest.fixture
def indexed_client(client):
    client.post("/api/v1/projects/p1/index", json={"paths": ["notes.txt", "paper.pdf"]})
    return client


def test_search(indexed_client, vector_index):
    response = indexed_client.post(URL, json={"query": "residual", "top_k": 4})

    assert response.status_code == 200
    hits = response.json()
    assert len(hits) == 4
    assert set(hits[0]) == {"file", "snippet", "score", "section"}
    assert vector_index.queries[-1] == {"top_k": 4, "filter": {"project_id": "p1"}}


def test_search_path_regex(indexed_client, vector_index):
    response = indexed_client.post(
        URL,
        json={"query": "residual", "top_k": 10, "filters": {"path": {"$regex": "\\.TXT$"}}},
    )

    hits = response.json()
    assert {hit["file"] for hit in hits} == {"notes.txt"}
    assert vector_index.queries[-1]["top_k"] == 50


def test_search_exact_path(indexed_client, vector_index):
    response = indexed_client.post(URL, json={"query": "residual", "filters": {"path": "paper.pdf"}})

    assert {hit["file"] for hit in response.json()} == {"paper.pdf"}
    assert vector_index.queries[-1]["filter"] == {"project_id": "p1", "path": "paper.pdf"}


def test_search_blank_query(client):
    response = client.post(URL, json={"query": "  "})

    assert response.status_code == 400


def test_search_invalid_filter(client):
    response = client.post(URL, json={"query": "residual", "filters": {"path": 5}})

    assert response.status_code == 400


def test_search_invalid_regex(client):
    response = client.post(URL, json={"query": "residual", "filters": {"path": {"$regex": "("}}})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "filters, expected",
    [
        (None, (None, None)),
        ({}, (None, None)),
        ({"path": "a.pdf"}, ("a.pdf", None)),
        ({"path": {"$regex": "^a"}}, (None, "^a")),
    ],
)
def test_parse_path_filter(filters, expected):
    assert parse_path_filter(filters) == expected


def test_parse_path_filter_rejects_other_shapes():
    with pytest.raises(ValidationError):
        parse_path_filter({"path": {"$in": ["a.pdf"]}})
