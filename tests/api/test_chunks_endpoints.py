from fakes import NDJSON_HEADERS, read_frames

BASE = "/api/v1/projects/p1"


def test_get_chunks(client, sources):
    response = client.get(f"{BASE}/chunk", params={"path": "notes.txt"})

    assert response.status_code == 200
    chunks = response.json()["chunks"]
    assert [chunk["id"] for chunk in chunks] == ["0", "1"]
    assert len(chunks[0]["text"]) == 1800
    assert "p1/notes.txt.chunks.json" in sources.objects


def test_get_chunks_custom_window(client):
    response = client.get(f"{BASE}/chunk", params={"path": "notes.txt", "chunk_size": 1000, "overlap": 0})

    assert len(response.json()["chunks"]) == 3


def test_get_chunks_invalid_window(client):
    response = client.get(f"{BASE}/chunk", params={"path": "notes.txt", "chunk_size": 100, "overlap": 100})

    assert response.status_code == 400


def test_get_chunks_missing_file(client):
    response = client.get(f"{BASE}/chunk", params={"path": "missing.txt"})

    assert response.status_code == 404


def test_cognify_streams_progress(client):
    response = client.post(f"{BASE}/cognify", json={"path": "notes.txt"})

    assert response.status_code == 200
    lines = response.text.splitlines()
    assert lines[0] == "🔍 Extracting text…"
    assert lines[-1] == "🎉 Done! File is ready for semantic search."


def test_cognify_ndjson_result(client, vector_index):
    response = client.post(f"{BASE}/cognify", json={"path": "notes.txt"}, headers=NDJSON_HEADERS)

    frames = read_frames(response)
    assert frames[-1]["event"] == "complete"
    assert frames[-1]["data"] == {"path": "notes.txt", "chunk_count": 2, "vector_count": 2}
    assert set(vector_index.records) == {"notes.txt#0", "notes.txt#1"}


def test_cognify_missing_file(client):
    response = client.post(f"{BASE}/cognify", json={"path": "missing.txt"}, headers=NDJSON_HEADERS)

    assert response.status_code == 200
    frames = read_frames(response)
    assert frames[0]["data"]["message"] == "🔍 Extracting text…"
    assert frames[-1]["event"] == "error"
    assert frames[-1]["data"]["code"] == "NotFoundError"


def test_list_cognified(client):
    assert client.get(f"{BASE}/cognified").json() == {"paths": []}

    client.post(f"{BASE}/cognify", json={"path": "notes.txt"})

    assert client.get(f"{BASE}/cognified").json() == {"paths": ["notes.txt"]}


def test_index_many(client, vector_index):
    response = client.post(f"{BASE}/index", json={"paths": ["notes.txt", "paper.pdf"]})

    assert response.status_code == 200
    assert response.json() == {"indexed": 2}
    assert len(vector_index.records) == 9


def test_index_many_requires_paths(client):
    response = client.post(f"{BASE}/index", json={"paths": []})

    assert response.status_code == 422
