from fakes import NDJSON_HEADERS, read_frames

URL = "/api/v1/projects/p1/compare"


def test_compare_summaries(client, sources, generator):
    sources.objects["p1/paper.pdf.summary.md"] = b"Summary A"
    sources.objects["p1/other.pdf"] = b"%PDF-1.4"
    sources.objects["p1/other.pdf.summary.md"] = b"Summary B"
    generator.replies = ["Report [P1] [P2]"]

    response = client.post(URL, json={"paths": ["paper.pdf", "other.pdf"]}, headers=NDJSON_HEADERS)

    assert response.status_code == 200
    frames = read_frames(response)
    assert frames[0]["data"]["label"] == "[P1]"
    assert frames[-1] == {
        "event": "complete",
        "data": {
            "report": "Report [P1] [P2]",
            "papers": [{"label": "[P1]", "path": "paper.pdf"}, {"label": "[P2]", "path": "other.pdf"}],
        },
    }


def test_compare_with_focus_plain_text(client, generator):
    generator.replies = ["Focused report"]

    response = client.post(URL, json={"paths": ["paper.pdf"], "focus": "Depth?"})

    assert response.status_code == 200
    assert "[P1] paper.pdf" in response.text
    assert response.text.endswith("Focused report")


def test_compare_too_many_papers(client, extractor, generator):
    response = client.post(URL, json={"paths": [f"paper{i}.pdf" for i in range(11)]})

    assert response.status_code == 400
    assert "max 10" in response.json()["detail"]
    extractor.extract.assert_not_called()
    assert generator.calls == []


def test_compare_empty_paths(client):
    response = client.post(URL, json={"paths": []})

    assert response.status_code == 400


def test_compare_nothing_usable(client, generator):
    response = client.post(URL, json={"paths": ["missing.pdf"]})

    assert response.status_code == 200
    assert "❌ [P1] failed:" in response.text
    assert "No usable inputs, aborting." in response.text
    assert generator.calls == []
