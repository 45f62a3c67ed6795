"""Tests for the Mathpix extractor (HTTP mocked with httpx.MockTransport)."""

import httpx
import pytest

from paperdesk.boundary.extraction.mathpix_client import MathpixExtractor
from paperdesk.core.exceptions import ExtractionFailedError
from fakes import SleepRecorder


class MathpixStub:
    """Scripted Mathpix API: submit, a status sequence, then the markdown."""

    def __init__(self, statuses: list[dict], submit: dict | None = None, submit_status: int = 200) -> None:
        self.statuses = list(statuses)
        self.submit = submit if submit is not None else {"pdf_id": "abc123"}
        self.submit_status = submit_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path == "/v3/pdf":
            return httpx.Response(self.submit_status, json=self.submit)
        if path == "/v3/pdf/abc123":
            return httpx.Response(200, json=self.statuses.pop(0))
        if path == "/v3/pdf/abc123.mmd":
            return httpx.Response(200, text="# Title\n\nBody")
        return httpx.Response(404, json={"error": "unknown route"})


def make_extractor(stub: MathpixStub, sleep: SleepRecorder) -> MathpixExtractor:
    return MathpixExtractor(
        app_id="app",
        app_key="key",
        poll_interval=1.0,
        transport=httpx.MockTransport(stub),
        sleep=sleep,
    )


class TestMathpixExtractor:
    """Tests for MathpixExtractor.extract."""

    @pytest.mark.asyncio
    async def test_submit_poll_download(self) -> None:
        """Should poll until completed and return the markdown."""
        stub = MathpixStub([{"status": "split"}, {"status": "processing"}, {"status": "completed"}])
        sleep = SleepRecorder()

        markdown = await make_extractor(stub, sleep).extract(b"%PDF-1.4", filename="paper.pdf")

        assert markdown == "# Title\n\nBody"
        assert sleep.delays == [1.0, 1.0]
        submit = stub.requests[0]
        assert submit.headers["app_id"] == "app"
        assert submit.headers["app_key"] == "key"
        assert b"options_json" in submit.content
        assert b"\"rm_spaces\": true" in submit.content
        assert b"paper.pdf" in submit.content

    @pytest.mark.asyncio
    async def test_remote_error_status(self) -> None:
        """Should raise ExtractionFailedError carrying the remote payload."""
        stub = MathpixStub([{"status": "error", "error": "unreadable"}])

        with pytest.raises(ExtractionFailedError) as exc_info:
            await make_extractor(stub, SleepRecorder()).extract(b"%PDF")

        assert exc_info.value.details["pdf_id"] == "abc123"
        assert exc_info.value.details["response"]["error"] == "unreadable"

    @pytest.mark.asyncio
    async def test_missing_pdf_id(self) -> None:
        """Should fail when the submission response lacks pdf_id."""
        stub = MathpixStub([], submit={"error": "invalid credentials"})

        with pytest.raises(ExtractionFailedError) as exc_info:
            await make_extractor(stub, SleepRecorder()).extract(b"%PDF")

        assert exc_info.value.details["response"] == {"error": "invalid credentials"}

    @pytest.mark.asyncio
    async def test_http_error_is_wrapped(self) -> None:
        """Should wrap HTTP status failures without retrying."""
        stub = MathpixStub([], submit={"error": "boom"}, submit_status=500)

        with pytest.raises(ExtractionFailedError) as exc_info:
            await make_extractor(stub, SleepRecorder()).extract(b"%PDF")

        assert exc_info.value.details["status_code"] == 500
        assert len(stub.requests) == 1

