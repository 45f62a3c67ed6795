"""
Mathpix PDF-to-markdown extraction adapter.

Submits a PDF, polls its conversion status, and downloads the resulting
Mathpix-Markdown. There is no retry and no overall deadline: callers decide
whether to try again.

Dependencies: httpx
System role: Text extraction boundary (PDF bytes to markdown)
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from paperdesk.core.exceptions import ExtractionFailedError

logger = logging.getLogger(__name__)

MATHPIX_BASE_URL = "https://api.mathpix.com"

CONVERSION_OPTIONS = {
    "streaming": False,
    "fullwidth_punctuation": False,
    "include_diagram_text": True,
    "rm_spaces": True,
    "rm_fonts": True,
}


class MathpixExtractor:
    """Convert PDF bytes into Mathpix-Markdown."""

    def __init__(
        self,
        app_id: str,
        app_key: str,
        base_url: str = MATHPIX_BASE_URL,
        poll_interval: float = 1.0,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize extractor.

        Args:
            app_id: Mathpix application id
            app_key: Mathpix application key
            base_url: API base URL
            poll_interval: Seconds between status polls
            timeout: Per-request HTTP timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
            sleep: Awaitable sleep used between polls
        """
        self._base_url = base_url.rstrip("/")
        self._headers = {"app_id": app_id, "app_key": app_key}
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def extract(self, data: bytes, filename: str = "document.pdf") -> str:
        """
        Convert a PDF into markdown.

        Args:
            data: Raw PDF bytes
            filename: Name reported in the multipart upload

        Returns:
            str: Mathpix-Markdown for the whole document

        Raises:
            ExtractionFailedError: On submission, polling or download failure,
                or when the service reports status "error"
        """
        logger.info(f"{__name__}:extract - Step 1: Submitting PDF ({len(data)} bytes)")
        async with self._client() as client:
            pdf_id = await self._submit(client, data, filename)
            logger.info(f"{__name__}:extract - Step 1 OK: pdf_id={pdf_id}")

            logger.info(f"{__name__}:extract - Step 2: Polling conversion status")
            await self._wait_until_complete(client, pdf_id)

            logger.info(f"{__name__}:extract - Step 3: Downloading markdown")
            response = await self._request(client, "GET", f"/v3/pdf/{pdf_id}.mmd")
            markdown = response.text
            logger.info(f"{__name__}:extract - Step 3 OK: {len(markdown)} chars")
            return markdown

    async def _submit(self, client: httpx.AsyncClient, data: bytes, filename: str) -> str:
        response = await self._request(
            client,
            "POST",
            "/v3/pdf",
            files={"file": (filename, data, "application/pdf")},
            data={"options_json": json.dumps(CONVERSION_OPTIONS)},
        )
        payload = _json(response)
        pdf_id = payload.get("pdf_id")
        if not pdf_id:
            raise ExtractionFailedError("Mathpix did not return a pdf_id", details={"response": payload})
        return pdf_id

    async def _wait_until_complete(self, client: httpx.AsyncClient, pdf_id: str) -> None:
        while True:
            response = await self._request(client, "GET", f"/v3/pdf/{pdf_id}")
            payload = _json(response)
            status = payload.get("status")
            if status == "completed":
                return
            if status == "error":
                logger.error(f"{__name__}:_wait_until_complete - Conversion failed for {pdf_id}")
                raise ExtractionFailedError(
                    f"Mathpix conversion failed for {pdf_id}",
                    details={"pdf_id": pdf_id, "response": payload},
                )
            logger.debug(f"{__name__}:_wait_until_complete - {pdf_id} status={status}")
            await self._sleep(self._poll_interval)

    async def _request(self, client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExtractionFailedError(
                f"Mathpix request failed: {method} {url} -> {e.response.status_code}",
                details={"status_code": e.response.status_code, "body": e.response.text[:500]},
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionFailedError(
                f"Mathpix request failed: {method} {url} - {type(e).__name__}: {e}",
            ) from e
        return response


def _json(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as e:
        raise ExtractionFailedError("Mathpix returned a non-JSON response", details={"body": response.text[:500]}) from e
    if not isinstance(payload, dict):
        raise ExtractionFailedError("Mathpix returned an unexpected payload", details={"response": payload})
    return payload
