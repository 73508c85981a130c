"""Shared test fixtures for the intake-form OCR test suite."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

API_KEY = "0123456789abcdef0123456789ABCDEF"
ENDPOINT = "https://example.cognitiveservices.azure.com/"
OPERATION_URL = (
    "https://example.cognitiveservices.azure.com/documentintelligence/"
    "documentModels/prebuilt-layout/analyzeResults/op-1?api-version=2023-07-31"
)


class SleepRecorder:
    """Awaitable stand-in for ``asyncio.sleep`` that records delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FakeAnalysisService:
    """Scripted analysis service served through ``httpx.MockTransport``.

    Args:
        poll_responses: Responses returned by successive status polls.
            Dicts are sent as 200 JSON bodies.
        submit_response: Response to the analyze POST. Defaults to a 202
            carrying an Operation-Location header.
    """

    def __init__(
        self,
        poll_responses: list[dict[str, Any] | httpx.Response],
        submit_response: httpx.Response | None = None,
    ) -> None:
        self.poll_responses = list(poll_responses)
        self.submit_response = submit_response or httpx.Response(
            202, headers={"Operation-Location": OPERATION_URL}
        )
        self.requests: list[httpx.Request] = []

    @property
    def submissions(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def polls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            return httpx.Response(
                self.submit_response.status_code,
                headers=self.submit_response.headers,
                content=self.submit_response.content,
            )
        response = self.poll_responses.pop(0)
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    """Return a fresh sleep recorder."""
    return SleepRecorder()


@pytest.fixture
def fake_service() -> Callable[..., FakeAnalysisService]:
    """Return a factory for scripted analysis services."""
    return FakeAnalysisService


@pytest.fixture
def analysis_result() -> dict[str, Any]:
    """A succeeded poll body with pages, a sparse table and form fields."""
    return {
        "status": "succeeded",
        "createdDateTime": "2024-05-01T10:00:00Z",
        "lastUpdatedDateTime": "2024-05-01T10:00:03Z",
        "analyzeResult": {
            "apiVersion": "2023-07-31",
            "modelId": "prebuilt-layout",
            "pages": [
                {
                    "pageNumber": 1,
                    "width": 8.5,
                    "height": 11,
                    "unit": "inch",
                    "lines": [
                        {"content": "Patient Intake Form", "boundingBox": [1, 1, 4, 1]},
                        {"content": "Name: Taro Yamada", "boundingBox": [1, 2, 4, 2]},
                    ],
                },
                {
                    "pageNumber": 2,
                    "width": 8.5,
                    "height": 11,
                    "unit": "inch",
                    "lines": [{"content": "Allergies: penicillin"}],
                },
            ],
            "tables": [
                {
                    "rowCount": 2,
                    "columnCount": 2,
                    "cells": [
                        {"rowIndex": 0, "columnIndex": 0, "content": "A"},
                        {
                            "rowIndex": 1,
                            "columnIndex": 1,
                            "rowSpan": 1,
                            "columnSpan": 1,
                            "content": "B",
                            "boundingBox": [0, 0, 1, 1],
                        },
                    ],
                }
            ],
            "keyValuePairs": [
                {"key": {"content": "Age"}, "value": {"content": "45"}},
                {"key": {"content": "Medication"}},
                {"value": {"content": "orphan value"}},
            ],
        },
    }


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
