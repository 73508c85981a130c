"""Asynchronous client for the Azure Document Intelligence analyze API.

Submits a base64-encoded document, then polls the returned operation
until the service reports a terminal state or the attempt budget runs
out. The HTTP transport and the inter-poll delay are injectable so the
protocol can be driven deterministically.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from intake_ocr.utils.config import AzureConfig
from intake_ocr.utils.logger import get_logger, mask_secret

from .errors import (
    SERVICE_NAME,
    AnalysisFailedError,
    AnalysisTimeoutError,
    InvalidApiKeyError,
    MissingOperationHandleError,
    ProtocolViolationError,
    TransportError,
    UnsupportedFileTypeError,
    translate_service_error,
)
from .extractor import extract_structured, extract_text
from .validation import normalize_endpoint, validate_api_key, validate_file_type

logger = get_logger(__name__)

DEFAULT_MODEL_ID = "prebuilt-layout"
SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
OPERATION_LOCATION_HEADER = "Operation-Location"

SleepFunc = Callable[[float], Awaitable[None]]


class AnalysisState(StrEnum):
    """Lifecycle states of a single document analysis."""

    VALIDATING = "validating"
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def _log_state(file_name: str, state: AnalysisState) -> None:
    logger.debug("Analysis of %s entered state %s", file_name, state)


@dataclass(frozen=True)
class AnalysisRequest:
    """A document to analyze together with the credentials to use."""

    file_content: str
    file_name: str
    mime_type: str
    api_key: str
    endpoint_url: str
    model_id: str = DEFAULT_MODEL_ID


@dataclass
class AnalysisOutcome:
    """Extracted output of a successful analysis."""

    content: str
    structured_data: dict[str, Any] | None
    raw_result: dict[str, Any]
    attempts: int
    state: AnalysisState = AnalysisState.SUCCEEDED


class DocumentAnalysisClient:
    """Runs the submit-and-poll protocol against the analysis service.

    The client holds no per-analysis state, so one instance can serve
    concurrent requests.

    Args:
        config: Service settings (API version, poll budget, timeouts).
        http_client: Shared ``httpx.AsyncClient``. When omitted, a client
            is opened for each analysis and closed afterwards.
        sleep: Awaitable used for the delay before every poll attempt.
    """

    def __init__(
        self,
        config: AzureConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.config = config or AzureConfig()
        self._http_client = http_client
        self._sleep = sleep

    def build_analyze_url(self, endpoint: str, model_id: str) -> str:
        """Return the analyze URL for a normalized endpoint and model."""
        return (
            f"{endpoint}/documentintelligence/documentModels/{model_id}:analyze"
            f"?api-version={self.config.api_version}"
        )

    async def analyze(self, request: AnalysisRequest) -> dict[str, Any]:
        """Analyze a document and return the raw result payload.

        Args:
            request: Document and credentials.

        Returns:
            Body of the poll response that reported ``succeeded``.

        Raises:
            InvalidInputError: If the request fails validation.
            TransportError: If the service answers with an error status.
            MissingOperationHandleError: If no operation URL is returned.
            AnalysisFailedError: If the service reports a failed analysis.
            AnalysisTimeoutError: If polling attempts are exhausted.
        """
        result, _ = await self._run(request)
        return result

    async def analyze_document(self, request: AnalysisRequest) -> AnalysisOutcome:
        """Analyze a document and extract its text and structured data."""
        result, attempts = await self._run(request)
        return AnalysisOutcome(
            content=extract_text(result),
            structured_data=extract_structured(result),
            raw_result=result,
            attempts=attempts,
        )

    async def _run(self, request: AnalysisRequest) -> tuple[dict[str, Any], int]:
        _log_state(request.file_name, AnalysisState.VALIDATING)

        if not validate_file_type(request.mime_type):
            raise UnsupportedFileTypeError(
                f"Unsupported file type: {request.mime_type}"
            )
        if not validate_api_key(request.api_key):
            raise InvalidApiKeyError("Invalid API key.")

        endpoint = normalize_endpoint(
            request.endpoint_url, expected_domain=self.config.expected_domain
        )
        model_id = (request.model_id or "").strip() or self.config.default_model_id
        url = self.build_analyze_url(endpoint, model_id)

        if self._http_client is not None:
            return await self._submit_and_poll(self._http_client, request, url)

        async with httpx.AsyncClient(
            timeout=self.config.request_timeout_s
        ) as http_client:
            return await self._submit_and_poll(http_client, request, url)

    async def _submit_and_poll(
        self,
        http_client: httpx.AsyncClient,
        request: AnalysisRequest,
        url: str,
    ) -> tuple[dict[str, Any], int]:
        _log_state(request.file_name, AnalysisState.SUBMITTING)
        logger.info(
            "Submitting %s (%s) with key %s",
            request.file_name,
            request.mime_type,
            mask_secret(request.api_key),
        )
        response = await self._send(
            http_client,
            "POST",
            url,
            headers={
                "Content-Type": "application/json",
                SUBSCRIPTION_KEY_HEADER: request.api_key,
            },
            json={"base64Source": request.file_content},
        )
        self._raise_for_status(response)

        operation_location = response.headers.get(OPERATION_LOCATION_HEADER)
        if not operation_location:
            raise MissingOperationHandleError()

        _log_state(request.file_name, AnalysisState.POLLING)
        max_attempts = self.config.max_poll_attempts
        for attempt in range(1, max_attempts + 1):
            await self._sleep(self.config.poll_interval_s)

            status_response = await self._send(
                http_client,
                "GET",
                operation_location,
                headers={SUBSCRIPTION_KEY_HEADER: request.api_key},
            )
            self._raise_for_status(status_response)

            try:
                status_result = status_response.json()
            except ValueError as exc:
                raise ProtocolViolationError(
                    "Operation status response was not valid JSON."
                ) from exc
            if not isinstance(status_result, dict):
                raise ProtocolViolationError(
                    "Operation status response was not a JSON object."
                )

            status = status_result.get("status")
            logger.debug(
                "Poll %d/%d for %s: %s", attempt, max_attempts, request.file_name, status
            )

            if status == AnalysisState.SUCCEEDED:
                _log_state(request.file_name, AnalysisState.SUCCEEDED)
                logger.info(
                    "Analysis of %s succeeded after %d attempts",
                    request.file_name,
                    attempt,
                )
                return status_result, attempt
            if status == AnalysisState.FAILED:
                _log_state(request.file_name, AnalysisState.FAILED)
                detail = status_result.get("errors", status_result.get("error"))
                logger.warning("Analysis of %s failed: %s", request.file_name, detail)
                raise AnalysisFailedError(detail)

        _log_state(request.file_name, AnalysisState.TIMED_OUT)
        logger.warning(
            "Analysis of %s timed out after %d attempts", request.file_name, max_attempts
        )
        raise AnalysisTimeoutError(max_attempts)

    async def _send(
        self,
        http_client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            return await http_client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not reach the {SERVICE_NAME}: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        """Raise a translated ``TransportError`` for non-success responses."""
        if response.is_success:
            return

        try:
            body = response.json()
        except ValueError:
            body = None

        message = translate_service_error(
            response.status_code, response.reason_phrase, body
        )
        raise TransportError(message, status_code=response.status_code)
