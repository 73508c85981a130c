"""FastAPI application for the intake-form OCR assistant.

Accepts a base64-encoded scan, runs it through document analysis and
optionally rewrites the extracted text with the configured formatter.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intake_ocr import __version__
from intake_ocr.analysis.client import AnalysisRequest, DocumentAnalysisClient
from intake_ocr.analysis.errors import humanize_error_message
from intake_ocr.formatting.base import FormatterOptions, TextFormatter
from intake_ocr.formatting.registry import get_formatter
from intake_ocr.utils.config import FormatterConfig, load_config
from intake_ocr.utils.logger import get_logger

from .schemas import (
    ErrorResponse,
    HealthResponse,
    ProcessDocumentRequest,
    ProcessDocumentResponse,
)

logger = get_logger(__name__)

MISSING_FILE_MESSAGE = "File information is missing."
MISSING_CREDENTIALS_MESSAGE = "An Azure API key and endpoint are required."

app = FastAPI(
    title="Intake Form OCR API",
    description="Extract text, tables and form fields from scanned intake forms",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config().server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": message}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject malformed request bodies with a 400 instead of a 422."""
    logger.warning("Rejected malformed request body: %s", exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})


def _get_components() -> tuple[DocumentAnalysisClient, TextFormatter, FormatterConfig]:
    """Initialize and return the processing components.

    Returns:
        Tuple of (analysis_client, formatter, formatter_config).
    """
    config = load_config()
    client = DocumentAnalysisClient(config.azure)
    formatter = get_formatter(config.formatter.kind)
    return client, formatter, config.formatter


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(status="healthy", version=__version__)


@app.post(
    "/api/process-document",
    response_model=ProcessDocumentResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_document(payload: ProcessDocumentRequest) -> ProcessDocumentResponse:
    """Analyze an uploaded form and return its extracted text.

    Args:
        payload: Base64 file, file metadata, service credentials and
            optional formatting settings.

    Returns:
        Extracted content, formatted content when a model path was given,
        and structured data when requested.
    """
    if not (payload.file_base64 and payload.file_name and payload.file_type):
        raise HTTPException(status_code=400, detail=MISSING_FILE_MESSAGE)

    if not (payload.azure_api_key and payload.azure_endpoint):
        raise HTTPException(status_code=400, detail=MISSING_CREDENTIALS_MESSAGE)

    try:
        client, formatter, formatter_config = _get_components()
        outcome = await client.analyze_document(
            AnalysisRequest(
                file_content=payload.file_base64,
                file_name=payload.file_name,
                mime_type=payload.file_type,
                api_key=payload.azure_api_key,
                endpoint_url=payload.azure_endpoint,
                model_id=payload.model_id or "",
            )
        )

        formatted_content = None
        if payload.gemma_model_path and outcome.content:
            formatted_content = formatter.format(
                outcome.content,
                FormatterOptions(
                    model_path=payload.gemma_model_path,
                    temperature=formatter_config.temperature,
                    max_tokens=formatter_config.max_tokens,
                ),
            )

        return ProcessDocumentResponse(
            content=outcome.content,
            formatted_content=formatted_content,
            structured_data=(
                outcome.structured_data if payload.include_structured else None
            ),
        )

    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Document processing failed for %s: %s", payload.file_name, exc)
        raise HTTPException(status_code=500, detail=humanize_error_message(exc)) from exc
