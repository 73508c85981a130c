"""Pydantic request/response schemas for the FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProcessDocumentRequest(BaseModel):
    """Request schema for a document processing call.

    Every field is optional at the schema level so that missing values
    are reported with the endpoint's own 400 messages.
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    file_base64: str | None = Field(default=None, alias="fileBase64")
    file_name: str | None = Field(default=None, alias="fileName")
    file_type: str | None = Field(default=None, alias="fileType")
    azure_api_key: str | None = Field(default=None, alias="azureApiKey")
    azure_endpoint: str | None = Field(default=None, alias="azureEndpoint")
    model_id: str | None = Field(default=None, alias="modelId")
    gemma_model_path: str | None = Field(default=None, alias="gemmaModelPath")
    include_structured: bool = Field(default=False, alias="includeStructured")


class ProcessDocumentResponse(BaseModel):
    """Response schema for a successful document processing call."""

    model_config = ConfigDict(populate_by_name=True)

    content: str
    formatted_content: str | None = Field(default=None, alias="formattedContent")
    structured_data: dict[str, Any] | None = Field(
        default=None, alias="structuredData"
    )


class ErrorResponse(BaseModel):
    """Response schema for a rejected or failed request."""

    error: str


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
