"""Input checks performed before any call to the analysis service."""

import re
from urllib.parse import urlsplit

from intake_ocr.utils.logger import get_logger

from .errors import InvalidEndpointError

logger = get_logger(__name__)

SUPPORTED_FILE_TYPES: frozenset[str] = frozenset(
    {
        "application/pdf",
        "image/jpeg",
        "image/jpg",
        "image/png",
    }
)

DEFAULT_SERVICE_DOMAIN = "cognitiveservices.azure.com"

_API_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{32}$")


def validate_file_type(mime_type: str | None) -> bool:
    """Return whether the MIME type is accepted by the analysis service."""
    return mime_type in SUPPORTED_FILE_TYPES


def validate_api_key(api_key: str | None) -> bool:
    """Return whether the key looks like a subscription key (32 hex chars)."""
    if not api_key:
        return False
    return _API_KEY_PATTERN.fullmatch(api_key) is not None


def normalize_endpoint(
    endpoint: str | None,
    expected_domain: str = DEFAULT_SERVICE_DOMAIN,
) -> str:
    """Validate a service endpoint and strip one trailing slash.

    Hosts outside the expected domain are allowed but logged, since
    private deployments and proxies are legitimate.

    Args:
        endpoint: Base URL of the analysis resource.
        expected_domain: Domain that standard resources are hosted under.

    Returns:
        The endpoint without a trailing ``/``.

    Raises:
        InvalidEndpointError: If the endpoint is empty or not an absolute URL.
    """
    if not endpoint:
        raise InvalidEndpointError("No Azure endpoint was specified.")

    try:
        parts = urlsplit(endpoint)
        hostname = parts.hostname
    except ValueError as exc:
        raise InvalidEndpointError("Invalid Azure endpoint URL.") from exc

    if not parts.scheme or not parts.netloc or not hostname:
        raise InvalidEndpointError("Invalid Azure endpoint URL.")

    if expected_domain not in hostname:
        logger.warning(
            "Endpoint host %s is not a standard %s domain", hostname, expected_domain
        )

    return endpoint[:-1] if endpoint.endswith("/") else endpoint
