"""Application entry point for the intake-form OCR API server."""

import uvicorn

from intake_ocr.api.app import app
from intake_ocr.utils.config import load_config
from intake_ocr.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
