"""Command-line interface for analyzing intake forms and exporting results.

Provides subcommands for analyzing a single scan to JSON and for
processing a folder of scans into a CSV summary.
"""

import argparse
import asyncio
import base64
import csv
import json
import mimetypes
import os
import sys
import time
from pathlib import Path

from intake_ocr.analysis.client import (
    AnalysisOutcome,
    AnalysisRequest,
    DocumentAnalysisClient,
)
from intake_ocr.analysis.errors import humanize_error_message
from intake_ocr.formatting.base import FormatterOptions
from intake_ocr.formatting.registry import FORMATTERS, get_formatter
from intake_ocr.utils.config import AppConfig, load_config
from intake_ocr.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

API_KEY_ENV = "AZURE_DOCUMENT_INTELLIGENCE_KEY"
ENDPOINT_ENV = "AZURE_DOCUMENT_INTELLIGENCE_ENDPOINT"

_SUPPORTED_EXTENSIONS = ("*.pdf", "*.jpg", "*.jpeg", "*.png")
_CSV_COLUMNS = [
    "filename",
    "status",
    "page_count",
    "table_count",
    "field_count",
    "attempts",
    "processing_time_s",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported document files in a directory.

    Args:
        input_dir: Directory to scan for documents.

    Returns:
        Sorted list of document file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def guess_mime_type(file_path: Path) -> str:
    """Guess a file's MIME type from its extension."""
    mime_type, _ = mimetypes.guess_type(file_path.name)
    return mime_type or "application/octet-stream"


def build_request(
    file_path: Path,
    api_key: str,
    endpoint: str,
    model_id: str = "",
) -> AnalysisRequest:
    """Read a file from disk and wrap it in an analysis request."""
    return AnalysisRequest(
        file_content=base64.b64encode(file_path.read_bytes()).decode("ascii"),
        file_name=file_path.name,
        mime_type=guess_mime_type(file_path),
        api_key=api_key,
        endpoint_url=endpoint,
        model_id=model_id,
    )


def _summarize_outcome(outcome: AnalysisOutcome) -> dict[str, object]:
    structured = outcome.structured_data or {}
    return {
        "status": "success",
        "page_count": len(structured.get("pages", [])),
        "table_count": len(structured.get("tables", [])),
        "field_count": len(structured.get("keyValuePairs", [])),
        "attempts": outcome.attempts,
        "error": None,
    }


async def _analyze_folder(
    files: list[Path],
    client: DocumentAnalysisClient,
    api_key: str,
    endpoint: str,
    model_id: str,
    verbose: bool,
) -> list[dict[str, object]]:
    results: list[dict[str, object]] = []

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            request = build_request(file_path, api_key, endpoint, model_id)
            outcome = await client.analyze_document(request)
            result = {"filename": file_path.name, **_summarize_outcome(outcome)}
        except Exception as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            result = {
                "filename": file_path.name,
                "status": "failed",
                "error": humanize_error_message(exc),
            }
        result["processing_time_s"] = round(time.time() - start_time, 2)
        results.append(result)

    return results


def process_folder(
    input_dir: Path,
    output_csv: Path,
    api_key: str,
    endpoint: str,
    model_id: str = "",
    verbose: bool = False,
    config: AppConfig | None = None,
) -> dict[str, int]:
    """Analyze all documents in a folder and export a CSV summary.

    Documents are analyzed one after another so a single subscription
    key is not pushed into rate limiting.

    Args:
        input_dir: Directory containing document files.
        output_csv: Path for the output CSV file.
        api_key: Service subscription key.
        endpoint: Service endpoint URL.
        model_id: Analysis model; blank selects the configured default.
        verbose: Whether to print per-file progress.
        config: Application configuration. Loaded from disk when omitted.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = config or load_config()
    client = DocumentAnalysisClient(config.azure)

    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d documents to process", len(files))
    results = asyncio.run(
        _analyze_folder(files, client, api_key, endpoint, model_id, verbose)
    )

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    successful = sum(1 for r in results if r["status"] == "success")
    summary = {
        "total": len(files),
        "successful": successful,
        "failed": len(files) - successful,
    }
    _print_summary(summary, output_csv)
    return summary


def _write_csv(results: list[dict[str, object]], output_path: Path) -> None:
    """Write per-document results to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout.

    Args:
        summary: Counts of total, successful, and failed documents.
        output_csv: Path to the output CSV.
    """
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(
    file_path: Path,
    api_key: str,
    endpoint: str,
    model_id: str = "",
    formatter_kind: str | None = None,
    include_structured: bool = False,
    config: AppConfig | None = None,
    model_path: str = "",
) -> dict[str, object]:
    """Analyze a single document and return its extracted output.

    Args:
        file_path: Path to the document file.
        api_key: Service subscription key.
        endpoint: Service endpoint URL.
        model_id: Analysis model; blank selects the configured default.
        formatter_kind: Formatter to apply, or ``None`` to skip formatting.
        include_structured: Whether to include the structured mapping.
        config: Application configuration. Loaded from disk when omitted.
        model_path: Path of the local language model handed to the
            formatter; blank when the formatter needs none.

    Returns:
        Dictionary with filename, content, formattedContent and
        structuredData.
    """
    config = config or load_config()
    client = DocumentAnalysisClient(config.azure)

    request = build_request(file_path, api_key, endpoint, model_id)
    outcome = asyncio.run(client.analyze_document(request))

    formatted_content = None
    if formatter_kind and outcome.content:
        formatter = get_formatter(formatter_kind)
        formatted_content = formatter.format(
            outcome.content,
            FormatterOptions(
                model_path=model_path,
                temperature=config.formatter.temperature,
                max_tokens=config.formatter.max_tokens,
            ),
        )

    return {
        "filename": file_path.name,
        "content": outcome.content,
        "formattedContent": formatted_content,
        "structuredData": outcome.structured_data if include_structured else None,
    }


def _add_credential_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--api-key",
        default=os.environ.get(API_KEY_ENV),
        help=f"Subscription key (default: ${API_KEY_ENV})",
    )
    parser.add_argument(
        "--endpoint",
        default=os.environ.get(ENDPOINT_ENV),
        help=f"Service endpoint URL (default: ${ENDPOINT_ENV})",
    )
    parser.add_argument(
        "--model-id",
        default="",
        help="Analysis model (default: configured layout model)",
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Intake Form OCR Assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    batch_parser = subparsers.add_parser("batch", help="Analyze a folder of documents")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with documents"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )
    _add_credential_arguments(batch_parser)

    single_parser = subparsers.add_parser("extract", help="Analyze a single document")
    single_parser.add_argument("file", type=Path, help="Document file to analyze")
    single_parser.add_argument(
        "-f",
        "--format",
        choices=sorted(FORMATTERS),
        dest="formatter",
        help="Rewrite the extracted text with this formatter",
    )
    single_parser.add_argument(
        "--structured",
        action="store_true",
        help="Include structured pages, tables and form fields",
    )
    single_parser.add_argument(
        "--model-path",
        default="",
        help="Local language model passed to the formatter",
    )
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    _add_credential_arguments(single_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    config = load_config()
    setup_logging(config.log_level)

    if not args.api_key or not args.endpoint:
        print(
            f"Error: an API key and endpoint are required "
            f"(--api-key/--endpoint or ${API_KEY_ENV}/${ENDPOINT_ENV})",
            file=sys.stderr,
        )
        sys.exit(1)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir,
            args.output,
            args.api_key,
            args.endpoint,
            args.model_id,
            args.verbose,
            config=config,
        )
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(
                args.file,
                args.api_key,
                args.endpoint,
                args.model_id,
                args.formatter,
                args.structured,
                config=config,
                model_path=args.model_path,
            )
        except Exception as exc:
            logger.error("Analysis of %s failed: %s", args.file.name, exc)
            print(f"Error: {humanize_error_message(exc)}", file=sys.stderr)
            sys.exit(1)
        output_str = json.dumps(result, indent=2, ensure_ascii=False)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str, encoding="utf-8")
            print(f"Output written to {args.output}")
        else:
            print(output_str)


if __name__ == "__main__":
    main()
