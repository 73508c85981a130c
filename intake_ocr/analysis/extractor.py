"""Extraction of text and structured data from analysis results.

Turns the nested payload returned by the layout model into a single
human-readable text (pages, reconstructed tables, form fields) and into
a structured mapping that keeps page geometry, bounding boxes and spans.
Both extractors degrade instead of raising: a malformed payload yields
the fixed fallback text or ``None``.
"""

from typing import Any

from intake_ocr.utils.logger import get_logger

logger = get_logger(__name__)

EXTRACTION_FALLBACK_TEXT = "Could not extract text from the analysis result."
UNKNOWN_FIELD_LABEL = "Unknown field"
CELL_SEPARATOR = " | "


def _analyze_section(result: dict[str, Any]) -> dict[str, Any]:
    """Return the ``analyzeResult`` body, accepting an already unwrapped one."""
    if "analyzeResult" in result:
        return result["analyzeResult"] or {}
    return result


def build_table_grid(table: dict[str, Any]) -> list[list[str]]:
    """Rebuild a dense grid from a table's sparse cell list.

    Missing positions stay empty. When several cells share an index the
    last one in list order wins.

    Args:
        table: Raw table with ``rowCount``, ``columnCount`` and ``cells``.

    Returns:
        ``rowCount`` rows of ``columnCount`` strings.

    Raises:
        KeyError: If a cell has no ``rowIndex`` or ``columnIndex``.
        IndexError: If a cell lies outside the declared grid.
    """
    row_count = table.get("rowCount") or 0
    column_count = table.get("columnCount") or 0
    grid = [[""] * column_count for _ in range(row_count)]

    for cell in table.get("cells") or []:
        row_index = cell["rowIndex"]
        column_index = cell["columnIndex"]
        if not (0 <= row_index < row_count and 0 <= column_index < column_count):
            raise IndexError(
                f"Cell at ({row_index}, {column_index}) is outside "
                f"a {row_count}x{column_count} table"
            )
        grid[row_index][column_index] = cell.get("content") or ""

    return grid


def render_table(grid: list[list[str]]) -> str:
    """Render a grid as newline-separated, pipe-joined rows."""
    return "\n".join(CELL_SEPARATOR.join(row) for row in grid)


def extract_text(result: dict[str, Any]) -> str:
    """Flatten an analysis result into readable text.

    Args:
        result: Final poll response body.

    Returns:
        Page text, then tables, then form fields, stripped of surrounding
        whitespace. A fixed fallback message if the payload is malformed.
    """
    try:
        analyze_result = _analyze_section(result)
        parts: list[str] = []

        for page in analyze_result.get("pages") or []:
            parts.append(f"===== Page {page.get('pageNumber')} =====\n\n")
            for line in page.get("lines") or []:
                parts.append(f"{line.get('content', '')}\n")
            parts.append("\n")

        tables = analyze_result.get("tables") or []
        if tables:
            parts.append("===== Tables =====\n\n")
            for number, table in enumerate(tables, 1):
                parts.append(f"Table {number}:\n")
                grid = build_table_grid(table)
                if grid:
                    parts.append(render_table(grid) + "\n")
                parts.append("\n")

        key_value_pairs = analyze_result.get("keyValuePairs") or []
        if key_value_pairs:
            parts.append("===== Form Fields =====\n\n")
            for pair in key_value_pairs:
                key = (pair.get("key") or {}).get("content") or UNKNOWN_FIELD_LABEL
                value = (pair.get("value") or {}).get("content") or ""
                parts.append(f"{key}: {value}\n")
            parts.append("\n")

        return "".join(parts).strip()
    except Exception as exc:
        logger.error("Text extraction failed: %s", exc)
        return EXTRACTION_FALLBACK_TEXT


def extract_structured(result: dict[str, Any]) -> dict[str, Any] | None:
    """Map an analysis result onto a page/table/key-value structure.

    Args:
        result: Final poll response body.

    Returns:
        Mapping with ``pages``, ``tables`` and ``keyValuePairs``, or
        ``None`` if the payload could not be read.
    """
    try:
        analyze_result = _analyze_section(result)

        pages = [
            {
                "pageNumber": page.get("pageNumber"),
                "width": page.get("width"),
                "height": page.get("height"),
                "unit": page.get("unit"),
                "lines": [
                    {
                        "content": line.get("content"),
                        "boundingBox": line.get("boundingBox"),
                    }
                    for line in page.get("lines") or []
                ],
            }
            for page in analyze_result.get("pages") or []
        ]

        tables = [
            {
                "rowCount": table.get("rowCount"),
                "columnCount": table.get("columnCount"),
                "cells": [
                    {
                        "rowIndex": cell.get("rowIndex"),
                        "columnIndex": cell.get("columnIndex"),
                        "rowSpan": cell.get("rowSpan") or 1,
                        "columnSpan": cell.get("columnSpan") or 1,
                        "content": cell.get("content"),
                        "boundingBox": cell.get("boundingBox"),
                    }
                    for cell in table.get("cells") or []
                ],
            }
            for table in analyze_result.get("tables") or []
        ]

        key_value_pairs = [
            {
                "key": (pair.get("key") or {}).get("content") or "",
                "value": (pair.get("value") or {}).get("content") or "",
            }
            for pair in analyze_result.get("keyValuePairs") or []
        ]

        return {"pages": pages, "tables": tables, "keyValuePairs": key_value_pairs}
    except Exception as exc:
        logger.error("Structured data extraction failed: %s", exc)
        return None
