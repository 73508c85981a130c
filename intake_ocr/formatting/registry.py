"""Lookup of formatter implementations by configured name."""

from .base import TextFormatter
from .clinical import ClinicalNoteFormatter
from .summary import IntakeSummaryFormatter

FORMATTERS: dict[str, type[TextFormatter]] = {
    "summary": IntakeSummaryFormatter,
    "clinical": ClinicalNoteFormatter,
}


def get_formatter(kind: str) -> TextFormatter:
    """Instantiate the formatter registered under ``kind``.

    Raises:
        ValueError: If no formatter is registered under that name.
    """
    try:
        return FORMATTERS[kind]()
    except KeyError:
        raise ValueError(
            f"Unknown formatter '{kind}', expected one of {sorted(FORMATTERS)}"
        ) from None
