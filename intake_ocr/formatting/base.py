"""Formatter capability interface for post-processing extracted text."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_PROMPT = """\
You are a medical assistant. Analyze the text extracted from the intake
form below and rewrite it in a structured form a physician can paste into
the medical chart. Extract the important clinical information.

Extracted text:
{text}

Use the following layout:
[Basic Information]
- Name: (patient name)
- Age: (age)
- Sex: (sex)

[Chief Complaint / Symptoms]
(bulleted complaints and symptoms)

[Past History]
(bulleted past illnesses)

[Present Illness]
(summary of the present illness)

[Medications]
(bulleted current medications)

[Allergies]
(allergy information)

[Examination Notes]
(key points and cautions read from the intake form)
"""


@dataclass(frozen=True)
class FormatterOptions:
    """Generation settings passed to a formatter backend."""

    model_path: str
    temperature: float = 0.7
    max_tokens: int = 1024


class TextFormatter(ABC):
    """Rewrites extracted OCR text into a presentation format.

    Implementations may be rule-based or backed by a language model; the
    analysis pipeline only relies on ``format`` returning a string.
    """

    @abstractmethod
    def format(
        self,
        text: str,
        options: FormatterOptions,
        prompt: str | None = None,
    ) -> str:
        """Return ``text`` rewritten according to the formatter's template.

        Args:
            text: Text produced by the result extractor.
            options: Model location and generation settings.
            prompt: Instruction override for model-backed formatters.
                ``DEFAULT_PROMPT`` is used when omitted.
        """
