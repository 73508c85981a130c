"""Line-oriented intake summary formatter.

Drops the section markers produced by the result extractor, turns
``key: value`` lines into bullets and appends a chart memo block.
"""

import re

from .base import FormatterOptions, TextFormatter

SECTION_MARKERS = ("===== Page", "===== Tables", "===== Form Fields")
_KEY_VALUE_SPLIT = re.compile(r"[：:]")


class IntakeSummaryFormatter(TextFormatter):
    """Rule-based stand-in for a model that summarizes intake forms."""

    def format(
        self,
        text: str,
        options: FormatterOptions,
        prompt: str | None = None,
    ) -> str:
        lines = ["[Intake Form]"]

        for line in text.split("\n"):
            if not line.strip() or line.startswith(SECTION_MARKERS):
                continue

            parts = _KEY_VALUE_SPLIT.split(line, maxsplit=1)
            if len(parts) == 2:
                key, value = parts[0].strip(), parts[1].strip()
                if key and value:
                    lines.append(f"- {key}: {value}")
                    continue

            lines.append(line)

        lines.extend(
            [
                "",
                "[Chart Memo]",
                "Review the intake form above and note the following "
                "points during the examination.",
                "This section will be generated by a language model.",
            ]
        )
        return "\n".join(lines) + "\n"
