"""Pattern-based clinical note formatter.

Scans extracted intake-form text for patient details, complaints,
history, medications and allergies, and lays them out as a chart note.
Keywords are matched in English and Japanese since intake forms are
commonly bilingual.
"""

import re
from dataclasses import dataclass, field

from intake_ocr.utils.logger import get_logger

from .base import FormatterOptions, TextFormatter

logger = get_logger(__name__)

NOTHING_NOTABLE = "Nothing notable"
UNKNOWN = "Unknown"

_VALUE = re.compile(r"[：:]\s*(.+)")
_AGE_VALUE = re.compile(r"[：:]\s*(\d+)")
_NONE_ANSWER = re.compile(r"なし|無し|特になし|^(none|no|n/?a|nil)\.?$", re.IGNORECASE)

_NAME = re.compile(r"氏名|名前|患者名|\bname\b", re.IGNORECASE)
_AGE = re.compile(r"年齢|\bage\b", re.IGNORECASE)
_SEX = re.compile(r"性別|\bsex\b|\bgender\b", re.IGNORECASE)
_FEMALE = re.compile(r"女|\bfemale\b|\bwoman\b", re.IGNORECASE)
_MALE = re.compile(r"男|\bmale\b|\bman\b", re.IGNORECASE)
_SYMPTOM = re.compile(r"症状|主訴|訴え|痛み|不調|symptom|complaint|pain", re.IGNORECASE)
_HISTORY = re.compile(
    r"既往歴|病歴|過去の病気|past history|medical history", re.IGNORECASE
)
_PRESENT_ILLNESS = re.compile(
    r"現病歴|現在の状態|現在の症状|present illness|current condition", re.IGNORECASE
)
_MEDICATION = re.compile(
    r"薬|服薬|内服|処方|medication|medicine|prescription", re.IGNORECASE
)
_ALLERGY = re.compile(r"アレルギー|過敏症|allerg", re.IGNORECASE)


@dataclass
class IntakeFindings:
    """Facts pulled out of an intake form."""

    name: str = UNKNOWN
    age: int | None = None
    sex: str = UNKNOWN
    symptoms: list[str] = field(default_factory=list)
    history: list[str] = field(default_factory=list)
    present_illness: str | None = None
    medications: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)


def _value_of(line: str) -> str | None:
    match = _VALUE.search(line)
    if match:
        return match.group(1).strip() or None
    return None


def _answered(value: str | None) -> bool:
    return bool(value) and not _NONE_ANSWER.search(value)


def collect_findings(text: str) -> IntakeFindings:
    """Scan intake text line by line for clinically relevant answers."""
    findings = IntakeFindings()
    lines = text.split("\n")

    for line in lines:
        if _NAME.search(line):
            value = _value_of(line)
            if value:
                findings.name = value
        elif _AGE.search(line):
            match = _AGE_VALUE.search(line)
            if match:
                findings.age = int(match.group(1))
        elif _SEX.search(line):
            if _FEMALE.search(line):
                findings.sex = "Female"
            elif _MALE.search(line):
                findings.sex = "Male"

    for line in lines:
        if _SYMPTOM.search(line) and not _HISTORY.search(line):
            value = _value_of(line)
            if value:
                findings.symptoms.append(value)

        if _HISTORY.search(line):
            value = _value_of(line)
            if _answered(value):
                findings.history.append(value)

        if _PRESENT_ILLNESS.search(line):
            value = _value_of(line)
            if value:
                findings.present_illness = value

        if _MEDICATION.search(line) and not _ALLERGY.search(line):
            value = _value_of(line)
            if _answered(value):
                findings.medications.append(value)

        if _ALLERGY.search(line):
            value = _value_of(line)
            if _answered(value):
                findings.allergies.append(value)

    return findings


def _bullets(items: list[str]) -> list[str]:
    if not items:
        return [NOTHING_NOTABLE]
    return [f"- {item}" for item in items]


def render_note(findings: IntakeFindings) -> str:
    """Lay out findings as a chart note with derived examination reminders."""
    age = f"{findings.age} years" if findings.age is not None else UNKNOWN
    lines = [
        "[Basic Information]",
        f"- Name: {findings.name}",
        f"- Age: {age}",
        f"- Sex: {findings.sex}",
        "",
        "[Chief Complaint / Symptoms]",
        *_bullets(findings.symptoms),
        "",
        "[Past History]",
        *_bullets(findings.history),
        "",
        "[Present Illness]",
        findings.present_illness or "No information",
        "",
        "[Medications]",
        *_bullets(findings.medications),
        "",
        "[Allergies]",
        *_bullets(findings.allergies),
        "",
        "[Examination Notes]",
        "Based on the intake form, the following points deserve attention:",
    ]

    if findings.sex == "Female" and findings.age is not None and findings.age > 40:
        lines.append("- Female over 40: consider gynecological screening")
    if findings.symptoms:
        lines.append("- Confirm the details of the reported symptoms")
    if findings.history:
        lines.append("- Check how past history relates to the current symptoms")
    if findings.medications:
        lines.append("- Review current medications for interactions")
    if findings.allergies:
        lines.append("- Take the reported allergies into account when prescribing")

    lines.extend(
        [
            "",
            "Note: these notes are based on the intake form only and must be "
            "confirmed during the examination.",
        ]
    )
    return "\n".join(lines)


class ClinicalNoteFormatter(TextFormatter):
    """Rule-based stand-in for a model that writes clinical chart notes."""

    def format(
        self,
        text: str,
        options: FormatterOptions,
        prompt: str | None = None,
    ) -> str:
        try:
            return render_note(collect_findings(text))
        except Exception as exc:
            logger.error("Clinical note formatting failed: %s", exc)
            return f"Formatting failed: {exc}"
