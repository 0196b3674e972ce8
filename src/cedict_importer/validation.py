"""Pre-import Validation Module

Checks a CC-CEDICT JSON array without touching the store, reporting
missing required fields and structural problems as errors, and missing
optional fields as warnings.
"""

from typing import Any, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import ImportFileError
from .loaders import NOT_AN_ARRAY_MESSAGE
from .transformers import entry_label

REQUIRED_FIELDS = (
    ("word", "Missing Chinese headword"),
    ("pinyin", "Missing pinyin"),
    ("meaning.primary", "Missing primary meaning"),
)

OPTIONAL_FIELDS = (
    ("vietnameseReading", "Missing Sino-Vietnamese reading"),
    ("meaning.partOfSpeech", "Missing part of speech"),
    ("grammar.level", "Missing grammar level"),
)

RELATED_LISTS = ("synonyms", "antonyms", "compounds")


class ValidationIssue(BaseModel):
    index: int
    word: str
    field: str
    type: Literal["required", "structure"]
    message: str


class ValidationWarning(BaseModel):
    index: int
    word: str
    field: str
    message: str


class ValidationReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    valid: int = 0
    invalid: int = 0
    missing_required: int = Field(0, alias="missingRequired")
    missing_optional: int = Field(0, alias="missingOptional")
    errors: List[ValidationIssue] = []
    warnings: List[ValidationWarning] = []


def _lookup(entry: dict, dotted: str) -> Any:
    value: Any = entry
    for part in dotted.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _is_present(value: Any) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None and value != ""


def validate_entry(entry: Any, index: int, report: ValidationReport) -> None:
    """Validate one entry, appending its issues and updating the counters."""
    word = entry_label(entry)

    if not isinstance(entry, dict):
        report.errors.append(ValidationIssue(
            index=index, word=word, field="", type="structure",
            message="Entry must be a JSON object",
        ))
        report.invalid += 1
        return

    is_valid = True

    for field, message in REQUIRED_FIELDS:
        if not _is_present(_lookup(entry, field)):
            report.errors.append(ValidationIssue(
                index=index, word=word, field=field, type="required", message=message,
            ))
            report.missing_required += 1
            is_valid = False

    for field, message in OPTIONAL_FIELDS:
        if not _is_present(_lookup(entry, field)):
            report.warnings.append(ValidationWarning(
                index=index, word=word, field=field, message=message,
            ))
            report.missing_optional += 1

    examples = entry.get("examples")
    if examples is not None and not isinstance(examples, list):
        report.errors.append(ValidationIssue(
            index=index, word=word, field="examples", type="structure",
            message="examples must be an array",
        ))
        is_valid = False

    related = entry.get("related")
    if related:
        for name in RELATED_LISTS:
            value = related.get(name) if isinstance(related, dict) else None
            if not isinstance(value, list):
                report.warnings.append(ValidationWarning(
                    index=index, word=word, field=f"related.{name}",
                    message=f"{name} must be an array",
                ))

    if is_valid:
        report.valid += 1
    else:
        report.invalid += 1


def validate_entries(entries: Any) -> ValidationReport:
    """
    Validate a parsed CC-CEDICT array without importing anything.

    Raises:
        ImportFileError: If entries is not a list
    """
    if not isinstance(entries, list):
        raise ImportFileError(NOT_AN_ARRAY_MESSAGE)

    report = ValidationReport(total=len(entries))
    for index, entry in enumerate(entries):
        validate_entry(entry, index, report)
    return report
