"""Data Models Module

Defines Pydantic models for vocabulary entries at each stage of an import:
the raw uploaded entry, the canonical record produced by normalization,
the stricter schema the store enforces on write, and the result reports
returned to callers.
"""

import math
from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_validator,
    model_validator,
)


HSK_CATEGORIES = ("HSK1", "HSK2", "HSK3", "HSK4", "HSK5", "HSK6")

Category = Literal[
    "HSK1", "HSK2", "HSK3", "HSK4", "HSK5", "HSK6",
    "Common", "Idiom", "Proverb", "Advanced", "Other",
    "Place Name", "Person Name", "Technical", "Literary", "Informal",
]

Formality = Literal["formal", "neutral", "informal", "literary"]

# ints stay ints so a stored frequency reads back exactly as uploaded
Number = Union[int, float]
Frequency = Union[NonNegativeInt, Annotated[float, Field(ge=0, allow_inf_nan=False)]]


# ============================================================================
# Boundary coercion helpers
# ============================================================================


def _optional_text(value: Any) -> Optional[str]:
    """Keep strings, drop anything else."""
    return value if isinstance(value, str) else None


def _text_list(value: Any) -> List[str]:
    """Always a list of strings; non-lists and non-string members are dropped."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


# ============================================================================
# Raw (untrusted) entry
# ============================================================================


class RawExample(BaseModel):
    model_config = ConfigDict(extra="ignore")

    chinese: Optional[str] = None
    pinyin: Optional[str] = None
    vietnamese: Optional[str] = None

    @field_validator("chinese", "pinyin", "vietnamese", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _optional_text(value)


class RawMeaning(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    primary: Optional[str] = None
    secondary: List[str] = []
    part_of_speech: Optional[str] = Field(None, alias="partOfSpeech")

    @field_validator("primary", "part_of_speech", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("secondary", mode="before")
    @classmethod
    def _list(cls, value: Any) -> List[str]:
        return _text_list(value)


class RawGrammar(BaseModel):
    model_config = ConfigDict(extra="ignore")

    level: Optional[str] = None
    frequency: Optional[Number] = None
    formality: Optional[str] = None

    @field_validator("level", "formality", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("frequency", mode="before")
    @classmethod
    def _number(cls, value: Any) -> Optional[Number]:
        # bool is an int subclass but never a frequency
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            finite = math.isfinite(float(value))
        except OverflowError:
            return None
        return value if finite else None


class RawRelated(BaseModel):
    model_config = ConfigDict(extra="ignore")

    synonyms: List[str] = []
    antonyms: List[str] = []
    compounds: List[str] = []

    @field_validator("synonyms", "antonyms", "compounds", mode="before")
    @classmethod
    def _list(cls, value: Any) -> List[str]:
        return _text_list(value)


class RawEntry(BaseModel):
    """One element of an uploaded CC-CEDICT JSON array.

    Parsing is lenient: wrongly-typed text becomes None, non-list sequences
    become [], and non-object sub-documents become empty. Whether the entry
    is usable is decided later by the normalizer, not here.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    word: Optional[str] = None
    pinyin: Optional[str] = None
    vietnamese_reading: Optional[str] = Field(None, alias="vietnameseReading")
    meaning: RawMeaning = Field(default_factory=RawMeaning)
    grammar: RawGrammar = Field(default_factory=RawGrammar)
    examples: List[RawExample] = []
    related: RawRelated = Field(default_factory=RawRelated)

    @field_validator("word", "pinyin", "vietnamese_reading", mode="before")
    @classmethod
    def _text(cls, value: Any) -> Optional[str]:
        return _optional_text(value)

    @field_validator("meaning", "grammar", "related", mode="before")
    @classmethod
    def _sub_document(cls, value: Any) -> dict:
        return _mapping(value)

    @field_validator("examples", mode="before")
    @classmethod
    def _examples(cls, value: Any) -> List[dict]:
        if not isinstance(value, list):
            return []
        return [_mapping(item) for item in value]


# ============================================================================
# Canonical record (normalizer output)
# ============================================================================


class Meaning(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    primary: str
    secondary: List[str] = []
    part_of_speech: str = Field("", alias="partOfSpeech")


class Grammar(BaseModel):
    level: str = ""
    frequency: Number = 0
    formality: str = "neutral"


class Example(BaseModel):
    chinese: str = ""
    pinyin: str = ""
    vietnamese: str = ""


class Related(BaseModel):
    synonyms: List[str] = []
    antonyms: List[str] = []
    compounds: List[str] = []


class CanonicalRecord(BaseModel):
    """Normalized, store-ready vocabulary record keyed by headword.

    hsk_level and category are always filled in together by the level
    mapper; callers never set them independently.
    """
    model_config = ConfigDict(populate_by_name=True)

    headword: str
    pinyin: str
    vietnamese_reading: str = Field("", alias="vietnameseReading")
    meaning: Meaning
    grammar: Grammar = Field(default_factory=Grammar)
    examples: List[Example] = []
    related: Related = Field(default_factory=Related)
    hsk_level: Optional[int] = Field(None, alias="hskLevel")
    category: str = "Common"


# ============================================================================
# Store-side schema
# ============================================================================


class StoredExample(BaseModel):
    chinese: str = Field(min_length=1)
    pinyin: str = Field(min_length=1)
    vietnamese: str = Field(min_length=1)


class StoredMeaning(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    primary: str = Field(min_length=1)
    secondary: List[str] = []
    part_of_speech: str = Field("", alias="partOfSpeech")


class StoredGrammar(BaseModel):
    level: str = ""
    frequency: Frequency = 0
    formality: Formality = "neutral"


class StoredVocabulary(BaseModel):
    """Schema the vocabulary store enforces before any write."""
    model_config = ConfigDict(populate_by_name=True)

    headword: str = Field(min_length=1)
    pinyin: str = Field(min_length=1)
    vietnamese_reading: str = Field("", alias="vietnameseReading")
    meaning: StoredMeaning
    grammar: StoredGrammar = Field(default_factory=StoredGrammar)
    examples: List[StoredExample] = []
    related: Related = Field(default_factory=Related)
    hsk_level: Optional[int] = Field(None, ge=1, le=6, alias="hskLevel")
    category: Category = "Common"

    @model_validator(mode="after")
    def _level_matches_category(self) -> "StoredVocabulary":
        if self.category in HSK_CATEGORIES:
            if self.hsk_level != int(self.category[3:]):
                raise ValueError(
                    f"hskLevel {self.hsk_level!r} does not match category {self.category}"
                )
        elif self.hsk_level is not None:
            raise ValueError(
                f"hskLevel must be null for category {self.category}"
            )
        return self


# ============================================================================
# Uploads and results
# ============================================================================


class UploadedFile(BaseModel):
    """An uploaded file held in memory, independent of any web framework."""

    file_name: str
    content: bytes
    mimetype: str = "application/json"

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path | str) -> "UploadedFile":
        path = Path(path)
        return cls(file_name=path.name, content=path.read_bytes())


class ImportItemError(BaseModel):
    index: int
    word: str
    error: str


class ImportItemSuccess(BaseModel):
    index: int
    word: str
    action: Literal["created", "updated"]
    id: str


class ImportResult(BaseModel):
    """Per-file import report.

    errors and successes are kept in input order and carry the 0-based
    index of the entry they describe.
    """
    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[ImportItemError] = []
    successes: List[ImportItemSuccess] = []


class FileResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    file_size: int = Field(alias="fileSize")
    status: Literal["success", "error"]
    results: Optional[ImportResult] = None
    error: Optional[str] = None


class MultiFileResult(BaseModel):
    """Aggregate report for a multi-file import."""
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    total_files: int = Field(alias="totalFiles")
    total_items: int = Field(0, alias="totalItems")
    total_success: int = Field(0, alias="totalSuccess")
    total_failed: int = Field(0, alias="totalFailed")
    total_skipped: int = Field(0, alias="totalSkipped")
    files_results: List[FileResult] = Field(default_factory=list, alias="filesResults")

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
