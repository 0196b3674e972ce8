"""Entry Normalization Module

Converts raw CC-CEDICT JSON entries into canonical vocabulary records
ready for the store.

Key responsibilities:
  - Parse untrusted input through the lenient RawEntry boundary model
  - Reject entries missing a headword, pinyin or primary meaning
  - Trim text fields and default everything optional
  - Derive hsk_level/category from grammar.level via the level mapper
"""

import logging
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from .levels import map_level
from .models import (
    CanonicalRecord,
    Example,
    Grammar,
    Meaning,
    RawEntry,
    Related,
)

logger = logging.getLogger(__name__)

UNKNOWN_WORD = "Unknown"


def clean_text(value: Optional[str]) -> str:
    """Strip surrounding whitespace; None becomes an empty string."""
    if not value:
        return ""
    return value.strip()


def clean_text_set(values: Iterable[str]) -> List[str]:
    """Trim members, drop blanks and repeats, keep first-seen order."""
    seen: set[str] = set()
    cleaned: List[str] = []
    for value in values:
        text = clean_text(value)
        if text and text not in seen:
            seen.add(text)
            cleaned.append(text)
    return cleaned


def parse_raw_entry(raw: Any) -> Optional[RawEntry]:
    """Parse one array element into a RawEntry, or None if it is not an object."""
    if not isinstance(raw, dict):
        return None
    try:
        return RawEntry.model_validate(raw)
    except ValidationError as e:
        logger.debug("Raw entry failed boundary parsing: %s", e)
        return None


def entry_label(raw: Any) -> str:
    """Best-effort identifying label for error reports."""
    if isinstance(raw, dict):
        word = raw.get("word")
        if isinstance(word, str) and word.strip():
            return word.strip()
    return UNKNOWN_WORD


def normalize(raw: Any) -> Optional[CanonicalRecord]:
    """
    Normalize one raw CC-CEDICT entry.

    Args:
        raw: One element of the uploaded JSON array (any type)

    Returns:
        CanonicalRecord, or None when the entry is not an object or is missing
        word, pinyin or meaning.primary after trimming. Invalid input never
        raises.
    """
    entry = parse_raw_entry(raw)
    if entry is None:
        return None

    headword = clean_text(entry.word)
    pinyin = clean_text(entry.pinyin)
    primary = clean_text(entry.meaning.primary)

    if not headword or not pinyin or not primary:
        return None

    level = clean_text(entry.grammar.level)
    mapping = map_level(level)

    frequency = entry.grammar.frequency
    formality = clean_text(entry.grammar.formality)

    return CanonicalRecord(
        headword=headword,
        pinyin=pinyin,
        vietnamese_reading=clean_text(entry.vietnamese_reading),
        meaning=Meaning(
            primary=primary,
            secondary=[s.strip() for s in entry.meaning.secondary],
            part_of_speech=clean_text(entry.meaning.part_of_speech),
        ),
        grammar=Grammar(
            level=level,
            frequency=frequency if frequency else 0,
            formality=formality or "neutral",
        ),
        examples=[
            Example(
                chinese=clean_text(ex.chinese),
                pinyin=clean_text(ex.pinyin),
                vietnamese=clean_text(ex.vietnamese),
            )
            for ex in entry.examples
        ],
        related=Related(
            synonyms=clean_text_set(entry.related.synonyms),
            antonyms=clean_text_set(entry.related.antonyms),
            compounds=clean_text_set(entry.related.compounds),
        ),
        hsk_level=mapping.hsk_level,
        category=mapping.category,
    )
