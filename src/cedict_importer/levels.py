"""Level Mapping Module

Maps the free-text ``grammar.level`` label of a CC-CEDICT entry to an
(hsk_level, category) pair. Rules are checked in a fixed order and the
first match wins:

  1. absent or blank         -> (None, "Common")
  2. "HSK1" .. "HSK6"        -> (n, "HSK<n>")   single digit 1-6 only
  3. "advanced"              -> (None, "Advanced")
  4. named levels            -> see LEVEL_TABLE
  5. anything else           -> (None, "Common")

All comparisons are case-insensitive and ignore surrounding whitespace.
"""

import re
from typing import Any, NamedTuple, Optional


class LevelMapping(NamedTuple):
    hsk_level: Optional[int]
    category: str


DEFAULT_MAPPING = LevelMapping(None, "Common")

HSK_PATTERN = re.compile(r"^HSK([1-6])$", re.IGNORECASE)

LEVEL_TABLE = {
    "beginner": LevelMapping(1, "HSK1"),
    "elementary": LevelMapping(2, "HSK2"),
    "intermediate": LevelMapping(3, "HSK3"),
    "literary": LevelMapping(None, "Literary"),
    "technical": LevelMapping(None, "Technical"),
    "informal": LevelMapping(None, "Informal"),
}


def map_level(level_text: Any) -> LevelMapping:
    """Return the (hsk_level, category) pair for a level label.

    Never raises: non-string input is treated as absent.
    """
    if not isinstance(level_text, str) or not level_text.strip():
        return DEFAULT_MAPPING

    label = level_text.strip()

    if match := HSK_PATTERN.match(label):
        number = int(match.group(1))
        return LevelMapping(number, f"HSK{number}")

    lowered = label.lower()

    if lowered == "advanced":
        return LevelMapping(None, "Advanced")

    return LEVEL_TABLE.get(lowered, DEFAULT_MAPPING)
