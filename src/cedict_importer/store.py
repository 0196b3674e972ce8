"""Vocabulary Store Module

SQLite-backed store for canonical vocabulary records, keyed by headword.

Every write is validated against StoredVocabulary first and then applied
with one atomic ``INSERT ... ON CONFLICT(headword) DO UPDATE`` statement,
so two imports racing on the same headword cannot both create it. The
UNIQUE constraint on headword stays in place as a backstop.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, NamedTuple, Optional, Protocol
from uuid import uuid4

from pydantic import ValidationError

from .config import DB_PATH
from .errors import RecordValidationError
from .models import CanonicalRecord, StoredVocabulary

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS vocabulary (
    id                 TEXT PRIMARY KEY,
    headword           TEXT NOT NULL UNIQUE CHECK (length(headword) > 0),
    pinyin             TEXT NOT NULL CHECK (length(pinyin) > 0),
    vietnamese_reading TEXT NOT NULL DEFAULT '',
    meaning            TEXT NOT NULL,
    grammar            TEXT NOT NULL,
    examples           TEXT NOT NULL DEFAULT '[]',
    related            TEXT NOT NULL,
    hsk_level          INTEGER CHECK (hsk_level IS NULL OR hsk_level BETWEEN 1 AND 6),
    category           TEXT NOT NULL,
    created_at         TEXT NOT NULL,
    updated_at         TEXT NOT NULL
)
"""

UPSERT_SQL = """
INSERT INTO vocabulary (
    id, headword, pinyin, vietnamese_reading, meaning, grammar,
    examples, related, hsk_level, category, created_at, updated_at
)
VALUES (
    :id, :headword, :pinyin, :vietnamese_reading, :meaning, :grammar,
    :examples, :related, :hsk_level, :category, :now, :now
)
ON CONFLICT(headword) DO UPDATE SET
    pinyin = excluded.pinyin,
    vietnamese_reading = excluded.vietnamese_reading,
    meaning = excluded.meaning,
    grammar = excluded.grammar,
    examples = excluded.examples,
    related = excluded.related,
    hsk_level = excluded.hsk_level,
    category = excluded.category,
    updated_at = excluded.updated_at
RETURNING id
"""

JSON_COLUMNS = ("meaning", "grammar", "examples", "related")


class UpsertOutcome(NamedTuple):
    action: Literal["created", "updated"]
    id: str


class StoreProtocol(Protocol):
    """What the batch runner needs from a store."""

    def upsert(self, record: CanonicalRecord) -> UpsertOutcome:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_for_write(record: CanonicalRecord) -> StoredVocabulary:
    """
    Check a record against the store schema.

    Raises:
        RecordValidationError: listing every failing field, e.g.
            "grammar.formality: Input should be 'formal', ..."
    """
    try:
        return StoredVocabulary.model_validate(record.model_dump(by_alias=True))
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            problems.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        raise RecordValidationError(
            f"Validation failed for '{record.headword}': " + "; ".join(problems)
        ) from e


class VocabularyStore:
    """Persistent vocabulary records with insert-or-update by headword."""

    def __init__(
        self,
        db_path: Path | str = DB_PATH,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.db_path = Path(db_path)
        self.clock = clock

    @contextmanager
    def connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.execute(SCHEMA)
        logger.debug("Vocabulary store ready at %s", self.db_path)

    def upsert(self, record: CanonicalRecord) -> UpsertOutcome:
        """
        Create the record, or overwrite every mutable field of the record
        that already has its headword.

        Returns:
            UpsertOutcome with action "created" and a fresh id, or "updated"
            and the id of the existing record.

        Raises:
            RecordValidationError: if the record breaks the store schema
            sqlite3.Error: on database failures, including constraint
                violations raised by a concurrent writer
        """
        stored = validate_for_write(record)
        new_id = uuid4().hex
        data = stored.model_dump(by_alias=True)
        params: Dict[str, Any] = {
            "id": new_id,
            "headword": stored.headword,
            "pinyin": stored.pinyin,
            "vietnamese_reading": stored.vietnamese_reading,
            "hsk_level": stored.hsk_level,
            "category": stored.category,
            "now": self.clock().isoformat(),
        }
        for column in JSON_COLUMNS:
            params[column] = json.dumps(data[column], ensure_ascii=False, allow_nan=False)

        with self.connect() as conn:
            rows = conn.execute(UPSERT_SQL, params).fetchall()

        record_id = rows[0]["id"]
        action = "created" if record_id == new_id else "updated"
        logger.debug("Upserted %r: %s (id=%s)", stored.headword, action, record_id)
        return UpsertOutcome(action, record_id)

    def get(self, headword: str) -> Optional[Dict[str, Any]]:
        """Return the stored record for a headword (camelCase keys), or None."""
        with self.connect() as conn:
            row = conn.execute(
                "SELECT * FROM vocabulary WHERE headword = ?", (headword,)
            ).fetchone()
        if row is None:
            return None
        return {
            "id": row["id"],
            "headword": row["headword"],
            "pinyin": row["pinyin"],
            "vietnameseReading": row["vietnamese_reading"],
            "meaning": json.loads(row["meaning"]),
            "grammar": json.loads(row["grammar"]),
            "examples": json.loads(row["examples"]),
            "related": json.loads(row["related"]),
            "hskLevel": row["hsk_level"],
            "category": row["category"],
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
        }

    def count(self) -> int:
        with self.connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM vocabulary").fetchone()[0]

    def all_headwords(self) -> List[str]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT headword FROM vocabulary ORDER BY created_at, headword"
            ).fetchall()
        return [row["headword"] for row in rows]
