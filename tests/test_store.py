# tests/test_store.py

import sqlite3
from datetime import datetime, timezone

import pytest

from src.cedict_importer.errors import RecordValidationError
from src.cedict_importer.models import CanonicalRecord, Example, Grammar, Meaning
from src.cedict_importer.store import VocabularyStore, validate_for_write
from src.cedict_importer.transformers import normalize


@pytest.fixture
def store(tmp_path):
    s = VocabularyStore(tmp_path / "vocab.db")
    s.initialize()
    return s


def make_record(headword="你好", primary="hello", **kwargs):
    return CanonicalRecord(
        headword=headword,
        pinyin=kwargs.pop("pinyin", "nǐ hǎo"),
        meaning=Meaning(primary=primary),
        **kwargs,
    )


def test_upsert_creates_new_record(store):
    outcome = store.upsert(make_record(hsk_level=1, category="HSK1"))

    assert outcome.action == "created"
    assert outcome.id
    assert store.count() == 1

    stored = store.get("你好")
    assert stored["id"] == outcome.id
    assert stored["hskLevel"] == 1
    assert stored["category"] == "HSK1"
    assert stored["meaning"]["primary"] == "hello"


def test_upsert_updates_existing_record_in_place(store):
    first = store.upsert(make_record(primary="hello"))
    second = store.upsert(make_record(primary="hi there"))

    assert second.action == "updated"
    assert second.id == first.id
    assert store.count() == 1
    assert store.get("你好")["meaning"]["primary"] == "hi there"


def test_update_is_full_overwrite_not_merge(store):
    store.upsert(make_record(
        vietnamese_reading="nhĩ hảo",
        examples=[Example(chinese="你好！", pinyin="nǐ hǎo!", vietnamese="Xin chào!")],
    ))
    store.upsert(make_record())

    stored = store.get("你好")
    assert stored["vietnameseReading"] == ""
    assert stored["examples"] == []


def test_update_preserves_created_at_and_refreshes_updated_at(tmp_path):
    times = iter([
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 6, 1, tzinfo=timezone.utc),
    ])
    store = VocabularyStore(tmp_path / "vocab.db", clock=lambda: next(times))
    store.initialize()

    store.upsert(make_record())
    store.upsert(make_record(primary="hi"))

    stored = store.get("你好")
    assert stored["createdAt"].startswith("2024-01-01")
    assert stored["updatedAt"].startswith("2024-06-01")


def test_get_missing_headword_returns_none(store):
    assert store.get("不存在") is None


def test_headwords_are_distinct_keys(store):
    store.upsert(make_record("你好"))
    store.upsert(make_record("您好"))
    assert set(store.all_headwords()) == {"你好", "您好"}
    assert store.count() == 2


# --- schema validation on write ------------------------------------------------


def test_invalid_formality_is_rejected(store):
    record = make_record(grammar=Grammar(formality="casual"))

    with pytest.raises(RecordValidationError) as excinfo:
        store.upsert(record)

    assert "grammar.formality" in str(excinfo.value)
    assert store.count() == 0


def test_negative_frequency_is_rejected(store):
    with pytest.raises(RecordValidationError, match="grammar.frequency"):
        store.upsert(make_record(grammar=Grammar(frequency=-1)))


def test_infinite_frequency_is_rejected(store):
    with pytest.raises(RecordValidationError, match="grammar.frequency"):
        store.upsert(make_record(grammar=Grammar(frequency=float("inf"))))
    assert store.count() == 0


def test_integer_frequency_reads_back_as_integer(store):
    store.upsert(make_record(grammar=Grammar(frequency=5)))
    store.upsert(make_record(headword="谢谢", grammar=Grammar(frequency=2.5)))

    frequency = store.get("你好")["grammar"]["frequency"]
    assert frequency == 5
    assert isinstance(frequency, int)
    assert store.get("谢谢")["grammar"]["frequency"] == 2.5


def test_example_with_blank_fields_is_rejected(store):
    record = make_record(examples=[Example(chinese="你好", pinyin="", vietnamese="")])
    with pytest.raises(RecordValidationError, match="examples"):
        store.upsert(record)


def test_unknown_category_is_rejected(store):
    with pytest.raises(RecordValidationError, match="category"):
        store.upsert(make_record(category="Slang"))


def test_mismatched_hsk_pair_is_rejected():
    with pytest.raises(RecordValidationError, match="does not match"):
        validate_for_write(make_record(hsk_level=2, category="HSK1"))
    with pytest.raises(RecordValidationError, match="must be null"):
        validate_for_write(make_record(hsk_level=3, category="Common"))


def test_record_validation_error_is_a_value_error(store):
    with pytest.raises(ValueError):
        store.upsert(make_record(category="Slang"))


def test_normalized_sample_entries_pass_validation(store):
    raw = {
        "word": "学习",
        "pinyin": "xué xí",
        "meaning": {"primary": "to study"},
        "grammar": {"level": "elementary", "frequency": 800},
    }
    outcome = store.upsert(normalize(raw))
    assert outcome.action == "created"
    assert store.get("学习")["category"] == "HSK2"


def test_unique_headword_constraint_backstops_direct_inserts(store):
    store.upsert(make_record())
    with store.connect() as conn:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO vocabulary (id, headword, pinyin, meaning, grammar, related,"
                " category, created_at, updated_at)"
                " VALUES ('x', '你好', 'nǐ hǎo', '{}', '{}', '{}', 'Common', 'now', 'now')"
            )
