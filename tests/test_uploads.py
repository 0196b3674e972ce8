# tests/test_uploads.py

import json

import pytest

from src.cedict_importer import uploads as uploads_mod
from src.cedict_importer.audit import UploadAuditLog
from src.cedict_importer.errors import (
    ImportFileError,
    NoFilesProvidedError,
    RateLimitExceededError,
    UploadRejectedError,
)
from src.cedict_importer.models import UploadedFile
from src.cedict_importer.rate_limit import UploadRateLimiter
from src.cedict_importer.store import VocabularyStore


def make_entries(n):
    return [
        {"word": f"词{i}", "pinyin": f"cí {i}", "meaning": {"primary": f"word {i}"}}
        for i in range(n)
    ]


def as_upload(entries, name="words.json", mimetype="application/json"):
    return UploadedFile(
        file_name=name,
        content=json.dumps(entries, ensure_ascii=False).encode("utf-8"),
        mimetype=mimetype,
    )


class FakeClock:
    def __init__(self, start=100.0, step=0.25):
        self.now = start
        self.step = step

    def __call__(self):
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def store(tmp_path):
    s = VocabularyStore(tmp_path / "vocab.db")
    s.initialize()
    return s


@pytest.fixture
def audit_log(tmp_path):
    return UploadAuditLog(log_dir=tmp_path / "logs")


# --- single file --------------------------------------------------------------


def test_single_upload_returns_summary_and_details(store, audit_log):
    response = uploads_mod.upload_cedict_file(
        as_upload(make_entries(3)), store, audit_log=audit_log, clock=FakeClock(),
    )

    assert response["summary"] == "Upload complete: 3 succeeded, 0 failed, 0 skipped"
    assert response["details"]["total"] == 3
    assert store.count() == 3


def test_single_upload_writes_truncated_audit_entry(store, audit_log):
    entries = make_entries(6) + [{"word": ""} for _ in range(7)]

    uploads_mod.upload_cedict_file(
        as_upload(entries, name="big.json"), store, audit_log=audit_log, clock=FakeClock(step=0.5),
    )

    [entry] = audit_log.read_entries()
    assert entry["level"] == "INFO"
    assert entry["action"] == uploads_mod.SINGLE_UPLOAD_ACTION
    assert entry["file"]["originalName"] == "big.json"
    assert entry["results"]["total"] == 13
    assert entry["results"]["success"] == 6
    assert entry["results"]["failed"] == 7
    assert len(entry["results"]["errors"]) == 5
    assert len(entry["results"]["successes"]) == 5
    assert entry["results"]["errors"][0]["index"] == 6
    assert entry["durationMs"] == 500.0


def test_single_upload_malformed_json_is_audited_and_raised(store, audit_log):
    bad = UploadedFile(file_name="bad.json", content=b"[1, 2")

    with pytest.raises(ImportFileError):
        uploads_mod.upload_cedict_file(bad, store, audit_log=audit_log)

    [entry] = audit_log.read_entries()
    assert entry["level"] == "ERROR"
    assert entry["error"]["type"] == "ImportFileError"
    assert store.count() == 0


def test_single_upload_without_file_is_rejected(store, audit_log):
    with pytest.raises(UploadRejectedError, match="No JSON file"):
        uploads_mod.upload_cedict_file(None, store, audit_log=audit_log)
    assert audit_log.read_entries()[0]["level"] == "ERROR"


def test_single_upload_resets_rate_limiter_after_admission(store):
    limiter = UploadRateLimiter(max_hits=1, window_seconds=3600)

    # every single-file upload clears the counters, so the limit never trips
    for _ in range(3):
        uploads_mod.upload_cedict_file(as_upload(make_entries(1)), store, limiter=limiter)


def test_single_upload_respects_exhausted_limit(store):
    limiter = UploadRateLimiter(max_hits=1, window_seconds=3600)
    limiter.hit("anonymous")

    with pytest.raises(RateLimitExceededError):
        uploads_mod.upload_cedict_file(as_upload(make_entries(1)), store, limiter=limiter)
    assert store.count() == 0


# --- multiple files -----------------------------------------------------------


def test_multiple_upload_response_and_audit(store, audit_log):
    files = [
        as_upload(make_entries(5), "a.json"),
        UploadedFile(file_name="b.json", content=b"{ broken"),
    ]

    response = uploads_mod.upload_multiple_cedict_files(files, store, audit_log=audit_log)

    assert response["totalFiles"] == 2
    assert response["totalItems"] == 5
    assert response["totalSuccess"] == 5
    assert response["totalFailed"] == 1
    assert [f["status"] for f in response["filesResults"]] == ["success", "error"]

    [entry] = audit_log.read_entries()
    assert entry["action"] == uploads_mod.MULTIPLE_UPLOAD_ACTION
    assert entry["file"]["originalName"] == "multiple_files"
    assert entry["results"]["filesProcessed"] == 2
    assert entry["results"]["failed"] == 1


def test_multiple_upload_without_files_fails_before_processing(store, audit_log):
    with pytest.raises(NoFilesProvidedError):
        uploads_mod.upload_multiple_cedict_files([], store, audit_log=audit_log)
    assert store.count() == 0


def test_multiple_upload_does_not_reset_rate_limiter(store):
    limiter = UploadRateLimiter(max_hits=2, window_seconds=3600)
    files = [as_upload(make_entries(1))]

    uploads_mod.upload_multiple_cedict_files(files, store, limiter=limiter)
    uploads_mod.upload_multiple_cedict_files(files, store, limiter=limiter)
    with pytest.raises(RateLimitExceededError):
        uploads_mod.upload_multiple_cedict_files(files, store, limiter=limiter)


# --- constraints --------------------------------------------------------------


def test_too_many_files_rejected():
    files = [as_upload([], f"{i}.json") for i in range(3)]
    with pytest.raises(UploadRejectedError, match="Too many files"):
        uploads_mod.check_upload_constraints(files, max_count=2)


def test_oversized_file_rejected():
    with pytest.raises(UploadRejectedError, match="too large"):
        uploads_mod.check_upload_constraints([as_upload(make_entries(10))], max_size=10)


def test_non_json_file_rejected():
    upload = UploadedFile(file_name="words.csv", content=b"a,b", mimetype="text/csv")
    with pytest.raises(UploadRejectedError, match="Only JSON"):
        uploads_mod.check_upload_constraints([upload])


def test_json_extension_accepted_with_generic_mimetype():
    upload = as_upload([], name="words.JSON", mimetype="application/octet-stream")
    uploads_mod.check_upload_constraints([upload])


def test_constraint_violation_is_raised_from_multi_upload(store, monkeypatch, audit_log):
    # the limit is a default argument bound at import time, so wrap the checker
    original = uploads_mod.check_upload_constraints
    monkeypatch.setattr(
        uploads_mod,
        "check_upload_constraints",
        lambda files: original(files, max_count=1),
    )

    files = [as_upload(make_entries(1), "a.json"), as_upload(make_entries(1), "b.json")]
    with pytest.raises(UploadRejectedError):
        uploads_mod.upload_multiple_cedict_files(files, store, audit_log=audit_log)
    assert store.count() == 0
    [entry] = audit_log.read_entries()
    assert entry["level"] == "ERROR"
    assert entry["file"]["originalName"] == "multiple_files"
    assert [f["originalName"] for f in entry["file"]["files"]] == ["a.json", "b.json"]
    assert entry["file"]["size"] == sum(f.size for f in files)
