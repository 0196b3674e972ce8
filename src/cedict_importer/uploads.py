"""Upload Entry Points

Framework-agnostic versions of the two admin upload operations:

  - upload_cedict_file: one JSON file -> {summary, details}
  - upload_multiple_cedict_files: N JSON files -> aggregate totals and
    per-file breakdown

Both apply the upload rate limit and the size/count/type constraints
before the importer sees any data, time the run, and leave an entry in
the upload audit log.
"""

import logging
import time
from pathlib import PurePath
from typing import Callable, Optional, Sequence

from .audit import UploadAuditLog, file_metadata
from .config import ALLOWED_JSON_TYPES, MAX_JSON_FILE_SIZE, MAX_JSON_FILES_COUNT
from .errors import NoFilesProvidedError, UploadRejectedError
from .models import UploadedFile
from .pipeline import (
    NO_FILES_MESSAGE,
    build_single_file_response,
    import_file,
    run_multiple_files,
)
from .rate_limit import UploadRateLimiter
from .store import StoreProtocol

logger = logging.getLogger(__name__)

SINGLE_UPLOAD_ACTION = "CC_CEDICT_UPLOAD"
MULTIPLE_UPLOAD_ACTION = "MULTIPLE_CC_CEDICT_UPLOAD"
NO_FILE_MESSAGE = "No JSON file was provided"


def _success_rate(success: int, total: int) -> str:
    return f"{(success / total) * 100:.2f}%" if total > 0 else "0%"


def check_upload_constraints(
    files: Sequence[UploadedFile],
    max_size: int = MAX_JSON_FILE_SIZE,
    max_count: int = MAX_JSON_FILES_COUNT,
) -> None:
    """
    Enforce the upload limits.

    Raises:
        UploadRejectedError: too many files, a file over max_size, or a file
            that is neither a JSON mimetype nor named *.json
    """
    if len(files) > max_count:
        raise UploadRejectedError(
            f"Too many files: {len(files)} (maximum is {max_count})"
        )
    for uploaded in files:
        is_json = (
            uploaded.mimetype in ALLOWED_JSON_TYPES
            or PurePath(uploaded.file_name).suffix.lower() == ".json"
        )
        if not is_json:
            raise UploadRejectedError(
                f"Only JSON files are accepted: {uploaded.file_name} ({uploaded.mimetype})"
            )
        if uploaded.size > max_size:
            raise UploadRejectedError(
                f"File {uploaded.file_name} is too large: "
                f"{uploaded.size} bytes (maximum is {max_size})"
            )


def upload_cedict_file(
    uploaded: Optional[UploadedFile],
    store: StoreProtocol,
    *,
    limiter: Optional[UploadRateLimiter] = None,
    audit_log: Optional[UploadAuditLog] = None,
    client_key: str = "anonymous",
    clock: Callable[[], float] = time.monotonic,
) -> dict:
    """
    Import a single uploaded CC-CEDICT JSON file.

    The rate-limit counters are cleared once the upload has been admitted.

    Returns:
        {"summary": str, "details": ImportResult as dict}

    Raises:
        UploadRejectedError: missing file or constraint violation
        RateLimitExceededError: client over its upload allowance
        ImportFileError: the file is not a JSON array
    """
    if uploaded is None:
        error = UploadRejectedError(NO_FILE_MESSAGE)
        if audit_log is not None:
            audit_log.record_failure(SINGLE_UPLOAD_ACTION, error)
        raise error

    meta = file_metadata(uploaded.file_name, uploaded.mimetype, uploaded.size)

    if limiter is not None:
        limiter.hit(client_key)
        limiter.reset()

    try:
        check_upload_constraints([uploaded])
    except UploadRejectedError as e:
        if audit_log is not None:
            audit_log.record_failure(SINGLE_UPLOAD_ACTION, e, file=meta)
        raise

    start = clock()
    logger.info("CC-CEDICT upload started: %s (%d bytes)", uploaded.file_name, uploaded.size)

    try:
        result = import_file(uploaded, store)
    except Exception as e:
        duration_ms = (clock() - start) * 1000
        logger.exception("CC-CEDICT upload failed: %s", uploaded.file_name)
        if audit_log is not None:
            audit_log.record_failure(SINGLE_UPLOAD_ACTION, e, file=meta, duration_ms=duration_ms)
        raise

    duration_ms = (clock() - start) * 1000
    if audit_log is not None:
        audit_log.record_upload(SINGLE_UPLOAD_ACTION, meta, result.model_dump(), duration_ms)

    logger.info(
        "✓ CC-CEDICT upload finished in %.0fms (items=%d, success rate=%s)",
        duration_ms,
        result.total,
        _success_rate(result.success, result.total),
    )
    return build_single_file_response(result)


def upload_multiple_cedict_files(
    files: Optional[Sequence[UploadedFile]],
    store: StoreProtocol,
    *,
    limiter: Optional[UploadRateLimiter] = None,
    audit_log: Optional[UploadAuditLog] = None,
    client_key: str = "anonymous",
    clock: Callable[[], float] = time.monotonic,
) -> dict:
    """
    Import several uploaded CC-CEDICT JSON files one after another.

    Returns:
        MultiFileResult as a camelCase dict (summary, totals, filesResults)

    Raises:
        NoFilesProvidedError: no files supplied
        UploadRejectedError: constraint violation
        RateLimitExceededError: client over its upload allowance
    """
    if not files:
        error = NoFilesProvidedError(NO_FILES_MESSAGE)
        if audit_log is not None:
            audit_log.record_failure(MULTIPLE_UPLOAD_ACTION, error)
        raise error

    meta = file_metadata("multiple_files", None, sum(f.size for f in files))
    meta["files"] = [file_metadata(f.file_name, f.mimetype, f.size) for f in files]

    if limiter is not None:
        limiter.hit(client_key)

    try:
        check_upload_constraints(files)
    except UploadRejectedError as e:
        if audit_log is not None:
            audit_log.record_failure(MULTIPLE_UPLOAD_ACTION, e, file=meta)
        raise

    start = clock()
    logger.info(
        "Multiple CC-CEDICT upload started: %s",
        ", ".join(f.file_name for f in files),
    )

    result = run_multiple_files(files, store)

    duration_ms = (clock() - start) * 1000
    if audit_log is not None:
        audit_log.record_upload(
            MULTIPLE_UPLOAD_ACTION,
            meta,
            {
                "total": result.total_items,
                "success": result.total_success,
                "failed": result.total_failed,
                "skipped": result.total_skipped,
                "filesProcessed": result.total_files,
            },
            duration_ms,
        )

    logger.info(
        "✓ Multiple CC-CEDICT upload finished in %.0fms (files=%d, items=%d, success rate=%s)",
        duration_ms,
        result.total_files,
        result.total_items,
        _success_rate(result.total_success, result.total_items),
    )
    return result.to_response()
