"""
CC-CEDICT Import Pipeline

Runs uploaded CC-CEDICT JSON arrays through normalization and the
vocabulary store, producing per-item reports.

Features:
- Strictly sequential processing: result indexes always equal input positions
- Per-item failure boundary: one bad entry never aborts the batch
- Per-file failure boundary for multi-file imports
- Progress tracking and structured logging
- Idempotent re-imports (existing headwords are updated, never duplicated)
"""

import logging
import time
from typing import Any, List, Optional, Sequence

from .errors import ImportFileError, NoFilesProvidedError
from .loaders import NOT_AN_ARRAY_MESSAGE, parse_json_entries
from .models import (
    FileResult,
    ImportItemError,
    ImportItemSuccess,
    ImportResult,
    MultiFileResult,
    UploadedFile,
)
from .store import StoreProtocol
from .transformers import entry_label, normalize

logger = logging.getLogger(__name__)

INVALID_ENTRY_MESSAGE = "Invalid or missing required data"
NO_FILES_MESSAGE = "No JSON files were provided"


def format_summary(
    success: int,
    failed: int,
    skipped: int,
    files: Optional[int] = None,
) -> str:
    """Human-readable view of import counters."""
    counts = f"{success} succeeded, {failed} failed, {skipped} skipped"
    if files is None:
        return f"Upload complete: {counts}"
    return f"Upload of {files} files complete: {counts}"


def run_batch(entries: Any, store: StoreProtocol) -> ImportResult:
    """
    Import a list of raw CC-CEDICT entries one at a time, in order.

    Each entry is normalized and upserted by headword. Entries that fail
    normalization or whose write raises are recorded in ``errors`` with
    their original index; everything else is recorded in ``successes``.

    Args:
        entries: Parsed top-level JSON value; must be a list
        store: Anything with ``upsert(record) -> UpsertOutcome``

    Returns:
        ImportResult with counts and per-item detail

    Raises:
        ImportFileError: If entries is not a list (nothing is processed)
    """
    if not isinstance(entries, list):
        raise ImportFileError(NOT_AN_ARRAY_MESSAGE)

    result = ImportResult(total=len(entries))
    if not entries:
        logger.warning("No entries to import")
        return result

    t0 = time.time()
    log_interval = max(1, len(entries) // 10)

    for idx, raw in enumerate(entries):
        position = idx + 1
        if position == 1 or position == len(entries) or position % log_interval == 0:
            logger.info(
                "Import progress: %d/%d (%.1f%%) - Success: %d, Failed: %d",
                position,
                len(entries),
                (position / len(entries)) * 100,
                result.success,
                result.failed,
            )

        record = normalize(raw)
        if record is None:
            logger.warning("Rejecting entry idx=%d word=%r: %s",
                           idx, entry_label(raw), INVALID_ENTRY_MESSAGE)
            result.failed += 1
            result.errors.append(ImportItemError(
                index=idx, word=entry_label(raw), error=INVALID_ENTRY_MESSAGE,
            ))
            continue

        try:
            outcome = store.upsert(record)
        except Exception as e:
            logger.warning("Failed to store entry idx=%d word=%r: %s",
                           idx, record.headword, e)
            result.failed += 1
            result.errors.append(ImportItemError(
                index=idx, word=entry_label(raw), error=str(e),
            ))
            continue

        result.success += 1
        result.successes.append(ImportItemSuccess(
            index=idx, word=record.headword, action=outcome.action, id=outcome.id,
        ))

    logger.info(
        "✓ Imported %d entries in %.2fs (success=%d, failed=%d, skipped=%d)",
        result.total,
        time.time() - t0,
        result.success,
        result.failed,
        result.skipped,
    )
    return result


def import_file(uploaded: UploadedFile, store: StoreProtocol) -> ImportResult:
    """Parse one uploaded file and import its entries.

    Raises:
        ImportFileError: If the file is not a JSON array
    """
    logger.info("Importing %s (%d bytes)", uploaded.file_name, uploaded.size)
    entries = parse_json_entries(uploaded.content)
    return run_batch(entries, store)


def build_single_file_response(result: ImportResult) -> dict:
    summary = format_summary(result.success, result.failed, result.skipped)
    return {"summary": summary, "details": result.model_dump()}


def run_multiple_files(
    files: Sequence[UploadedFile],
    store: StoreProtocol,
) -> MultiFileResult:
    """
    Import several uploaded files one after another.

    A file that cannot be parsed or imported is recorded with
    ``status="error"`` and counts as a single failed unit; its siblings are
    still processed. Successful files add their counts to the totals.

    Raises:
        NoFilesProvidedError: If files is empty (checked before any work)
    """
    if not files:
        raise NoFilesProvidedError(NO_FILES_MESSAGE)

    logger.info("Importing %d files sequentially", len(files))

    files_results: List[FileResult] = []
    total_items = total_success = total_failed = total_skipped = 0

    for file_no, uploaded in enumerate(files, start=1):
        logger.info("File %d/%d: %s", file_no, len(files), uploaded.file_name)
        try:
            result = import_file(uploaded, store)
        except Exception as e:
            logger.error("File %s could not be imported: %s", uploaded.file_name, e)
            files_results.append(FileResult(
                file_name=uploaded.file_name,
                file_size=uploaded.size,
                status="error",
                error=str(e),
            ))
            total_failed += 1
            continue

        files_results.append(FileResult(
            file_name=uploaded.file_name,
            file_size=uploaded.size,
            status="success",
            results=result,
        ))
        total_items += result.total
        total_success += result.success
        total_failed += result.failed
        total_skipped += result.skipped

    summary = format_summary(total_success, total_failed, total_skipped, files=len(files))
    logger.info("✓ %s", summary)

    return MultiFileResult(
        summary=summary,
        total_files=len(files),
        total_items=total_items,
        total_success=total_success,
        total_failed=total_failed,
        total_skipped=total_skipped,
        files_results=files_results,
    )
