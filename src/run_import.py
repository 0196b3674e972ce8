"""Importer CLI Entry Point

Command-line interface for importing CC-CEDICT JSON files into the
vocabulary store. One input file goes through the single-file upload path,
several go through the multi-file path.

Usage:
    python -m src.run_import --input data/cedict_sample.json
    python -m src.run_import --input a.json b.json --db data/vocabulary.db
    python -m src.run_import --input a.json --validate-only
"""

import argparse
import json
import logging
import time
from pathlib import Path

from src.cedict_importer.audit import UploadAuditLog
from src.cedict_importer.config import DB_PATH, LOG_DIR
from src.cedict_importer.loaders import load_raw_entries
from src.cedict_importer.models import UploadedFile
from src.cedict_importer.rate_limit import UploadRateLimiter
from src.cedict_importer.store import VocabularyStore
from src.cedict_importer.uploads import upload_cedict_file, upload_multiple_cedict_files
from src.cedict_importer.validation import validate_entries


def configure_logging(log_dir: Path = LOG_DIR) -> None:
    """Configure logging with both console and file output.

    Sets up:
      - Root logger at DEBUG level
      - Console handler at INFO level for user-facing messages
      - File handler at DEBUG level for detailed troubleshooting
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "import.log"

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # Clear existing handlers to avoid duplicates if run multiple times
    logger.handlers.clear()
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)


def main(argv=None) -> int:
    """
    CLI entrypoint for the CC-CEDICT importer.

    Returns a Unix-style exit code: 0 when the import ran to completion
    (even if some entries failed), 1 on a fatal failure or, with
    --validate-only, when any entry is invalid.
    """
    parser = argparse.ArgumentParser(
        description="Import CC-CEDICT JSON files into the vocabulary store"
    )
    parser.add_argument(
        "--input",
        type=Path,
        nargs="+",
        required=True,
        help="One or more CC-CEDICT JSON array files.",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=DB_PATH,
        help=f"SQLite vocabulary database (default: {DB_PATH})",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=LOG_DIR,
        help=f"Directory for the run log and upload audit log (default: {LOG_DIR})",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Check the files and report problems without importing anything",
    )
    parser.add_argument(
        "--no-audit",
        action="store_true",
        help="Do not append to the upload audit log",
    )
    parser.add_argument(
        "--client-key",
        default="cli",
        help="Client identity used for upload rate limiting",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path to write the full JSON result",
    )

    args = parser.parse_args(argv)

    configure_logging(args.log_dir)
    logger = logging.getLogger(__name__)

    logger.info("=== Starting CC-CEDICT import ===")
    logger.info("Input: %s", ", ".join(str(p) for p in args.input))
    logger.info("Database: %s", args.db)
    logger.info("Validate only: %s", args.validate_only)

    try:
        start_time = time.time()

        if args.validate_only:
            all_valid = True
            for path in args.input:
                report = validate_entries(load_raw_entries(path))
                logger.info(
                    "%s: %d/%d valid, %d errors, %d warnings",
                    path, report.valid, report.total,
                    len(report.errors), len(report.warnings),
                )
                for err in report.errors:
                    logger.info("  [idx=%d] %s: %s - %s",
                                err.index, err.word, err.field, err.message)
                all_valid = all_valid and report.invalid == 0
            return 0 if all_valid else 1

        store = VocabularyStore(args.db)
        store.initialize()
        audit_log = None if args.no_audit else UploadAuditLog(log_dir=args.log_dir)
        limiter = UploadRateLimiter()
        files = [UploadedFile.from_path(p) for p in args.input]

        if len(files) == 1:
            response = upload_cedict_file(
                files[0], store,
                limiter=limiter, audit_log=audit_log, client_key=args.client_key,
            )
            details = response["details"]
            counts = (details["total"], details["success"], details["failed"], details["skipped"])
        else:
            response = upload_multiple_cedict_files(
                files, store,
                limiter=limiter, audit_log=audit_log, client_key=args.client_key,
            )
            counts = (
                response["totalItems"], response["totalSuccess"],
                response["totalFailed"], response["totalSkipped"],
            )

        if args.report is not None:
            args.report.parent.mkdir(parents=True, exist_ok=True)
            args.report.write_text(
                json.dumps(response, ensure_ascii=False, indent=2), encoding="utf-8"
            )

        elapsed_time = time.time() - start_time

        logger.info("=" * 70)
        logger.info("Import completed in %.2fs", elapsed_time)
        logger.info("")
        logger.info("Summary: %s", response["summary"])
        logger.info("  Items:    %d", counts[0])
        logger.info("  Success:  %d", counts[1])
        logger.info("  Failed:   %d", counts[2])
        logger.info("  Skipped:  %d", counts[3])
        logger.info("  Records in store: %d", store.count())
        if args.report is not None:
            logger.info("  Report:   %s", args.report)
        logger.info("=" * 70)

    except Exception as e:
        logger.exception(f"Import failed with an unhandled exception: {e}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
