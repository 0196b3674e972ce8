"""Importer Configuration

Module-level settings for the CC-CEDICT importer, read once from the
environment at import time.

Environment variables:
  CEDICT_DB_PATH: SQLite database file for the vocabulary store
      (default: data/vocabulary.db)
  LOG_DIR: Directory for the upload audit log (default: logs)
  MAX_JSON_FILE_SIZE: Maximum size of one uploaded JSON file in bytes
      (default: 50 MiB)
  MAX_JSON_FILES_COUNT: Maximum number of files per multi-file upload
      (default: 20)
  UPLOAD_RATE_LIMIT_WINDOW_SECONDS: Upload rate-limit window (default: 3600)
  UPLOAD_RATE_LIMIT_MAX: Uploads allowed per client per window (default: 10)
"""

import os
from pathlib import Path

DB_PATH = Path(os.getenv("CEDICT_DB_PATH", "data/vocabulary.db"))
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
UPLOAD_LOG_FILE = "uploads.log"

MAX_JSON_FILE_SIZE = int(os.getenv("MAX_JSON_FILE_SIZE", str(50 * 1024 * 1024)))
MAX_JSON_FILES_COUNT = int(os.getenv("MAX_JSON_FILES_COUNT", "20"))
ALLOWED_JSON_TYPES = ("application/json", "text/json")

UPLOAD_RATE_LIMIT_WINDOW_SECONDS = float(
    os.getenv("UPLOAD_RATE_LIMIT_WINDOW_SECONDS", "3600")
)
UPLOAD_RATE_LIMIT_MAX = int(os.getenv("UPLOAD_RATE_LIMIT_MAX", "10"))

# Only the first N errors/successes of a run go into the audit log
LOG_SAMPLE_SIZE = 5
