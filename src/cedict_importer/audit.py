"""Upload Audit Log

Append-only JSON-lines record of every upload: file metadata, result
counts, the first few errors/successes, and timing. The importer only
writes here; ``scripts/view_upload_log.py`` reads it back.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from .config import LOG_DIR, LOG_SAMPLE_SIZE, UPLOAD_LOG_FILE

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def file_metadata(file_name: Optional[str], mimetype: Optional[str], size: Optional[int]) -> Dict[str, Any]:
    return {"originalName": file_name, "mimetype": mimetype, "size": size}


def sample_results(results: Dict[str, Any], sample_size: int = LOG_SAMPLE_SIZE) -> Dict[str, Any]:
    """Copy of an import result dict with errors/successes cut to the first N."""
    sampled = dict(results)
    for key in ("errors", "successes"):
        if key in sampled and sampled[key] is not None:
            sampled[key] = list(sampled[key])[:sample_size]
    return sampled


class UploadAuditLog:
    def __init__(
        self,
        log_dir: Path | str = LOG_DIR,
        file_name: str = UPLOAD_LOG_FILE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.path = Path(log_dir) / file_name
        self.clock = clock

    def _write(self, entry: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
        except OSError:
            logger.warning("Failed to write upload audit entry (non-fatal)", exc_info=True)

    def _entry(self, level: str, message: str, action: str, **data: Any) -> Dict[str, Any]:
        return {
            "timestamp": self.clock().isoformat(),
            "level": level,
            "message": message,
            "action": action,
            **data,
            "requestId": uuid4().hex,
        }

    def record_upload(
        self,
        action: str,
        file: Dict[str, Any],
        results: Dict[str, Any],
        duration_ms: float,
    ) -> None:
        """Record a completed upload; errors/successes are truncated."""
        self._write(self._entry(
            "INFO",
            "CC-CEDICT upload completed",
            action,
            file=file,
            results=sample_results(results),
            durationMs=round(duration_ms, 2),
        ))

    def record_failure(
        self,
        action: str,
        error: BaseException,
        file: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
    ) -> None:
        self._write(self._entry(
            "ERROR",
            "CC-CEDICT upload failed",
            action,
            file=file,
            error={"type": type(error).__name__, "message": str(error)},
            durationMs=round(duration_ms, 2) if duration_ms is not None else None,
        ))

    def read_entries(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return the most recent entries (oldest first); unparseable lines are skipped."""
        if not self.path.exists():
            return []
        entries: List[Dict[str, Any]] = []
        with self.path.open("r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning("Skipping malformed audit line %d in %s", line_no, self.path)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries
