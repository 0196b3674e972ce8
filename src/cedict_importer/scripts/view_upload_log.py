"""Upload Log Viewer

Prints recent entries of the upload audit log, or aggregate statistics.

Usage:
    python -m src.cedict_importer.scripts.view_upload_log uploads --lines 20
    python -m src.cedict_importer.scripts.view_upload_log stats
"""

import argparse
from pathlib import Path
from typing import Any, Dict, List

from ..audit import UploadAuditLog
from ..config import LOG_DIR


def format_entry(entry: Dict[str, Any]) -> str:
    file = entry.get("file") or {}
    lines = [
        f"[{entry.get('timestamp')}] {entry.get('level')}: {entry.get('message')}",
        f"   Action: {entry.get('action')}",
        f"   File: {file.get('originalName') or 'N/A'}",
        f"   Size: {file.get('size') if file.get('size') is not None else 'N/A'} bytes",
    ]
    results = entry.get("results")
    if results:
        lines.append(
            "   Results: total={total} success={success} failed={failed} skipped={skipped}".format(
                total=results.get("total", 0),
                success=results.get("success", 0),
                failed=results.get("failed", 0),
                skipped=results.get("skipped", 0),
            )
        )
    error = entry.get("error")
    if error:
        lines.append(f"   Error: {error.get('type')}: {error.get('message')}")
    return "\n".join(lines)


def compute_stats(entries: List[Dict[str, Any]]) -> Dict[str, int]:
    stats = {"uploads": 0, "failures": 0, "items": 0, "success": 0, "failed": 0, "skipped": 0}
    for entry in entries:
        if entry.get("level") == "ERROR":
            stats["failures"] += 1
            continue
        stats["uploads"] += 1
        results = entry.get("results") or {}
        stats["items"] += results.get("total", 0)
        stats["success"] += results.get("success", 0)
        stats["failed"] += results.get("failed", 0)
        stats["skipped"] += results.get("skipped", 0)
    return stats


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect the CC-CEDICT upload audit log.")
    parser.add_argument("command", choices=["uploads", "stats"])
    parser.add_argument("--lines", type=int, default=50, help="Number of recent entries to show")
    parser.add_argument("--log-dir", type=Path, default=LOG_DIR)
    args = parser.parse_args(argv)

    audit_log = UploadAuditLog(log_dir=args.log_dir)

    if args.command == "stats":
        stats = compute_stats(audit_log.read_entries())
        print("UPLOAD LOG STATS")
        for key, value in stats.items():
            print(f"  {key:<9} {value}")
        return 0

    entries = audit_log.read_entries(limit=args.lines)
    if not entries:
        print(f"No upload log entries in {audit_log.path}")
        return 0
    print("UPLOAD LOGS")
    for entry in entries:
        print(format_entry(entry))
        print("")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
