"""Input Validation Script

Checks a CC-CEDICT JSON file before importing it:
  - Top level is a JSON array
  - Every entry has word, pinyin and meaning.primary
  - examples, when present, is an array
  - Missing optional fields are reported as warnings

Usage:
    python -m src.cedict_importer.scripts.validate_input \\
        --path data/cedict_sample.json

Exits with code 0 when every entry is valid, 1 on validation failure or an
unreadable file, 2 on argument error.
"""

import argparse
from pathlib import Path

from ..loaders import load_raw_entries
from ..validation import validate_entries


def main(argv: list[str] | None = None) -> None:
    """Validate a CC-CEDICT JSON file and print the report.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:]

    Raises:
        SystemExit: With code 0 on success, 1 on validation failure
    """
    parser = argparse.ArgumentParser(
        description="Validate a CC-CEDICT JSON file without importing it."
    )
    parser.add_argument(
        "--path",
        type=str,
        required=True,
        help="Path to the CC-CEDICT JSON array file",
    )
    parser.add_argument(
        "--quiet-warnings",
        action="store_true",
        help="Only print the warning count, not each warning",
    )
    args = parser.parse_args(argv)

    path = Path(args.path)

    try:
        entries = load_raw_entries(path)
        report = validate_entries(entries)
    except Exception as e:
        print(f"FAILED TO LOAD FILE: {e}")
        raise SystemExit(1)

    if report.invalid:
        print("VALIDATION FAILED:\n")
        for err in report.errors:
            print(f"[idx={err.index}] {err.word}: {err.field or '<entry>'} ({err.type}) - {err.message}")
        print(f"\nValid entries: {report.valid}/{report.total}")
        print(f"Total errors: {len(report.errors)}")
        if report.warnings:
            print(f"Total warnings: {len(report.warnings)}")
        raise SystemExit(1)

    print("VALIDATION PASSED")
    print(f"Total entries: {report.total}")
    if report.warnings:
        if not args.quiet_warnings:
            print("\nWarnings (non-fatal):")
            for w in report.warnings:
                print(f"[idx={w.index}] {w.word}: {w.field} - {w.message}")
        print(f"\nTotal warnings: {len(report.warnings)}")

    raise SystemExit(0)


if __name__ == "__main__":
    main()
