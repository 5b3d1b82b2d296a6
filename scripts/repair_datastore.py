#!/usr/bin/env python3
"""
In-place repair of a Hut! JSON datastore.

- Creates a timestamped backup before applying changes.
- Renames legacy camelCase collections and fields (paymentSessions -> payment_sessions,
  checkInDate -> check_in_date, ...) without dropping data.
- Backfills missing collections and per-record defaults.

Usage:
  ./venv/bin/python scripts/repair_datastore.py --data instance/hut-data.json
"""

from __future__ import annotations

import argparse
import copy
import json
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path

from hut.models.document import repair_document

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def rename_keys(record: dict) -> int:
    """Rename camelCase keys to snake_case, recursing into nested records."""
    renamed = 0
    for value in record.values():
        if isinstance(value, dict):
            renamed += rename_keys(value)
        elif isinstance(value, list):
            renamed += sum(rename_keys(item) for item in value if isinstance(item, dict))
    for key in list(record):
        target = snake_case(key)
        if target == key:
            continue
        if target in record:
            continue
        record[target] = record.pop(key)
        renamed += 1
    return renamed


def run(data_path: Path, dry_run: bool = False) -> None:
    if not data_path.exists():
        raise FileNotFoundError(f"Datastore not found: {data_path}")

    data = json.loads(data_path.read_text(encoding="utf-8"))
    before = copy.deepcopy(data)
    renamed = rename_keys(data)
    repair_document(data)

    if data == before:
        print("Datastore already in shape; nothing to do.")
        return
    print(f"Renamed {renamed} legacy field(s).")
    if dry_run:
        print("Dry run: no changes written.")
        return

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    backup = data_path.with_name(f"{data_path.name}.repair-backup-{stamp}")
    shutil.copy2(data_path, backup)
    print(f"Backup created: {backup}")

    data_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    print("Repair completed successfully.")


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--data", default="instance/hut-data.json", help="Path to the JSON datastore")
    parser.add_argument("--dry-run", action="store_true", help="Report without writing")
    args = parser.parse_args()
    run(Path(args.data), dry_run=args.dry_run)


if __name__ == "__main__":
    main()
