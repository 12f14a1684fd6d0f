#!/usr/bin/env python3
"""
Match a spreadsheet import against existing clients.

Each row is resolved by account number, CPF, CNPJ, then name, falling back
to account mappings of merged clients. Unmatched and low-confidence rows are
exported for manual review.

Usage:
    python scripts/match_import.py data/revenues_march.csv
    python scripts/match_import.py data/revenues_march.csv --review-out data/review.csv
    python scripts/match_import.py data/revenues_march.csv --show 30
"""

import argparse
import csv
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from backoffice.database import SessionLocal, init_db
from backoffice.entity_resolution import (
    ClientResolver,
    confidence_icon,
    match_method_label,
)


def read_rows(path: Path) -> list[dict]:
    # utf-8-sig strips the BOM spreadsheet exports often carry
    with open(path, newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


def print_summary(stats):
    print("\n" + "=" * 60)
    print("IMPORT MATCHING")
    print("=" * 60)
    print(f"Rows:      {stats.total_rows}")
    print(f"Matched:   {stats.matched}")
    print(f"Unmatched: {stats.unmatched}")

    if stats.by_method:
        print("\nBy method:")
        for method, count in stats.by_method.most_common():
            print(f"  {method:<18} {count:>6}")
    if stats.by_confidence:
        print("\nBy confidence:")
        for confidence, count in stats.by_confidence.most_common():
            print(f"  {confidence:<18} {count:>6}")


def print_rows(resolved, limit):
    print("\n" + "-" * 60)
    for item in resolved[:limit]:
        result = item.result
        label = item.data.account_number or item.data.cpf or item.data.cnpj or item.data.name or "-"
        target = result.client.name if result.is_match else ""
        print(
            f"  {confidence_icon(result.confidence)} #{item.row_number:<5} {label[:24]:<26} "
            f"{match_method_label(result.matched_by):<24} {target}"
        )


def main():
    parser = argparse.ArgumentParser(description="Match import rows to existing clients")
    parser.add_argument("csv_path", type=Path, help="CSV file to match")
    parser.add_argument("--review-out", type=Path, default=None, help="Review queue CSV path")
    parser.add_argument("--show", type=int, default=0, help="Print the first N resolved rows")
    args = parser.parse_args()

    rows = read_rows(args.csv_path)

    init_db()
    db = SessionLocal()
    try:
        resolver = ClientResolver.from_session(db)
        resolved, stats = resolver.resolve_rows(rows)
    finally:
        db.close()

    print_summary(stats)
    if args.show:
        print_rows(resolved, args.show)

    if resolver.review_queue:
        path = resolver.export_review_queue(args.review_out)
        print(f"\nReview queue ({len(resolver.review_queue)} rows) exported to: {path}")


if __name__ == "__main__":
    main()
