#!/usr/bin/env python3
"""
Duplicate Client Diagnostic Script

Finds clients sharing a CPF/CNPJ and, optionally, clients with near-identical
names. Can merge a duplicate group into its first active client.

Usage:
    python scripts/check_duplicates.py
    python scripts/check_duplicates.py --names --threshold 85
    python scripts/check_duplicates.py --merge 12345678900
    python scripts/check_duplicates.py --merge 12345678900 --delete
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import settings
from backoffice.database import SessionLocal, init_db
from backoffice.duplicates import ClientMerger, find_duplicate_groups, find_similar_names
from backoffice.entity_resolution.matchers import normalize_document, prefer_active
from backoffice.models import Client


def describe(client: Client) -> str:
    parts = [f"id={client.id[:8]}"]
    if client.account_number:
        parts.append(f"Acct:{client.account_number}")
    parts.append("active" if client.active else "inactive")
    return " | ".join(parts)


def print_groups(groups):
    print("\n" + "=" * 80)
    print(f"  CLIENTS SHARING A DOCUMENT ({len(groups)} groups)")
    print("=" * 80)
    for group in groups:
        print(f"\n  {group.key}")
        for client in group.clients:
            print(f"    - {client.name:<40} {describe(client)}")


def print_name_pairs(pairs, threshold):
    print("\n" + "=" * 80)
    print(f"  SIMILAR NAMES (score >= {threshold}, {len(pairs)} pairs)")
    print("=" * 80)
    for pair in pairs:
        print(
            f"  {pair.similarity_score:>5.1f}  {pair.client_a.name:<32} "
            f"<-> {pair.client_b.name}"
        )


def main():
    parser = argparse.ArgumentParser(description="Find duplicate clients")
    parser.add_argument("--names", action="store_true", help="Also list similar names")
    parser.add_argument(
        "--threshold", type=int, default=settings.DUPLICATE_NAME_THRESHOLD,
        help="Name similarity threshold 0-100",
    )
    parser.add_argument("--merge", metavar="DOCUMENT", help="Merge the group with this CPF/CNPJ")
    parser.add_argument("--delete", action="store_true", help="Delete merged clients instead of deactivating")
    args = parser.parse_args()

    init_db()
    db = SessionLocal()
    try:
        clients = db.query(Client).all()
        groups = find_duplicate_groups(clients)

        if args.merge:
            key = normalize_document(args.merge)
            group = next((g for g in groups if g.key == key), None)
            if group is None:
                print(f"No duplicate group for document {args.merge}")
                sys.exit(1)
            target = prefer_active(group.clients)
            sources = [c for c in group.clients if c.id != target.id]
            result = ClientMerger(db).merge(target, sources, delete_sources=args.delete)
            print(
                f"Merged into '{target.name}': {result.accounts_mapped} account(s) mapped, "
                f"{result.source_clients_deleted} deleted, "
                f"{result.source_clients_deactivated} deactivated"
            )
            return

        print_groups(groups)
        if args.names:
            pairs = find_similar_names(clients, threshold=args.threshold)
            print_name_pairs(pairs, args.threshold)
    finally:
        db.close()


if __name__ == "__main__":
    main()
