"""
Import Resolver

Direct identifier matching with a fallback to the account mapping table
kept for merged clients, plus batch resolution of import rows.
"""

import csv
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from config.logging import logger
from config.settings import settings
from backoffice.models import Client, ClientAccountMapping
from backoffice.entity_resolution.matchers import (
    ClientMatcher,
    MatchConfidence,
    MatchInput,
    MatchMethod,
    MatchResult,
    NO_MATCH,
    normalize_text,
)


@dataclass(frozen=True)
class AccountMapping:
    """Account number that now belongs to another (surviving) client."""
    client_id: str
    account_number: str
    original_client_name: Optional[str] = None


@dataclass
class ResolutionStats:
    """Statistics from a batch resolution run."""
    total_rows: int = 0
    matched: int = 0
    unmatched: int = 0
    by_method: Counter = field(default_factory=Counter)
    by_confidence: Counter = field(default_factory=Counter)


@dataclass
class ResolvedRow:
    """One import row and the client it resolved to."""
    row_number: int
    data: MatchInput
    result: MatchResult


def find_client_match_with_mappings(
    clients: Sequence[Any],
    mappings: Sequence[Any],
    data: MatchInput,
) -> MatchResult:
    """
    Match directly, then through the account mapping table.

    The mapping table is only consulted when no tier matched and the row
    carries an account number.
    """
    direct = ClientMatcher(clients).match(data)
    if direct.is_match:
        return direct

    account = normalize_text(data.account_number)
    if not account:
        return NO_MATCH

    mapping = next(
        (m for m in mappings if normalize_text(m.account_number) == account),
        None,
    )
    if mapping is None:
        return NO_MATCH

    client = next((c for c in clients if c.id == mapping.client_id), None)
    if client is None:
        return NO_MATCH

    return MatchResult(client, MatchMethod.ACCOUNT_MAPPING, MatchConfidence.HIGH)


class ClientResolver:
    """
    Resolves import rows against a fixed pool of clients and account mappings.

    Usage:
        resolver = ClientResolver.from_session(db)
        results, stats = resolver.resolve_rows(rows)
        resolver.export_review_queue()
    """

    def __init__(
        self,
        clients: Sequence[Any],
        mappings: Optional[Sequence[Any]] = None,
    ):
        self.clients = list(clients)
        self.mappings = list(mappings or [])
        self.review_queue: list[ResolvedRow] = []

    @classmethod
    def from_session(cls, db: Session) -> "ClientResolver":
        """Load every client (active or not) and every account mapping."""
        clients = db.query(Client).all()
        mappings = [
            AccountMapping(
                client_id=m.client_id,
                account_number=m.account_number,
                original_client_name=m.original_client_name,
            )
            for m in db.query(ClientAccountMapping).all()
        ]
        logger.info(f"Loaded {len(clients)} clients and {len(mappings)} account mappings")
        return cls(clients, mappings)

    def resolve(self, data: MatchInput) -> MatchResult:
        result = find_client_match_with_mappings(self.clients, self.mappings, data)
        logger.debug(f"Resolved {data} -> {result}")
        return result

    def resolve_rows(
        self, rows: Sequence[Mapping[str, Any]]
    ) -> tuple[list[ResolvedRow], ResolutionStats]:
        """
        Resolve a batch of raw rows (CSV dicts).

        review_queue is replaced with this batch's unmatched rows and
        low-confidence matches.
        """
        stats = ResolutionStats()
        self.review_queue = []
        resolved: list[ResolvedRow] = []

        for row_number, row in enumerate(rows, start=1):
            data = MatchInput.from_row(row)
            result = self.resolve(data)
            item = ResolvedRow(row_number=row_number, data=data, result=result)
            resolved.append(item)

            stats.total_rows += 1
            if result.is_match:
                stats.matched += 1
                stats.by_method[result.matched_by.value] += 1
                stats.by_confidence[result.confidence.value] += 1
            else:
                stats.unmatched += 1

            if not result.is_match or result.confidence == MatchConfidence.LOW:
                self.review_queue.append(item)

        logger.info(
            f"Resolved {stats.matched}/{stats.total_rows} rows "
            f"({stats.unmatched} unmatched, {len(self.review_queue)} queued for review)"
        )
        return resolved, stats

    def export_review_queue(self, path: Optional[Path] = None) -> Path:
        """
        Export unmatched and low-confidence rows to CSV for manual review.

        Returns:
            Path to the created CSV file
        """
        if path is None:
            path = settings.resolve_path(settings.REVIEW_QUEUE_PATH)

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow([
                "row_number", "account_number", "cpf", "cnpj", "name",
                "matched_client_id", "matched_client_name", "matched_by",
                "confidence", "decision",
            ])

            for item in self.review_queue:
                client = item.result.client
                writer.writerow([
                    item.row_number,
                    item.data.account_number or "",
                    item.data.cpf or "",
                    item.data.cnpj or "",
                    item.data.name or "",
                    getattr(client, "id", "") if client is not None else "",
                    getattr(client, "name", "") if client is not None else "",
                    item.result.matched_by.value if item.result.matched_by else "",
                    item.result.confidence.value if item.result.confidence else "",
                    "",  # Filled in by reviewer
                ])

        logger.info(f"Exported {len(self.review_queue)} rows to {path}")
        return path
