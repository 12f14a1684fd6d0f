"""
Duplicate client detection and merging.

Duplicates are grouped by shared CPF/CNPJ. Near-identical names are only
surfaced for manual review; they never feed the import matcher.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from rapidfuzz import fuzz
from sqlalchemy.orm import Session

from config.logging import logger
from config.settings import settings
from backoffice.entity_resolution.matchers import normalize_document, normalize_text
from backoffice.models import Client, ClientAccountMapping, ClientType


@dataclass
class DuplicateGroup:
    """Clients sharing one normalized document identifier."""
    key: str
    clients: list = field(default_factory=list)


@dataclass
class SimilarNamePair:
    client_a: Any
    client_b: Any
    similarity_score: float


@dataclass
class MergeResult:
    accounts_mapped: int = 0
    source_clients_deleted: int = 0
    source_clients_deactivated: int = 0


def _document_key(client: Any) -> str:
    client_type = getattr(client, "client_type", ClientType.INDIVIDUAL)
    if client_type in (ClientType.ORGANIZATION, ClientType.ORGANIZATION.value):
        return normalize_document(getattr(client, "cnpj", None))
    return normalize_document(getattr(client, "cpf", None))


def find_duplicate_groups(clients: Sequence[Any]) -> list[DuplicateGroup]:
    """
    Group clients by CPF (individuals) or CNPJ (organizations).

    Only groups with more than one client are returned, in order of first
    appearance.
    """
    groups: dict[str, DuplicateGroup] = {}
    for client in clients:
        key = _document_key(client)
        if not key:
            continue
        groups.setdefault(key, DuplicateGroup(key=key)).clients.append(client)

    return [group for group in groups.values() if len(group.clients) > 1]


def find_similar_names(
    clients: Sequence[Any],
    threshold: Optional[int] = None,
) -> list[SimilarNamePair]:
    """
    Pairs of clients whose normalized names score >= threshold (0-100).

    Token sort ratio is used so "Silva Maria" pairs with "Maria Silva".
    """
    if threshold is None:
        threshold = settings.DUPLICATE_NAME_THRESHOLD

    names = [normalize_text(getattr(c, "name", None)) for c in clients]
    pairs = []
    for i, client_a in enumerate(clients):
        if not names[i]:
            continue
        for j in range(i + 1, len(clients)):
            if not names[j]:
                continue
            score = fuzz.token_sort_ratio(names[i], names[j])
            if score >= threshold:
                pairs.append(SimilarNamePair(client_a, clients[j], score))

    pairs.sort(key=lambda p: p.similarity_score, reverse=True)
    return pairs


class ClientMerger:
    """
    Merges duplicate clients into a surviving target client.

    Account numbers of the sources are recorded in client_account_mappings
    so later imports still resolve to the target.
    """

    def __init__(self, db: Session):
        self.db = db

    def merge(
        self,
        target: Client,
        sources: Sequence[Client],
        delete_sources: bool = False,
    ) -> MergeResult:
        if not sources:
            raise ValueError("No source clients to merge")
        if any(source.id == target.id for source in sources):
            raise ValueError(f"Cannot merge client {target.id} into itself")

        logger.info(
            f"Merging {len(sources)} client(s) into '{target.name}' "
            f"(delete_sources={delete_sources})"
        )
        result = MergeResult()

        try:
            for source in sources:
                if not source.account_number:
                    continue
                mapping = (
                    self.db.query(ClientAccountMapping)
                    .filter(ClientAccountMapping.account_number == source.account_number)
                    .first()
                )
                if mapping is None:
                    mapping = ClientAccountMapping(account_number=source.account_number)
                    self.db.add(mapping)
                mapping.client_id = target.id
                mapping.original_client_name = source.name
                self.db.flush()
                result.accounts_mapped += 1

            # Mappings of sources merged earlier move to the new target
            source_ids = [source.id for source in sources]
            self.db.query(ClientAccountMapping).filter(
                ClientAccountMapping.client_id.in_(source_ids)
            ).update({ClientAccountMapping.client_id: target.id}, synchronize_session="fetch")

            # Flush before deleting so the cascade doesn't take the new mappings
            self.db.flush()
            for source in sources:
                if delete_sources:
                    self.db.expire(source, ["account_mappings"])
                    self.db.delete(source)
                    result.source_clients_deleted += 1
                else:
                    source.active = False
                    result.source_clients_deactivated += 1

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Merge complete: {result.accounts_mapped} account(s) mapped, "
            f"{result.source_clients_deleted} deleted, "
            f"{result.source_clients_deactivated} deactivated"
        )
        return result
