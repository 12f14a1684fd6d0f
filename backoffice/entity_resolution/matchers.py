"""
Client matching strategies for import resolution.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class MatchMethod(Enum):
    """Identifier that produced a match."""
    ACCOUNT_NUMBER = "account_number"
    CPF = "cpf"
    CNPJ = "cnpj"
    NAME = "name"
    ACCOUNT_MAPPING = "account_mapping"  # Account of a client merged into another


class MatchConfidence(Enum):
    """Qualitative reliability of a match."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Minimum digits after normalization before a document is trusted
CPF_MIN_DIGITS = 11
CNPJ_MIN_DIGITS = 14

CONFIDENCE_ICONS = {
    MatchConfidence.HIGH: "✓",
    MatchConfidence.MEDIUM: "~",
    MatchConfidence.LOW: "?",
}

MATCH_METHOD_LABELS = {
    MatchMethod.ACCOUNT_NUMBER: "Account number",
    MatchMethod.CPF: "CPF",
    MatchMethod.CNPJ: "CNPJ",
    MatchMethod.NAME: "Name",
    MatchMethod.ACCOUNT_MAPPING: "Mapped account (merge)",
}


@dataclass(frozen=True)
class ClientRecord:
    """In-memory candidate for callers that don't hold ORM rows."""
    id: str
    name: str
    account_number: Optional[str] = None
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class MatchInput:
    """Identifying fields of an imported row. All optional."""
    account_number: Optional[str] = None
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    name: Optional[str] = None

    # Spreadsheet headers seen in broker exports, lowercased
    HEADER_ALIASES = {
        "account_number": ("account_number", "account", "conta", "numero_conta", "número da conta"),
        "cpf": ("cpf",),
        "cnpj": ("cnpj",),
        "name": ("name", "nome", "client", "cliente", "client_name"),
    }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MatchInput":
        """Build input from a CSV/dict row; blank cells count as absent."""
        lowered = {str(k).strip().lower(): v for k, v in row.items() if k is not None}
        values = {}
        for field_name, aliases in cls.HEADER_ALIASES.items():
            values[field_name] = None
            for alias in aliases:
                raw = lowered.get(alias)
                if raw is None:
                    continue
                text = str(raw).strip()
                if text:
                    values[field_name] = text
                    break
        return cls(**values)

    @property
    def is_empty(self) -> bool:
        return not (self.account_number or self.cpf or self.cnpj or self.name)


@dataclass(frozen=True)
class MatchResult:
    """Result of a client matching attempt."""
    client: Optional[Any] = None
    matched_by: Optional[MatchMethod] = None
    confidence: Optional[MatchConfidence] = None

    def __post_init__(self):
        present = (self.client is not None, self.matched_by is not None, self.confidence is not None)
        if any(present) and not all(present):
            raise ValueError(
                "client, matched_by and confidence must be set together"
            )

    @property
    def is_match(self) -> bool:
        return self.client is not None

    def __repr__(self) -> str:
        if self.client is not None:
            return (
                f"<MatchResult({getattr(self.client, 'name', self.client)}, "
                f"{self.matched_by.value}, {self.confidence.value})>"
            )
        return "<MatchResult(no match)>"


NO_MATCH = MatchResult()


def normalize_document(value: Optional[str]) -> str:
    """Keep digits only (drops dots, dashes, slashes)."""
    if not value:
        return ""
    return re.sub(r"\D", "", str(value))


def normalize_text(value: Optional[str]) -> str:
    """Lowercase and trim for account numbers and names."""
    if not value:
        return ""
    return str(value).lower().strip()


def prefer_active(matches: Sequence[Any]) -> Optional[Any]:
    """
    Pick the active candidate among duplicates.

    sorted() is stable, so among equally active candidates the first one
    in input order wins.
    """
    if not matches:
        return None
    return sorted(matches, key=lambda c: not getattr(c, "active", False))[0]


def confidence_icon(confidence: Optional[MatchConfidence]) -> str:
    return CONFIDENCE_ICONS.get(confidence, "✗")


def match_method_label(method: Optional[MatchMethod]) -> str:
    return MATCH_METHOD_LABELS.get(method, "Not found")


class ClientMatcher:
    """
    Matches an imported row to an existing client by identifier hierarchy.

    Priority order (first hit wins):
    1. Account number - high confidence
    2. CPF (>= 11 digits) - high confidence
    3. CNPJ (>= 14 digits) - high confidence
    4. Name, exact after normalization - low confidence

    Usage:
        matcher = ClientMatcher(clients)
        result = matcher.match(MatchInput(account_number="ACC-001"))
        if result.is_match:
            client = result.client
    """

    def __init__(self, clients: Sequence[Any]):
        self.clients = list(clients)

    def match(self, data: MatchInput) -> MatchResult:
        # 1. Account number
        account = normalize_text(data.account_number)
        if account:
            client = self._find("account_number", account, normalize_text)
            if client is not None:
                return MatchResult(client, MatchMethod.ACCOUNT_NUMBER, MatchConfidence.HIGH)

        # 2. CPF
        cpf = normalize_document(data.cpf)
        if len(cpf) >= CPF_MIN_DIGITS:
            client = self._find("cpf", cpf, normalize_document)
            if client is not None:
                return MatchResult(client, MatchMethod.CPF, MatchConfidence.HIGH)

        # 3. CNPJ
        cnpj = normalize_document(data.cnpj)
        if len(cnpj) >= CNPJ_MIN_DIGITS:
            client = self._find("cnpj", cnpj, normalize_document)
            if client is not None:
                return MatchResult(client, MatchMethod.CNPJ, MatchConfidence.HIGH)

        # 4. Name (fallback)
        name = normalize_text(data.name)
        if name:
            client = self._find("name", name, normalize_text)
            if client is not None:
                return MatchResult(client, MatchMethod.NAME, MatchConfidence.LOW)

        return NO_MATCH

    def _find(self, attribute: str, normalized: str, normalizer) -> Optional[Any]:
        matches = [
            c for c in self.clients
            if normalizer(getattr(c, attribute, None)) == normalized
        ]
        return prefer_active(matches)


def find_client_match(clients: Sequence[Any], data: MatchInput) -> MatchResult:
    """Match against a candidate pool in one call."""
    return ClientMatcher(clients).match(data)
