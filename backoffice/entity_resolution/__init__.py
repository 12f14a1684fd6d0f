"""
Client Resolution Module

Hierarchical identifier matching for imported rows:
- Account number, CPF, CNPJ (high confidence)
- Exact normalized name (low confidence)
- Account mappings left behind by client merges (high confidence)
"""

from backoffice.entity_resolution.matchers import (
    ClientMatcher,
    ClientRecord,
    MatchConfidence,
    MatchInput,
    MatchMethod,
    MatchResult,
    confidence_icon,
    find_client_match,
    match_method_label,
)
from backoffice.entity_resolution.resolver import (
    AccountMapping,
    ClientResolver,
    ResolutionStats,
    find_client_match_with_mappings,
)

__all__ = [
    "AccountMapping",
    "ClientMatcher",
    "ClientRecord",
    "ClientResolver",
    "MatchConfidence",
    "MatchInput",
    "MatchMethod",
    "MatchResult",
    "ResolutionStats",
    "confidence_icon",
    "find_client_match",
    "find_client_match_with_mappings",
    "match_method_label",
]
