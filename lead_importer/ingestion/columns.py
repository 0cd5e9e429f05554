"""Fuzzy matching of free-text spreadsheet headers onto lead fields.

Headers arrive in every shape: accented Portuguese, abbreviated English,
combined concepts (``"tel/cel"``) and numbered copies (``"telefone2"``).
Each field is resolved by running an ordered cascade of increasingly
permissive strategies and keeping the first hit. Within a strategy the alias
order wins over the header order.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import ImporterConfig
from ..models import IDENTIFYING_FIELDS, NOT_FOUND, ColumnMapping, FieldKind
from ..normalize import normalize_key

LOGGER = logging.getLogger(__name__)

Header = Tuple[int, str]
Strategy = Callable[[Sequence[Header], Sequence[str]], Optional[int]]

PREFIX_LENGTH = 3
TOKEN_SEPARATORS = re.compile(r"[/\-_.,;:|&+\s]+")

# Resolution order; later kinds cannot claim a column taken by an earlier one.
RESOLUTION_ORDER = (
    FieldKind.NAME,
    FieldKind.EMAIL,
    FieldKind.PHONE,
    FieldKind.ADDRESS,
    FieldKind.CITY,
    FieldKind.STATE,
    FieldKind.WEBSITE,
    FieldKind.TYPE,
)


def _contains(header: str, alias: str) -> bool:
    # Short headers such as "id" would otherwise match inside longer aliases.
    return alias in header or (len(header) >= PREFIX_LENGTH and header in alias)


def _shares_prefix(header: str, alias: str) -> bool:
    if len(header) < PREFIX_LENGTH or len(alias) < PREFIX_LENGTH:
        return False
    return alias[:PREFIX_LENGTH] in header or header[:PREFIX_LENGTH] in alias


def exact_match(headers: Sequence[Header], aliases: Sequence[str]) -> Optional[int]:
    for alias in aliases:
        for index, header in headers:
            if header == alias:
                return index
    return None


def substring_match(headers: Sequence[Header], aliases: Sequence[str]) -> Optional[int]:
    for alias in aliases:
        for index, header in headers:
            if header and _contains(header, alias):
                return index
    return None


def prefix_match(headers: Sequence[Header], aliases: Sequence[str]) -> Optional[int]:
    """Catch truncated headers and typos (``"telef"``, ``"endereç"``)."""

    for alias in aliases:
        for index, header in headers:
            if _shares_prefix(header, alias):
                return index
    return None


def split_tokens(header: str) -> List[str]:
    return [token for token in TOKEN_SEPARATORS.split(header) if token]


def token_match(headers: Sequence[Header], aliases: Sequence[str]) -> Optional[int]:
    """Match the parts of compound headers such as ``"tel/cel"``."""

    tokenised = [(index, split_tokens(header)) for index, header in headers]
    for alias in aliases:
        for index, tokens in tokenised:
            for token in tokens:
                if alias in token or (len(token) >= PREFIX_LENGTH and token in alias):
                    return index
                if _shares_prefix(token, alias):
                    return index
    return None


def numeric_suffix_strategy(patterns: Iterable[str]) -> Strategy:
    """Build a strategy matching sequentially numbered phone columns."""

    compiled = [re.compile(pattern) for pattern in patterns]

    def numeric_suffix_match(headers: Sequence[Header], aliases: Sequence[str]) -> Optional[int]:
        for pattern in compiled:
            for index, header in headers:
                if pattern.search(header):
                    return index
        return None

    return numeric_suffix_match


BASE_STRATEGIES: Tuple[Strategy, ...] = (exact_match, substring_match, prefix_match, token_match)


def _strategies_for(kind: FieldKind, config: ImporterConfig) -> List[Strategy]:
    strategies = list(BASE_STRATEGIES)
    if kind is FieldKind.PHONE and config.phone_suffix_patterns:
        strategies.append(numeric_suffix_strategy(config.phone_suffix_patterns))
    return strategies


def _normalised_aliases(kind: FieldKind, config: ImporterConfig) -> List[str]:
    aliases: List[str] = []
    for alias in config.aliases_for(kind):
        key = normalize_key(alias, config.mojibake_table)
        if key and key not in aliases:
            aliases.append(key)
    return aliases


def find_column_index(
    headers: Sequence[object],
    kind: FieldKind,
    config: Optional[ImporterConfig] = None,
    *,
    exclude: Iterable[int] = (),
) -> int:
    """Return the index of the header that best matches ``kind`` or ``-1``."""

    config = config or ImporterConfig()
    excluded = set(exclude)
    candidates = [
        (index, normalize_key(header, config.mojibake_table))
        for index, header in enumerate(headers)
        if index not in excluded
    ]
    aliases = _normalised_aliases(kind, config)

    for strategy in _strategies_for(kind, config):
        index = strategy(candidates, aliases)
        if index is not None:
            LOGGER.debug(
                "Field %s matched header %r at index %s via %s",
                kind.value,
                headers[index],
                index,
                strategy.__name__,
            )
            return index

    LOGGER.debug("Field %s did not match any header", kind.value)
    return NOT_FOUND


def resolve_column_mapping(headers: Sequence[object], config: Optional[ImporterConfig] = None) -> ColumnMapping:
    """Resolve every :class:`FieldKind` against a header row.

    Each column is claimed by at most one field, except that state may share
    the city column (a combined ``"Cidade/UF"`` header). When none of name,
    email or phone resolves, the first three columns are forced onto them so
    a file with unrecognisable headers is still imported.
    """

    config = config or ImporterConfig()
    mapping = ColumnMapping()
    claimed: set[int] = set()

    for kind in RESOLUTION_ORDER:
        exclude = set(claimed)
        if kind is FieldKind.STATE and mapping.is_mapped(FieldKind.CITY):
            exclude.discard(mapping.get(FieldKind.CITY))
        index = find_column_index(headers, kind, config, exclude=exclude)
        if index != NOT_FOUND:
            mapping.indices[kind] = index
            claimed.add(index)

    if not any(mapping.is_mapped(kind) for kind in IDENTIFYING_FIELDS):
        for position, kind in enumerate(IDENTIFYING_FIELDS):
            if position < len(headers):
                mapping.indices[kind] = position
        mapping.forced = True
        LOGGER.warning(
            "No name, email or phone column recognised; forcing positional mapping %s",
            {kind.value: mapping.describe([str(h) for h in headers])[kind.value] for kind in IDENTIFYING_FIELDS},
        )

    return mapping


__all__ = [
    "BASE_STRATEGIES",
    "RESOLUTION_ORDER",
    "exact_match",
    "find_column_index",
    "numeric_suffix_strategy",
    "prefix_match",
    "resolve_column_mapping",
    "split_tokens",
    "substring_match",
    "token_match",
]
