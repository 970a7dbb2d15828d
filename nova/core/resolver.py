"""Entity reference resolution.

Maps a free-text reference ("laptop savings", "physics") onto one record of
a live collection. The default strategy is case-insensitive substring
containment on a canonical field, first match in collection order wins.
Strategies are pluggable so executors never hard-code the matching rule.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

logger = logging.getLogger(__name__)


def field_value(record: Any, key: str) -> Any:
    """Read a field from a mapping or attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


class ResolutionStrategy(Protocol):
    def resolve(self, reference: str, collection: Iterable[Any], key: str) -> Any | None: ...


class SubstringResolver:
    """First record whose `key` field contains the reference, ignoring case."""

    def resolve(self, reference: str, collection: Iterable[Any], key: str) -> Any | None:
        needle = (reference or "").strip().lower()
        if not needle:
            return None
        for record in collection or ():
            value = field_value(record, key)
            if isinstance(value, str) and needle in value.lower():
                return record
        return None


DEFAULT_RESOLVER = SubstringResolver()


def find_by_id(collection: Iterable[Any], record_id: str) -> Any | None:
    """Exact id lookup."""
    if not record_id:
        return None
    for record in collection or ():
        if str(field_value(record, "id")) == record_id:
            return record
    return None


def resolve_record(
    resolver: ResolutionStrategy,
    collection: Iterable[Any] | None,
    key: str,
    reference: str | None,
    record_id: str | None = None,
) -> Any | None:
    """Resolve by exact id first, then by the strategy.

    The id doubles as the text reference when no name was given.
    """
    records = list(collection or ())
    if record_id:
        match = find_by_id(records, record_id)
        if match is not None:
            return match
    lookup = reference or record_id or ""
    match = resolver.resolve(lookup, records, key)
    if match is None:
        logger.info("No %s matching '%s' among %d records", key, lookup, len(records))
    return match
