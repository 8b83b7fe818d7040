"""Extraction of duplicated packages from a resolved dependency graph."""

import logging
from collections import defaultdict
from typing import Iterable

from .parser import GraphRecord
from ..baseline.canonical import DuplicateEntry, DuplicateSet, check_field

logger = logging.getLogger(__name__)


def extract_duplicates(records: Iterable[GraphRecord], source: str | None = None) -> DuplicateSet:
    """Collect packages resolved to two or more distinct versions.

    A package may occur many times in a graph, once per inclusion path. Only the
    set of distinct versions per package matters, so neither repeated
    occurrences nor their order affect the result. Packages with a single
    version are dropped.

    Args:
        records: Package occurrences from one graph snapshot
        source: Name of the graph input, used in error messages

    Returns:
        The duplicate set of the snapshot, in canonical order

    Raises:
        FormatError: If an identity or version cannot be represented in the
            canonical form
    """
    versions_by_identity: dict[str, set[str]] = defaultdict(set)
    for record in records:
        check_field(record.identity, 'identity', source, record.location)
        check_field(record.version, 'version', source, record.location)
        versions_by_identity[record.identity].add(record.version)

    entries = [DuplicateEntry.of(identity, versions)
               for identity, versions in versions_by_identity.items()
               if len(versions) >= 2]

    logger.debug("Found %d duplicated package(s) among %d package(s)", len(entries), len(versions_by_identity))
    return DuplicateSet(entries)
