"""Parsers turning raw dependency graph output into package occurrence records.

Two grammars are accepted.

``cargo tree`` text, one package occurrence per line::

    la-term v0.1.0 (/src/la-term)
    ├── bitflags v1.3.2
    │   └── la-parse v0.1.0 (/src/la-parse) (*)
    [build-dependencies]
    └── cc v1.0.73

Each line is an optional tree prefix (Unicode or ASCII drawing characters, or
the depth number printed by ``--prefix depth``), then ``NAME vVERSION``, then
optional annotations such as the source path, ``(*)`` or ``(proc-macro)``.
Blank lines and ``[...-dependencies]`` headers are skipped.

``Cargo.lock``, a TOML document whose ``[[package]]`` tables carry ``name``
and ``version`` keys.

Any other input raises ParseError. The first malformed record aborts parsing.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # pyright: ignore[reportMissingImports]

from ..errors import ParseError

logger = logging.getLogger(__name__)

FORMAT_AUTO = 'auto'
FORMAT_TREE = 'tree'
FORMAT_LOCK = 'lock'
GRAPH_FORMATS = (FORMAT_AUTO, FORMAT_TREE, FORMAT_LOCK)

_TREE_PREFIX = re.compile(r'^[\s│├└─|`\-]*(?:\d+(?=\S))?')
_TREE_HEADER = re.compile(r'^\[[a-z]+-dependencies\]$')
_TREE_PACKAGE = re.compile(r'^(?P<name>[A-Za-z][A-Za-z0-9_\-]*) v(?P<version>\S+)(?:\s+(?P<annotations>.*))?$')
_LOCK_PACKAGE_HEADER = re.compile(r'^\s*\[\[package\]\]\s*$', re.MULTILINE)


@dataclass(frozen=True)
class GraphRecord:
    """One occurrence of a resolved package in the dependency graph.

    Attributes:
        identity: Package name
        version: Resolved version
        location: Where the occurrence was read from, used in error messages.
                  A 1-based line number for tree output, "package #N" for lock files.
    """
    identity: str
    version: str
    location: int | str


def parse_cargo_tree(text: str, source: str = '<input>') -> list[GraphRecord]:
    """Parse ``cargo tree`` output into records, one per package line.

    Raises:
        ParseError: On the first line that is neither blank, a section header
            nor a package occurrence
    """
    records = list(_iter_cargo_tree(text, source))
    logger.debug("Parsed %d package occurrence(s) from cargo tree output %s", len(records), source)
    return records


def _iter_cargo_tree(text: str, source: str) -> Iterator[GraphRecord]:
    for line_number, line in enumerate(text.splitlines(), start=1):
        body = _TREE_PREFIX.sub('', line, count=1).rstrip()
        if not body or _TREE_HEADER.match(body):
            continue

        match = _TREE_PACKAGE.match(body)
        if match is None:
            raise ParseError(source, line_number, f"expected 'NAME vVERSION', got {line.strip()!r}")

        yield GraphRecord(match.group('name'), match.group('version'), line_number)


def parse_cargo_lock(text: str, source: str = '<input>') -> list[GraphRecord]:
    """Parse a Cargo.lock document into records, one per ``[[package]]`` table.

    Raises:
        ParseError: If the document is not valid TOML, or a package table lacks a
            string name or version
    """
    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(source, None, f"invalid lock file: {e}") from e

    packages = document.get('package', [])
    if not isinstance(packages, list):
        raise ParseError(source, None, "'package' must be an array of tables")

    records = []
    for ordinal, package in enumerate(packages, start=1):
        location = f"package #{ordinal}"
        if not isinstance(package, dict):
            raise ParseError(source, location, "not a table")
        name = package.get('name')
        version = package.get('version')
        if not isinstance(name, str) or not name:
            raise ParseError(source, location, "missing string 'name'")
        if not isinstance(version, str) or not version:
            raise ParseError(source, location, f"{name}: missing string 'version'")
        records.append(GraphRecord(name, version, location))

    logger.debug("Parsed %d package(s) from lock file %s", len(records), source)
    return records


def detect_format(text: str) -> str:
    """Guess the grammar of raw graph text: lock files have [[package]] tables."""
    if _LOCK_PACKAGE_HEADER.search(text):
        return FORMAT_LOCK
    return FORMAT_TREE


def parse_graph(text: str, graph_format: str = FORMAT_AUTO, source: str = '<input>') -> list[GraphRecord]:
    """Parse raw dependency graph text in the given grammar.

    Args:
        text: Raw graph output
        graph_format: One of 'auto', 'tree' or 'lock'
        source: Name of the input, used in error messages

    Returns:
        Package occurrence records in input order

    Raises:
        ParseError: If the text does not match the grammar
        ValueError: If graph_format is unknown
    """
    if graph_format not in GRAPH_FORMATS:
        raise ValueError(f"Unknown graph format: {graph_format}")

    if graph_format == FORMAT_AUTO:
        graph_format = detect_format(text)
        logger.debug("Detected %s format for %s", graph_format, source)

    if graph_format == FORMAT_LOCK:
        return parse_cargo_lock(text, source)
    return parse_cargo_tree(text, source)
