"""Duplicate set data model and its canonical text form.

The canonical form is one line per duplicated package:

    IDENTITY VERSION VERSION [VERSION...]

Entries are sorted by identity, versions are sorted by ``version_sort_key``,
fields are separated by a single space and every line ends with a newline.
Two duplicate sets are equal exactly when their canonical forms are
byte-identical.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

import mmh3

from ..errors import FormatError

COMMENT_PREFIX = '#'
FIELD_SEPARATOR = ' '

_WHITESPACE = re.compile(r'\s')
_SEMVER = re.compile(
    r'^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)'
    r'(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?'
    r'(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$')
_DIGIT_RUNS = re.compile(r'(\d+)')


def _natural_key(text: str) -> tuple:
    # Digit runs compare numerically, everything else by code point
    return tuple((0, int(part), '') if part.isdecimal() else (1, 0, part)
                 for part in _DIGIT_RUNS.split(text) if part)


def version_sort_key(version: str) -> tuple:
    """Sort key ordering versions by SemVer precedence.

    SemVer versions come first, ordered by major, minor and patch, with a
    pre-release sorting before the corresponding release. Anything else sorts
    after them in natural order. The raw string breaks remaining ties, so the
    order is total.
    """
    match = _SEMVER.match(version)
    if match is None:
        return 1, (), _natural_key(version), version

    major, minor, patch, prerelease, _ = match.groups()
    if prerelease is None:
        prerelease_key: tuple = (1,)
    else:
        prerelease_key = (0, tuple(
            (0, int(identifier), '') if identifier.isdecimal() else (1, 0, identifier)
            for identifier in prerelease.split('.')))
    return 0, (int(major), int(minor), int(patch)), prerelease_key, version


def check_field(value: str, kind: str, source: str | None = None, location: int | str | None = None) -> str:
    """Validate an identity or version against the delimiter constraint.

    Raises:
        FormatError: If the value is empty, contains whitespace, or is an identity
            that would be read back as a comment
    """
    if not isinstance(value, str) or not value:
        raise FormatError(source, location, f"empty {kind}")
    if _WHITESPACE.search(value):
        raise FormatError(source, location, f"{kind} {value!r} contains whitespace")
    if kind == 'identity' and value.startswith(COMMENT_PREFIX):
        raise FormatError(source, location, f"identity {value!r} starts with {COMMENT_PREFIX!r}")
    return value


@dataclass(frozen=True)
class DuplicateEntry:
    """A package resolved to two or more distinct versions.

    Attributes:
        identity: Package name, independent of version
        versions: Distinct resolved versions in canonical order
    """
    identity: str
    versions: tuple[str, ...]

    def __post_init__(self):
        check_field(self.identity, 'identity')
        for version in self.versions:
            check_field(version, 'version')
        if len(set(self.versions)) != len(self.versions):
            raise FormatError(None, None, f"{self.identity}: repeated version in {list(self.versions)}")
        if len(self.versions) < 2:
            raise FormatError(None, None, f"{self.identity}: a duplicate needs at least two versions")
        object.__setattr__(self, 'versions', tuple(sorted(self.versions, key=version_sort_key)))

    @classmethod
    def of(cls, identity: str, versions: Iterable[str]) -> "DuplicateEntry":
        return cls(identity, tuple(versions))

    def to_line(self) -> str:
        """Serialize the entry as one canonical line, without the newline."""
        return FIELD_SEPARATOR.join((self.identity,) + self.versions)

    def __str__(self) -> str:
        return self.to_line()


class DuplicateSet:
    """Immutable collection of duplicate entries keyed by package identity.

    Iteration always yields entries in canonical order regardless of the order
    they were supplied in.
    """

    def __init__(self, entries: Iterable[DuplicateEntry] = ()):
        by_identity: dict[str, DuplicateEntry] = {}
        for entry in entries:
            if entry.identity in by_identity:
                raise FormatError(None, None, f"{entry.identity}: listed more than once")
            by_identity[entry.identity] = entry
        self._entries: dict[str, DuplicateEntry] = {
            identity: by_identity[identity] for identity in sorted(by_identity)}

    def __iter__(self) -> Iterator[DuplicateEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identity: object) -> bool:
        return identity in self._entries

    def __getitem__(self, identity: str) -> DuplicateEntry:
        return self._entries[identity]

    def get(self, identity: str) -> DuplicateEntry | None:
        return self._entries.get(identity)

    def identities(self) -> list[str]:
        return list(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DuplicateSet):
            return NotImplemented
        return serialize(self) == serialize(other)

    def __hash__(self) -> int:
        return hash(serialize(self))

    def __repr__(self) -> str:
        return f"DuplicateSet({[entry.to_line() for entry in self]})"


def canonicalize(duplicate_set: Iterable[DuplicateEntry]) -> DuplicateSet:
    """Return the canonical form of a collection of duplicate entries.

    Idempotent: canonicalizing a canonical set yields an equal set.
    """
    return DuplicateSet(DuplicateEntry.of(entry.identity, entry.versions) for entry in duplicate_set)


def serialize(duplicate_set: DuplicateSet) -> str:
    """Render a duplicate set as canonical text. An empty set renders as ''."""
    return ''.join(entry.to_line() + '\n' for entry in duplicate_set)


def parse_canonical(text: str, source: str | None = None) -> DuplicateSet:
    """Parse canonical text back into a duplicate set.

    Blank lines and lines starting with ``#`` are ignored. Fields may be
    separated by any run of spaces or tabs.

    Args:
        text: Text in the canonical grammar
        source: Name used in error messages, usually the file path

    Raises:
        FormatError: On a line with fewer than two versions, a version repeated on
            one line, or an identity appearing on more than one line
    """
    entries: list[DuplicateEntry] = []
    seen: dict[str, int] = {}

    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue

        identity, *versions = stripped.split()
        if len(versions) < 2:
            raise FormatError(source, line_number,
                              f"expected 'IDENTITY VERSION VERSION...', got {stripped!r}")
        if len(set(versions)) != len(versions):
            raise FormatError(source, line_number, f"{identity}: repeated version in {stripped!r}")
        if identity in seen:
            raise FormatError(source, line_number,
                              f"{identity}: already listed on line {seen[identity]}")
        seen[identity] = line_number
        entries.append(DuplicateEntry.of(identity, versions))

    return DuplicateSet(entries)


def fingerprint(duplicate_set: DuplicateSet) -> str:
    """Compute the 128-bit Murmur3 hash of the canonical form as 32 hex digits."""
    hash_value = mmh3.hash128(serialize(duplicate_set).encode('utf-8'), signed=False)
    return hash_value.to_bytes(16, byteorder='big').hex()
