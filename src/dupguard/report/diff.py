"""Structural comparison of the current duplicate set against the baseline."""

from dataclasses import dataclass

from ..baseline.canonical import DuplicateEntry, DuplicateSet, canonicalize


@dataclass(frozen=True)
class Diff:
    """Difference between the current duplicate set and the baseline.

    A package whose version set changed appears twice: its baseline entry in
    ``removed`` and its current entry in ``added``.

    Attributes:
        added: Current entries missing from the baseline, sorted by identity
        removed: Baseline entries missing from the current state, sorted by identity
        unchanged: Entries present on both sides, sorted by identity
    """
    added: tuple[DuplicateEntry, ...] = ()
    removed: tuple[DuplicateEntry, ...] = ()
    unchanged: tuple[DuplicateEntry, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.added and not self.removed

    @property
    def changed_identities(self) -> list[str]:
        """Identities whose version set differs between the two sides."""
        removed = {entry.identity for entry in self.removed}
        return [entry.identity for entry in self.added if entry.identity in removed]

    def baseline_side(self) -> DuplicateSet:
        return DuplicateSet(self.removed + self.unchanged)

    def current_side(self) -> DuplicateSet:
        return DuplicateSet(self.added + self.unchanged)


def diff(current: DuplicateSet, baseline: DuplicateSet) -> Diff:
    """Compare the current duplicate set with the baseline.

    Both sides are canonicalized first, so only content matters.
    """
    current = canonicalize(current)
    baseline = canonicalize(baseline)

    added = tuple(entry for entry in current if baseline.get(entry.identity) != entry)
    removed = tuple(entry for entry in baseline if current.get(entry.identity) != entry)
    unchanged = tuple(entry for entry in current if baseline.get(entry.identity) == entry)

    return Diff(added, removed, unchanged)
