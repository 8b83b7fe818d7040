"""Rendering of audit results and the pass/fail verdict."""

import difflib

from .diff import Diff
from ..baseline.canonical import fingerprint, serialize
from ..errors import DriftError

EXIT_CLEAN = 0
EXIT_DRIFT = 1
EXIT_ERROR = 2


def render_patch(diff: Diff, baseline_label: str) -> str:
    """Render the drift as a unified diff from the baseline to the current state.

    The lines use the canonical serialization, so the output applies as a patch
    to a canonical baseline file named baseline_label.
    """
    before = serialize(diff.baseline_side()).splitlines()
    after = serialize(diff.current_side()).splitlines()
    lines = difflib.unified_diff(
        before, after,
        fromfile=f"a/{baseline_label}", tofile=f"b/{baseline_label}",
        lineterm='')
    return ''.join(line + '\n' for line in lines)


def render_summary(diff: Diff, baseline_label: str) -> str:
    """Explain which baseline entries have to change to reconcile the drift."""
    changed = set(diff.changed_identities)
    removed_by_identity = {entry.identity: entry for entry in diff.removed}

    lines = [f"Duplicate dependencies differ from {baseline_label}:"]
    for entry in diff.added:
        if entry.identity in changed:
            old_versions = ' '.join(removed_by_identity[entry.identity].versions)
            new_versions = ' '.join(entry.versions)
            lines.append(f"  changed:              {entry.identity} ({old_versions} -> {new_versions})")
        else:
            lines.append(f"  new duplicate:        {entry.to_line()}")
    for entry in diff.removed:
        if entry.identity not in changed:
            lines.append(f"  no longer duplicated: {entry.to_line()}")

    lines.append(f"Baseline fingerprint {fingerprint(diff.baseline_side())}, "
                 f"current fingerprint {fingerprint(diff.current_side())}.")
    lines.append("Either remove the new duplication from the dependency graph, or update")
    lines.append(f"{baseline_label} to the current state (dupguard show > {baseline_label}).")
    return '\n'.join(lines) + '\n'


def render_report(diff: Diff, baseline_label: str) -> str:
    """Render the full audit report for a diff.

    Args:
        diff: Result of comparing the current state with the baseline
        baseline_label: Baseline path as shown to the user, relative to the project root

    Returns:
        A one-line confirmation for a clean diff, otherwise a unified diff
        followed by a summary
    """
    if diff.is_clean:
        current = diff.current_side()
        return (f"No unexpected duplicate dependencies: {len(current)} approved duplicate(s) "
                f"match {baseline_label} (fingerprint {fingerprint(current)}).\n")
    return render_patch(diff, baseline_label) + '\n' + render_summary(diff, baseline_label)


def check_verdict(diff: Diff) -> None:
    """Raise DriftError unless the diff is clean."""
    if not diff.is_clean:
        raise DriftError(diff)
