"""Tests for report rendering and the drift check."""
import unittest

from dupguard.baseline.canonical import DuplicateSet, fingerprint, parse_canonical
from dupguard.errors import DriftError
from dupguard.report.diff import diff
from dupguard.report.verdict import (
    EXIT_CLEAN,
    EXIT_DRIFT,
    EXIT_ERROR,
    check_verdict,
    render_patch,
    render_report,
)


class RenderReportTest(unittest.TestCase):
    """Tests for render_report and render_patch."""

    def test_clean_report(self):
        """A clean diff renders a single confirmation line."""
        baseline = parse_canonical('A 1.0 2.0\n')

        report = render_report(diff(baseline, baseline), 'expected-duplicate-deps.txt')

        self.assertEqual(1, report.count('\n'))
        self.assertIn('No unexpected duplicate dependencies', report)
        self.assertIn(fingerprint(baseline), report)

    def test_changed_entry_patch(self):
        """A changed version set renders as a removed and an added line."""
        result = diff(parse_canonical('A 1.0 2.0 3.0\n'), parse_canonical('A 1.0 2.0\n'))

        patch = render_patch(result, 'expected-duplicate-deps.txt')

        self.assertEqual(
            '--- a/expected-duplicate-deps.txt\n'
            '+++ b/expected-duplicate-deps.txt\n'
            '@@ -1 +1 @@\n'
            '-A 1.0 2.0\n'
            '+A 1.0 2.0 3.0\n',
            patch)

    def test_patch_keeps_context(self):
        """Unchanged entries appear as context lines so the patch applies."""
        current = parse_canonical('a 1 2\nb 1 2\nc 1 2\n')
        baseline = parse_canonical('a 1 2\nc 1 2\n')

        patch = render_patch(diff(current, baseline), 'deps.txt')

        self.assertIn(' a 1 2\n+b 1 2\n c 1 2\n', patch)

    def test_patch_against_empty_baseline(self):
        """New duplicates against an empty baseline are all additions."""
        patch = render_patch(diff(parse_canonical('a 1 2\n'), DuplicateSet()), 'deps.txt')

        self.assertTrue(patch.endswith('+a 1 2\n'))
        self.assertNotIn('\n-a', patch)

    def test_drift_summary(self):
        """The summary names each package to add, remove or change in the baseline."""
        current = parse_canonical('A 1.0 2.0 3.0\nnew 1 2\n')
        baseline = parse_canonical('A 1.0 2.0\nold 1 2\n')

        report = render_report(diff(current, baseline), 'script/expected-duplicate-deps.txt')

        self.assertIn('changed:              A (1.0 2.0 -> 1.0 2.0 3.0)', report)
        self.assertIn('new duplicate:        new 1 2', report)
        self.assertIn('no longer duplicated: old 1 2', report)
        self.assertIn('dupguard show > script/expected-duplicate-deps.txt', report)
        self.assertNotIn('new duplicate:        A', report)

    def test_report_is_deterministic(self):
        """The same inputs always render the same bytes."""
        current = parse_canonical('b 2 1\na 1 2 3\n')
        baseline = parse_canonical('a 1 2\n')

        first = render_report(diff(current, baseline), 'deps.txt')
        second = render_report(diff(parse_canonical('a 3 2 1\nb 1 2\n'), baseline), 'deps.txt')

        self.assertEqual(first, second)


class CheckVerdictTest(unittest.TestCase):
    """Tests for check_verdict and the exit codes."""

    def test_clean_passes(self):
        """A clean diff does not raise."""
        check_verdict(diff(DuplicateSet(), DuplicateSet()))

    def test_drift_raises(self):
        """Drift raises DriftError carrying the diff."""
        result = diff(parse_canonical('a 1 2\n'), DuplicateSet())

        with self.assertRaises(DriftError) as cm:
            check_verdict(result)

        self.assertIs(result, cm.exception.diff)
        self.assertIn('1 added', str(cm.exception))

    def test_exit_codes_distinct(self):
        """Clean, drift and error exits are distinguishable."""
        self.assertEqual(0, EXIT_CLEAN)
        self.assertEqual(3, len({EXIT_CLEAN, EXIT_DRIFT, EXIT_ERROR}))
