"""Comparison and reporting of audit results.

This package contains:
- diff: Diff and the comparison of the current duplicate set with the baseline
- verdict: Report rendering, exit codes and the drift check
"""
