"""Baseline handling: the canonical duplicate set model and the committed baseline file.

This package contains:
- canonical: DuplicateEntry, DuplicateSet and the canonical text form
- store: BaselineStore for loading the committed baseline
- path: Utilities for finding the project root and the baseline path
"""
