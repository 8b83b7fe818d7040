"""Dependency graph input: parsing raw graph output and extracting duplicated packages.

This package contains:
- parser: Grammars for cargo tree output and Cargo.lock files
- source: Reading raw graph text from a file, stdin or a command
- extractor: Reduction of package occurrences to the duplicate set
"""
