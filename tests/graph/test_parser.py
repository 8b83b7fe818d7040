"""Tests for the raw dependency graph parsers."""
import textwrap
import unittest

from dupguard.errors import ParseError
from dupguard.graph.parser import (
    FORMAT_LOCK,
    FORMAT_TREE,
    GraphRecord,
    detect_format,
    parse_cargo_lock,
    parse_cargo_tree,
    parse_graph,
)

CARGO_TREE_DUPLICATES = textwrap.dedent('''\
    bitflags v1.3.2
    └── la-parse v0.1.0 (/src/la-parse)
        └── librealgebra v0.1.0 (/src/librealgebra)

    bitflags v2.4.0
    ├── la-term v0.1.0 (/src/la-term)
    │   ├── la-parse v0.1.0 (/src/la-parse) (*)
    │   └── librealgebra v0.1.0 (/src/librealgebra)
    [build-dependencies]
    └── cc v1.0.73
''')

LOCK_FILE = textwrap.dedent('''\
    # This file is automatically @generated by Cargo.
    # It is not intended for manual editing.
    version = 3

    [[package]]
    name = "bitflags"
    version = "1.3.2"
    source = "registry+https://github.com/rust-lang/crates.io-index"

    [[package]]
    name = "bitflags"
    version = "2.4.0"
    source = "registry+https://github.com/rust-lang/crates.io-index"

    [[package]]
    name = "la-term"
    version = "0.1.0"
    dependencies = [
     "bitflags 2.4.0",
    ]
''')


class CargoTreeParserTest(unittest.TestCase):
    """Tests for parse_cargo_tree."""

    def test_parse_unicode_tree(self):
        """Every package line becomes a record; blank lines and headers are skipped."""
        records = parse_cargo_tree(CARGO_TREE_DUPLICATES)

        self.assertEqual([
            GraphRecord('bitflags', '1.3.2', 1),
            GraphRecord('la-parse', '0.1.0', 2),
            GraphRecord('librealgebra', '0.1.0', 3),
            GraphRecord('bitflags', '2.4.0', 5),
            GraphRecord('la-term', '0.1.0', 6),
            GraphRecord('la-parse', '0.1.0', 7),
            GraphRecord('librealgebra', '0.1.0', 8),
            GraphRecord('cc', '1.0.73', 10),
        ], records)

    def test_parse_ascii_tree(self):
        """ASCII drawing characters from --charset ascii are stripped."""
        text = 'foo v1.0.0\n|-- bar v0.2.0\n|   `-- baz v0.3.0-alpha.1\n`-- qux v4.0.0+build.5\n'

        records = parse_cargo_tree(text)

        self.assertEqual(
            [('foo', '1.0.0'), ('bar', '0.2.0'), ('baz', '0.3.0-alpha.1'), ('qux', '4.0.0+build.5')],
            [(record.identity, record.version) for record in records])

    def test_parse_depth_prefix(self):
        """Depth numbers printed by --prefix depth are stripped."""
        text = '0foo v1.0.0 (/src/foo)\n1bar v0.2.0\n12baz_sys v0.3.0 (proc-macro)\n'

        records = parse_cargo_tree(text)

        self.assertEqual(['foo', 'bar', 'baz_sys'], [record.identity for record in records])

    def test_parse_no_prefix(self):
        """Output of --prefix none parses line by line."""
        records = parse_cargo_tree('foo v1.0.0\nfoo v2.0.0\n')

        self.assertEqual(['1.0.0', '2.0.0'], [record.version for record in records])

    def test_parse_empty_output(self):
        """No output means no packages."""
        self.assertEqual([], parse_cargo_tree(''))
        self.assertEqual([], parse_cargo_tree('\n\n'))

    def test_malformed_line_names_location(self):
        """A line that is not a package fails with its line number and content."""
        text = 'foo v1.0.0\n├── bar 0.2.0\n'

        with self.assertRaises(ParseError) as cm:
            parse_cargo_tree(text, 'graph.txt')

        self.assertEqual('graph.txt', cm.exception.source)
        self.assertEqual(2, cm.exception.location)
        self.assertIn('graph.txt:2:', str(cm.exception))
        self.assertIn('bar 0.2.0', str(cm.exception))

    def test_no_partial_recovery(self):
        """Parsing stops at the first malformed line even if later lines are valid."""
        with self.assertRaises(ParseError) as cm:
            parse_cargo_tree('error: failed to select a version\nfoo v1.0.0\n')

        self.assertEqual(1, cm.exception.location)


class CargoLockParserTest(unittest.TestCase):
    """Tests for parse_cargo_lock."""

    def test_parse_lock_file(self):
        """Each [[package]] table becomes one record numbered by its position."""
        records = parse_cargo_lock(LOCK_FILE)

        self.assertEqual([
            GraphRecord('bitflags', '1.3.2', 'package #1'),
            GraphRecord('bitflags', '2.4.0', 'package #2'),
            GraphRecord('la-term', '0.1.0', 'package #3'),
        ], records)

    def test_lock_without_packages(self):
        """A lock file without packages yields no records."""
        self.assertEqual([], parse_cargo_lock('version = 3\n'))

    def test_missing_version(self):
        """A package without a version names the offending package."""
        text = '[[package]]\nname = "foo"\nversion = "1.0.0"\n\n[[package]]\nname = "bar"\n'

        with self.assertRaises(ParseError) as cm:
            parse_cargo_lock(text, 'Cargo.lock')

        self.assertEqual('package #2', cm.exception.location)
        self.assertIn('bar', str(cm.exception))

    def test_missing_name(self):
        """A package without a name is rejected."""
        with self.assertRaises(ParseError):
            parse_cargo_lock('[[package]]\nversion = "1.0.0"\n')

    def test_invalid_toml(self):
        """Invalid TOML is reported as a parse error."""
        with self.assertRaises(ParseError) as cm:
            parse_cargo_lock('[[package]\nname = ', 'Cargo.lock')

        self.assertEqual('Cargo.lock', cm.exception.source)


class ParseGraphTest(unittest.TestCase):
    """Tests for format detection and dispatch."""

    def test_detect_format(self):
        """Lock files are recognized by their package tables."""
        self.assertEqual(FORMAT_LOCK, detect_format(LOCK_FILE))
        self.assertEqual(FORMAT_TREE, detect_format(CARGO_TREE_DUPLICATES))
        self.assertEqual(FORMAT_TREE, detect_format(''))

    def test_auto_dispatch(self):
        """Auto mode parses both grammars."""
        self.assertEqual(3, len(parse_graph(LOCK_FILE)))
        self.assertEqual(8, len(parse_graph(CARGO_TREE_DUPLICATES)))

    def test_forced_format(self):
        """A forced tree format does not accept lock file content."""
        with self.assertRaises(ParseError):
            parse_graph(LOCK_FILE, FORMAT_TREE)

    def test_unknown_format(self):
        """Unknown format names are rejected."""
        with self.assertRaises(ValueError):
            parse_graph('', 'json')
