"""The audit pipeline: raw graph and baseline in, diff out."""

import logging
from dataclasses import dataclass

from .baseline.canonical import DuplicateSet
from .baseline.store import BaselineStore
from .graph.extractor import extract_duplicates
from .graph.parser import FORMAT_AUTO, parse_graph
from .report.diff import Diff, diff

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditResult:
    """Outcome of one audit run.

    Attributes:
        current: Duplicate set extracted from the graph snapshot
        baseline: Approved duplicate set loaded from the baseline file
        diff: Comparison of the two
    """
    current: DuplicateSet
    baseline: DuplicateSet
    diff: Diff


def current_state(graph_text: str, graph_format: str = FORMAT_AUTO, source: str = '<input>') -> DuplicateSet:
    """Extract the canonical duplicate set from raw graph text."""
    return extract_duplicates(parse_graph(graph_text, graph_format, source), source)


def run_audit(graph_text: str, baseline_store: BaselineStore, graph_format: str = FORMAT_AUTO,
              source: str = '<input>') -> AuditResult:
    """Audit one dependency graph snapshot against the baseline.

    The baseline is loaded before the graph is parsed so that a missing
    baseline is reported even when the graph is also broken.

    Args:
        graph_text: Raw output of the dependency resolution tool
        baseline_store: Store for the committed baseline
        graph_format: Grammar of graph_text, see parse_graph
        source: Name of the graph input, used in error messages

    Raises:
        NotFoundError: If the baseline file is missing
        FormatError: If the baseline is malformed or a graph value cannot be
            represented in the canonical form
        ParseError: If the graph text is malformed
    """
    baseline = baseline_store.load()
    current = current_state(graph_text, graph_format, source)
    result = AuditResult(current, baseline, diff(current, baseline))

    logger.info("Audit of %s against %s: %d current, %d approved, %d added, %d removed",
                source, baseline_store.path, len(current), len(baseline),
                len(result.diff.added), len(result.diff.removed))
    return result
