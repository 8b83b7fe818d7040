from .audit import AuditResult, current_state, run_audit
from .baseline.canonical import DuplicateEntry, DuplicateSet, canonicalize, fingerprint, parse_canonical, serialize
from .baseline.store import BaselineStore
from .errors import DriftError, DupguardError, FormatError, GraphSourceError, NotFoundError, ParseError
from .graph.extractor import extract_duplicates
from .graph.parser import GraphRecord, parse_graph
from .report.diff import Diff, diff
from .report.verdict import EXIT_CLEAN, EXIT_DRIFT, EXIT_ERROR, check_verdict, render_report
