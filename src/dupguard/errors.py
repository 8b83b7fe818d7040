"""Exceptions raised by the duplicate dependency audit."""


class DupguardError(Exception):
    """Base class for all errors reported by dupguard."""


class ParseError(DupguardError):
    """Raw dependency graph input could not be parsed.

    Attributes:
        source: Name of the input (file path, ``<stdin>`` or the command line)
        location: Line number or record description of the offending input
        detail: Description of what is wrong with it
    """

    def __init__(self, source: str, location: str | int | None, detail: str):
        self.source = source
        self.location = location
        self.detail = detail
        super().__init__(_describe(source, location, detail))


class FormatError(DupguardError):
    """Baseline content is malformed, or a value violates the delimiter constraint.

    Attributes:
        source: Name of the baseline (usually its path), or None for in-memory values
        location: Line number within the source, or None
        detail: Description of what is wrong
    """

    def __init__(self, source: str | None, location: str | int | None, detail: str):
        self.source = source
        self.location = location
        self.detail = detail
        super().__init__(_describe(source, location, detail))


class NotFoundError(DupguardError):
    """The baseline file does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(
            f"baseline file not found: {path} "
            f"(commit an explicit baseline, an empty file means no duplicates are approved)")


class GraphSourceError(DupguardError):
    """The raw dependency graph could not be obtained."""


class DriftError(DupguardError):
    """The current duplicate set differs from the baseline.

    This is the expected outcome of a failing audit rather than a fault. The
    attached diff is what gets reported.
    """

    def __init__(self, diff):
        self.diff = diff
        super().__init__(
            f"duplicate dependencies drifted from the baseline: "
            f"{len(diff.added)} added, {len(diff.removed)} removed")


def _describe(source: str | None, location: str | int | None, detail: str) -> str:
    if source is None:
        return detail
    if location is None:
        return f"{source}: {detail}"
    return f"{source}:{location}: {detail}"
