"""Reading the committed baseline of approved duplicate dependencies."""

import logging
import os
from pathlib import Path

from .canonical import DuplicateSet, parse_canonical
from ..errors import FormatError, NotFoundError

logger = logging.getLogger(__name__)


class BaselineStore:
    """Read-only access to the baseline file.

    The baseline uses the canonical grammar of ``parse_canonical``, so the output
    of ``dupguard show`` can be written to it verbatim. The store never writes
    the file; updating the baseline is a deliberate human edit.
    """

    def __init__(self, path: str | os.PathLike):
        self.path: Path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> DuplicateSet:
        """Load and parse the baseline.

        An empty or comment-only file is a valid baseline with no approved
        duplicates. A missing file is not.

        Returns:
            The approved duplicate set

        Raises:
            NotFoundError: If the baseline file is absent or not a regular file
            FormatError: If the file cannot be read, is not valid UTF-8 or violates the grammar
        """
        if not self.exists():
            raise NotFoundError(self.path)

        try:
            data = self.path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError(self.path) from e
        except OSError as e:
            raise FormatError(str(self.path), None, f"cannot read baseline: {e.strerror or e}") from e

        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise FormatError(str(self.path), None, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e

        baseline = parse_canonical(text, str(self.path))
        logger.debug("Loaded %d approved duplicate(s) from %s", len(baseline), self.path)
        return baseline
