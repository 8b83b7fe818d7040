"""Obtaining raw dependency graph text from a file, stdin or a command."""

import logging
import os
import shlex
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from ..errors import GraphSourceError

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_COMMAND = ('cargo', 'tree', '--duplicates')
STDIN_PATH = '-'


@dataclass(frozen=True)
class RawGraph:
    """Raw graph text together with a description of where it came from."""
    text: str
    source: str


def read_graph_file(path: str | os.PathLike) -> RawGraph:
    """Read raw graph text from a file, or from stdin when path is '-'.

    Raises:
        GraphSourceError: If the file cannot be read
    """
    if str(path) == STDIN_PATH:
        # Decode as UTF-8 whatever the locale, unless stdin was replaced by a text-only stream
        stdin_bytes = getattr(sys.stdin, 'buffer', None)
        try:
            if stdin_bytes is not None:
                return RawGraph(stdin_bytes.read().decode('utf-8'), '<stdin>')
            return RawGraph(sys.stdin.read(), '<stdin>')
        except UnicodeDecodeError as e:
            raise GraphSourceError(f"standard input is not valid UTF-8 ({e.reason} at byte {e.start})") from e

    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except FileNotFoundError as e:
        raise GraphSourceError(f"graph file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise GraphSourceError(f"cannot read graph file {path}: {e}") from e

    logger.debug("Read %d byte(s) of graph output from %s", len(text), path)
    return RawGraph(text, str(path))


def split_command(command: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Normalize a configured command into an argument list.

    Strings are split with shell-like quoting rules. None selects the default
    ``cargo tree --duplicates``.
    """
    if command is None:
        return list(DEFAULT_GRAPH_COMMAND)
    if isinstance(command, str):
        arguments = shlex.split(command)
    else:
        arguments = [str(argument) for argument in command]
    if not arguments:
        raise GraphSourceError("graph command is empty")
    return arguments


def run_graph_command(command: str | list[str] | tuple[str, ...] | None, cwd: Path | None = None) -> RawGraph:
    """Run the dependency resolution tool and capture its standard output.

    The command runs to completion without a timeout; no shell is involved.

    Args:
        command: Command line, or None for the default
        cwd: Working directory for the command, normally the project root

    Raises:
        GraphSourceError: If the command cannot be started, exits non-zero, or prints
            output that is not valid UTF-8
    """
    arguments = split_command(command)
    source = shlex.join(arguments)
    logger.debug("Running %s in %s", source, cwd or os.getcwd())

    try:
        completed = subprocess.run(arguments, cwd=cwd, capture_output=True)
    except FileNotFoundError as e:
        raise GraphSourceError(f"command not found: {arguments[0]}") from e
    except OSError as e:
        raise GraphSourceError(f"cannot run {source}: {e}") from e

    if completed.returncode != 0:
        stderr = completed.stderr.decode('utf-8', errors='replace').strip()
        message = f"{source} exited with status {completed.returncode}"
        if stderr:
            message += f":\n{stderr}"
        raise GraphSourceError(message)

    try:
        text = completed.stdout.decode('utf-8')
    except UnicodeDecodeError as e:
        raise GraphSourceError(f"output of {source} is not valid UTF-8 ({e.reason} at byte {e.start})") from e

    return RawGraph(text, source)
