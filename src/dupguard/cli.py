import argparse
import logging
import os
import sys
import textwrap
from functools import wraps
from pathlib import Path

from .audit import current_state, run_audit
from .baseline.canonical import serialize
from .baseline.path import SETTINGS_FILE_NAME, find_project_root, resolve_baseline_path
from .baseline.store import BaselineStore
from .errors import DriftError, DupguardError
from .graph.parser import FORMAT_AUTO, GRAPH_FORMATS
from .graph.source import RawGraph, read_graph_file, run_graph_command
from .report.verdict import EXIT_CLEAN, EXIT_DRIFT, EXIT_ERROR, check_verdict, render_report
from .settings import (
    ProjectSettings,
    SETTING_BASELINE_PATH,
    SETTING_GRAPH_COMMAND,
    SETTING_GRAPH_FORMAT,
    SETTING_LOGGING_LEVEL,
    SETTING_LOGGING_PATH,
)
from .utils.profiling import profile_main

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class AuditContext:
    """Resolved configuration of one invocation: project, settings and inputs."""

    def __init__(self, project_root: Path, settings: ProjectSettings, args: argparse.Namespace):
        self.project_root = project_root
        self.settings = settings
        self._args = args

        configured = args.baseline
        if configured is None:
            configured = settings.get(SETTING_BASELINE_PATH)
            if configured is not None and not (isinstance(configured, str) and configured):
                raise settings.invalid(SETTING_BASELINE_PATH, 'a non-empty string', configured)
        self.baseline_path = resolve_baseline_path(project_root, configured)

        graph_format = args.format
        if graph_format is None:
            graph_format = settings.get(SETTING_GRAPH_FORMAT, FORMAT_AUTO)
            if graph_format not in GRAPH_FORMATS:
                raise settings.invalid(SETTING_GRAPH_FORMAT, f"one of {', '.join(GRAPH_FORMATS)}", graph_format)
        self.graph_format: str = graph_format

        command = settings.get(SETTING_GRAPH_COMMAND)
        if command is not None and not (
                isinstance(command, str) or
                (isinstance(command, list) and all(isinstance(argument, str) for argument in command))):
            raise settings.invalid(SETTING_GRAPH_COMMAND, 'a string or a list of strings', command)
        self._configured_command = command

    @property
    def baseline_label(self) -> str:
        """Baseline path as shown in reports, relative to the project root when possible."""
        if self.baseline_path.is_relative_to(self.project_root):
            return self.baseline_path.relative_to(self.project_root).as_posix()
        return str(self.baseline_path)

    def baseline_store(self) -> BaselineStore:
        return BaselineStore(self.baseline_path)

    def read_graph(self) -> RawGraph:
        if self._args.graph is not None:
            return read_graph_file(self._args.graph)
        command = self._args.command if self._args.command is not None else self._configured_command
        return run_graph_command(command, cwd=self.project_root)


def needs_graph(func):
    """Decorator for commands that audit a dependency graph.

    The decorated function will receive (context, graph, output, args).
    The wrapper function takes (context, output, args) and reads the raw graph
    from the configured file or command.
    """
    @wraps(func)
    def wrapper(context, output, args):
        return func(context, context.read_graph(), output, args)
    return wrapper


def no_graph(func):
    """Decorator for commands that only look at the baseline.

    The decorated function will receive (context, output, args).
    """
    @wraps(func)
    def wrapper(context, output, args):
        return func(context, output, args)
    return wrapper


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dupguard',
        description='Check that every package resolved to more than one version in the dependency graph is '
                    'approved in the committed baseline of expected duplicates.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              dupguard
              dupguard --graph Cargo.lock
              cargo tree --duplicates | dupguard --graph -
              dupguard show > expected-duplicate-deps.txt

            Exit status: 0 when the duplicates match the baseline, 1 when they drifted,
            2 on any other error.
            ''').strip()
    )
    parser.add_argument(
        '--project',
        metavar='PATH',
        help='Path to the project root. If not provided, uses DUPGUARD_PROJECT environment variable or searches '
             f'upward from the current directory for {SETTINGS_FILE_NAME}, then for Cargo.lock.')
    parser.add_argument(
        '--baseline',
        metavar='PATH',
        help='Path to the baseline file, relative to the project root. Defaults to baseline.path from '
             f'{SETTINGS_FILE_NAME} or expected-duplicate-deps.txt.')
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '--graph',
        metavar='PATH',
        help='Read the dependency graph from a file ("-" for standard input) instead of running a command')
    source.add_argument(
        '--command',
        metavar='CMD',
        help='Command printing the dependency graph. Defaults to graph.command from '
             f'{SETTINGS_FILE_NAME} or "cargo tree --duplicates".')
    parser.add_argument(
        '--format',
        choices=list(GRAPH_FORMATS),
        help='Grammar of the dependency graph: cargo tree output, Cargo.lock, or auto-detected (default)')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log detailed information to standard error')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file for operation logging. If not provided, uses logging.path from '
             f'{SETTINGS_FILE_NAME} or no logging.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=LOG_LEVELS,
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when a log file is used.')
    parser.set_defaults(method=_check)

    subparsers = parser.add_subparsers(
        dest='subcommand',
        title='Commands',
        description='Available commands (default: check)',
        help='Use "dupguard COMMAND --help" for command-specific help'
    )

    parser_check = subparsers.add_parser(
        'check',
        help='Compare the duplicated packages with the baseline',
        description='Extracts the packages resolved to more than one version and compares them with the '
                    'baseline. Prints a unified diff against the baseline when they differ.')
    parser_check.set_defaults(method=_check)

    parser_show = subparsers.add_parser(
        'show',
        help='Print the current duplicated packages in baseline format',
        description='Prints the duplicated packages of the current dependency graph in the canonical baseline '
                    'format. Redirect the output to the baseline file to approve the current state.')
    parser_show.set_defaults(method=_show)

    parser_normalize = subparsers.add_parser(
        'normalize',
        help='Print the baseline in canonical form',
        description='Parses the baseline and prints it in canonical form, without comments and with entries and '
                    'versions sorted.')
    parser_normalize.set_defaults(method=_normalize)

    return parser


def configure_logging(args: argparse.Namespace, settings: ProjectSettings | None) -> None:
    """Configure logging from command line arguments, falling back to project settings."""
    log_file = args.log_file
    log_level = args.log_level
    if settings is not None:
        log_path_setting = settings.get(SETTING_LOGGING_PATH)
        if log_path_setting is not None and not (isinstance(log_path_setting, str) and log_path_setting):
            raise settings.invalid(SETTING_LOGGING_PATH, 'a non-empty string', log_path_setting)
        log_level_setting = settings.get(SETTING_LOGGING_LEVEL)
        if log_level_setting is not None and log_level_setting not in LOG_LEVELS:
            raise settings.invalid(SETTING_LOGGING_LEVEL, f"one of {', '.join(LOG_LEVELS)}", log_level_setting)

        if log_file is None and log_path_setting:
            log_file = str(settings.project_root / log_path_setting)
            if log_level is None:
                log_level = log_level_setting

    if log_file:
        # Reset logging configuration
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
        logging.basicConfig(
            filename=log_file,
            level=getattr(logging, log_level or 'INFO'),
            format=LOG_FORMAT
        )
    elif args.verbose:
        logging.basicConfig(
            stream=sys.stderr,
            level=getattr(logging, log_level or 'DEBUG'),
            format=LOG_FORMAT
        )


def run(argv: list[str] | None = None, output=None) -> int:
    """Run the command line interface and return the exit status."""
    if output is None:
        output = sys.stdout

    parser = build_parser()
    args = parser.parse_args(argv)

    project = args.project
    if project is None:
        project = os.environ.get('DUPGUARD_PROJECT')
    if project is not None:
        project_root = Path(project).absolute()
        if not project_root.is_dir():
            parser.error(f"project directory not found: {project}")
    else:
        project_root = find_project_root(Path.cwd())

    settings = None
    try:
        settings = ProjectSettings(project_root)
        configure_logging(args, settings)
        logger.debug("Project root: %s", project_root)
        context = AuditContext(project_root, settings, args)
        return args.method(context, output, args)
    except DriftError as e:
        logger.info("%s", e)
        return EXIT_DRIFT
    except DupguardError as e:
        if settings is None:
            configure_logging(args, None)
        logger.debug("Audit aborted", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


@profile_main
def dupguard_main():
    sys.exit(run())


@needs_graph
def _check(context: AuditContext, graph: RawGraph, output, args):
    result = run_audit(graph.text, context.baseline_store(), context.graph_format, graph.source)
    output.write(render_report(result.diff, context.baseline_label))
    check_verdict(result.diff)
    return EXIT_CLEAN


@needs_graph
def _show(context: AuditContext, graph: RawGraph, output, args):
    output.write(serialize(current_state(graph.text, context.graph_format, graph.source)))
    return EXIT_CLEAN


@no_graph
def _normalize(context: AuditContext, output, args):
    output.write(serialize(context.baseline_store().load()))
    return EXIT_CLEAN


if __name__ == '__main__':
    dupguard_main()
