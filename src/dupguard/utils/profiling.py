"""Profiling support for dupguard using cProfile.

When the DUPGUARD_PROFILE environment variable is set to a directory path,
profiling data for the command line entry point is saved to that directory
under a per-run subdirectory named after the start timestamp and PID.
"""
import cProfile
import functools
import itertools
import os
import time
from pathlib import Path
from typing import Callable, TypeVar, ParamSpec

P = ParamSpec('P')
T = TypeVar('T')

PROFILE_ENVIRONMENT_VARIABLE = 'DUPGUARD_PROFILE'

# Global counter for generating unique sequence numbers within the same process
_profile_counter = itertools.count()


def get_profile_dir() -> Path | None:
    """Get the profile directory from environment variable.

    Returns:
        Path to profile directory if DUPGUARD_PROFILE is set, None otherwise.
        The path includes a subdirectory for the run with format
        {timestamp_ms}_{pid} (e.g., "1730332456789_54321")
    """
    profile_path = os.environ.get(PROFILE_ENVIRONMENT_VARIABLE)
    if profile_path:
        timestamp_ms = int(time.time() * 1000)
        return Path(profile_path) / f"{timestamp_ms}_{os.getpid()}"
    return None


def generate_profile_filename(prefix: str = "profile") -> str:
    """Generate a unique profile filename like "main_54398_0.prof".

    The filename includes the prefix, the process PID and a sequence number
    that keeps names unique within the same process.
    """
    return f"{prefix}_{os.getpid()}_{next(_profile_counter)}.prof"


def profile_function(func: Callable[P, T], prefix: str = "profile") -> Callable[P, T]:
    """Wrap a function so it is profiled if DUPGUARD_PROFILE is set.

    Args:
        func: Function to profile
        prefix: Prefix for the profile filename

    Returns:
        Wrapped function that profiles if environment variable is set
    """
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        profile_dir = get_profile_dir()

        if profile_dir is None:
            return func(*args, **kwargs)

        profile_dir.mkdir(parents=True, exist_ok=True)
        profile_file = profile_dir / generate_profile_filename(prefix)

        profiler = cProfile.Profile()
        try:
            profiler.enable()
            return func(*args, **kwargs)
        finally:
            profiler.disable()
            profiler.dump_stats(str(profile_file))

    return wrapper


def profile_main(func: Callable[P, T]) -> Callable[P, T]:
    """Decorator for the main entry point function, profiling with prefix "main"."""
    return profile_function(func, prefix="main")
