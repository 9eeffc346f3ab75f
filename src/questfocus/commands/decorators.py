"""Decorators and helpers shared by command functions."""

import functools
import time
import traceback
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import typer

from questfocus.exceptions import NotFoundError
from questfocus.services.focus_engine import FocusEngine
from questfocus.services.runtime import Runtime, load_runtime
from questfocus.utils.exit_codes import (
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NOT_FOUND,
    get_exit_code_name,
)
from questfocus.utils.logger import get_logger
from questfocus.utils.ui.console import get_console
from questfocus.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def command_wrapper(func: Callable):
    """Decorator to wrap command functions with logging and error reporting."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            result = func(*args, **kwargs)
            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except AppError as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) [%s] - %s",
                cmd,
                elapsed,
                get_exit_code_name(e.exit_code),
                str(e),
            )
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit:
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=ERROR_GENERAL) from e

    return wrapper


@contextmanager
def open_runtime() -> Iterator[Runtime]:
    """Load the engine for one command and flush everything afterwards."""
    runtime = load_runtime()
    try:
        yield runtime
    finally:
        announce_level_ups(runtime.engine)
        runtime.close()
        runtime.save_state()


def rejection_error(engine: FocusEngine) -> AppError:
    """Turn the engine's last rejection into an AppError with a fitting exit code."""
    code = ERROR_NOT_FOUND if isinstance(engine.last_error, NotFoundError) else ERROR_INVALID_ARGS
    return AppError(engine.last_rejection or "Operation rejected", exit_code=code)


def announce_level_ups(engine: FocusEngine) -> None:
    """Print any level-up that happened while the command ran."""
    from questfocus.ui.timer_display import show_level_up

    for event in engine.drain_level_ups():
        show_level_up(event, get_console())
