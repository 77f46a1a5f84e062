"""Central logging configuration for the client and the build tools.

The desktop client writes diagnostics to a log file so that failed background
update checks (which are never shown to the user) can still be inspected.  The
build tools log to stderr only, where CI captures them.

Two environment variables customise the client log location:

``METADATAZERO_LOG_FILE``
    Absolute path to the log file that should be created.

``METADATAZERO_LOG_DIR``
    Directory where the default log file name will be created.  Ignored when
    ``METADATAZERO_LOG_FILE`` is present.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from enum import Enum
from pathlib import Path
from typing import Iterable

_LOG_FILE_ENV = "METADATAZERO_LOG_FILE"
_LOG_DIR_ENV = "METADATAZERO_LOG_DIR"
_DEFAULT_DIRNAME = ".metadatazero"
_DEFAULT_LOGNAME = "metadatazero.log"
_HANDLER_TAG = "_metadatazero_logging_handler"

_CONFIGURED = False
_CLI_CONFIGURED = False
_LOG_PATH: Path | None = None
_FILE_HANDLER: logging.FileHandler | None = None

USER_HOME_PLACEHOLDER = "<user_home>"


class LogVerbosity(str, Enum):
    """Verbosity levels supported by the client log file."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    VERBOSE = "verbose"


_VERBOSITY_LEVELS: dict[LogVerbosity, int] = {
    LogVerbosity.ERROR: logging.ERROR,
    LogVerbosity.WARNING: logging.WARNING,
    LogVerbosity.INFO: logging.INFO,
    LogVerbosity.VERBOSE: logging.DEBUG,
}

_DEFAULT_VERBOSITY = LogVerbosity.INFO
_CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


def _home_patterns() -> list[re.Pattern[str]]:
    candidates = {str(Path.home())}
    for env_var in ("HOME", "USERPROFILE"):
        value = os.environ.get(env_var)
        if value:
            candidates.add(os.path.expanduser(value))
    flags = re.IGNORECASE if os.name == "nt" else 0
    patterns: list[re.Pattern[str]] = []
    for candidate in sorted(candidates, key=len, reverse=True):
        normalised = os.path.normpath(candidate)
        if normalised in {os.sep, "", "."}:
            continue
        patterns.append(re.compile(re.escape(normalised), flags))
    return patterns


class _RedactingFormatter(logging.Formatter):
    """Replace the user's home directory so shared logs do not leak it."""

    def __init__(self, fmt: str, datefmt: str | None = None) -> None:
        super().__init__(fmt, datefmt)
        self._patterns = _home_patterns()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        for pattern in self._patterns:
            formatted = pattern.sub(USER_HOME_PLACEHOLDER, formatted)
        return formatted


def ensure_app_logging() -> Path:
    """Configure the root logger for the desktop client.

    The first call installs a file handler filtered by the current verbosity and,
    when stderr is interactive, an INFO console handler.  Later calls return the
    already configured log path.
    """

    global _CONFIGURED, _LOG_PATH, _FILE_HANDLER

    if _CONFIGURED and _LOG_PATH is not None:
        return _LOG_PATH

    log_path = _resolve_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    formatter = _RedactingFormatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(_VERBOSITY_LEVELS[_CURRENT_VERBOSITY])
    file_handler.setFormatter(formatter)
    setattr(file_handler, _HANDLER_TAG, True)
    root.addHandler(file_handler)
    _FILE_HANDLER = file_handler

    if _should_log_to_stderr(root.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.INFO)
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_TAG, True)
        root.addHandler(stream_handler)

    _CONFIGURED = True
    _LOG_PATH = log_path

    logging.getLogger(__name__).info(
        "Writing application logs to %s (verbosity=%s)",
        log_path,
        _CURRENT_VERBOSITY.value,
    )
    return log_path


def configure_cli_logging(verbose: bool = False) -> None:
    """Send build-tool log records to stderr in a compact format."""

    global _CLI_CONFIGURED

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if _CLI_CONFIGURED:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    setattr(handler, _HANDLER_TAG, True)
    root.addHandler(handler)
    _CLI_CONFIGURED = True


def set_file_log_verbosity(verbosity: LogVerbosity | str) -> None:
    """Adjust the minimum severity recorded in the client log file."""

    global _CURRENT_VERBOSITY

    if isinstance(verbosity, str):
        try:
            verbosity = LogVerbosity(verbosity.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported log verbosity: {verbosity}") from exc

    ensure_app_logging()
    _CURRENT_VERBOSITY = verbosity
    if _FILE_HANDLER is not None:
        _FILE_HANDLER.setLevel(_VERBOSITY_LEVELS[verbosity])
    logging.getLogger(__name__).info("File log verbosity set to %s", verbosity.value)


def get_file_log_verbosity() -> LogVerbosity:
    return _CURRENT_VERBOSITY


def _resolve_log_path() -> Path:
    env_file = os.environ.get(_LOG_FILE_ENV)
    if env_file:
        return Path(env_file).expanduser()

    env_dir = os.environ.get(_LOG_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser() / _DEFAULT_LOGNAME

    return Path.home() / _DEFAULT_DIRNAME / "logs" / _DEFAULT_LOGNAME


def _should_log_to_stderr(handlers: Iterable[logging.Handler]) -> bool:
    stderr = getattr(sys, "stderr", None)
    is_tty = getattr(stderr, "isatty", None)
    if not callable(is_tty):
        return False
    try:
        if not is_tty():
            return False
    except (OSError, ValueError):
        return False

    for handler in handlers:
        if isinstance(handler, logging.StreamHandler) and handler.stream is stderr:
            return False
    return True


def _reset_for_tests() -> None:
    """Remove handlers installed by this module."""

    global _CONFIGURED, _CLI_CONFIGURED, _LOG_PATH, _FILE_HANDLER, _CURRENT_VERBOSITY

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    _CONFIGURED = False
    _CLI_CONFIGURED = False
    _LOG_PATH = None
    _FILE_HANDLER = None
    _CURRENT_VERBOSITY = _DEFAULT_VERBOSITY


__all__ = [
    "LogVerbosity",
    "USER_HOME_PLACEHOLDER",
    "configure_cli_logging",
    "ensure_app_logging",
    "get_file_log_verbosity",
    "set_file_log_verbosity",
]
