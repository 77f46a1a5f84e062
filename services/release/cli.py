"""Exit-code conventions shared by the release command-line tools."""

from __future__ import annotations

import argparse
import logging
from typing import Callable, NoReturn, Sequence

from services.release.models import ReleaseError, UsageError
from shared.logging_config import configure_cli_logging

_LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class ReleaseArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports bad usage as :class:`UsageError`."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{message}\n{self.format_usage().rstrip()}")


def run_tool(
    name: str,
    action: Callable[[argparse.Namespace], int],
    parser: ReleaseArgumentParser,
    argv: Sequence[str] | None = None,
) -> int:
    """Parse ``argv`` and run ``action``, mapping failures to exit code 1."""

    configure_cli_logging()
    try:
        args = parser.parse_args(argv)
        return action(args)
    except UsageError as exc:
        _LOGGER.error("%s: %s", name, exc)
        return EXIT_FAILURE
    except ReleaseError as exc:
        _LOGGER.error("%s failed: %s", name, exc)
        return EXIT_FAILURE
    except OSError as exc:
        _LOGGER.error("%s failed: %s", name, exc)
        return EXIT_FAILURE


__all__ = ["EXIT_FAILURE", "EXIT_OK", "ReleaseArgumentParser", "run_tool"]
