# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Common exceptions and error handling."""


# type annotations
from __future__ import annotations
from typing import Callable, Optional

# standard libs
import os
import sys
import logging
import datetime
import traceback

# external libs
from cmdkit.app import exit_status

# internal libs
from devgrid.core.platform import default_path

# public interface
__all__ = ['log_exception', 'write_traceback', 'display_critical', ]


def log_exception(exc: Exception, logger: Callable[[str], None], status: int) -> int:
    """Log the exception and exit with `status`."""
    logger(str(exc))
    return status


def display_critical(message: str) -> None:
    """Print a critical message to stderr before logging is available."""
    print(f'CRITICAL [{__name__}] {message}', file=sys.stderr)


def write_traceback(exc: Exception, logger: Optional[logging.Logger] = None,
                    module: Optional[str] = None, status: int = exit_status.uncaught_exception) -> int:
    """
    Write exception traceback to a file in the log directory and return exit status.

    The message is passed to `logger.critical` if given, otherwise printed
    directly to stderr (e.g., when logging itself is misconfigured).
    """
    time = datetime.datetime.now().strftime('%Y%m%d-%H%M%S')
    path = os.path.join(default_path.log, f'exception-{time}.log')
    with open(path, mode='w') as stream:
        print(''.join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=stream)
    msg = str(exc).replace('\n', ' - ')
    source = f'{module}: ' if module else ''
    report = display_critical if logger is None else logger.critical
    report(f'{source}{exc.__class__.__name__}: {msg}')
    report(f'Exception traceback written to {path}')
    return status
