# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Shared behavior for `grid` subcommands."""


# type annotations
from __future__ import annotations
from typing import Dict, Callable, Type

# standard libs
import sys
import functools

# external libs
from cmdkit.app import exit_status
from cmdkit.config import ConfigurationError
from rich.console import Console
from rich.table import Table
from rich.markup import escape

# internal libs
from ...core.logging import Logger
from ...core.exceptions import log_exception
from ...supervisor import Report, UnknownServiceError

# public interface
__all__ = ['BatchError', 'EXCEPTIONS', 'STATUS_STYLE', 'print_report', 'check_report', ]


# application logger
log = Logger.with_name('grid')


class BatchError(RuntimeError):
    """One or more services failed within a batch."""


EXCEPTIONS: Dict[Type[Exception], Callable[[Exception], int]] = {
    UnknownServiceError: functools.partial(log_exception, logger=log.critical,
                                           status=exit_status.bad_argument),
    ConfigurationError: functools.partial(log_exception, logger=log.critical,
                                          status=exit_status.bad_config),
    BatchError: functools.partial(log_exception, logger=log.critical,
                                  status=exit_status.runtime_error),
}


STATUS_STYLE = {
    'running': 'green',
    'starting': 'yellow',
    'stopping': 'yellow',
    'stopped': 'blue',
    'installed': 'blue',
    'not-running': 'blue',
    'uninstalled': 'magenta',
    'failed': 'red',
    'skipped': 'red',
    'timed-out': 'red',
}


def print_report(report: Report) -> None:
    """Print one line per outcome (as a table on a terminal)."""
    if sys.stdout.isatty():
        table = Table(show_header=True, header_style='bold', box=None)
        table.add_column('service')
        table.add_column('action')
        table.add_column('status')
        table.add_column('message')
        for outcome in report:
            style = STATUS_STYLE.get(outcome.status, 'default')
            table.add_row(outcome.name, outcome.action, f'[{style}]{outcome.status}[/]',
                          escape(outcome.message) if not outcome.ok else '')
        Console().print(table)
    else:
        for outcome in report:
            line = f'{outcome.name} {outcome.action} {outcome.status}'
            print(line if outcome.ok else f'{line}: {outcome.message}')


def check_report(report: Report) -> None:
    """Print `report` and raise BatchError on any failure."""
    print_report(report)
    if not report.ok:
        failed = ', '.join(sorted({outcome.name for outcome in report.failed}))
        raise BatchError(f'Failed: {failed}')
