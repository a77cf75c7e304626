# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Show service status."""


# type annotations
from __future__ import annotations
from typing import List, Tuple, Optional

# standard libs
import sys
import time
import functools

# external libs
from cmdkit.app import Application, exit_status
from cmdkit.cli import Interface
from rich.console import Console
from rich.table import Table
from rich.markup import escape

# internal libs
from ...core.logging import Logger, cli_setup
from ...core.exceptions import log_exception
from ...supervisor import Supervisor, State, UnknownServiceError, ALL
from .common import EXCEPTIONS, STATUS_STYLE

# public interface
__all__ = ['StatusApp', 'format_uptime', ]


PROGRAM = 'grid status'
USAGE = f"""\
usage: {PROGRAM} [-h] [<service>] [--debug | --verbose]
{__doc__}\
"""

HELP = f"""\
{USAGE}

Liveness is re-checked for every service. Nothing is modified and the
exit status is always zero.

arguments:
<service>             Name of service (default "all").

options:
-d, --debug           Show debugging messages.
-v, --verbose         Show information messages.
-h, --help            Show this message and exit.\
"""


# application logger
log = Logger.with_name('grid')


# States with a live process behind them
ACTIVE = (State.STARTING, State.RUNNING, State.STOPPING)


def format_uptime(seconds: float) -> str:
    """Compact duration (e.g., '2d03h', '1h04m', '5m02s', '7s')."""
    seconds = int(max(seconds, 0))
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    if days:
        return f'{days}d{hours:02d}h'
    if hours:
        return f'{hours}h{minutes:02d}m'
    if minutes:
        return f'{minutes}m{seconds:02d}s'
    return f'{seconds}s'


class StatusApp(Application):
    """Application class for status command."""

    interface = Interface(PROGRAM, USAGE, HELP)
    ALLOW_NOARGS = True

    service: str = ALL
    interface.add_argument('service', nargs='?', default=service)

    debug: bool = False
    verbose: bool = False
    logging_interface = interface.add_mutually_exclusive_group()
    logging_interface.add_argument('-d', '--debug', action='store_true')
    logging_interface.add_argument('-v', '--verbose', action='store_true')

    exceptions = {
        **EXCEPTIONS,
        # exit status is zero even for an unknown name
        UnknownServiceError: functools.partial(log_exception, logger=log.error, status=exit_status.success),
    }

    def run(self) -> None:
        """Print state of selected services."""
        supervisor = Supervisor.from_config()
        self.format_output(self.collect(supervisor, self.service))

    @staticmethod
    def collect(supervisor: Supervisor, target: str) -> List[Tuple[str, State, Optional[int], str, str]]:
        """Rows of (name, state, pid, uptime, logpath)."""
        now = time.time()
        rows = []
        for name, state in supervisor.status(target):
            pid, uptime = None, '-'
            if state in ACTIVE:
                handle = supervisor.registry.lookup(name)
                if handle is not None:
                    pid, uptime = handle.pid, format_uptime(now - handle.started)
            rows.append((name, state, pid, uptime, supervisor.descriptors[name].logpath))
        return rows

    @staticmethod
    def format_output(rows: List[Tuple[str, State, Optional[int], str, str]]) -> None:
        """Print as a table on a terminal, otherwise plain lines."""
        if sys.stdout.isatty():
            table = Table(show_header=True, header_style='bold', box=None)
            for column in ('service', 'state', 'pid', 'uptime', 'log'):
                table.add_column(column)
            for name, state, pid, uptime, logpath in rows:
                style = STATUS_STYLE.get(str(state), 'default')
                table.add_row(name, f'[{style}]{state}[/]', '-' if pid is None else str(pid),
                              uptime, escape(logpath))
            Console().print(table)
        else:
            for name, state, pid, uptime, logpath in rows:
                print(f'{name} {state} {"-" if pid is None else pid} {uptime} {logpath}')

    def __enter__(self) -> StatusApp:
        """Initialize resources."""
        cli_setup(self)
        return self
