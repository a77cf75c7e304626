# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Start services in the background."""


# type annotations
from __future__ import annotations
from typing import Optional

# external libs
from cmdkit.app import Application
from cmdkit.cli import Interface

# internal libs
from ...core.logging import Logger, cli_setup
from ...supervisor import Supervisor, ALL
from .common import EXCEPTIONS, check_report

# public interface
__all__ = ['StartApp', ]


PROGRAM = 'grid start'
PADDING = ' ' * len(PROGRAM)
USAGE = f"""\
usage: {PROGRAM} [-h] <service> [--deadline SEC]
       {PADDING} [--debug | --verbose]
{__doc__}\
"""

HELP = f"""\
{USAGE}

Services are started in configured order. A service already running
counts as success. Each service waits on its readiness check (if any).

arguments:
<service>                  Name of service (or "all").

options:
    --deadline     SEC     Give up on the whole batch after SEC seconds.
-d, --debug                Show debugging messages.
-v, --verbose              Show information messages.
-h, --help                 Show this message and exit.\
"""


# application logger
log = Logger.with_name('grid')


class StartApp(Application):
    """Application class for start command."""

    interface = Interface(PROGRAM, USAGE, HELP)

    service: str = ALL
    interface.add_argument('service')

    deadline: Optional[float] = None
    interface.add_argument('--deadline', type=float, default=deadline)

    debug: bool = False
    verbose: bool = False
    logging_interface = interface.add_mutually_exclusive_group()
    logging_interface.add_argument('-d', '--debug', action='store_true')
    logging_interface.add_argument('-v', '--verbose', action='store_true')

    exceptions = {**EXCEPTIONS, }

    def run(self) -> None:
        """Start selected services."""
        supervisor = Supervisor.from_config()
        check_report(supervisor.start(self.service, deadline=self.deadline))

    def __enter__(self) -> StartApp:
        """Initialize resources."""
        cli_setup(self)
        return self
