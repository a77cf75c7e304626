# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Rebuild the grid from scratch."""


# type annotations
from __future__ import annotations
from typing import Optional

# external libs
from cmdkit.app import Application
from cmdkit.cli import Interface

# internal libs
from ...core.logging import Logger, cli_setup
from ...supervisor import Supervisor
from .common import EXCEPTIONS, BatchError, check_report

# public interface
__all__ = ['BootstrapApp', ]


PROGRAM = 'grid bootstrap'
USAGE = f"""\
usage: {PROGRAM} [-h] [--deadline SEC] [--debug | --verbose]
{__doc__}\
"""

HELP = f"""\
{USAGE}

Stop all services, wipe the deploy area, install all services, and
start everything that installed. Nothing is wiped if any service
could not be stopped.

options:
    --deadline     SEC     Give up on each batch after SEC seconds.
-d, --debug                Show debugging messages.
-v, --verbose              Show information messages.
-h, --help                 Show this message and exit.\
"""


# application logger
log = Logger.with_name('grid')


class BootstrapApp(Application):
    """Application class for bootstrap command."""

    interface = Interface(PROGRAM, USAGE, HELP)
    ALLOW_NOARGS = True

    deadline: Optional[float] = None
    interface.add_argument('--deadline', type=float, default=deadline)

    debug: bool = False
    verbose: bool = False
    logging_interface = interface.add_mutually_exclusive_group()
    logging_interface.add_argument('-d', '--debug', action='store_true')
    logging_interface.add_argument('-v', '--verbose', action='store_true')

    exceptions = {**EXCEPTIONS, }

    def run(self) -> None:
        """Stop, wipe, install, and start."""
        supervisor = Supervisor.from_config()
        try:
            check_report(supervisor.bootstrap(deadline=self.deadline))
        except BatchError:
            log.warning('Bootstrap incomplete - grid may be partially deployed (see `grid status`)')
            raise

    def __enter__(self) -> BootstrapApp:
        """Initialize resources."""
        cli_setup(self)
        return self
