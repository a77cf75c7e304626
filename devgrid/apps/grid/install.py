# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Install services into the deploy area."""


# type annotations
from __future__ import annotations

# external libs
from cmdkit.app import Application
from cmdkit.cli import Interface

# internal libs
from ...core.logging import Logger, cli_setup
from ...supervisor import Supervisor, ALL
from .common import EXCEPTIONS, check_report

# public interface
__all__ = ['InstallApp', ]


PROGRAM = 'grid install'
USAGE = f"""\
usage: {PROGRAM} [-h] <service> [--debug | --verbose]
{__doc__}\
"""

HELP = f"""\
{USAGE}

arguments:
<service>             Name of service (or "all").

options:
-d, --debug           Show debugging messages.
-v, --verbose         Show information messages.
-h, --help            Show this message and exit.\
"""


# application logger
log = Logger.with_name('grid')


class InstallApp(Application):
    """Application class for install command."""

    interface = Interface(PROGRAM, USAGE, HELP)

    service: str = ALL
    interface.add_argument('service')

    debug: bool = False
    verbose: bool = False
    logging_interface = interface.add_mutually_exclusive_group()
    logging_interface.add_argument('-d', '--debug', action='store_true')
    logging_interface.add_argument('-v', '--verbose', action='store_true')

    exceptions = {**EXCEPTIONS, }

    def run(self) -> None:
        """Install selected services."""
        supervisor = Supervisor.from_config()
        check_report(supervisor.install(self.service))

    def __enter__(self) -> InstallApp:
        """Initialize resources."""
        cli_setup(self)
        return self
