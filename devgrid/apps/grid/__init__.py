# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Entry-point for grid command-line interface."""


# standard libs
import sys

# internal libs
from ...__meta__ import (__version__, __description__,
                         __copyright__, __developer__, __contact__,
                         __website__, __ascii_art__)
from ...core.logging import Logger
from . import install, start, stop, status, bootstrap

# external libs
from cmdkit.app import Application, ApplicationGroup
from cmdkit.cli import Interface


PROGRAM = 'grid'
USAGE = f"""\
usage: {PROGRAM} [-h] [-v] <command> [<args>...]
{__description__}\
"""

EPILOG = f"""\
Documentation and issue tracking at:
{__website__}

Copyright {__copyright__}
{__developer__} <{__contact__}>\
"""

HELP = f"""\
{USAGE}

commands:
install                {install.__doc__}
start                  {start.__doc__}
stop                   {stop.__doc__}
status                 {status.__doc__}
bootstrap              {bootstrap.__doc__}

options:
-h, --help             Show this message and exit.
-v, --version          Show the version and exit.

Use the -h/--help flag with the above commands to
learn more about their usage.

{EPILOG}\
"""


# initialize application logger
log = Logger.with_name('grid')


# logging setup for command-line interface
Application.log_critical = log.critical
Application.log_exception = log.exception


class GridApp(ApplicationGroup):
    """Top-level application class for grid."""

    interface = Interface(PROGRAM, USAGE, HELP)
    interface.add_argument('command')
    interface.add_argument('-v', '--version', action='version', version=__version__)
    interface.add_argument('--ascii-art', action='version', version=__ascii_art__)

    command = None
    commands = {'install': install.InstallApp,
                'start': start.StartApp,
                'stop': stop.StopApp,
                'status': status.StatusApp,
                'bootstrap': bootstrap.BootstrapApp,
                }


def main() -> int:
    """Entry-point for `grid` console application."""
    return GridApp.main(sys.argv[1:])
