# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Pluggable installers.

Fetching, verifying, extracting and configuring a service lives entirely
outside the supervisor. An installer is anything implementing `install`.
The built-in `CommandInstaller` runs a configured command (e.g., a script
that downloads and unpacks a release into the deploy area).
"""


# type annotations
from __future__ import annotations
from typing import List, Dict, Optional, TYPE_CHECKING

# standard libs
import os
import abc
import shlex
import logging
import subprocess

# internal libs
from devgrid.supervisor.exceptions import InstallError

# NOTE: descriptor imports this module
if TYPE_CHECKING:
    from devgrid.supervisor.descriptor import ServiceDescriptor

# public interface
__all__ = ['Installer', 'CommandInstaller', ]

# module logger
log = logging.getLogger(__name__)


class Installer(abc.ABC):
    """Abstract installer capability for a single service."""

    @abc.abstractmethod
    def install(self, descriptor: ServiceDescriptor) -> None:
        """Install the service or raise InstallError."""


class CommandInstaller(Installer):
    """
    Run a command to install a service.

    The command runs from the deploy directory with `GRID_SERVICE`,
    `GRID_DEPLOY` and `GRID_HOME` (the service working directory)
    in its environment. Output is appended to `<logpath>.install`.
    """

    argv: List[str] = None
    deploy: str = None
    timeout: Optional[float] = None

    def __init__(self, argv: List[str], deploy: str, timeout: Optional[float] = None) -> None:
        self.argv = list(argv)
        self.deploy = deploy
        self.timeout = timeout

    @classmethod
    def from_command(cls, command: str, deploy: str, timeout: Optional[float] = None) -> CommandInstaller:
        """Initialize from a shell-style command string."""
        return cls(shlex.split(command), deploy, timeout=timeout)

    def environ(self, descriptor: ServiceDescriptor) -> Dict[str, str]:
        """Environment for the install command."""
        return {**os.environ, **descriptor.env,
                'GRID_SERVICE': descriptor.name,
                'GRID_DEPLOY': self.deploy,
                'GRID_HOME': descriptor.cwd}

    def install(self, descriptor: ServiceDescriptor) -> None:
        """Run install command for `descriptor`."""
        os.makedirs(self.deploy, exist_ok=True)
        logpath = f'{descriptor.logpath}.install'
        os.makedirs(os.path.dirname(logpath), exist_ok=True)
        log.info(f'Installing \'{descriptor.name}\' ({shlex.join(self.argv)})')
        try:
            with open(logpath, mode='ab') as logfile:
                subprocess.run(self.argv, cwd=self.deploy, env=self.environ(descriptor),
                               stdin=subprocess.DEVNULL, stdout=logfile, stderr=subprocess.STDOUT,
                               timeout=self.timeout, check=True)
        except FileNotFoundError as error:
            raise InstallError(descriptor.name, f'command not found ({self.argv[0]})') from error
        except subprocess.TimeoutExpired as error:
            raise InstallError(descriptor.name, f'timeout after {self.timeout} seconds') from error
        except subprocess.CalledProcessError as error:
            raise InstallError(descriptor.name, f'exit status {error.returncode} (see {logpath})') from error
        log.debug(f'Installed \'{descriptor.name}\'')

    def __repr__(self) -> str:
        return f'CommandInstaller({shlex.join(self.argv)!r})'
