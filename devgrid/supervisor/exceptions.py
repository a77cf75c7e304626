# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Supervisor error taxonomy."""


# type annotations
from __future__ import annotations
from typing import Optional

# public interface
__all__ = ['SupervisorError', 'UnknownServiceError', 'DuplicateServiceError', 'NotInstalledError',
           'StartupTimeoutError', 'ServiceExitedError', 'StopTimeoutError', 'InstallError', ]


class SupervisorError(Exception):
    """Base class for all errors concerning a named service."""

    name: str = None

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class UnknownServiceError(SupervisorError):
    """Service name not found in configuration."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f'Service \'{name}\' not in configuration')


class DuplicateServiceError(SupervisorError):
    """A live process is already registered for the service."""

    pid: int = None

    def __init__(self, name: str, pid: int) -> None:
        self.pid = pid
        super().__init__(name, f'Service \'{name}\' already running (pid={pid})')


class NotInstalledError(SupervisorError):
    """Service must be installed before it can be started."""

    def __init__(self, name: str, reason: Optional[str] = None) -> None:
        reason = '' if not reason else f' ({reason})'
        super().__init__(name, f'Service \'{name}\' is not installed{reason}')


class StartupTimeoutError(SupervisorError):
    """Readiness check did not pass in time (the process is left running)."""

    pid: int = None
    timeout: float = None

    def __init__(self, name: str, pid: int, timeout: float) -> None:
        self.pid = pid
        self.timeout = timeout
        super().__init__(name, f'Service \'{name}\' (pid={pid}) not ready after {timeout:.1f} seconds')


class ServiceExitedError(SupervisorError):
    """Process exited before passing its readiness check."""

    pid: int = None
    logpath: str = None

    def __init__(self, name: str, pid: int, logpath: str) -> None:
        self.pid = pid
        self.logpath = logpath
        super().__init__(name, f'Service \'{name}\' (pid={pid}) exited during startup (see {logpath})')


class StopTimeoutError(SupervisorError):
    """Process survived both graceful and forceful termination (or the deadline expired)."""

    pid: int = None

    def __init__(self, name: str, pid: Optional[int]) -> None:
        self.pid = pid
        super().__init__(name, f'Service \'{name}\' (pid={pid}) did not confirm exit')


class InstallError(SupervisorError):
    """Installer failed for the service."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(name, f'Install failed for \'{name}\': {reason}')
