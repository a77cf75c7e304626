# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Readiness checks.

A readiness check decides when a launched process is actually usable,
not merely spawned. Checks are polled by the launcher until they pass
or their timeout is reached.
"""


# type annotations
from __future__ import annotations
from typing import Optional, Mapping, Any

# standard libs
import os
import abc
import socket

# external libs
from cmdkit.config import ConfigurationError

# public interface
__all__ = ['ReadyCheck', 'FileExists', 'PortListening', 'LogContains', ]


class ReadyCheck(abc.ABC):
    """Abstract predicate polled after launch."""

    timeout: Optional[float] = None

    @abc.abstractmethod
    def __call__(self) -> bool:
        """True if the service is ready."""

    def prepare(self) -> None:
        """Called by the launcher just before the process is spawned."""

    @classmethod
    def from_config(cls, params: Mapping[str, Any], cwd: str, logpath: str) -> ReadyCheck:
        """
        Build check from a `[service.<name>.ready]` table.

        Exactly one of `port`, `file`, or `log` must be given.
        Relative `file` paths are taken from `cwd`.
        """
        params = dict(params)
        timeout = params.pop('timeout', None)
        kinds = [kind for kind in ('port', 'file', 'log') if kind in params]
        if len(kinds) != 1:
            raise ConfigurationError(f'Readiness check requires exactly one of port, file, or log '
                                     f'(given: {", ".join(sorted(params)) or "none"})')
        kind, = kinds
        if kind == 'port':
            check = PortListening(int(params['port']), host=params.get('host', 'localhost'))
        elif kind == 'file':
            check = FileExists(os.path.join(cwd, os.path.expanduser(params['file'])))
        else:
            check = LogContains(params.get('path', logpath), params['log'])
        check.timeout = None if timeout is None else float(timeout)
        return check


class FileExists(ReadyCheck):
    """Ready once `path` exists."""

    def __init__(self, path: str, timeout: Optional[float] = None) -> None:
        self.path = path
        self.timeout = timeout

    def __call__(self) -> bool:
        return os.path.exists(self.path)

    def __repr__(self) -> str:
        return f'FileExists(\'{self.path}\')'


class PortListening(ReadyCheck):
    """Ready once a TCP connection to `host:port` is accepted."""

    def __init__(self, port: int, host: str = 'localhost', timeout: Optional[float] = None) -> None:
        self.port = port
        self.host = host
        self.timeout = timeout

    def __call__(self) -> bool:
        try:
            with socket.create_connection((self.host, self.port), timeout=1):
                return True
        except OSError:
            return False

    def __repr__(self) -> str:
        return f'PortListening({self.host}:{self.port})'


class LogContains(ReadyCheck):
    """Ready once `text` appears in the log file (after the launch point)."""

    offset: int = 0

    def __init__(self, path: str, text: str, timeout: Optional[float] = None) -> None:
        self.path = path
        self.text = text
        self.timeout = timeout

    def prepare(self) -> None:
        """Skip output from previous runs (the log is appended to)."""
        try:
            self.offset = os.path.getsize(self.path)
        except FileNotFoundError:
            self.offset = 0

    def __call__(self) -> bool:
        try:
            with open(self.path, mode='rb') as stream:
                stream.seek(self.offset)
                content = stream.read().decode(errors='replace')
        except FileNotFoundError:
            return False
        return self.text in content

    def __repr__(self) -> str:
        return f'LogContains(\'{self.path}\', \'{self.text}\')'
