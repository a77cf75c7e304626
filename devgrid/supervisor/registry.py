# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Durable process registry.

One TOML record per service under a runtime directory, so that a later
invocation can find (and stop) processes started by an earlier one.
"""


# type annotations
from __future__ import annotations
from typing import List, Tuple, Dict, Optional, Iterator, Any

# standard libs
import os
import enum
import fcntl
import logging
import tempfile
import contextlib
from dataclasses import dataclass

# external libs
import psutil
import tomlkit
from cmdkit.config import Namespace

# internal libs
from devgrid.supervisor.exceptions import DuplicateServiceError

# public interface
__all__ = ['State', 'ProcessHandle', 'Registry', ]

# module logger
log = logging.getLogger(__name__)


# Allowed difference (seconds) between recorded and observed process creation time
CREATE_TIME_TOLERANCE: float = 1.0


class State(enum.Enum):
    """Observable service states."""
    UNINSTALLED = 'uninstalled'
    STOPPED = 'stopped'
    STARTING = 'starting'
    RUNNING = 'running'
    STOPPING = 'stopping'

    def __str__(self) -> str:
        return self.value


@dataclass
class ProcessHandle:
    """Supervisor-side record of a launched process."""

    pid: int
    started: float  # process creation time (seconds since epoch)
    state: State = State.STARTING
    logpath: Optional[str] = None

    def process(self) -> Optional[psutil.Process]:
        """
        The live process for this handle, or None.

        A zombie, a missing PID, or a PID whose creation time does not match
        `started` (i.e., the PID was recycled by an unrelated process) are all dead.
        """
        try:
            process = psutil.Process(self.pid)
            if process.status() == psutil.STATUS_ZOMBIE:
                return None
            if abs(process.create_time() - self.started) > CREATE_TIME_TOLERANCE:
                log.debug(f'PID {self.pid} reused by another process')
                return None
            return process
        except (psutil.NoSuchProcess, psutil.ZombieProcess):
            return None
        except psutil.AccessDenied:
            # exists but owned by someone else, so it cannot be ours
            return None

    def is_alive(self) -> bool:
        """Re-checked on every call, never cached."""
        return self.process() is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {'pid': self.pid, 'started': self.started, 'state': self.state.value}
        if self.logpath is not None:
            data['logpath'] = self.logpath
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProcessHandle:
        return cls(pid=int(data['pid']), started=float(data['started']),
                   state=State(data.get('state', State.STARTING.value)),
                   logpath=data.get('logpath', None))


class Registry:
    """Persistent mapping from service name to ProcessHandle."""

    path: str = None

    def __init__(self, path: str) -> None:
        """Initialize with directory `path` (created if necessary)."""
        self.path = path
        os.makedirs(self.path, exist_ok=True)

    def filepath(self, name: str) -> str:
        """Path to record for service `name`."""
        return os.path.join(self.path, f'{name}.toml')

    @contextlib.contextmanager
    def lock(self, name: str) -> Iterator[None]:
        """Exclusive advisory lock for service `name` (across processes)."""
        with open(os.path.join(self.path, f'.{name}.lock'), mode='a') as lockfile:
            fcntl.flock(lockfile.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lockfile.fileno(), fcntl.LOCK_UN)

    def _read(self, name: str) -> Optional[ProcessHandle]:
        filepath = self.filepath(name)
        if not os.path.exists(filepath):
            return None
        try:
            return ProcessHandle.from_dict(Namespace.from_toml(filepath))
        except Exception as error:
            log.error(f'Unreadable record for \'{name}\' ({filepath}): {error.__class__.__name__}: {error}')
            return None

    def _write(self, name: str, handle: ProcessHandle) -> None:
        fd, temp_path = tempfile.mkstemp(prefix=f'.{name}.', suffix='.tmp', dir=self.path)
        try:
            with os.fdopen(fd, mode='w') as stream:
                stream.write(tomlkit.dumps({'name': name, **handle.to_dict()}))
            os.replace(temp_path, self.filepath(name))
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

    def record(self, name: str, handle: ProcessHandle) -> None:
        """
        Persist `handle` for `name`.

        Raises:
            DuplicateServiceError: A live handle is already recorded.
        """
        with self.lock(name):
            current = self._read(name)
            if current is not None and current.is_alive():
                raise DuplicateServiceError(name, current.pid)
            if current is not None:
                log.debug(f'Replacing stale record for \'{name}\' (pid={current.pid})')
            self._write(name, handle)
        log.debug(f'Recorded \'{name}\' (pid={handle.pid}, state={handle.state})')

    def lookup(self, name: str) -> Optional[ProcessHandle]:
        """Recorded handle for `name` (live or not) or None."""
        return self._read(name)

    def transition(self, name: str, state: State) -> ProcessHandle:
        """Update the state of the recorded handle for `name`."""
        with self.lock(name):
            handle = self._read(name)
            if handle is None:
                raise KeyError(f'No record for \'{name}\'')
            handle.state = state
            self._write(name, handle)
        log.debug(f'Service \'{name}\' is {state}')
        return handle

    def remove(self, name: str) -> None:
        """Remove record for `name` (idempotent)."""
        with self.lock(name):
            try:
                os.remove(self.filepath(name))
                log.debug(f'Removed record for \'{name}\'')
            except FileNotFoundError:
                pass

    def list(self) -> List[Tuple[str, ProcessHandle]]:
        """All recorded (name, handle) pairs sorted by name."""
        records = []
        for filename in sorted(os.listdir(self.path)):
            if filename.endswith('.toml') and not filename.startswith('.'):
                name = filename[:-len('.toml')]
                handle = self._read(name)
                if handle is not None:
                    records.append((name, handle))
        return records

    def __repr__(self) -> str:
        return f'<Registry(path=\'{self.path}\')>'
