# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Launch services as detached background processes."""


# type annotations
from __future__ import annotations
from typing import Optional

# standard libs
import os
import time
import logging
import functools
from subprocess import Popen, DEVNULL, STDOUT

# external libs
import psutil

# internal libs
from devgrid.supervisor.descriptor import ServiceDescriptor
from devgrid.supervisor.registry import Registry, ProcessHandle, State
from devgrid.supervisor.polling import Deadline, wait_for, bounded
from devgrid.supervisor.exceptions import (DuplicateServiceError, NotInstalledError,
                                           StartupTimeoutError, ServiceExitedError)

# public interface
__all__ = ['Launcher', ]

# module logger
log = logging.getLogger(__name__)


class Launcher:
    """Start services and record their handles."""

    registry: Registry = None
    interval: float = 0.25
    ready_timeout: float = 60

    def __init__(self, registry: Registry, interval: float = interval, ready_timeout: float = ready_timeout) -> None:
        self.registry = registry
        self.interval = float(interval)
        self.ready_timeout = float(ready_timeout)

    def start(self, descriptor: ServiceDescriptor, deadline: Optional[Deadline] = None) -> ProcessHandle:
        """
        Launch `descriptor` and wait for readiness (if it has a check).

        Raises:
            NotInstalledError: Service not installed or executable missing.
            DuplicateServiceError: Already running.
            StartupTimeoutError: Not ready in time (process left running).
            ServiceExitedError: Process died before becoming ready.
        """
        name = descriptor.name
        if not descriptor.is_installed():
            raise NotInstalledError(name)
        executable = descriptor.resolve_executable()
        if executable is None:
            raise NotInstalledError(name, f'executable not found: {descriptor.executable}')

        current = self.registry.lookup(name)
        if current is not None and current.is_alive():
            raise DuplicateServiceError(name, current.pid)

        handle = self.spawn(descriptor, executable)
        try:
            self.registry.record(name, handle)
        except DuplicateServiceError:
            log.error(f'Service \'{name}\' started concurrently elsewhere - abandoning pid={handle.pid}')
            self.abandon(handle)
            raise

        log.info(f'Started \'{name}\' (pid={handle.pid})')
        if descriptor.ready is None:
            return self.registry.transition(name, State.RUNNING)
        else:
            return self.await_ready(descriptor, handle, deadline)

    def spawn(self, descriptor: ServiceDescriptor, executable: str) -> ProcessHandle:
        """Create the process in a new session with output appended to its log."""
        os.makedirs(os.path.dirname(descriptor.logpath), exist_ok=True)
        if descriptor.ready is not None:
            descriptor.ready.prepare()
        with open(descriptor.logpath, mode='ab') as logfile:
            process = Popen([executable, *descriptor.args], cwd=descriptor.cwd,
                            env={**os.environ, **descriptor.env},
                            stdin=DEVNULL, stdout=logfile, stderr=STDOUT,
                            start_new_session=True, close_fds=True)
        try:
            started = psutil.Process(process.pid).create_time()
        except psutil.NoSuchProcess:
            started = time.time()
        log.debug(f'Spawned {descriptor.command} (pid={process.pid}, cwd={descriptor.cwd})')
        return ProcessHandle(pid=process.pid, started=started, state=State.STARTING, logpath=descriptor.logpath)

    def await_ready(self, descriptor: ServiceDescriptor, handle: ProcessHandle,
                    deadline: Optional[Deadline] = None) -> ProcessHandle:
        """Poll readiness check until it passes or times out."""
        timeout = bounded(descriptor.ready.timeout or self.ready_timeout, deadline)
        log.debug(f'Waiting on \'{descriptor.name}\' for {descriptor.ready} (timeout={timeout:.1f})')
        try:
            ready = wait_for(functools.partial(self.check_ready, descriptor, handle),
                             timeout=timeout, interval=self.interval)
        except ServiceExitedError:
            self.registry.remove(descriptor.name)
            raise
        if not ready:
            raise StartupTimeoutError(descriptor.name, handle.pid, timeout)
        log.info(f'Service \'{descriptor.name}\' is ready')
        return self.registry.transition(descriptor.name, State.RUNNING)

    @staticmethod
    def check_ready(descriptor: ServiceDescriptor, handle: ProcessHandle) -> bool:
        """Readiness predicate that fails fast if the process has died."""
        if not handle.is_alive():
            raise ServiceExitedError(descriptor.name, handle.pid, descriptor.logpath)
        return descriptor.ready()

    @staticmethod
    def abandon(handle: ProcessHandle) -> None:
        """Kill a process that could not be recorded."""
        process = handle.process()
        if process is not None:
            try:
                process.kill()
                process.wait(timeout=5)
            except psutil.NoSuchProcess:
                pass
            except psutil.TimeoutExpired:
                log.critical(f'Kill failed for abandoned process (pid={handle.pid})')
