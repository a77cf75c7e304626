# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Stop services with confirmation of exit.

Termination escalates from a graceful step (the service's own stop command,
or SIGTERM) to SIGKILL. The registry record is removed only once every
process in the service's tree is confirmed gone.
"""


# type annotations
from __future__ import annotations
from typing import List, Optional

# standard libs
import os
import enum
import logging
import subprocess

# external libs
import psutil

# internal libs
from devgrid.supervisor.descriptor import ServiceDescriptor
from devgrid.supervisor.registry import Registry, State
from devgrid.supervisor.polling import Deadline, bounded

# public interface
__all__ = ['StopResult', 'Terminator', ]

# module logger
log = logging.getLogger(__name__)


class StopResult(enum.Enum):
    """Outcome of a stop request."""
    STOPPED = 'stopped'
    TIMED_OUT = 'timed-out'
    NOT_RUNNING = 'not-running'

    def __str__(self) -> str:
        return self.value


class Terminator:
    """Stop recorded services."""

    registry: Registry = None
    timeout: float = 10
    kill_timeout: float = 5

    def __init__(self, registry: Registry, timeout: float = timeout, kill_timeout: float = kill_timeout) -> None:
        self.registry = registry
        self.timeout = float(timeout)
        self.kill_timeout = float(kill_timeout)

    def stop(self, name: str, descriptor: Optional[ServiceDescriptor] = None,
             timeout: Optional[float] = None, deadline: Optional[Deadline] = None) -> StopResult:
        """
        Stop service `name`.

        The graceful step gets `timeout` seconds (or the descriptor's, or the default)
        before escalating to SIGKILL. If `deadline` cuts the graceful step short,
        the result is TIMED_OUT without escalation and the record keeps its last
        observed state.
        """
        handle = self.registry.lookup(name)
        if handle is None:
            log.debug(f'Service \'{name}\' not running')
            return StopResult.NOT_RUNNING

        process = handle.process()
        if process is None:
            log.warning(f'Service \'{name}\' (pid={handle.pid}) already exited - removing stale record')
            self.registry.remove(name)
            return StopResult.NOT_RUNNING

        self.registry.transition(name, State.STOPPING)
        processes = self.collect(process)
        grace = self.grace(descriptor, timeout)
        window = Deadline(grace)
        cutoff = deadline is not None and deadline.remaining < grace

        log.info(f'Stopping \'{name}\' (pid={handle.pid})')
        if descriptor is not None and descriptor.stop:
            if not self.run_stop_command(descriptor, bounded(window.remaining, deadline)):
                self.terminate(processes)
        else:
            self.terminate(processes)

        gone, alive = psutil.wait_procs(processes, timeout=bounded(window.remaining, deadline))
        if alive:
            if cutoff:
                log.error(f'Deadline reached stopping \'{name}\' (pid={handle.pid})')
                return StopResult.TIMED_OUT
            log.error(f'Interrupt failed for \'{name}\' (pid={handle.pid}) - killing now')
            self.kill(alive)
            gone, alive = psutil.wait_procs(alive, timeout=bounded(self.kill_timeout, deadline))
        if alive:
            log.critical(f'Kill failed for \'{name}\' (pid={handle.pid}): '
                         f'{len(alive)} process(es) remain')
            return StopResult.TIMED_OUT

        self.registry.remove(name)
        log.info(f'Stopped \'{name}\'')
        return StopResult.STOPPED

    def grace(self, descriptor: Optional[ServiceDescriptor], timeout: Optional[float]) -> float:
        """Seconds allowed for the graceful step (explicit, then per-service, then default)."""
        if timeout is not None:
            return float(timeout)
        if descriptor is not None and descriptor.timeout is not None:
            return float(descriptor.timeout)
        return self.timeout

    @staticmethod
    def collect(process: psutil.Process) -> List[psutil.Process]:
        """The process and all of its descendants."""
        try:
            return [process, *process.children(recursive=True)]
        except psutil.NoSuchProcess:
            return [process]

    @staticmethod
    def terminate(processes: List[psutil.Process]) -> None:
        """Send SIGTERM to all `processes`."""
        for process in processes:
            try:
                log.debug(f'Sending SIGTERM (pid={process.pid})')
                process.terminate()
            except psutil.NoSuchProcess:
                log.debug(f'Process already exited (pid={process.pid})')

    @staticmethod
    def kill(processes: List[psutil.Process]) -> None:
        """Send SIGKILL to all `processes`."""
        for process in processes:
            try:
                log.warning(f'Sending SIGKILL (pid={process.pid})')
                process.kill()
            except psutil.NoSuchProcess:
                log.debug(f'Process already exited (pid={process.pid})')

    @staticmethod
    def run_stop_command(descriptor: ServiceDescriptor, timeout: float) -> bool:
        """Run the service's own stop command, True if it succeeded."""
        log.debug(f'Running stop command for \'{descriptor.name}\': {list(descriptor.stop)}')
        try:
            with open(descriptor.logpath, mode='ab') as logfile:
                subprocess.run(list(descriptor.stop), cwd=descriptor.cwd,
                               env={**os.environ, **descriptor.env},
                               stdin=subprocess.DEVNULL, stdout=logfile, stderr=subprocess.STDOUT,
                               timeout=timeout, check=True)
            return True
        except (OSError, subprocess.SubprocessError) as error:
            log.warning(f'Stop command failed for \'{descriptor.name}\' '
                        f'({error.__class__.__name__}: {error}) - sending SIGTERM')
            return False
