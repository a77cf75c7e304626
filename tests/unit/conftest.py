# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Fixtures for unit tests."""


# type annotations
from __future__ import annotations
from typing import Callable, Iterator

# standard libs
import os
import sys

# external libs
import pytest

# internal libs
from devgrid.supervisor import ServiceDescriptor, Registry, Launcher, Terminator, LogContains


# Service programs (run with the current interpreter)
PROGRAMS = {
    'sleep': 'import time; time.sleep(60)',
    'ready': 'import time; print("ready", flush=True); time.sleep(60)',
    'exit': 'import sys; sys.exit(3)',
    'stubborn': ('import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); '
                 'print("ready", flush=True); time.sleep(60)'),
    'flag': ('import os, time\n'
             'print("ready", flush=True)\n'
             'while not os.path.exists("stop.flag"): time.sleep(0.05)\n'),
    'env': 'import os, time; print(os.environ["GREETING"], flush=True); time.sleep(60)',
}


@pytest.fixture
def workdir(tmp_path) -> str:
    """Service working directory."""
    path = tmp_path / 'deploy'
    path.mkdir()
    return str(path)


@pytest.fixture
def logdir(tmp_path) -> str:
    """Service log directory."""
    path = tmp_path / 'log'
    path.mkdir()
    return str(path)


@pytest.fixture
def registry(tmp_path) -> Iterator[Registry]:
    """Registry in a temporary directory (leftover services killed on teardown)."""
    registry = Registry(str(tmp_path / 'run'))
    yield registry
    for name, handle in registry.list():
        process = handle.process()
        if process is not None and process.pid != os.getpid():
            process.kill()
            process.wait(timeout=5)


@pytest.fixture
def launcher(registry) -> Launcher:
    return Launcher(registry, interval=0.05, ready_timeout=10)


@pytest.fixture
def terminator(registry) -> Terminator:
    return Terminator(registry, timeout=5, kill_timeout=5)


@pytest.fixture
def make_service(workdir, logdir) -> Callable[..., ServiceDescriptor]:
    """
    Factory for descriptors running one of the PROGRAMS.

    With `wait_ready` the service is ready once it prints "ready".
    """

    def factory(name: str, program: str = 'sleep', wait_ready: bool = False, **options) -> ServiceDescriptor:
        logpath = os.path.join(logdir, f'{name}.log')
        params = {'executable': sys.executable, 'args': ('-c', PROGRAMS[program]),
                  'cwd': workdir, 'logpath': logpath}
        if wait_ready:
            params['ready'] = LogContains(logpath, 'ready')
        params.update(options)
        return ServiceDescriptor(name=name, **params)

    return factory
