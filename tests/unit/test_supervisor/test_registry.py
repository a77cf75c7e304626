# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the process registry."""


# standard libs
import os
import time
import subprocess

# external libs
import pytest
import psutil
from hypothesis import given, strategies as st

# internal libs
from devgrid.supervisor.registry import Registry, ProcessHandle, State
from devgrid.supervisor.exceptions import DuplicateServiceError


def current() -> ProcessHandle:
    """Handle for this (live) test process."""
    return ProcessHandle(pid=os.getpid(), started=psutil.Process().create_time(), state=State.RUNNING)


def dead() -> ProcessHandle:
    """Handle for a process that has already exited."""
    process = subprocess.Popen(['true'])
    started = psutil.Process(process.pid).create_time()
    process.wait()
    return ProcessHandle(pid=process.pid, started=started, state=State.RUNNING)


@pytest.mark.unit
class TestProcessHandle:
    """Unit tests for ProcessHandle."""

    def test_alive(self) -> None:
        assert current().is_alive()

    def test_dead(self) -> None:
        assert not dead().is_alive()

    def test_pid_reuse(self) -> None:
        handle = current()
        handle.started -= 3600
        assert not handle.is_alive()

    def test_zombie(self) -> None:
        process = subprocess.Popen(['true'])
        handle = ProcessHandle(pid=process.pid, started=psutil.Process(process.pid).create_time())
        time.sleep(0.2)  # exited but not yet reaped
        assert not handle.is_alive()
        process.wait()

    @given(pid=st.integers(min_value=1, max_value=2**22), started=st.floats(min_value=0, max_value=2e9),
           state=st.sampled_from(State), logpath=st.one_of(st.none(), st.text(min_size=1)))
    def test_dict(self, pid: int, started: float, state: State, logpath: str) -> None:
        handle = ProcessHandle(pid=pid, started=started, state=state, logpath=logpath)
        assert ProcessHandle.from_dict(handle.to_dict()) == handle


@pytest.mark.unit
class TestRegistry:
    """Unit tests for Registry."""

    def test_empty(self, registry: Registry) -> None:
        assert registry.lookup('broker') is None
        assert registry.list() == []

    def test_record_and_lookup(self, registry: Registry) -> None:
        handle = current()
        registry.record('broker', handle)
        assert registry.lookup('broker') == handle
        assert os.path.exists(registry.filepath('broker'))

    def test_record_is_toml(self, registry: Registry) -> None:
        registry.record('broker', current())
        with open(registry.filepath('broker'), mode='r') as stream:
            content = stream.read()
        assert 'name = "broker"' in content
        assert f'pid = {os.getpid()}' in content
        assert 'state = "running"' in content

    def test_duplicate(self, registry: Registry) -> None:
        registry.record('broker', current())
        with pytest.raises(DuplicateServiceError) as exc_info:
            registry.record('broker', current())
        assert exc_info.value.name == 'broker'
        assert exc_info.value.pid == os.getpid()
        assert len(registry.list()) == 1

    def test_replace_stale(self, registry: Registry) -> None:
        registry.record('broker', dead())
        handle = current()
        registry.record('broker', handle)
        assert registry.lookup('broker') == handle

    def test_lookup_returns_stale(self, registry: Registry) -> None:
        handle = dead()
        registry.record('broker', handle)
        assert registry.lookup('broker') == handle
        assert not registry.lookup('broker').is_alive()

    def test_transition(self, registry: Registry) -> None:
        registry.record('broker', ProcessHandle(pid=os.getpid(), started=psutil.Process().create_time()))
        assert registry.lookup('broker').state is State.STARTING
        assert registry.transition('broker', State.RUNNING).state is State.RUNNING
        assert registry.lookup('broker').state is State.RUNNING

    def test_transition_missing(self, registry: Registry) -> None:
        with pytest.raises(KeyError):
            registry.transition('broker', State.RUNNING)

    def test_remove_idempotent(self, registry: Registry) -> None:
        registry.record('broker', current())
        registry.remove('broker')
        registry.remove('broker')
        assert registry.lookup('broker') is None

    def test_list_sorted(self, registry: Registry) -> None:
        for name in ('worker', 'api', 'db'):
            registry.record(name, dead())
        assert [name for name, _ in registry.list()] == ['api', 'db', 'worker']

    def test_unreadable_record(self, registry: Registry) -> None:
        with open(registry.filepath('broker'), mode='w') as stream:
            stream.write('this is not [ toml')
        assert registry.lookup('broker') is None
        assert registry.list() == []

    def test_shared_between_instances(self, registry: Registry) -> None:
        registry.record('broker', current())
        assert Registry(registry.path).lookup('broker') == registry.lookup('broker')
