# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the grid command-line interface."""


# type annotations
from __future__ import annotations

# external libs
import pytest
from cmdkit.app import exit_status
from cmdkit.config import ConfigurationError

# internal libs
from devgrid.__meta__ import __version__
from devgrid.apps.grid import GridApp
from devgrid.apps.grid.status import format_uptime
from devgrid.supervisor import Supervisor, Registry, Launcher, Terminator, FileExists, State


@pytest.fixture
def grid(registry: Registry, launcher: Launcher, terminator: Terminator,
         make_service, workdir, monkeypatch) -> Supervisor:
    """Supervisor for services A and B used by every command."""
    supervisor = Supervisor([make_service('A'), make_service('B')],
                            registry=registry, launcher=launcher, terminator=terminator, deploy=workdir)
    monkeypatch.setattr(Supervisor, 'from_config', classmethod(lambda cls, config=None: supervisor))
    return supervisor


@pytest.fixture
def broken(registry: Registry, launcher: Launcher, terminator: Terminator,
           make_service, monkeypatch) -> Supervisor:
    """Supervisor where B exits before becoming ready."""
    supervisor = Supervisor([make_service('A'), make_service('B', 'exit', ready=FileExists('/no/such/file'))],
                            registry=registry, launcher=launcher, terminator=terminator)
    monkeypatch.setattr(Supervisor, 'from_config', classmethod(lambda cls, config=None: supervisor))
    return supervisor


@pytest.mark.unit
class TestGridApp:
    """Unit tests for GridApp."""

    def test_usage(self, capsys) -> None:
        assert GridApp.main([]) == exit_status.usage
        assert 'usage: grid' in capsys.readouterr().out

    def test_help(self, capsys) -> None:
        assert GridApp.main(['--help']) == exit_status.success
        out = capsys.readouterr().out
        for command in ('install', 'start', 'stop', 'status', 'bootstrap'):
            assert command in out

    def test_version(self, capsys) -> None:
        assert GridApp.main(['--version']) == exit_status.success
        assert __version__ in capsys.readouterr().out

    def test_unknown_command(self) -> None:
        assert GridApp.main(['restart', 'all']) == exit_status.bad_argument

    def test_start_stop(self, grid: Supervisor, registry: Registry, capsys) -> None:
        assert GridApp.main(['start', 'all']) == exit_status.success
        assert capsys.readouterr().out.splitlines() == ['A start running', 'B start running']
        assert dict(grid.status()) == {'A': State.RUNNING, 'B': State.RUNNING}
        assert GridApp.main(['stop', 'A', '--timeout', '2']) == exit_status.success
        assert capsys.readouterr().out.splitlines() == ['A stop stopped']
        assert GridApp.main(['stop', 'all']) == exit_status.success
        assert capsys.readouterr().out.splitlines() == ['B stop stopped', 'A stop not-running']
        assert registry.list() == []

    def test_start_twice(self, grid: Supervisor) -> None:
        assert GridApp.main(['start', 'A']) == exit_status.success
        assert GridApp.main(['start', 'A']) == exit_status.success

    def test_start_requires_service(self, grid: Supervisor) -> None:
        assert GridApp.main(['start']) == exit_status.usage

    def test_start_failure(self, broken: Supervisor, capsys) -> None:
        assert GridApp.main(['start', 'all', '--deadline', '30']) == exit_status.runtime_error
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == 'A start running'
        assert lines[1].startswith('B start failed: ')

    def test_unknown_service(self, grid: Supervisor) -> None:
        for command in ('install', 'start', 'stop'):
            assert GridApp.main([command, 'nope']) == exit_status.bad_argument

    def test_status_unknown_service(self, grid: Supervisor, capsys) -> None:
        assert GridApp.main(['status', 'nope']) == exit_status.success
        assert capsys.readouterr().out == ''

    def test_bad_option(self, grid: Supervisor) -> None:
        assert GridApp.main(['start', 'all', '--deadline', 'soon']) == exit_status.bad_argument
        assert GridApp.main(['stop', 'all', '--debug', '--verbose']) == exit_status.bad_argument

    def test_status(self, grid: Supervisor, capsys) -> None:
        assert GridApp.main(['start', 'A']) == exit_status.success
        capsys.readouterr()
        assert GridApp.main(['status']) == exit_status.success
        lines = capsys.readouterr().out.splitlines()
        assert [line.split()[:2] for line in lines] == [['A', 'running'], ['B', 'stopped']]
        name, state, pid, uptime, logpath = lines[0].split()
        assert int(pid) == grid.registry.lookup('A').pid
        assert logpath == grid.descriptors['A'].logpath
        name, state, pid, uptime, logpath = lines[1].split()
        assert pid == '-' and uptime == '-'

    def test_status_one(self, grid: Supervisor, capsys) -> None:
        assert GridApp.main(['status', 'B', '--verbose']) == exit_status.success
        assert [line.split()[:2] for line in capsys.readouterr().out.splitlines()] == [['B', 'stopped']]

    def test_install(self, grid: Supervisor, capsys) -> None:
        assert GridApp.main(['install', 'all']) == exit_status.success
        assert capsys.readouterr().out.splitlines() == ['A install installed', 'B install installed']

    def test_bad_config(self, monkeypatch) -> None:

        def from_config(cls, config=None) -> Supervisor:
            raise ConfigurationError('Missing `service.A.argv`')

        monkeypatch.setattr(Supervisor, 'from_config', classmethod(from_config))
        assert GridApp.main(['status']) == exit_status.bad_config

    def test_bootstrap(self, grid: Supervisor, capsys) -> None:
        assert GridApp.main(['start', 'all']) == exit_status.success
        capsys.readouterr()
        assert GridApp.main(['bootstrap', '--deadline', '60']) == exit_status.success
        actions = [line.split()[:2] for line in capsys.readouterr().out.splitlines()]
        assert actions == [['B', 'stop'], ['A', 'stop'], ['A', 'install'], ['B', 'install'],
                           ['A', 'start'], ['B', 'start']]
        assert dict(grid.status()) == {'A': State.RUNNING, 'B': State.RUNNING}


@pytest.mark.unit
@pytest.mark.parametrize('seconds, expected', [(0, '0s'), (7.9, '7s'), (62, '1m02s'), (3840, '1h04m'),
                                               (183600, '2d03h'), (-5, '0s')])
def test_format_uptime(seconds: float, expected: str) -> None:
    assert format_uptime(seconds) == expected
