# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Supervisor facade.

Sequences launcher and terminator calls over one service or "all" of them
and aggregates per-service outcomes. A failure on one service never
prevents attempting the others.
"""


# type annotations
from __future__ import annotations
from typing import List, Dict, Optional, NamedTuple, Iterable

# standard libs
import os
import shutil
import logging
from dataclasses import dataclass, field

# external libs
from cmdkit.config import Configuration, ConfigurationError

# internal libs
from devgrid.core.config import config as default_config, get_supervisor_options, get_deploy_path, get_services
from devgrid.core.platform import default_path, home
from devgrid.supervisor.descriptor import ServiceDescriptor, load_descriptors
from devgrid.supervisor.registry import Registry, State
from devgrid.supervisor.launcher import Launcher
from devgrid.supervisor.terminator import Terminator, StopResult
from devgrid.supervisor.polling import Deadline
from devgrid.supervisor.exceptions import (SupervisorError, UnknownServiceError, DuplicateServiceError,
                                           StopTimeoutError, InstallError)

# public interface
__all__ = ['ALL', 'Outcome', 'Report', 'ServiceStatus', 'Supervisor', ]

# module logger
log = logging.getLogger(__name__)


# Target name meaning every configured service
ALL = 'all'


@dataclass
class Outcome:
    """Result of one action on one service."""

    name: str
    action: str
    status: str
    ok: bool = True
    error: Optional[Exception] = None

    @property
    def message(self) -> str:
        return '' if self.error is None else str(self.error)


@dataclass
class Report:
    """Aggregate outcomes of a batch."""

    outcomes: List[Outcome] = field(default_factory=list)

    def add(self, outcome: Outcome) -> Outcome:
        self.outcomes.append(outcome)
        return outcome

    def extend(self, other: Report) -> None:
        self.outcomes.extend(other.outcomes)

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def failed(self) -> List[Outcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def succeeded(self) -> List[Outcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    def __iter__(self):
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)


class ServiceStatus(NamedTuple):
    """Current state of a service."""
    name: str
    state: State


class Supervisor:
    """Install, start, stop and report on a fixed set of services."""

    descriptors: Dict[str, ServiceDescriptor] = None
    registry: Registry = None
    launcher: Launcher = None
    terminator: Terminator = None
    deploy: Optional[str] = None

    def __init__(self, descriptors: Iterable[ServiceDescriptor], registry: Registry,
                 launcher: Optional[Launcher] = None, terminator: Optional[Terminator] = None,
                 deploy: Optional[str] = None) -> None:
        """Initialize with `descriptors` in the order they should be started."""
        self.descriptors = {}
        for descriptor in descriptors:
            if descriptor.name == ALL:
                raise ConfigurationError(f'Service name \'{ALL}\' is reserved')
            if descriptor.name in self.descriptors:
                raise ConfigurationError(f'Duplicate service name \'{descriptor.name}\'')
            self.descriptors[descriptor.name] = descriptor
        self.registry = registry
        self.launcher = launcher or Launcher(registry)
        self.terminator = terminator or Terminator(registry)
        self.deploy = deploy

    @classmethod
    def from_config(cls, config: Optional[Configuration] = None) -> Supervisor:
        """Build from runtime configuration."""
        config = config or default_config
        options = get_supervisor_options(config)
        deploy = get_deploy_path(config)
        registry = Registry(default_path.services)
        return cls(load_descriptors(get_services(config), deploy=deploy, logdir=default_path.log),
                   registry=registry,
                   launcher=Launcher(registry, interval=options.poll, ready_timeout=options.ready_timeout),
                   terminator=Terminator(registry, timeout=options.stop_timeout, kill_timeout=options.kill_timeout),
                   deploy=deploy)

    @property
    def names(self) -> List[str]:
        """Service names in configured order."""
        return list(self.descriptors)

    def select(self, target: str) -> List[ServiceDescriptor]:
        """Descriptors for `target` (a service name or "all")."""
        if target == ALL:
            return list(self.descriptors.values())
        if target not in self.descriptors:
            raise UnknownServiceError(target)
        return [self.descriptors[target], ]

    def install(self, target: str = ALL) -> Report:
        """Run the installer for each selected service."""
        report = Report()
        for descriptor in self.select(target):
            try:
                if descriptor.installer is not None:
                    descriptor.installer.install(descriptor)
                elif not descriptor.is_installed():
                    raise InstallError(descriptor.name, 'no installer configured')
                report.add(Outcome(descriptor.name, 'install', 'installed'))
            except InstallError as error:
                log.error(str(error))
                report.add(Outcome(descriptor.name, 'install', 'failed', ok=False, error=error))
            except Exception as error:
                wrapped = InstallError(descriptor.name, f'{error.__class__.__name__}: {error}')
                log.error(str(wrapped))
                report.add(Outcome(descriptor.name, 'install', 'failed', ok=False, error=wrapped))
        return report

    def start(self, target: str = ALL, deadline: Optional[float] = None) -> Report:
        """
        Start each selected service in configured order.

        An already running service counts as success, one still starting
        (never became ready) does not. `deadline` (seconds)
        bounds the whole batch.
        """
        deadline = None if deadline is None else Deadline(deadline)
        report = Report()
        for descriptor in self.select(target):
            try:
                handle = self.launcher.start(descriptor, deadline=deadline)
                report.add(Outcome(descriptor.name, 'start', str(handle.state)))
            except DuplicateServiceError as error:
                handle = self.registry.lookup(descriptor.name)
                state = State.RUNNING if handle is None else handle.state
                if state is State.RUNNING:
                    log.info(str(error))
                else:
                    log.error(f'Service \'{descriptor.name}\' (pid={error.pid}) is still {state}')
                report.add(Outcome(descriptor.name, 'start', str(state), ok=state is State.RUNNING, error=error))
            except SupervisorError as error:
                log.error(str(error))
                report.add(Outcome(descriptor.name, 'start', 'failed', ok=False, error=error))
            except OSError as error:
                log.error(f'Failed to start \'{descriptor.name}\': {error}')
                report.add(Outcome(descriptor.name, 'start', 'failed', ok=False, error=error))
        return report

    def stop(self, target: str = ALL, timeout: Optional[float] = None, deadline: Optional[float] = None) -> Report:
        """
        Stop each selected service in reverse configured order.

        Stopping "all" includes registered services no longer in configuration.
        """
        deadline = None if deadline is None else Deadline(deadline)
        if target == ALL:
            names = list(reversed(self.names))
            names += [name for name, _ in self.registry.list() if name not in self.descriptors]
        else:
            names = [descriptor.name for descriptor in self.select(target)]
        report = Report()
        for name in names:
            try:
                result = self.terminator.stop(name, descriptor=self.descriptors.get(name),
                                              timeout=timeout, deadline=deadline)
                if result is StopResult.TIMED_OUT:
                    handle = self.registry.lookup(name)
                    raise StopTimeoutError(name, None if handle is None else handle.pid)
                report.add(Outcome(name, 'stop', str(result)))
            except SupervisorError as error:
                log.error(str(error))
                report.add(Outcome(name, 'stop', 'failed', ok=False, error=error))
            except (OSError, KeyError) as error:
                log.error(f'Failed to stop \'{name}\': {error}')
                report.add(Outcome(name, 'stop', 'failed', ok=False, error=error))
        return report

    def state(self, descriptor: ServiceDescriptor) -> State:
        """Current state (liveness re-checked, nothing modified)."""
        handle = self.registry.lookup(descriptor.name)
        if handle is not None and handle.is_alive():
            return handle.state
        if descriptor.is_installed():
            return State.STOPPED
        return State.UNINSTALLED

    def status(self, target: str = ALL) -> List[ServiceStatus]:
        """State of each selected service."""
        return [ServiceStatus(descriptor.name, self.state(descriptor)) for descriptor in self.select(target)]

    def wipe(self) -> None:
        """Remove and recreate the deploy area."""
        if not self.deploy:
            log.warning('No deploy area configured - nothing to wipe')
            return
        deploy = os.path.abspath(self.deploy)
        if deploy in (os.path.abspath(os.sep), os.path.abspath(home)):
            raise ConfigurationError(f'Refusing to wipe deploy area ({deploy})')
        if os.path.isdir(deploy):
            log.info(f'Wiping deploy area ({deploy})')
            shutil.rmtree(deploy)
        os.makedirs(deploy, exist_ok=True)

    def bootstrap(self, deadline: Optional[float] = None) -> Report:
        """
        Stop all, wipe the deploy area, install all, start all.

        Stops early (without wiping) if any service could not be stopped.
        """
        report = self.stop(ALL, deadline=deadline)
        if not report.ok:
            log.error('Services still running - deploy area left untouched')
            return report
        self.wipe()
        installed = self.install(ALL)
        report.extend(installed)
        for outcome in installed:
            if outcome.ok:
                report.extend(self.start(outcome.name, deadline=deadline))
            else:
                report.add(Outcome(outcome.name, 'start', 'skipped', ok=False, error=outcome.error))
        return report

    def __repr__(self) -> str:
        return f'<Supervisor(services={self.names}, registry={self.registry})>'
