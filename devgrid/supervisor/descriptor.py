# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Service descriptors."""


# type annotations
from __future__ import annotations
from typing import List, Tuple, Dict, Mapping, Optional, Any

# standard libs
import os
import shlex
import shutil
from dataclasses import dataclass, field

# external libs
from cmdkit.config import ConfigurationError

# internal libs
from devgrid.core.platform import default_path
from devgrid.supervisor.readiness import ReadyCheck
from devgrid.supervisor.installer import Installer, CommandInstaller

# public interface
__all__ = ['ServiceDescriptor', 'load_descriptors', ]


@dataclass(frozen=True)
class ServiceDescriptor:
    """Static metadata for one managed service."""

    name: str
    executable: str
    args: Tuple[str, ...] = ()
    cwd: str = os.getcwd()
    logpath: str = None
    env: Dict[str, str] = field(default_factory=dict)
    ready: Optional[ReadyCheck] = None
    stop: Optional[Tuple[str, ...]] = None
    timeout: Optional[float] = None
    creates: Optional[str] = None
    installer: Optional[Installer] = None

    def __post_init__(self) -> None:
        """Default log destination by service name."""
        if self.logpath is None:
            object.__setattr__(self, 'logpath', os.path.join(default_path.log, f'{self.name}.log'))

    @property
    def command(self) -> List[str]:
        """Full argument vector."""
        return [self.executable, *self.args]

    def resolve_executable(self) -> Optional[str]:
        """
        Absolute path to a runnable executable, or None.

        Paths containing a separator are taken relative to `cwd`,
        bare names are searched for on PATH.
        """
        if os.sep in self.executable:
            path = os.path.join(self.cwd, os.path.expanduser(self.executable))
            return path if os.path.isfile(path) and os.access(path, os.X_OK) else None
        else:
            return shutil.which(self.executable, path=self.env.get('PATH', os.getenv('PATH')))

    def is_installed(self) -> bool:
        """Check marker file (if configured), working directory, and executable."""
        if self.creates is not None:
            return os.path.exists(os.path.join(self.cwd, self.creates))
        return os.path.isdir(self.cwd) and self.resolve_executable() is not None

    @classmethod
    def from_config(cls, name: str, params: Mapping[str, Any], deploy: str, logdir: str) -> ServiceDescriptor:
        """Build from a `[service.<name>]` configuration table."""
        label = f'service.{name}'
        if not isinstance(params, Mapping):
            raise ConfigurationError(f'Expected table for `{label}`')
        unknown = set(params) - {'argv', 'cwd', 'log', 'env', 'ready', 'stop', 'timeout', 'creates', 'install'}
        if unknown:
            raise ConfigurationError(f'Unexpected field(s) for `{label}`: {", ".join(sorted(unknown))}')
        if 'argv' not in params:
            raise ConfigurationError(f'Missing `{label}.argv`')
        argv = _split(params['argv'], f'{label}.argv')
        if not argv:
            raise ConfigurationError(f'Empty `{label}.argv`')
        cwd = os.path.expanduser(params.get('cwd', os.path.join(deploy, name)))
        logpath = os.path.expanduser(params.get('log', os.path.join(logdir, f'{name}.log')))
        env = {str(key): str(value) for key, value in dict(params.get('env', {})).items()}
        ready = None
        if 'ready' in params:
            try:
                ready = ReadyCheck.from_config(params['ready'], cwd=cwd, logpath=logpath)
            except ConfigurationError as error:
                raise ConfigurationError(f'{error} for `{label}.ready`') from error
        stop = None if 'stop' not in params else tuple(_split(params['stop'], f'{label}.stop'))
        installer = None
        if 'install' in params:
            installer = CommandInstaller(_split(params['install'], f'{label}.install'), deploy)
        return cls(name=name, executable=argv[0], args=tuple(argv[1:]), cwd=cwd, logpath=logpath,
                   env=env, ready=ready, stop=stop, installer=installer, creates=params.get('creates'),
                   timeout=None if 'timeout' not in params else float(params['timeout']))


def _split(value: Any, label: str) -> List[str]:
    """Accept either a command string or a list of arguments."""
    if isinstance(value, str):
        return shlex.split(value)
    if isinstance(value, (list, tuple)):
        return [str(arg) for arg in value]
    raise ConfigurationError(f'Expected string or list for `{label}`')


def load_descriptors(services: Mapping[str, Any], deploy: str, logdir: str) -> List[ServiceDescriptor]:
    """Build descriptors in configured order from the `[service]` section."""
    return [ServiceDescriptor.from_config(name, params, deploy=deploy, logdir=logdir)
            for name, params in services.items()]
