# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Runtime files and folders.

Each site (system, user, local) has the same layout under its own prefix.
The registry of running services lives under `run/services` and each
service's output goes to `log/<name>.log`.
"""


# standard libs
import os

# external libs
from cmdkit.config import Namespace

# public interface
__all__ = ['cwd', 'home', 'root', 'site', 'path', 'default_path', 'layout', ]


cwd = os.getcwd()
home = os.path.expanduser('~')
root = os.getuid() == 0
site = 'system' if root else 'user'


def layout(prefix: str, config: str) -> Namespace:
    """Site directories under `prefix` with `config` file."""
    return Namespace({
        'lib': os.path.join(prefix, 'lib'),
        'log': os.path.join(prefix, 'log'),
        'run': os.path.join(prefix, 'run'),
        'services': os.path.join(prefix, 'run', 'services'),
        'deploy': os.path.join(prefix, 'deploy'),
        'config': config,
    })


path = Namespace({
    'system': {**layout('/var/lib/devgrid', '/etc/devgrid.toml'),
               'lib': '/var/lib/devgrid',
               'log': '/var/log/devgrid',
               'run': '/var/run/devgrid',
               'services': '/var/run/devgrid/services'},
    'user': layout(os.path.join(home, '.devgrid'), os.path.join(home, '.devgrid', 'config.toml')),
    'local': layout(os.path.join(cwd, '.devgrid'), os.path.join(cwd, '.devgrid', 'config.toml')),
})


# Automatically initialize default site directories
default_path = path.get(site)
for folder in ('lib', 'log', 'run'):
    os.makedirs(default_path.get(folder), exist_ok=True)
