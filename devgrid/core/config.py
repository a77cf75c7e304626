# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Runtime configuration.

Files:
           /etc/devgrid.toml    System
    ~/.devgrid/config.toml     User
     .devgrid/config.toml      Local

Environment variables (e.g., DEVGRID_LOGGING_LEVEL) take precedence.
"""


# type annotations
from __future__ import annotations
from typing import Optional, Protocol

# standard libs
import os
import sys
import logging
import functools

# external libs
from cmdkit.app import exit_status
from cmdkit.config import Namespace, Environ, Configuration, ConfigurationError

# internal libs
from devgrid.core.platform import path, default_path
from devgrid.core.exceptions import write_traceback

# public interface
__all__ = ['config', 'default', 'ConfigurationError', 'Namespace', 'blame',
           'load', 'load_file', 'reload_file', 'load_env', 'reload_env',
           'get_supervisor_options', 'get_deploy_path', 'get_services',
           'DEFAULT_LOGGING_STYLE', 'LOGGING_STYLES', ]

# partial logging (not yet configured - initialized afterward)
log = logging.getLogger(__name__)


DEFAULT_LOGGING_STYLE = 'default'
LOGGING_STYLES = {
    'default': {
        'datefmt': '%Y-%m-%d %H:%M:%S',
        'format': ('%(ansi_bold)s%(ansi_level)s%(levelname)8s%(ansi_reset)s %(ansi_faint)s[%(name)s]%(ansi_reset)s'
                   ' %(message)s'),
    },
    'system': {
        'datefmt': '%Y-%m-%d %H:%M:%S',
        'format': '%(asctime)s.%(msecs)03d %(hostname)s %(levelname)8s [%(app_id)s] [%(name)s] %(message)s',
    },
    'detailed': {
        'datefmt': '%Y-%m-%d %H:%M:%S',
        'format': ('%(ansi_faint)s%(asctime)s.%(msecs)03d %(hostname)s %(ansi_reset)s'
                   '%(ansi_level)s%(ansi_bold)s%(levelname)8s%(ansi_reset)s '
                   '%(ansi_faint)s[%(name)s]%(ansi_reset)s %(message)s'),
    }
}


# Environment variables and configuration files are automatically merged with defaults
default = Namespace({

    'logging': {
        'level': 'warning',
        # NOTE: If a 'style' is defined than other parameters can be overridden
        'style': DEFAULT_LOGGING_STYLE,
        **LOGGING_STYLES.get(DEFAULT_LOGGING_STYLE),
    },

    'supervisor': {
        'poll': 0.25,          # Seconds between liveness and readiness checks
        'stop_timeout': 10,    # Seconds to wait on graceful stop before hard kill
        'kill_timeout': 5,     # Seconds to wait for exit after hard kill
        'ready_timeout': 60,   # Seconds to wait for readiness if not set by service
    },

    'deploy': {
        'path': default_path.deploy,
    },

    # NOTE: Each [service.<name>] table defines one managed service
    'service': {},
})


def reload_file(filepath: str) -> Namespace:
    """Force reloading configuration file."""
    if not os.path.exists(filepath):
        return Namespace({})
    try:
        return Namespace.from_toml(filepath)
    except Exception as err:
        raise ConfigurationError(f'(from file: {filepath}) {err.__class__.__name__}: {err}')


@functools.lru_cache(maxsize=None)
def load_file(filepath: str) -> Namespace:
    """Load configuration file."""
    return reload_file(filepath)


def reload_env() -> Environ:
    """Force reloading environment variables and expanding hierarchy as namespace."""
    return Environ(prefix='DEVGRID').expand()


@functools.lru_cache(maxsize=None)
def load_env() -> Environ:
    """Load environment variables and expand hierarchy as namespace."""
    return reload_env()


def partial_load(**preload: Namespace) -> Configuration:
    """Load configuration from files and merge environment variables."""
    return Configuration(**{
        'default': default, **preload,
        'system': load_file(path.system.config),
        'user': load_file(path.user.config),
        'local': load_file(path.local.config),
        'env': load_env(),
    })


def blame(base: Configuration, *varpath: str) -> Optional[str]:
    """Construct filename or variable assignment string based on precedent of `varpath`."""
    source = base.which(*varpath)
    if not source:
        return None
    if source in ('system', 'user', 'local'):
        return f'from: {path.get(source).config}'
    elif source == 'env':
        return 'from: DEVGRID_' + '_'.join([node.upper() for node in varpath])
    else:
        return f'from: <{source}>'


def get_logging_style(base: Configuration) -> str:
    """Get and check valid on `config.logging.style`."""
    style = base.logging.style
    label = blame(base, 'logging', 'style')
    if not isinstance(style, str):
        raise ConfigurationError(f'Expected string for `logging.style` ({label})')
    style = style.lower()
    if style in LOGGING_STYLES:
        return style
    else:
        raise ConfigurationError(f'Unrecognized `logging.style` \'{style}\' ({label})')


def get_supervisor_options(base: Configuration) -> Namespace:
    """Get and check `[supervisor]` timing options are positive numbers."""
    options = Namespace()
    for key in default.supervisor:
        value = base.supervisor.get(key)
        label = blame(base, 'supervisor', key)
        try:
            options[key] = float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f'Expected number for `supervisor.{key}`, given \'{value}\' ({label})')
        if options[key] <= 0:
            raise ConfigurationError(f'Expected positive value for `supervisor.{key}`, given {value} ({label})')
    return options


def get_deploy_path(base: Configuration) -> str:
    """Get and check `deploy.path` (expanded to an absolute path)."""
    deploy = base.deploy.path
    if not isinstance(deploy, str) or not deploy:
        raise ConfigurationError(f'Expected path for `deploy.path` ({blame(base, "deploy", "path")})')
    return os.path.abspath(os.path.expanduser(deploy))


def get_services(base: Configuration) -> Namespace:
    """Get `[service.<name>]` tables in configured order."""
    services = base.service
    if not isinstance(services, dict):
        raise ConfigurationError(f'Expected table for `service` ({blame(base, "service")})')
    return services


def build_preloads(base: Configuration) -> Namespace:
    """Build 'preload' namespace from base configuration."""
    return Namespace({'logging': LOGGING_STYLES.get(get_logging_style(base))})


class LoaderImpl(Protocol):
    """Loader interface for building configuration."""
    def __call__(self: LoaderImpl, **preloads: Namespace) -> Configuration: ...


def build_configuration(loader: LoaderImpl) -> Configuration:
    """Construct full configuration."""
    return loader(preload=build_preloads(base=loader()))


def load() -> Configuration:
    """Load configuration from files and merge environment variables."""
    return build_configuration(loader=partial_load)


try:
    config = load()
except Exception as error:
    write_traceback(error, module=__name__)
    sys.exit(exit_status.bad_config)
