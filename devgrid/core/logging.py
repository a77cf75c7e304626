# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Logging configuration."""


# type annotations
from __future__ import annotations
from typing import Dict, Any

# standard libraries
import sys
import uuid
import socket
import logging

# external libs
from cmdkit.app import Application, exit_status
from cmdkit.config import ConfigurationError

# internal libs
from devgrid.core.config import config, blame
from devgrid.core.exceptions import write_traceback

# public interface
__all__ = ['Logger', 'StreamHandler', 'HOSTNAME', 'INSTANCE', 'TRACE', 'cli_setup', ]


# Cached for later use
HOSTNAME = socket.gethostname()


# Unique for every instance of devgrid
INSTANCE = str(uuid.uuid4())


ANSI_RESET = '\033[0m'
ANSI_STYLE: Dict[str, str] = {
    'bold': '\033[1m',
    'faint': '\033[2m',
    'italic': '\033[3m',
    'underline': '\033[4m',
}
ANSI_COLOR: Dict[str, str] = {
    color: f'\033[3{code}m'
    for code, color in enumerate(['black', 'red', 'green', 'yellow', 'blue', 'magenta', 'cyan', 'white'])
}


# Canonical colors for logging messages
level_color: Dict[str, str] = {
    'TRACE': ANSI_COLOR['cyan'],
    'DEBUG': ANSI_COLOR['blue'],
    'INFO': ANSI_COLOR['green'],
    'WARNING': ANSI_COLOR['yellow'],
    'ERROR': ANSI_COLOR['red'],
    'CRITICAL': ANSI_COLOR['magenta'],
}


TRACE: int = logging.DEBUG - 5
logging.addLevelName(TRACE, 'TRACE')


class Logger(logging.Logger):
    """Extend Logger to implement TRACE level."""

    def trace(self, msg: str, *args, **kwargs):
        """Log 'msg % args' with severity 'TRACE'."""
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    @classmethod
    def with_name(cls: Logger, name: str) -> Logger:
        """Shorthand for `log: Logger = logging.getLogger(name)`."""
        return logging.getLogger(name)


# Inject class back into logging library
logging.setLoggerClass(Logger)


class LogRecord(logging.LogRecord):
    """Extends LogRecord to include the hostname and ANSI color codes."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.app_id = INSTANCE
        self.hostname = HOSTNAME
        colored = sys.stderr.isatty()
        self.ansi_level = level_color.get(self.levelname, '') if colored else ''
        self.ansi_reset = ANSI_RESET if colored else ''
        for name, code in ANSI_STYLE.items():
            setattr(self, f'ansi_{name}', code if colored else '')
        for name, code in ANSI_COLOR.items():
            setattr(self, f'ansi_{name}', code if colored else '')


# Inject factory back into logging library
logging.setLogRecordFactory(LogRecord)


class StreamHandler(logging.StreamHandler):
    """A StreamHandler that panics on exceptions in the logging configuration."""

    def handleError(self, record: LogRecord) -> None:
        """Pretty-print message and write traceback to file."""
        err_type, err_val, tb = sys.exc_info()
        write_traceback(err_val, module=__name__)
        sys.exit(exit_status.bad_config)


def level_from_name(name: Any, source: str = 'logging.level') -> int:
    """Get level value from `name`."""
    label = blame(config, *source.split('.'))
    if not isinstance(name, str):
        raise ConfigurationError(f'Expected string for logging level, given \'{name}\' ({label})')
    name = name.upper()
    if name == 'TRACE':
        return TRACE
    elif name in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        return getattr(logging, name)
    else:
        raise ConfigurationError(f'Unsupported logging level \'{name}\' ({label})')


try:
    levelname = config.logging.level
    level = level_from_name(levelname)
except Exception as error:
    write_traceback(error, module=__name__)
    sys.exit(exit_status.bad_config)


try:
    handler = StreamHandler(stream=sys.stderr)
    handler.setFormatter(
        logging.Formatter(config.logging.format,
                          datefmt=config.logging.datefmt)
    )
except Exception as error:
    write_traceback(error, module=__name__)
    sys.exit(exit_status.bad_config)


devgrid_logger = logging.getLogger('devgrid')
grid_logger = logging.getLogger('grid')


devgrid_logger.setLevel(level)
grid_logger.setLevel(level)


devgrid_logger.addHandler(handler)
grid_logger.addHandler(handler)


def cli_setup(app: Application) -> None:
    """Raise logging level for command-line `--debug` or `--verbose` options."""
    if getattr(app, 'debug', False) is True:
        level_override = logging.DEBUG
    elif getattr(app, 'verbose', False) is True:
        level_override = logging.INFO
    else:
        return
    for logger in (devgrid_logger, grid_logger):
        logger.setLevel(min(logger.level, level_override))
