# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""
Local development grid supervisor.

This package installs, starts, stops and reports on the named external
services that make up a local development grid.
"""


# standard libs
import sys

# external libs
from rich.traceback import install as enable_rich_tracebacks

# internal libs
from .__meta__ import (__appname__, __version__, __authors__, __developer__, __contact__,
                       __license__, __website__, __copyright__, __description__,
                       __keywords__, __ascii_art__)

# NOTE: forced import triggers configuration and logging setup
from .core.config import config
from .core import logging

# public interface
__all__ = ['__appname__', '__version__', '__authors__', '__developer__', '__contact__',
           '__license__', '__website__', '__copyright__', '__description__',
           '__keywords__', '__ascii_art__', ]


# Enable rich tracebacks for interactive shells
if sys.stdout.isatty() and hasattr(sys, 'ps1'):
    enable_rich_tracebacks()
