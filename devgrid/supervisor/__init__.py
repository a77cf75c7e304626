# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Declarative supervision of local grid services."""


# internal libs
from .exceptions import (SupervisorError, UnknownServiceError, DuplicateServiceError, NotInstalledError,
                         StartupTimeoutError, ServiceExitedError, StopTimeoutError, InstallError)
from .readiness import ReadyCheck, FileExists, PortListening, LogContains
from .installer import Installer, CommandInstaller
from .descriptor import ServiceDescriptor, load_descriptors
from .registry import State, ProcessHandle, Registry
from .polling import Deadline, wait_for
from .launcher import Launcher
from .terminator import Terminator, StopResult
from .supervisor import ALL, Outcome, Report, ServiceStatus, Supervisor
