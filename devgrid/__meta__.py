# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Package metadata for devgrid."""


__appname__     = 'devgrid'
__version__     = '0.3.0'
__authors__     = ['DevGrid Developers <devgrid@users.noreply.github.com>', ]
__developer__   = 'DevGrid Developers'
__contact__     = 'devgrid@users.noreply.github.com'
__license__     = 'Apache License 2.0'
__website__     = 'https://github.com/devgrid/devgrid'
__copyright__   = 'DevGrid Developers 2024-2026'
__description__ = 'Install, start, stop and inspect the services of a local development grid.'
__keywords__    = 'development grid service supervisor process pidfile'
__ascii_art__   = r"""
       __                     _     __
  ____/ /__ _   ______ _____(_)___/ /
 / __  / _ \ | / / __ `/ ___/ / __  /
/ /_/ /  __/ |/ / /_/ / /  / / /_/ /
\__,_/\___/|___/\__, /_/  /_/\__,_/
               /____/
"""
