# SPDX-FileCopyrightText: 2026 DevGrid Developers
# SPDX-License-Identifier: Apache-2.0

"""Command-line applications."""
