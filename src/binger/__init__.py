# SPDX-FileCopyrightText: 2025-present The Binger Authors
#
# SPDX-License-Identifier: MIT

"""Binger - Personal movie and TV show tracker."""

from binger.__about__ import __version__

__all__ = ["__version__"]
