# SPDX-FileCopyrightText: 2025-present The Binger Authors
#
# SPDX-License-Identifier: MIT
__version__ = "0.1.0"
