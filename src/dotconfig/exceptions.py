# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ConfigTree exceptions."""

from __future__ import annotations


class ConfigTreeError(Exception):
    """Base exception for ConfigTree errors."""

    pass


class ImmutableTreeError(ConfigTreeError, TypeError):
    """Raised when a ConfigTree is written or deleted through subscript access."""

    pass


class DeserializationError(ConfigTreeError, ValueError):
    """Raised when stored ConfigTree state cannot be restored."""

    pass
