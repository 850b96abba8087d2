# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""dotconfig - Immutable configuration trees with dot-notation paths.

A lightweight, zero-dependency library for reading, deriving and merging
nested configuration values addressed by paths like 'database.host'.
"""

import logging

__version__ = "0.1.0"

from .exceptions import (
    ConfigTreeError,
    DeserializationError,
    ImmutableTreeError,
)
from .nodes import is_assoc, parse_path, wrap
from .options import CleanPolicy, MergeStrategy
from .store import ConfigTree

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Core classes
    "ConfigTree",
    # Options
    "CleanPolicy",
    "MergeStrategy",
    # Helpers
    "is_assoc",
    "parse_path",
    "wrap",
    # Exceptions
    "ConfigTreeError",
    "DeserializationError",
    "ImmutableTreeError",
]
