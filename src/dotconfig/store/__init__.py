# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""ConfigTree package - Immutable dot-notation configuration store.

The package is organized into:
- core: Main ConfigTree class with path traversal, access, derivation
  and serialization
- merging: Recursive merge of containers with REPLACE/KEEP/APPEND strategies

Example:
    >>> from dotconfig import ConfigTree
    >>> config = ConfigTree().with_('app.name', 'MyApp')
    >>> config['app.name']
    'MyApp'
"""

from .core import ConfigTree
from .merging import merge_containers

__all__ = ["ConfigTree", "merge_containers"]
