"""
Package resolver implements permission document lookups for docauthz.
"""

from .base import PermissionsResolver
from .memory import MemoryPermissionsResolver
from .file import FilePermissionsResolver

__all__ = [
    'PermissionsResolver',
    'MemoryPermissionsResolver',
    'FilePermissionsResolver',
]
