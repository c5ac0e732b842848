"""
In-memory permissions resolver for development and testing.
"""

import logging
from collections import Counter
from typing import Dict, Mapping, Optional

from ..core.types import PermissionFields
from .base import PermissionsResolver


logger = logging.getLogger(__name__)


class MemoryPermissionsResolver(PermissionsResolver):
    """
    Dictionary-backed resolver.

    Keeps a per-id call counter so callers can verify how often the store was
    actually hit.
    """

    def __init__(self, documents: Optional[Mapping[str, PermissionFields]] = None):
        self._documents: Dict[str, PermissionFields] = dict(documents or {})
        self.calls: Counter = Counter()

    async def resolve(self, resource_id: str) -> Optional[PermissionFields]:
        """Return the stored fields for a document."""
        self.calls[resource_id] += 1
        return self._documents.get(resource_id)

    def add(self, resource_id: str, fields: PermissionFields) -> None:
        """Store (or replace) the fields of a document."""
        self._documents[resource_id] = fields
        logger.debug(f"Stored permissions for document {resource_id}")

    def remove(self, resource_id: str) -> bool:
        """Remove a document."""
        return self._documents.pop(resource_id, None) is not None

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())
