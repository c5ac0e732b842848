"""
Permissions resolver interface.

The resolver is the document store seam: it maps a resource id to the stored
permission fields of that document, or None when there is no such document.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..core.types import PermissionFields


class PermissionsResolver(ABC):
    """
    Base class for permission document lookups.

    Implementations may be synchronous or asynchronous; the lookup cache awaits
    the result of ``resolve`` when it is awaitable. Any failure other than
    "not found" must be raised, never reported as None.
    """

    @abstractmethod
    def resolve(self, resource_id: str) -> Optional[PermissionFields]:
        """
        Look up the permission fields of a document.

        Args:
            resource_id: Opaque document id

        Returns:
            The stored fields, or None if the document does not exist
        """
        pass
