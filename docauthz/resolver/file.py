"""
File-based permissions resolver.

Each document is stored as ``<storage_dir>/<resource_id>.json``.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import aiofiles

from ..core.types import PermissionFields
from ..errors import ResolverError
from .base import PermissionsResolver


logger = logging.getLogger(__name__)


class FilePermissionsResolver(PermissionsResolver):
    """Resolve permission fields from JSON files on disk."""

    def __init__(self, storage_dir: str = "./permissions"):
        self.storage_dir = Path(storage_dir)

    def _get_document_path(self, resource_id: str) -> Optional[Path]:
        """Get the file path for a document, or None for ids that are not plain names."""
        if not resource_id or resource_id in (".", "..") or "/" in resource_id or "\\" in resource_id:
            return None
        return self.storage_dir / f"{resource_id}.json"

    async def resolve(self, resource_id: str) -> Optional[PermissionFields]:
        """Load permission fields from file."""
        document_path = self._get_document_path(resource_id)

        if document_path is None or not document_path.exists():
            return None

        try:
            async with aiofiles.open(document_path, 'r', encoding='utf-8') as f:
                data = json.loads(await f.read())
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load permissions for {resource_id}: {e}")
            raise ResolverError(
                f"Could not read permissions document {resource_id}",
                resource_id=resource_id,
                cause=e,
            ) from e

        if not isinstance(data, dict):
            # Wrong shape is recovered downstream as empty lists
            logger.warning(f"Permissions document {resource_id} is not an object")
            return {}
        return data

    async def save(self, resource_id: str, fields: PermissionFields) -> None:
        """Write permission fields to file."""
        document_path = self._get_document_path(resource_id)
        if document_path is None:
            raise ValueError(f"Invalid document id: {resource_id!r}")

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(document_path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(dict(fields), indent=2))
