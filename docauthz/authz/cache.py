"""
Per-context cache of permission documents.

Every document id is resolved at most once per evaluation context. Concurrent
lookups of the same id share the single in-flight fetch.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, Union

from ..core.types import PermissionFields
from ..errors import ResolverError
from ..resolver.base import PermissionsResolver


logger = logging.getLogger(__name__)

T = TypeVar('T')

ResolverLike = Union[PermissionsResolver, Callable[[str], Any]]


class _FetchAbandoned(Exception):
    """The task owning an in-flight fetch was cancelled."""


class LookupCache:
    """
    Memoizes resolver results within a single evaluation context.

    Entries are write-once: once a document (or its absence) has been cached it
    is returned verbatim for the rest of the context's lifetime. A failed or
    cancelled fetch commits nothing, so a later lookup tries again.
    """

    def __init__(self, resolver: ResolverLike):
        self._resolve_fn = resolver.resolve if hasattr(resolver, 'resolve') else resolver
        self._entries: Dict[str, Optional[PermissionFields]] = {}
        self._pending: Dict[str, asyncio.Future] = {}
        self._derived: Dict[Tuple[str, str], Any] = {}
        self.hits = 0
        self.misses = 0

    async def fields_for(self, resource_id: str) -> Optional[PermissionFields]:
        """
        Return the permission fields of a document.

        Args:
            resource_id: Opaque document id

        Returns:
            The stored fields, or None if the resolver has no such document

        Raises:
            ResolverError: If the resolver failed
        """
        while True:
            if resource_id in self._entries:
                self.hits += 1
                return self._entries[resource_id]

            pending = self._pending.get(resource_id)
            if pending is None:
                return await self._fetch(resource_id)

            try:
                # Shielded so a cancelled waiter does not cancel the shared fetch
                fields = await asyncio.shield(pending)
            except _FetchAbandoned:
                continue
            self.hits += 1
            return fields

    async def _fetch(self, resource_id: str) -> Optional[PermissionFields]:
        future = asyncio.get_running_loop().create_future()
        self._pending[resource_id] = future
        self.misses += 1
        logger.debug(f"Resolving permissions for document {resource_id}")

        try:
            result = self._resolve_fn(resource_id)
            if inspect.isawaitable(result):
                result = await result
        except ResolverError as e:
            self._abandon(resource_id, future, e)
            raise
        except Exception as e:
            logger.error(f"Permissions resolver failed for document {resource_id}: {e}")
            error = ResolverError(
                f"Could not resolve permissions for document {resource_id}",
                resource_id=resource_id,
                cause=e,
            )
            self._abandon(resource_id, future, error)
            raise error from e
        except BaseException:
            # Cancellation, KeyboardInterrupt, SystemExit: waiters retry the fetch
            self._abandon(resource_id, future, _FetchAbandoned(resource_id))
            raise

        del self._pending[resource_id]
        self._entries[resource_id] = result
        future.set_result(result)
        if result is None:
            logger.debug(f"Document {resource_id} not found")
        return result

    def _abandon(self, resource_id: str, future: asyncio.Future, error: BaseException) -> None:
        self._pending.pop(resource_id, None)
        future.set_exception(error)
        # Marks the exception retrieved when nobody is waiting on it
        future.exception()

    def put(self, resource_id: str, fields: Optional[PermissionFields]) -> None:
        """
        Seed the cache with an already-loaded document.

        Raises:
            ValueError: If the id is already cached or being fetched
        """
        if not self.seed(resource_id, fields):
            raise ValueError(f"Permissions for document {resource_id} are already cached")

    def seed(self, resource_id: str, fields: Optional[PermissionFields]) -> bool:
        """Cache an already-loaded document unless the id is cached or being fetched."""
        if resource_id in self._entries or resource_id in self._pending:
            return False
        self._entries[resource_id] = fields
        logger.debug(f"Seeded permissions for document {resource_id}")
        return True

    def peek(self, resource_id: str) -> Optional[PermissionFields]:
        """Return a cached document without fetching it."""
        return self._entries.get(resource_id)

    def derived(self, resource_id: str, name: str, compute: Callable[[], T]) -> T:
        """Memoize a value computed purely from a cached document."""
        key = (resource_id, name)
        if key not in self._derived:
            self._derived[key] = compute()
        return self._derived[key]

    def stats(self) -> Dict[str, int]:
        return {
            'entries': len(self._entries),
            'pending': len(self._pending),
            'hits': self.hits,
            'misses': self.misses,
        }

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
