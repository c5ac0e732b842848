"""
Read and discover decisions for a (subject, document) pair.
"""

from collections.abc import Iterable, Mapping
from typing import Any, FrozenSet, List, Optional

from ..core.config import FieldConfig
from ..core.types import PermissionFields, Subject
from .cache import LookupCache
from .groups import GroupResolver
from .tracing import (
    Tracer, DECISION, DISCOVER_GROUPS, DISCOVER_USERS, READ_GROUPS, READ_USERS, USER_GROUPS
)


def coerce_list(value: Any) -> List[str]:
    """
    Coerce a stored permission value to a list of strings.

    A single string becomes a one-element list; anything that is not a list of
    strings contributes nothing, so malformed data can only deny access.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (Mapping, bytes)) or not isinstance(value, Iterable):
        return []
    return [v for v in value if isinstance(v, str)]


class PermissionEvaluator:
    """
    Decision core.

    Read implies discover, so the discover lists of a document are always the
    union of its discover and read lists. A missing document denies both.

    ``fields`` is the field-name mapping. The class-level default can be
    replaced per evaluator at construction and is never changed afterwards.
    """

    fields: FieldConfig = FieldConfig()

    def __init__(
        self,
        cache: LookupCache,
        groups: GroupResolver,
        fields: Optional[FieldConfig] = None,
        tracer: Optional[Tracer] = None,
    ):
        self.cache = cache
        self.groups = groups
        if fields is not None:
            fields.validate()
            self.fields = fields
        self.tracer = tracer

    def _trace(self, event: str, **details: Any) -> None:
        if self.tracer is not None:
            self.tracer(event, **details)

    def _list(self, resource_id: str, doc: Optional[PermissionFields], field_name: str) -> FrozenSet[str]:
        if not isinstance(doc, Mapping):
            return frozenset()
        return self.cache.derived(
            resource_id, f"field:{field_name}", lambda: frozenset(coerce_list(doc.get(field_name)))
        )

    def _union(self, resource_id: str, doc: Optional[PermissionFields],
               read_field: str, discover_field: str) -> FrozenSet[str]:
        if not isinstance(doc, Mapping):
            return frozenset()
        return self.cache.derived(
            resource_id, f"union:{read_field}|{discover_field}",
            lambda: self._list(resource_id, doc, read_field) | self._list(resource_id, doc, discover_field)
        )

    def _read_groups(self, resource_id: str, doc: Optional[PermissionFields]) -> FrozenSet[str]:
        rg = self._list(resource_id, doc, self.fields.read_group_field)
        self._trace(READ_GROUPS, resource_id=resource_id, groups=sorted(rg))
        return rg

    def _read_users(self, resource_id: str, doc: Optional[PermissionFields]) -> FrozenSet[str]:
        rp = self._list(resource_id, doc, self.fields.read_user_field)
        self._trace(READ_USERS, resource_id=resource_id, users=sorted(rp))
        return rp

    def _discover_groups(self, resource_id: str, doc: Optional[PermissionFields]) -> FrozenSet[str]:
        dg = self._union(
            resource_id, doc, self.fields.read_group_field, self.fields.discover_group_field
        )
        self._trace(DISCOVER_GROUPS, resource_id=resource_id, groups=sorted(dg))
        return dg

    def _discover_users(self, resource_id: str, doc: Optional[PermissionFields]) -> FrozenSet[str]:
        dp = self._union(
            resource_id, doc, self.fields.read_user_field, self.fields.discover_user_field
        )
        self._trace(DISCOVER_USERS, resource_id=resource_id, users=sorted(dp))
        return dp

    async def read_groups(self, resource_id: str) -> FrozenSet[str]:
        return self._read_groups(resource_id, await self.cache.fields_for(resource_id))

    async def read_users(self, resource_id: str) -> FrozenSet[str]:
        return self._read_users(resource_id, await self.cache.fields_for(resource_id))

    async def discover_groups(self, resource_id: str) -> FrozenSet[str]:
        """Union of the read and discover groups of a document."""
        return self._discover_groups(resource_id, await self.cache.fields_for(resource_id))

    async def discover_users(self, resource_id: str) -> FrozenSet[str]:
        """Union of the read and discover users of a document."""
        return self._discover_users(resource_id, await self.cache.fields_for(resource_id))

    def user_groups(self, subject: Subject) -> FrozenSet[str]:
        groups = self.groups.effective_groups(subject)
        self._trace(USER_GROUPS, user_key=getattr(subject, 'user_key', None), groups=sorted(groups))
        return groups

    def _decide(self, action: str, subject: Subject, resource_id: str,
                groups: FrozenSet[str], users: FrozenSet[str]) -> bool:
        user_key = getattr(subject, 'user_key', None)
        allowed = bool(self.user_groups(subject) & groups) or (
            isinstance(user_key, str) and bool(user_key) and user_key in users
        )
        self._trace(DECISION, action=action, resource_id=resource_id,
                    user_key=user_key, allowed=allowed)
        return allowed

    def _deny_missing(self, action: str, subject: Subject, resource_id: str) -> bool:
        self._trace(DECISION, action=action, resource_id=resource_id,
                    user_key=getattr(subject, 'user_key', None), allowed=False)
        return False

    async def can_read(self, subject: Subject, resource_id: str) -> bool:
        """
        Check whether a subject may read a document.

        Args:
            subject: The subject whose access is evaluated
            resource_id: Opaque document id

        Returns:
            bool: True if one of the subject's groups or its key is on the read lists

        Raises:
            ResolverError: If the document could not be looked up
        """
        doc = await self.cache.fields_for(resource_id)
        if doc is None:
            return self._deny_missing("read", subject, resource_id)
        return self._decide(
            "read", subject, resource_id,
            self._read_groups(resource_id, doc),
            self._read_users(resource_id, doc),
        )

    async def can_discover(self, subject: Subject, resource_id: str) -> bool:
        """
        Check whether a subject may discover a document.

        Anyone who may read a document may also discover it.

        Raises:
            ResolverError: If the document could not be looked up
        """
        doc = await self.cache.fields_for(resource_id)
        if doc is None:
            return self._deny_missing("discover", subject, resource_id)
        return self._decide(
            "discover", subject, resource_id,
            self._discover_groups(resource_id, doc),
            self._discover_users(resource_id, doc),
        )
