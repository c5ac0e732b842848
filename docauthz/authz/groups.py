"""
Effective group membership of a subject.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..core.config import PUBLIC_GROUP, REGISTERED_GROUP
from ..core.types import GroupMember


logger = logging.getLogger(__name__)


class GroupResolver:
    """
    Computes the groups a subject belongs to.

    Everyone is automatically a member of group ``public``. Persisted subjects
    are also members of ``registered``. Subjects implementing ``GroupMember``
    contribute their own groups. The result is memoized per subject instance
    for the lifetime of the resolver, which is owned by one evaluation context.

    Override ``user_groups`` in a subclass to source groups elsewhere (LDAP,
    an external directory, ...).
    """

    def __init__(
        self,
        default_groups: Optional[Iterable[str]] = None,
        registered_group: str = REGISTERED_GROUP,
    ):
        self._default_groups = list(default_groups) if default_groups is not None else [PUBLIC_GROUP]
        self._registered_group = registered_group
        # id(subject) -> (subject, groups); the subject is held so its id is not reused
        self._memo: Dict[int, Tuple[Any, FrozenSet[str]]] = {}

    def default_user_groups(self) -> List[str]:
        """Groups every subject belongs to."""
        return list(self._default_groups)

    def subject_groups(self, subject: Any) -> Set[str]:
        """Groups supplied by the subject itself, if it exposes any."""
        if not isinstance(subject, GroupMember):
            return set()

        groups = subject.groups
        if callable(groups):
            groups = groups()
        if groups is None:
            return set()
        if isinstance(groups, str):
            groups = [groups]
        try:
            return {g for g in groups if isinstance(g, str)}
        except TypeError:
            logger.warning(f"Ignoring non-iterable groups on subject {type(subject).__name__}")
            return set()

    def user_groups(self, subject: Any) -> Set[str]:
        groups = set(self.default_user_groups())
        groups.add(PUBLIC_GROUP)
        groups |= self.subject_groups(subject)
        if not self.is_new_record(subject):
            groups.add(self._registered_group)
        return groups

    def is_new_record(self, subject: Any) -> bool:
        """Whether the subject was never persisted; missing flags count as new."""
        flag = getattr(subject, 'is_new_record', True)
        if callable(flag):
            flag = flag()
        return bool(flag)

    def effective_groups(self, subject: Any) -> FrozenSet[str]:
        """Return the memoized group set of a subject."""
        entry = self._memo.get(id(subject))
        if entry is None or entry[0] is not subject:
            entry = (subject, frozenset(self.user_groups(subject)))
            self._memo[id(subject)] = entry
        return entry[1]
