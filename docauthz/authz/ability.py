"""
Evaluation context: what one subject may do, for one unit of work.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from ..core.config import AccessControlsConfig, get_config
from ..core.types import Action, Subject, action_name, resource_type_of
from .cache import LookupCache, ResolverLike
from .evaluator import PermissionEvaluator
from .groups import GroupResolver
from .rules import GrantSet, Predicate, Rule, RuleChain
from .tracing import Tracer


logger = logging.getLogger(__name__)


class Ability:
    """
    Per-subject authorization context.

    Build one per request and discard it afterwards: the document cache and the
    group memo live and die with it. Construction runs the rule chain, which
    installs the grant predicates; ``can`` dispatches to them.

    Example:
        ability = Ability(current_user, resolver)
        if await ability.can(Action.READ, SolrDocument(id="doc1")):
            ...
    """

    def __init__(
        self,
        user: Optional[Subject],
        resolver: ResolverLike,
        rules: Optional[Union[RuleChain, Iterable[Rule]]] = None,
        config: Optional[AccessControlsConfig] = None,
        tracer: Optional[Tracer] = None,
        options: Optional[Mapping[str, Any]] = None,
    ):
        self.config = config or get_config()
        self.current_user = user if user is not None else self.config.guest_user()
        self.options: Dict[str, Any] = dict(options or {})

        self.cache = LookupCache(resolver)
        self.groups = GroupResolver(
            default_groups=self.config.default_groups,
            registered_group=self.config.registered_group,
        )
        self.evaluator = PermissionEvaluator(
            self.cache, self.groups, fields=self.config.fields, tracer=tracer
        )

        if rules is None:
            rules = RuleChain.default()
        elif not isinstance(rules, RuleChain):
            rules = RuleChain(rules)
        self.rules = rules
        self.grants = GrantSet()
        self.grant_permissions()

    def grant_permissions(self) -> None:
        logger.debug(f"Granting permissions for user {self.user_key!r} with {self.rules!r}")
        self.rules.run(self)
        self.grants.freeze()

    def grant(self, action: Union[Action, str], resource_type: str, predicate: Predicate) -> None:
        """Install a grant predicate. Only valid while the rule chain runs."""
        self.grants.add(action, resource_type, predicate)

    @property
    def user_key(self) -> Optional[str]:
        return getattr(self.current_user, 'user_key', None)

    def user_groups(self) -> FrozenSet[str]:
        return self.evaluator.user_groups(self.current_user)

    async def test_read(self, resource_id: str) -> bool:
        return await self.evaluator.can_read(self.current_user, resource_id)

    async def test_discover(self, resource_id: str) -> bool:
        return await self.evaluator.can_discover(self.current_user, resource_id)

    async def can(self, action: Union[Action, str], resource: Any) -> bool:
        """
        Check whether the current user may perform an action on a resource.

        Args:
            action: ``Action.READ``, ``Action.DISCOVER`` or the name of a custom action
            resource: A ``SolrDocument``, a bare document id or any tagged resource

        Returns:
            bool: False for any action or resource type no rule grants

        Raises:
            ResolverError: If a document could not be looked up
        """
        name = action_name(action)
        resource_type = resource_type_of(resource)
        if name is None or resource_type is None:
            return False
        return await self.grants.allows(name, resource_type, resource)

    async def cannot(self, action: Union[Action, str], resource: Any) -> bool:
        return not await self.can(action, resource)
