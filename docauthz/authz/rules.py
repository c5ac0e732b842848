"""
Grant registration.

A rule is a callable that receives the evaluation context and installs grant
predicates on it. The rule chain runs once, when the context is built.
Deployments layer custom authorization logic by appending or prepending rules:

    rules = RuleChain.default().append(edit_permissions)
    ability = Ability(user, resolver, rules=rules)
"""

import inspect
import logging
from collections.abc import Mapping
from typing import (
    TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Tuple, Union
)

from ..core.types import Action, DOCUMENT_TYPE, ID_TYPE, action_name, resource_id_of

if TYPE_CHECKING:
    from .ability import Ability


logger = logging.getLogger(__name__)

Predicate = Callable[[Any], Union[bool, Awaitable[bool]]]
Rule = Callable[['Ability'], None]


class GrantSet:
    """
    Registry of grant predicates keyed by (action, resource type tag).

    Predicates registered for the same key are OR-combined in registration
    order. The set is frozen once the rule chain has run.
    """

    def __init__(self):
        self._grants: Dict[Tuple[str, str], List[Predicate]] = {}
        self._frozen = False

    def add(self, action: Union[Action, str], resource_type: str, predicate: Predicate) -> None:
        if self._frozen:
            raise RuntimeError("Grants cannot be added after the rule chain has run")
        name = action_name(action)
        if name is None:
            raise ValueError(f"Invalid action: {action!r}")
        if not resource_type:
            raise ValueError("resource_type is required")
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        self._grants.setdefault((name, resource_type), []).append(predicate)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def predicates(self, action: str, resource_type: str) -> Tuple[Predicate, ...]:
        return tuple(self._grants.get((action, resource_type), ()))

    async def allows(self, action: str, resource_type: str, resource: Any) -> bool:
        """Return True if any predicate for the key grants access to the resource."""
        for predicate in self.predicates(action, resource_type):
            result = predicate(resource)
            if inspect.isawaitable(result):
                result = await result
            if result:
                return True
        return False

    def __contains__(self, key: object) -> bool:
        return key in self._grants

    def __len__(self) -> int:
        return sum(len(p) for p in self._grants.values())


class RuleChain:
    """Immutable, ordered collection of grant-registration rules."""

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: Tuple[Rule, ...] = tuple(rules)
        for rule in self._rules:
            if not callable(rule):
                raise TypeError(f"Rule {rule!r} is not callable")

    @classmethod
    def default(cls) -> 'RuleChain':
        return cls([discover_permissions, read_permissions])

    def append(self, *rules: Rule) -> 'RuleChain':
        """Return a new chain with rules added after the existing ones."""
        return RuleChain(self._rules + rules)

    def prepend(self, *rules: Rule) -> 'RuleChain':
        """Return a new chain with rules added before the existing ones."""
        return RuleChain(rules + self._rules)

    def run(self, ability: 'Ability') -> None:
        for rule in self._rules:
            logger.debug(f"Running grant rule {getattr(rule, '__name__', rule)!r}")
            rule(ability)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        names = ", ".join(getattr(r, '__name__', repr(r)) for r in self._rules)
        return f"RuleChain([{names}])"


def _by_document_id(ability: 'Ability', check: Callable[[str], Awaitable[bool]]) -> Predicate:
    async def predicate(resource: Any) -> bool:
        resource_id = resource_id_of(resource)
        if resource_id is None:
            return False
        # A document loaded with its fields needs no resolver lookup
        fields = getattr(resource, 'fields', None)
        if isinstance(fields, Mapping) and fields:
            ability.cache.seed(resource_id, fields)
        return await check(resource_id)
    return predicate


def discover_permissions(ability: 'Ability') -> None:
    """Grant discover on documents and bare document ids."""
    predicate = _by_document_id(ability, ability.test_discover)
    ability.grant(Action.DISCOVER, DOCUMENT_TYPE, predicate)
    ability.grant(Action.DISCOVER, ID_TYPE, predicate)


def read_permissions(ability: 'Ability') -> None:
    """Grant read on documents and bare document ids."""
    predicate = _by_document_id(ability, ability.test_read)
    ability.grant(Action.READ, DOCUMENT_TYPE, predicate)
    ability.grant(Action.READ, ID_TYPE, predicate)
