"""
Package authz implements read/discover decisions for protected documents.

Read implies discover. Each ``Ability`` caches the permission documents it has
looked up, so a document is resolved at most once per context.
"""

from .ability import Ability
from .cache import LookupCache
from .evaluator import PermissionEvaluator, coerce_list
from .groups import GroupResolver
from .rules import (
    GrantSet,
    RuleChain,
    discover_permissions,
    read_permissions
)
from .tracing import (
    LoggingTracer,
    MemoryTracer,
    TraceEvent
)

__all__ = [
    # Context
    'Ability',

    # Evaluation
    'LookupCache',
    'PermissionEvaluator',
    'GroupResolver',
    'coerce_list',

    # Rules
    'GrantSet',
    'RuleChain',
    'discover_permissions',
    'read_permissions',

    # Tracing
    'LoggingTracer',
    'MemoryTracer',
    'TraceEvent'
]
