"""
docauthz Python Package

Access-control decisions for protected documents: may a subject discover a
document, and may it read it.
"""

__version__ = "0.1.0"

from .core.config import AccessControlsConfig, FieldConfig, get_config, set_config
from .core.types import Action, GuestUser, SolrDocument, User
from .authz import Ability, RuleChain
from .errors import AccessControlError, ConfigurationError, ResolverError
from .resolver import MemoryPermissionsResolver, PermissionsResolver

__all__ = [
    "Ability",
    "RuleChain",
    "Action",
    "User",
    "GuestUser",
    "SolrDocument",
    "AccessControlsConfig",
    "FieldConfig",
    "get_config",
    "set_config",
    "PermissionsResolver",
    "MemoryPermissionsResolver",
    "AccessControlError",
    "ConfigurationError",
    "ResolverError",
]
