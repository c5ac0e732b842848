"""
Core types for docauthz: subjects, resources, actions and permission fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any, ClassVar, Dict, List, Mapping, Optional, Protocol, Union, runtime_checkable
)


# Stored permission fields for one resource, keyed by the configured field names
PermissionFields = Mapping[str, Any]

# Resource type tags used by the grant registry
DOCUMENT_TYPE = "document"
ID_TYPE = "id"


class Action(Enum):
    """Built-in permission tiers. Read implies discover."""
    DISCOVER = "discover"
    READ = "read"

    def __str__(self) -> str:
        return self.value


def action_name(action: Union[Action, str, Any]) -> Optional[str]:
    """Normalize an action to the name the grant registry is keyed by."""
    if isinstance(action, Action):
        return action.value
    if isinstance(action, str) and action:
        return action.lower()
    return None


@runtime_checkable
class Subject(Protocol):
    """
    Identity whose access is evaluated.

    ``user_key`` is the stable key matched against per-resource user lists;
    ``is_new_record`` is true for an identity that was never persisted (guests).
    """

    @property
    def user_key(self) -> Optional[str]:
        ...

    @property
    def is_new_record(self) -> bool:
        ...


@runtime_checkable
class GroupMember(Protocol):
    """Optional subject capability: externally supplied group membership."""

    @property
    def groups(self) -> Any:
        ...


@dataclass
class User:
    """A persisted (registered) user."""
    user_key: str
    groups: List[str] = field(default_factory=list)
    persisted: bool = True

    @property
    def is_new_record(self) -> bool:
        return not self.persisted


@dataclass
class GuestUser:
    """
    A user who isn't logged in.

    Guests have no key and no group capability; they only ever belong to the
    default groups.
    """
    user_key: Optional[str] = None

    @property
    def is_new_record(self) -> bool:
        return True


@dataclass
class SolrDocument:
    """
    A protected document, identified by its id.

    ``fields`` holds the stored permission fields when the document was already
    loaded; a non-empty mapping is used instead of a resolver lookup.
    """
    resource_type: ClassVar[str] = DOCUMENT_TYPE

    id: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SolrDocument':
        """Create from a stored document; every key except ``id`` is a field."""
        fields = {k: v for k, v in data.items() if k != 'id'}
        return cls(id=data['id'], fields=fields)


def resource_type_of(resource: Any) -> Optional[str]:
    """
    Return the type tag of a resource, or None if it is not modeled.

    Bare string ids are tagged ``"id"``; objects declare their tag through a
    ``resource_type`` attribute.
    """
    if isinstance(resource, str):
        return ID_TYPE
    tag = getattr(resource, 'resource_type', None)
    if isinstance(tag, str) and tag:
        return tag
    return None


def resource_id_of(resource: Any) -> Optional[str]:
    """Return the document id of a resource, or None."""
    if isinstance(resource, str):
        return resource
    resource_id = getattr(resource, 'id', None)
    if isinstance(resource_id, str):
        return resource_id
    return None
