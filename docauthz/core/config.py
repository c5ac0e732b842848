"""
Configuration module for docauthz.

The field-name mapping tells the evaluator which keys of a stored document hold
the four permission lists. It is read-only while decisions are evaluated.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional
import os

from ..errors import ConfigurationError
from .types import GuestUser


DEFAULT_DISCOVER_GROUP_FIELD = "discover_access_group_ssim"
DEFAULT_DISCOVER_USER_FIELD = "discover_access_person_ssim"
DEFAULT_READ_GROUP_FIELD = "read_access_group_ssim"
DEFAULT_READ_USER_FIELD = "read_access_person_ssim"

PUBLIC_GROUP = "public"
REGISTERED_GROUP = "registered"


@dataclass(frozen=True)
class FieldConfig:
    """Names of the permission fields in a stored document"""
    discover_group_field: str = DEFAULT_DISCOVER_GROUP_FIELD
    discover_user_field: str = DEFAULT_DISCOVER_USER_FIELD
    read_group_field: str = DEFAULT_READ_GROUP_FIELD
    read_user_field: str = DEFAULT_READ_USER_FIELD

    @classmethod
    def from_env(cls, prefix: str = "DOCAUTHZ_") -> "FieldConfig":
        """Create field configuration from environment variables"""
        return cls(
            discover_group_field=os.getenv(
                f"{prefix}DISCOVER_GROUP_FIELD", DEFAULT_DISCOVER_GROUP_FIELD
            ),
            discover_user_field=os.getenv(
                f"{prefix}DISCOVER_USER_FIELD", DEFAULT_DISCOVER_USER_FIELD
            ),
            read_group_field=os.getenv(
                f"{prefix}READ_GROUP_FIELD", DEFAULT_READ_GROUP_FIELD
            ),
            read_user_field=os.getenv(
                f"{prefix}READ_USER_FIELD", DEFAULT_READ_USER_FIELD
            ),
        )

    def names(self) -> List[str]:
        return [
            self.discover_group_field,
            self.discover_user_field,
            self.read_group_field,
            self.read_user_field,
        ]

    def validate(self) -> bool:
        """Validate the field configuration"""
        for key, value in (
            ("discover_group_field", self.discover_group_field),
            ("discover_user_field", self.discover_user_field),
            ("read_group_field", self.read_group_field),
            ("read_user_field", self.read_user_field),
        ):
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(
                    f"{key} must be a non-empty string", config_key=key, config_value=value
                )
        if len(set(self.names())) != 4:
            raise ConfigurationError(
                "permission field names must be distinct",
                config_key="fields",
                config_value=self.names(),
            )
        return True


@dataclass
class AccessControlsConfig:
    """Configuration for the access-control engine"""
    fields: FieldConfig = field(default_factory=FieldConfig)
    guest_factory: Callable[[], Any] = GuestUser
    default_groups: List[str] = field(default_factory=lambda: [PUBLIC_GROUP])
    registered_group: str = REGISTERED_GROUP

    @classmethod
    def from_env(cls, prefix: str = "DOCAUTHZ_") -> "AccessControlsConfig":
        """Create configuration from environment variables"""
        default_groups = os.getenv(f"{prefix}DEFAULT_GROUPS", PUBLIC_GROUP).split(",")
        return cls(
            fields=FieldConfig.from_env(prefix),
            default_groups=[g.strip() for g in default_groups if g.strip()],
            registered_group=os.getenv(f"{prefix}REGISTERED_GROUP", REGISTERED_GROUP),
        )

    def guest_user(self) -> Any:
        """Build the subject used when no user is logged in"""
        return self.guest_factory()

    def validate(self) -> bool:
        """Validate the configuration"""
        self.fields.validate()
        if PUBLIC_GROUP not in self.default_groups:
            raise ConfigurationError(
                "default_groups must include the public group",
                config_key="default_groups",
                config_value=self.default_groups,
            )
        if not self.registered_group:
            raise ConfigurationError("registered_group is required", config_key="registered_group")
        if not callable(self.guest_factory):
            raise ConfigurationError("guest_factory must be callable", config_key="guest_factory")
        return True


_config: Optional[AccessControlsConfig] = None


def get_config() -> AccessControlsConfig:
    """Return the process-wide default configuration."""
    global _config
    if _config is None:
        _config = AccessControlsConfig()
    return _config


def set_config(config: Optional[AccessControlsConfig]) -> None:
    """Replace the process-wide default configuration (None restores defaults)."""
    global _config
    if config is not None:
        config.validate()
    _config = config
