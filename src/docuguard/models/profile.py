"""User profile data model."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from docuguard.core.constants import DEFAULT_PROFILE_NAME


class Theme(str, Enum):
    """Display theme preference."""

    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class UserProfile:
    """Settings of the local user."""

    name: str = DEFAULT_PROFILE_NAME
    email: str = ""
    phone: str = ""
    notifications_enabled: bool = True
    theme: Theme = Theme.DARK

    def with_toggled_theme(self) -> "UserProfile":
        """Return a copy with the other theme selected."""
        theme = Theme.LIGHT if self.theme is Theme.DARK else Theme.DARK
        return replace(self, theme=theme)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "notifications_enabled": self.notifications_enabled,
            "theme": self.theme.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        """Create from dictionary."""
        notifications = data.get("notifications_enabled", True)
        if not isinstance(notifications, bool):
            raise ValueError("notifications_enabled must be a boolean")
        return cls(
            name=str(data.get("name", DEFAULT_PROFILE_NAME)),
            email=str(data.get("email", "")),
            phone=str(data.get("phone") or ""),
            notifications_enabled=notifications,
            theme=Theme(data.get("theme", Theme.DARK.value)),
        )
