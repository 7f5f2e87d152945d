"""Keys and topics — the closed set of addressable settings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class DefaultsKey(StrEnum):
    """Every setting the application may persist.

    The set is closed: a slot only exists if its key is declared here, so a
    typo can never create an orphan entry.  Adding a setting is a code change.
    """

    ONBOARDING_COMPLETED = "onboarding_completed"
    LAUNCH_COUNT = "launch_count"
    LAST_SYNC_AT = "last_sync_at"
    PREFERRED_LOCALE = "preferred_locale"
    USER_PROFILE = "user_profile"
    APPEARANCE = "appearance"


class AccessorKind(StrEnum):
    """Scope prefix separating primitive slots from structured ones."""

    PRIMITIVE = "defaults"
    STRUCTURED = "defaults_codable"


@dataclass(frozen=True)
class Topic:
    """Composite address of one setting: ``(kind, key)``.

    Used verbatim as the store slot (``namespace=kind``, ``key=key``) and as
    the change-bus topic, so a primitive and a structured accessor for the
    same key never share storage or notifications.
    """

    kind: AccessorKind
    key: StrEnum

    @property
    def namespace(self) -> str:
        return str(self.kind)

    @property
    def slot(self) -> str:
        return str(self.key)

    def __str__(self) -> str:
        return f"{self.kind}:{self.key}"
