from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from ..core.constants import ADMIN_PERMISSIONS, LOCATION_READ_PERMISSION
from ..core.enums import AccessReason


@dataclass(frozen=True)
class RequesterClaims:
    """Verified identity of the caller, as handed over by the auth layer."""

    account_id: int
    permissions: FrozenSet[str] = frozenset()
    staff_id: Optional[int] = None

    @classmethod
    def from_session(cls, *, account_id, permissions: Optional[Iterable[str]] = None, staff_id=None) -> "RequesterClaims":
        if isinstance(permissions, str):
            permissions = [permissions]
        return cls(
            account_id=int(account_id),
            permissions=frozenset(str(p) for p in (permissions or [])),
            staff_id=int(staff_id) if staff_id else None,
        )

    @property
    def is_admin(self) -> bool:
        return bool(self.permissions & ADMIN_PERMISSIONS)

    @property
    def can_read_locations(self) -> bool:
        return LOCATION_READ_PERMISSION in self.permissions


@dataclass(frozen=True)
class AccessGrant:
    """Per-request verdict; recomputed on every call, never stored."""

    full_access: bool
    reason: AccessReason
    supervised_group_ids: FrozenSet[int] = field(default_factory=frozenset)
