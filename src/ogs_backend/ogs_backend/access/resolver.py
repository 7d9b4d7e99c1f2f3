from __future__ import annotations

import logging
from typing import FrozenSet, Optional

from ..core.enums import AccessReason
from ..core.exceptions import AuthorizationError
from ..groups.repository import SupervisionRepository
from ..students.model import Student
from .model import AccessGrant, RequesterClaims

logger = logging.getLogger(__name__)


class AccessLevelResolver:
    """Decides whether a requester has full access to a student's record.

    Full access is held by administrators (or holders of the elevated
    location read permission) and by staff currently supervising the
    student's educational group. Supervision is looked up on every call.
    """

    def __init__(self, supervision: SupervisionRepository):
        self._supervision = supervision

    def supervised_group_ids(self, claims: RequesterClaims) -> Optional[FrozenSet[int]]:
        """Groups the requester supervises, or None when that cannot be determined."""

        if claims.staff_id is None:
            return None
        try:
            return frozenset(int(g) for g in self._supervision.list_supervised_group_ids(claims.staff_id))
        except Exception:
            logger.warning("supervision lookup failed for staff_id=%s", claims.staff_id, exc_info=True)
            return None

    def resolve(
        self,
        claims: RequesterClaims,
        student: Student,
        *,
        supervised: Optional[FrozenSet[int]] = None,
    ) -> AccessGrant:
        """Grant for ``student``.

        ``supervised`` lets list endpoints look up supervision once per request.
        """

        if claims.is_admin:
            return AccessGrant(full_access=True, reason=AccessReason.ADMINISTRATOR)
        if claims.can_read_locations:
            return AccessGrant(full_access=True, reason=AccessReason.LOCATION_READ)

        group_id = student.group_id
        if group_id is None:
            return AccessGrant(full_access=False, reason=AccessReason.NO_GROUP)

        if claims.staff_id is None:
            return AccessGrant(full_access=False, reason=AccessReason.NOT_STAFF)

        if supervised is None:
            supervised = self.supervised_group_ids(claims)
        if supervised is None:
            return AccessGrant(full_access=False, reason=AccessReason.LOOKUP_FAILED)

        if group_id in supervised:
            return AccessGrant(full_access=True, reason=AccessReason.GROUP_SUPERVISOR, supervised_group_ids=supervised)
        return AccessGrant(full_access=False, reason=AccessReason.NOT_SUPERVISOR, supervised_group_ids=supervised)

    def authorize_modification(self, claims: RequesterClaims, group_id: Optional[int], operation: str) -> AccessGrant:
        """Raise AuthorizationError unless the requester may ``operation`` such a student.

        Only the administrator wildcard grants mutations on groupless students;
        the location read permission never authorizes a mutation.
        """

        if claims.is_admin:
            return AccessGrant(full_access=True, reason=AccessReason.ADMINISTRATOR)

        if group_id is None:
            raise AuthorizationError(f"only administrators can {operation} students without assigned groups")

        if claims.staff_id is None:
            raise AuthorizationError(f"insufficient permissions to {operation} this student's data")

        supervised = self.supervised_group_ids(claims)
        if supervised is None:
            raise AuthorizationError(f"insufficient permissions to {operation} this student's data")

        if group_id not in supervised:
            raise AuthorizationError(f"you can only {operation} students in groups you supervise")

        return AccessGrant(full_access=True, reason=AccessReason.GROUP_SUPERVISOR, supervised_group_ids=supervised)
