from datetime import datetime
from typing import Any, Optional
from sqlalchemy import and_, or_, select
from educonnect_backend.model.student import Student
from educonnect_backend.model.announcement import Announcement
from educonnect_backend.model.base import utcnow
from educonnect_backend.permissions.principal import Principal


class ChildrenQueryBuilder:
    """Utility class for building criteria over a parent's children"""

    @classmethod
    def children_subquery(cls, principal: Principal):
        """Ids of existing students referenced by the principal's associated ids"""
        return select(Student.id).where(Student.id.in_(list(principal.associated_ids or [])))

    @classmethod
    def filter_by_child_column(cls, column: Any, principal: Principal):
        """Records whose student reference is one of the principal's children"""
        return column.in_(cls.children_subquery(principal))

    @classmethod
    def filter_by_any_child(cls, relationship: Any, principal: Principal):
        """Records whose student set intersects the principal's children"""
        return relationship.any(Student.id.in_(cls.children_subquery(principal)))


class AnnouncementQueryBuilder:
    """Utility class for read-time announcement criteria"""

    @classmethod
    def active_criterion(cls, now: Optional[datetime] = None):
        """Active and not yet expired; expiry is evaluated at read time"""
        now = now or utcnow()
        return and_(
            Announcement.is_active.is_(True),
            or_(
                Announcement.expires_at.is_(None),
                Announcement.expires_at >= now,
            )
        )
