from typing import Any, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from educonnect_backend.permissions.handlers import PermissionHandler
from educonnect_backend.permissions.query_builders import ChildrenQueryBuilder
from educonnect_backend.permissions.principal import Principal, ROLE_PARENT, ROLE_TEACHER
from educonnect_backend.model.auth import User
from educonnect_backend.settings import settings


class UserPermissionHandler(PermissionHandler):
    """Roster visibility: parents see teachers, teachers see parents"""

    VISIBILITY = {
        ROLE_PARENT: "_teachers",
        ROLE_TEACHER: "_parents",
    }

    OWNER_FIELDS = ("id",)
    OWNERSHIP_ACTIONS = ("update_self",)

    def _teachers(self, principal: Principal, db: Session):
        return self.entity.role == ROLE_TEACHER

    def _parents(self, principal: Principal, db: Session):
        return self.entity.role == ROLE_PARENT


class StudentPermissionHandler(PermissionHandler):
    """Parents see their children; teachers see every student unless restricted to assigned ones.

    Students have no author, so update is gated by role alone.
    """

    VISIBILITY = {
        ROLE_PARENT: "_children",
        ROLE_TEACHER: "_teacher_students",
    }

    OWNERSHIP_ACTIONS = ()

    def _children(self, principal: Principal, db: Session):
        return self.entity.id.in_(list(principal.associated_ids or []))

    def _teacher_students(self, principal: Principal, db: Session):
        if not settings.RESTRICT_TEACHER_STUDENTS:
            return None
        return self.entity.teachers.any(User.id == principal.user_id)


class StudentRecordPermissionHandler(PermissionHandler):
    """Grades, attendance and behavior reports: parents through their children, teachers by authorship"""

    VISIBILITY = {
        ROLE_PARENT: "_children_records",
        ROLE_TEACHER: "_authored",
    }

    OWNER_FIELDS = ("teacher_id",)

    def _children_records(self, principal: Principal, db: Session):
        return ChildrenQueryBuilder.filter_by_child_column(self.entity.student_id, principal)

    def _authored(self, principal: Principal, db: Session):
        return self.entity.teacher_id == principal.user_id


class AssignmentPermissionHandler(PermissionHandler):

    VISIBILITY = {
        ROLE_PARENT: "_children_published",
        ROLE_TEACHER: "_authored",
    }

    OWNER_FIELDS = ("teacher_id",)

    def _children_published(self, principal: Principal, db: Session):
        return and_(
            ChildrenQueryBuilder.filter_by_any_child(self.entity.students, principal),
            self.entity.status != "draft",
        )

    def _authored(self, principal: Principal, db: Session):
        return self.entity.teacher_id == principal.user_id


class AnnouncementPermissionHandler(PermissionHandler):
    """Audience based visibility; parents also see announcements targeting their children"""

    VISIBILITY = {
        ROLE_PARENT: "_parent_audience",
        ROLE_TEACHER: "_teacher_audience",
    }

    OWNER_FIELDS = ("author_id",)

    def _parent_audience(self, principal: Principal, db: Session):
        return or_(
            self.entity.target_audience.in_(["all", "parents"]),
            ChildrenQueryBuilder.filter_by_any_child(self.entity.target_students, principal),
        )

    def _teacher_audience(self, principal: Principal, db: Session):
        return self.entity.target_audience.in_(["all", "teachers"])


class MeetingPermissionHandler(PermissionHandler):
    """Both participants own a meeting"""

    VISIBILITY = {
        ROLE_PARENT: "_as_parent",
        ROLE_TEACHER: "_as_teacher",
    }

    OWNER_FIELDS = ("parent_id", "teacher_id")
    OWNERSHIP_ACTIONS = ("update", "update_status", "delete")

    def _as_parent(self, principal: Principal, db: Session):
        return self.entity.parent_id == principal.user_id

    def _as_teacher(self, principal: Principal, db: Session):
        return self.entity.teacher_id == principal.user_id


class MessagePermissionHandler(PermissionHandler):
    """Messages are visible to their two endpoints only, admins included"""

    VISIBILITY = {
        ROLE_PARENT: "_endpoint",
        ROLE_TEACHER: "_endpoint",
        "admin": "_endpoint",
    }

    ADMIN_UNRESTRICTED = False

    # sender role -> receiver role
    ALLOWED_PAIRS = {
        (ROLE_PARENT, ROLE_TEACHER),
        (ROLE_TEACHER, ROLE_PARENT),
    }

    def _endpoint(self, principal: Principal, db: Session):
        return or_(
            self.entity.sender_id == principal.user_id,
            self.entity.receiver_id == principal.user_id,
        )

    def can_message(self, sender_role: Optional[str], receiver_role: Optional[str]) -> bool:
        return (sender_role, receiver_role) in self.ALLOWED_PAIRS

    def can_perform_action(self, principal: Principal, action: str, record: Optional[Any] = None) -> bool:
        if action == "read":
            # only the receiver marks a message read
            return record is not None and str(record.receiver_id) == str(principal.user_id)
        return super().can_perform_action(principal, action, record)
