"""
Handler-level permission tests

These tests exercise PermissionHandlers' can_perform_action and build_query
logic using lightweight principals and mocked database sessions.
"""

import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock
from sqlalchemy import false

from educonnect_backend.api.exceptions import ForbiddenException
from educonnect_backend.permissions.principal import Principal, build_claims
from educonnect_backend.permissions.core import permission_registry
from educonnect_backend.permissions.handlers_impl import (
    AnnouncementPermissionHandler,
    AssignmentPermissionHandler,
    MeetingPermissionHandler,
    MessagePermissionHandler,
    StudentPermissionHandler,
    StudentRecordPermissionHandler,
    UserPermissionHandler,
)
from educonnect_backend.model.auth import User
from educonnect_backend.model.student import Student
from educonnect_backend.model.academics import Assignment, Grade, Attendance, Behavior
from educonnect_backend.model.meeting import Meeting
from educonnect_backend.model.message import Message
from educonnect_backend.model.announcement import Announcement
from educonnect_backend.settings import settings

pytestmark = pytest.mark.unit


def make_db():
    """Create a MagicMock DB session with common methods."""
    db = MagicMock()
    q = MagicMock()
    q.filter.return_value = q
    q.order_by.return_value = q
    q.limit.return_value = q
    q.offset.return_value = q
    q.all.return_value = []
    q.first.return_value = None
    q.count.return_value = 0
    db.query.return_value = q
    return db


def sql(criterion) -> str:
    return str(criterion.compile(compile_kwargs={"literal_binds": True}))


parent = Principal(user_id="p1", role="parent", associated_ids=["s1", "s2"])
teacher = Principal(user_id="t1", role="teacher")
admin = Principal(user_id="a1", role="admin")


class TestRegistry:
    @pytest.mark.parametrize("entity", [User, Student, Grade, Attendance, Behavior, Assignment, Meeting, Message, Announcement])
    def test_every_entity_has_a_handler(self, entity):
        assert permission_registry.get_handler(entity) is not None

    def test_grade_attendance_behavior_share_record_handler(self):
        for entity in (Grade, Attendance, Behavior):
            assert isinstance(permission_registry.get_handler(entity), StudentRecordPermissionHandler)

    def test_unregistered_entity_is_forbidden_for_everyone(self):
        class AuditLog:
            __tablename__ = "audit_log"

        for principal in (parent, teacher, admin):
            with pytest.raises(ForbiddenException):
                permission_registry.check_permissions(principal, AuditLog, "list", make_db())


class TestVisibilityTable:
    def test_admin_gets_all(self):
        db = make_db()
        handler = StudentRecordPermissionHandler(Grade)
        q = handler.build_query(admin, "list", db)
        assert q is db.query.return_value
        db.query.return_value.filter.assert_not_called()

    def test_role_without_row_sees_nothing(self):
        handler = StudentRecordPermissionHandler(Grade)
        stranger = Principal(user_id="x1", role="guest", claims=build_claims([("permissions", "grade:list")]))
        criterion = handler.visibility_filter(stranger, make_db())
        assert criterion.compare(false())

    def test_missing_claim_is_forbidden(self):
        handler = StudentRecordPermissionHandler(Grade)
        with pytest.raises(ForbiddenException):
            handler.build_query(Principal(user_id="x2"), "list", make_db())

    def test_query_is_filtered_for_teacher(self):
        db = make_db()
        handler = StudentRecordPermissionHandler(Grade)
        handler.build_query(teacher, "list", db)
        db.query.return_value.filter.assert_called_once()

    def test_teacher_sees_authored_records(self):
        criterion = StudentRecordPermissionHandler(Attendance).visibility_filter(teacher, make_db())
        assert "attendance.teacher_id = 't1'" in sql(criterion)

    def test_parent_sees_children_records(self):
        criterion = StudentRecordPermissionHandler(Behavior).visibility_filter(parent, make_db())
        text = sql(criterion)
        assert "behavior.student_id IN" in text
        assert "'s1'" in text and "'s2'" in text

    def test_parent_students_are_children(self):
        criterion = StudentPermissionHandler(Student).visibility_filter(parent, make_db())
        assert "student.id IN ('s1', 's2')" in sql(criterion)

    def test_teacher_sees_all_students_by_default(self, monkeypatch):
        monkeypatch.setattr(settings, "RESTRICT_TEACHER_STUDENTS", False)
        assert StudentPermissionHandler(Student).visibility_filter(teacher, make_db()) is None

    def test_teacher_students_can_be_restricted(self, monkeypatch):
        monkeypatch.setattr(settings, "RESTRICT_TEACHER_STUDENTS", True)
        criterion = StudentPermissionHandler(Student).visibility_filter(teacher, make_db())
        assert criterion is not None
        assert "student_teacher" in sql(criterion)

    def test_parent_never_sees_draft_assignments(self):
        text = sql(AssignmentPermissionHandler(Assignment).visibility_filter(parent, make_db()))
        assert "assignment.status != 'draft'" in text

    def test_announcement_audiences(self):
        handler = AnnouncementPermissionHandler(Announcement)
        parent_sql = sql(handler.visibility_filter(parent, make_db()))
        teacher_sql = sql(handler.visibility_filter(teacher, make_db()))
        assert "'parents'" in parent_sql and "announcement_student" in parent_sql
        assert "'teachers'" in teacher_sql and "'parents'" not in teacher_sql

    def test_messages_restricted_for_admin_too(self):
        criterion = MessagePermissionHandler(Message).visibility_filter(admin, make_db())
        assert "message.sender_id = 'a1'" in sql(criterion)

    def test_roster(self):
        handler = UserPermissionHandler(User)
        assert "'teacher'" in sql(handler.visibility_filter(parent, make_db()))
        assert "'parent'" in sql(handler.visibility_filter(teacher, make_db()))
        assert handler.visibility_filter(admin, make_db()) is None


class TestMutationPermissions:
    def test_create_is_role_gated(self):
        handler = StudentRecordPermissionHandler(Grade)
        assert handler.can_perform_action(teacher, "create") is True
        assert handler.can_perform_action(admin, "create") is True
        assert handler.can_perform_action(parent, "create") is False

    def test_update_requires_authorship(self):
        handler = StudentRecordPermissionHandler(Grade)
        own = SimpleNamespace(teacher_id="t1")
        foreign = SimpleNamespace(teacher_id="t2")
        assert handler.can_perform_action(teacher, "update", own) is True
        assert handler.can_perform_action(teacher, "update", foreign) is False
        assert handler.can_perform_action(teacher, "delete", foreign) is False
        assert handler.can_perform_action(admin, "delete", foreign) is True

    def test_student_update_is_role_gated_only(self):
        handler = StudentPermissionHandler(Student)
        record = SimpleNamespace(id="s9")
        assert handler.can_perform_action(teacher, "update", record) is True
        assert handler.can_perform_action(parent, "update", record) is False
        assert handler.can_perform_action(parent, "add_child") is True
        assert handler.can_perform_action(teacher, "add_child") is False

    def test_meeting_participants_own_it(self):
        handler = MeetingPermissionHandler(Meeting)
        meeting = SimpleNamespace(parent_id="p1", teacher_id="t1")
        outsider = Principal(user_id="p2", role="parent")
        assert handler.can_perform_action(parent, "update_status", meeting) is True
        assert handler.can_perform_action(teacher, "delete", meeting) is True
        assert handler.can_perform_action(outsider, "update_status", meeting) is False
        assert handler.can_perform_action(admin, "update", meeting) is True

    def test_only_receiver_marks_read(self):
        handler = MessagePermissionHandler(Message)
        message = SimpleNamespace(sender_id="t1", receiver_id="p1")
        assert handler.can_perform_action(parent, "read", message) is True
        assert handler.can_perform_action(teacher, "read", message) is False
        assert handler.can_perform_action(admin, "read", message) is False

    @pytest.mark.parametrize("sender,receiver,allowed", [
        ("parent", "teacher", True),
        ("teacher", "parent", True),
        ("parent", "parent", False),
        ("parent", "admin", False),
        ("teacher", "teacher", False),
        ("admin", "parent", False),
    ])
    def test_message_pairs(self, sender, receiver, allowed):
        assert MessagePermissionHandler(Message).can_message(sender, receiver) is allowed

    def test_profile_update_is_self_only(self):
        handler = UserPermissionHandler(User)
        assert handler.can_perform_action(parent, "update_self", SimpleNamespace(id="p1")) is True
        assert handler.can_perform_action(parent, "update_self", SimpleNamespace(id="t1")) is False
        assert handler.can_perform_action(teacher, "update", SimpleNamespace(id="p1")) is False
