"""
Permission checking entry points built on the handler registry.
"""

from typing import Any, Optional
from sqlalchemy.orm import Session

from educonnect_backend.api.exceptions import ForbiddenException
from educonnect_backend.permissions.handlers import permission_registry, PermissionHandler
from educonnect_backend.permissions.handlers_impl import (
    UserPermissionHandler,
    StudentPermissionHandler,
    StudentRecordPermissionHandler,
    AssignmentPermissionHandler,
    AnnouncementPermissionHandler,
    MeetingPermissionHandler,
    MessagePermissionHandler,
)
from educonnect_backend.permissions.principal import Principal

from educonnect_backend.model.auth import User
from educonnect_backend.model.student import Student
from educonnect_backend.model.academics import Assignment, Grade, Attendance, Behavior
from educonnect_backend.model.meeting import Meeting
from educonnect_backend.model.message import Message
from educonnect_backend.model.announcement import Announcement


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""

    permission_registry.register(User, UserPermissionHandler(User))
    permission_registry.register(Student, StudentPermissionHandler(Student))

    # Records authored by a teacher about one student
    permission_registry.register(Grade, StudentRecordPermissionHandler(Grade))
    permission_registry.register(Attendance, StudentRecordPermissionHandler(Attendance))
    permission_registry.register(Behavior, StudentRecordPermissionHandler(Behavior))

    permission_registry.register(Assignment, AssignmentPermissionHandler(Assignment))
    permission_registry.register(Announcement, AnnouncementPermissionHandler(Announcement))
    permission_registry.register(Meeting, MeetingPermissionHandler(Meeting))
    permission_registry.register(Message, MessagePermissionHandler(Message))


def get_handler(entity: Any) -> PermissionHandler:
    handler = permission_registry.get_handler(entity)
    if handler is None:
        raise ForbiddenException(detail=f"No permission handler for {entity.__tablename__}")
    return handler


def check_permissions(permissions: Principal, entity: Any, action: str, db: Session):
    """
    Main entry point for permission checking.
    Uses the registry pattern to delegate to appropriate handlers.
    """
    return permission_registry.check_permissions(permissions, entity, action, db)


def check_action(permissions: Principal, entity: Any, action: str, record: Optional[Any] = None):
    """Raise ForbiddenException unless the principal may perform action, on record when given"""
    handler = get_handler(entity)

    if not handler.can_perform_action(permissions, action, record):
        raise ForbiddenException(detail=f"Not allowed to {action} {handler.resource_name}")


# Initialize handlers on module import
initialize_permission_handlers()
