from .base import Base, metadata
from .auth import User
from .student import Student, student_parent, student_teacher
from .academics import Assignment, Grade, Attendance, Behavior, assignment_student
from .meeting import Meeting
from .message import Message
from .announcement import Announcement, announcement_student

# Import all models to ensure relationships are properly set up
from . import auth, student, academics, meeting, message, announcement

__all__ = [
    'Base',
    'metadata',
    # Auth models
    'User',
    # School models
    'Student',
    'student_parent',
    'student_teacher',
    # Academic records
    'Assignment',
    'assignment_student',
    'Grade',
    'Attendance',
    'Behavior',
    # Communication
    'Meeting',
    'Message',
    'Announcement',
    'announcement_student',
]
