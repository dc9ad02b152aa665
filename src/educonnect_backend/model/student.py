from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, JSON, String, Table
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow

LINK_STATUS_LINKED = "linked"
LINK_STATUS_AWAITING_PARENT = "awaiting_parent"

student_parent = Table(
    'student_parent',
    Base.metadata,
    Column('student_id', ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
)

student_teacher = Table(
    'student_teacher',
    Base.metadata,
    Column('student_id', ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', ForeignKey('user.id', ondelete='CASCADE'), primary_key=True),
)


class Student(Base):
    __tablename__ = 'student'

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)

    # Business key, immutable after creation
    student_id = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    grade = Column(String(63), nullable=False)
    section = Column(String(63))
    subjects = Column(JSON, nullable=False, default=list)
    profile_picture = Column(String(2048), nullable=False, default='')
    enrollment_date = Column(DateTime(True), nullable=False, default=utcnow)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    parents = relationship('User', secondary=student_parent, lazy='selectin')
    teachers = relationship('User', secondary=student_teacher, lazy='selectin')

    @property
    def parent_ids(self):
        return [parent.id for parent in self.parents]

    @property
    def teacher_ids(self):
        return [teacher.id for teacher in self.teachers]

    @property
    def link_status(self) -> str:
        return LINK_STATUS_LINKED if len(self.parents) > 0 else LINK_STATUS_AWAITING_PARENT
