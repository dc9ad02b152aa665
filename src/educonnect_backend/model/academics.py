from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, Float, ForeignKey,
    Index, JSON, String, Table, UniqueConstraint
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow

assignment_student = Table(
    'assignment_student',
    Base.metadata,
    Column('assignment_id', ForeignKey('assignment.id', ondelete='CASCADE'), primary_key=True),
    Column('student_id', ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
)


class Assignment(Base):
    __tablename__ = 'assignment'
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'closed')", name='ck_assignment_status'),
        Index('assignment_teacher_idx', 'teacher_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    title = Column(String(255), nullable=False)
    description = Column(String(16384))
    subject = Column(String(255), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    due_date = Column(DateTime(True), nullable=False)
    max_grade = Column(Float, nullable=False, default=100)
    attachments = Column(JSON, nullable=False, default=list)
    status = Column(String(31), nullable=False, default='published')

    # Relationships
    teacher = relationship('User', foreign_keys=[teacher_id], lazy='joined')
    students = relationship('Student', secondary=assignment_student, lazy='selectin')

    @property
    def student_ids(self):
        return [student.id for student in self.students]


class Grade(Base):
    __tablename__ = 'grade'
    __table_args__ = (
        CheckConstraint('grade >= 0 AND grade <= max_grade', name='ck_grade_bounds'),
        CheckConstraint('max_grade > 0', name='ck_grade_max_grade'),
        Index('grade_student_date_idx', 'student_id', 'date'),
        Index('grade_teacher_idx', 'teacher_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    student_id = Column(ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    assignment_id = Column(ForeignKey('assignment.id', ondelete='SET NULL', onupdate='RESTRICT'))
    subject = Column(String(255), nullable=False)
    grade = Column(Float, nullable=False)
    max_grade = Column(Float, nullable=False, default=100)
    grade_type = Column(String(31), nullable=False, default='assignment')
    comments = Column(String(4096))
    date = Column(DateTime(True), nullable=False, default=utcnow)

    # Relationships
    student = relationship('Student', foreign_keys=[student_id], lazy='joined')
    teacher = relationship('User', foreign_keys=[teacher_id], lazy='joined')
    assignment = relationship('Assignment', foreign_keys=[assignment_id], lazy='joined')

    @property
    def percentage(self) -> float:
        if not self.max_grade:
            return 0.0
        return round(self.grade / self.max_grade * 100, 2)


class Attendance(Base):
    __tablename__ = 'attendance'
    __table_args__ = (
        # natural key: one record per student, calendar day and subject
        UniqueConstraint('student_id', 'date', 'subject', name='uq_attendance_student_date_subject'),
        CheckConstraint("status IN ('present', 'absent', 'late', 'excused')", name='ck_attendance_status'),
        Index('attendance_teacher_idx', 'teacher_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    student_id = Column(ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    date = Column(Date, nullable=False)
    subject = Column(String(255), nullable=False, default='')
    status = Column(String(31), nullable=False)
    notes = Column(String(4096))

    # Relationships
    student = relationship('Student', foreign_keys=[student_id], lazy='joined')
    teacher = relationship('User', foreign_keys=[teacher_id], lazy='joined')


class Behavior(Base):
    __tablename__ = 'behavior'
    __table_args__ = (
        CheckConstraint("type IN ('positive', 'negative', 'neutral')", name='ck_behavior_type'),
        CheckConstraint("severity IN ('low', 'medium', 'high')", name='ck_behavior_severity'),
        Index('behavior_student_date_idx', 'student_id', 'date'),
        Index('behavior_teacher_idx', 'teacher_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    student_id = Column(ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    type = Column(String(31), nullable=False)
    category = Column(String(31), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(String(16384), nullable=False)
    date = Column(DateTime(True), nullable=False, default=utcnow)
    severity = Column(String(31), nullable=False, default='medium')
    subject = Column(String(255))

    # Relationships
    student = relationship('Student', foreign_keys=[student_id], lazy='joined')
    teacher = relationship('User', foreign_keys=[teacher_id], lazy='joined')
