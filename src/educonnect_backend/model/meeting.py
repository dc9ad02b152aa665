from sqlalchemy import (
    CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Meeting(Base):
    __tablename__ = 'meeting'
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'confirmed', 'cancelled', 'completed')", name='ck_meeting_status'),
        CheckConstraint("requested_by IN ('parent', 'teacher')", name='ck_meeting_requested_by'),
        Index('meeting_parent_idx', 'parent_id'),
        Index('meeting_teacher_idx', 'teacher_id'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    title = Column(String(255), nullable=False)
    description = Column(String(16384))
    parent_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    teacher_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    student_id = Column(ForeignKey('student.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    scheduled_date = Column(DateTime(True), nullable=False)
    duration = Column(Integer, nullable=False, default=30)
    status = Column(String(31), nullable=False, default='pending')
    location = Column(String(31), nullable=False, default='in-person')
    meeting_link = Column(String(2048))
    notes = Column(String(16384))
    requested_by = Column(String(31), nullable=False)

    # Relationships
    parent = relationship('User', foreign_keys=[parent_id], lazy='joined')
    teacher = relationship('User', foreign_keys=[teacher_id], lazy='joined')
    student = relationship('Student', foreign_keys=[student_id], lazy='joined')
