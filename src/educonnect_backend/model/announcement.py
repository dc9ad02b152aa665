from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, JSON, String, Table
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow

announcement_student = Table(
    'announcement_student',
    Base.metadata,
    Column('announcement_id', ForeignKey('announcement.id', ondelete='CASCADE'), primary_key=True),
    Column('student_id', ForeignKey('student.id', ondelete='CASCADE'), primary_key=True),
)


class Announcement(Base):
    __tablename__ = 'announcement'
    __table_args__ = (
        CheckConstraint("target_audience IN ('all', 'parents', 'teachers', 'specific')", name='ck_announcement_audience'),
        CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name='ck_announcement_priority'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    title = Column(String(255), nullable=False)
    content = Column(String(16384), nullable=False)
    author_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    target_audience = Column(String(31), nullable=False, default='all')
    priority = Column(String(31), nullable=False, default='medium')
    attachments = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(True))

    # Relationships
    author = relationship('User', foreign_keys=[author_id], lazy='joined')
    target_students = relationship('Student', secondary=announcement_student, lazy='selectin')

    @property
    def target_student_ids(self):
        return [student.id for student in self.target_students]
