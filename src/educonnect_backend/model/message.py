from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, JSON, String
)
from sqlalchemy.orm import relationship

from .base import Base, new_id, utcnow


class Message(Base):
    __tablename__ = 'message'
    __table_args__ = (
        Index('msg_sender_receiver_created_idx', 'sender_id', 'receiver_id', 'created_at'),
        Index('msg_receiver_read_idx', 'receiver_id', 'is_read'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)

    sender_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    receiver_id = Column(ForeignKey('user.id', ondelete='CASCADE', onupdate='RESTRICT'), nullable=False)
    student_id = Column(ForeignKey('student.id', ondelete='SET NULL', onupdate='RESTRICT'))

    # Content
    subject = Column(String(255), nullable=False, default='')
    content = Column(String(16384), nullable=False)
    attachments = Column(JSON, nullable=False, default=list)

    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(True))

    # Relationships
    sender = relationship('User', foreign_keys=[sender_id], lazy='joined')
    receiver = relationship('User', foreign_keys=[receiver_id], lazy='joined')
    student = relationship('Student', foreign_keys=[student_id], lazy='joined')
