from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, JSON, String
)
from .base import Base, new_id, utcnow



class User(Base):
    __tablename__ = 'user'
    __table_args__ = (
        CheckConstraint("role IN ('parent', 'teacher', 'admin')", name='ck_user_role'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(True), nullable=False, default=utcnow)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    role = Column(String(31), nullable=False)
    phone = Column(String(63))
    address = Column(String(1024))
    profile_picture = Column(String(2048), nullable=False, default='')
    is_active = Column(Boolean, nullable=False, default=True)

    # Ordered set of student ids; only meaningful for parents
    associated_ids = Column(JSON, nullable=False, default=list)

    def add_associated_id(self, student_id: str) -> bool:
        """Append a student to the parent's children, returns False if already present."""
        current = list(self.associated_ids or [])
        if student_id in current:
            return False
        # reassign so the JSON column is flagged dirty
        self.associated_ids = current + [student_id]
        return True
