from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from educonnect_backend.api.exceptions import BadRequestException
from educonnect_backend.model.auth import User
from educonnect_backend.model.student import Student


def find_student(db: Session, reference: str) -> Optional[Student]:
    """Look a student up by record id or by business studentId"""
    return db.query(Student).filter(
        or_(Student.id == reference, Student.student_id == reference)
    ).first()


def resolve_student(db: Session, reference: str) -> Student:
    student = find_student(db, reference)
    if student is None:
        raise BadRequestException(detail=f"Student {reference} not found")
    return student


def resolve_students(db: Session, references: List[str]) -> List[Student]:
    students = []
    for reference in references:
        student = resolve_student(db, reference)
        if student not in students:
            students.append(student)
    return students


def student_filter_id(db: Session, reference: Optional[str]) -> Optional[str]:
    """Normalize a studentId query filter to the record id when it names a business key"""
    if reference is None:
        return None
    student = find_student(db, reference)
    return student.id if student is not None else reference


def resolve_users_with_role(db: Session, ids: List[str], role: str) -> List[User]:
    """Load users by id, all of which must exist and carry role"""
    users = []
    for user_id in dict.fromkeys(ids):
        user = db.query(User).filter(User.id == user_id).first()
        if user is None or user.role != role:
            raise BadRequestException(detail=f"User {user_id} is not a {role}")
        users.append(user)
    return users
