"""
Test data builders shared by the API tests.
"""

import base64
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from educonnect_backend.interface.tokens import create_access_token, hash_password
from educonnect_backend.model.auth import User
from educonnect_backend.model.student import Student

PASSWORD = "secret123"

# hashing is slow on purpose, so do it once
PASSWORD_HASH = hash_password(PASSWORD)


def add_user(session: Session, role: str, email: str, first_name: str = "Test", last_name: Optional[str] = None, **kwargs) -> User:
    user = User(
        first_name=first_name,
        last_name=last_name or role.capitalize(),
        email=email,
        password=PASSWORD_HASH,
        role=role,
        **kwargs,
    )
    session.add(user)
    session.flush()
    return user


def add_student(session: Session, student_id: str, first_name: str, last_name: str,
                parents: Iterable[User] = (), teachers: Iterable[User] = (), **kwargs) -> Student:
    student = Student(
        student_id=student_id,
        first_name=first_name,
        last_name=last_name,
        date_of_birth=kwargs.pop("date_of_birth", date(2015, 5, 1)),
        grade=kwargs.pop("grade", "Grade 4"),
        **kwargs,
    )
    student.parents = list(parents)
    student.teachers = list(teachers)
    session.add(student)
    session.flush()
    for parent in parents:
        parent.add_associated_id(student.id)
    return student


def bearer(user_id: str, role: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


def basic(email: str, password: str = PASSWORD) -> Dict[str, str]:
    encoded = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


@dataclass
class SchoolData:
    ids: Dict[str, str] = field(default_factory=dict)
    roles: Dict[str, str] = field(default_factory=dict)
    students: Dict[str, str] = field(default_factory=dict)

    def headers(self, name: str) -> Dict[str, str]:
        return bearer(self.ids[name], self.roles[name])


def build_school(session: Session) -> SchoolData:
    data = SchoolData()

    parent = add_user(session, "parent", "parent@example.com", first_name="Pat", last_name="Parker")
    other_parent = add_user(session, "parent", "other.parent@example.com", first_name="Olive", last_name="Owens")
    teacher = add_user(session, "teacher", "teacher@example.com", first_name="Tess", last_name="Taylor")
    other_teacher = add_user(session, "teacher", "other.teacher@example.com", first_name="Tom", last_name="Turner")
    admin = add_user(session, "admin", "admin@example.com", first_name="Ada", last_name="Admin")

    alice = add_student(session, "STU0001", "Alice", "Parker", parents=[parent], teachers=[teacher])
    bob = add_student(session, "STU0002", "Bob", "Owens", parents=[other_parent], teachers=[other_teacher])
    carol = add_student(session, "STU0003", "Carol", "Nobody")

    session.commit()

    for name, user in [
        ("parent", parent), ("other_parent", other_parent),
        ("teacher", teacher), ("other_teacher", other_teacher),
        ("admin", admin),
    ]:
        data.ids[name] = user.id
        data.roles[name] = user.role

    for name, student in [("alice", alice), ("bob", bob), ("carol", carol)]:
        data.students[name] = student.id

    return data
