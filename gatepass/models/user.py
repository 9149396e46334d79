"""User and StudentMentor models - the directory the gate pass core reads from"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from gatepass.database import Base


def generate_uuid_string():
    """Generate UUID as string for SQLite compatibility"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    """Closed set of actor roles.

    UNASSIGNED is a real variant for accounts that exist but have not been
    given a role yet; it never grants access to anything.
    """

    STUDENT = "STUDENT"
    APPROVER = "APPROVER"
    CHECKPOINT = "CHECKPOINT"
    ADMIN = "ADMIN"
    UNASSIGNED = "UNASSIGNED"

    @classmethod
    def parse(cls, value) -> "Role":
        """Map a claim or column value to a Role, falling back to UNASSIGNED"""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNASSIGNED


class User(Base):
    """User model - a student, approver, checkpoint operator or administrator"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(Enum(Role, native_enum=False, length=20), default=Role.UNASSIGNED, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class StudentMentor(Base):
    """StudentMentor model - assigns exactly one approver to a student"""

    __tablename__ = "student_mentors"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    mentor_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    student = relationship("User", foreign_keys=[student_id])
    mentor = relationship("User", foreign_keys=[mentor_id])
