"""GatePass model"""
import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from gatepass.database import Base
from gatepass.models.user import generate_uuid_string, utcnow


class GatePassStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    UTILIZED = "UTILIZED"


# Allowed forward moves; REJECTED and UTILIZED are terminal.
TRANSITIONS = {
    GatePassStatus.PENDING: frozenset({GatePassStatus.APPROVED, GatePassStatus.REJECTED}),
    GatePassStatus.APPROVED: frozenset({GatePassStatus.UTILIZED}),
    GatePassStatus.REJECTED: frozenset(),
    GatePassStatus.UTILIZED: frozenset(),
}


class GatePass(Base):
    """GatePass model - one exit-permission request and its resolution.

    token is a bearer credential: null until approval, set once, unique across
    every row. token_active is true only while the pass is APPROVED.
    """

    __tablename__ = "gate_passes"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    student_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    mentor_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    reason = Column(Text, nullable=False)
    status = Column(
        Enum(GatePassStatus, native_enum=False, length=20),
        default=GatePassStatus.PENDING,
        nullable=False,
        index=True,
    )
    token = Column(String(32), unique=True, nullable=True, index=True)
    token_active = Column(Boolean, default=False, nullable=False)
    applied_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    token_issued_at = Column(DateTime(timezone=True), nullable=True)
    redeemed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    student = relationship("User", foreign_keys=[student_id])
    mentor = relationship("User", foreign_keys=[mentor_id])

    __table_args__ = (
        # "pending passes for a mentor, newest first"
        Index("ix_gate_passes_mentor_status_time", "mentor_id", "status", "applied_at"),
    )
