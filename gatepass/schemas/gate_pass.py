"""Gate pass schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from gatepass.models.gate_pass import GatePassStatus


class GatePassApply(BaseModel):
    """Schema for a student's gate pass application"""

    # Length rules are enforced by the lifecycle so they surface as validation_error
    reason: str = Field(..., description="Why the student needs to leave campus")


class GatePassResponse(BaseModel):
    """Schema for a gate pass; never carries the token"""

    id: str
    student_id: str
    mentor_id: str
    reason: str
    status: GatePassStatus
    token_active: bool
    applied_at: datetime
    decided_at: Optional[datetime] = None
    token_issued_at: Optional[datetime] = None
    redeemed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class RedemptionReferenceResponse(BaseModel):
    """What the pass holder shows at the gate"""

    pass_id: str
    token: str
    scan_url: str
    qr_data_url: str


class StudentGatePassResponse(GatePassResponse):
    """A student's own pass, with its redemption reference while it is usable"""

    redemption: Optional[RedemptionReferenceResponse] = None


class StudentGatePassListResponse(BaseModel):
    items: List[StudentGatePassResponse]
    total: int


class GatePassListResponse(BaseModel):
    """Schema for a page of gate passes"""

    items: List[GatePassResponse]
    total: int
    pending_count: int


class ScanResponse(BaseModel):
    """
    Checkpoint scan result.

    outcome is one of admitted, invalid, already_used. Denials carry no
    further detail about why the credential was refused.
    """

    admitted: bool
    outcome: str
    message: str
    gate_pass: Optional[GatePassResponse] = None
    student_name: Optional[str] = None
