"""Pydantic schemas for request/response validation"""
from gatepass.schemas.gate_pass import (
    GatePassApply,
    GatePassListResponse,
    GatePassResponse,
    RedemptionReferenceResponse,
    ScanResponse,
    StudentGatePassListResponse,
    StudentGatePassResponse,
)
from gatepass.schemas.user import MentorResponse

__all__ = [
    "GatePassApply",
    "GatePassListResponse",
    "GatePassResponse",
    "RedemptionReferenceResponse",
    "ScanResponse",
    "StudentGatePassListResponse",
    "StudentGatePassResponse",
    "MentorResponse",
]
