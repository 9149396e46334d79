"""User directory schemas"""
from pydantic import BaseModel, ConfigDict

from gatepass.models.user import Role


class MentorResponse(BaseModel):
    """Schema for a student's assigned approver"""

    id: str
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)
