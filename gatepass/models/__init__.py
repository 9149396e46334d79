"""Database models"""
from gatepass.models.gate_pass import GatePass, GatePassStatus
from gatepass.models.user import Role, StudentMentor, User

__all__ = ["GatePass", "GatePassStatus", "Role", "StudentMentor", "User"]
