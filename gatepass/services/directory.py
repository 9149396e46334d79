"""Read-only lookups against the user directory"""
from typing import Optional

from sqlalchemy.orm import Session

from gatepass.models.user import StudentMentor, User


class Directory:
    """Resolves student to approver assignments.

    The tables behind it are maintained by administrative tooling; nothing in
    the gate pass core writes to them.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_approver(self, student_id: str) -> Optional[str]:
        """Return the assigned approver's id, or None when the student has none"""
        mapping = self.db.query(StudentMentor).filter(StudentMentor.student_id == student_id).first()
        return mapping.mentor_id if mapping else None

    def get_assigned_mentor(self, student_id: str) -> Optional[User]:
        mentor_id = self.resolve_approver(student_id)
        if mentor_id is None:
            return None
        return self.db.query(User).filter(User.id == mentor_id).first()
