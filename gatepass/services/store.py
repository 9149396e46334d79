"""Gate pass persistence - the only writer of gate_passes rows"""
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from gatepass.database import IMMEDIATE
from gatepass.models.gate_pass import TRANSITIONS, GatePass, GatePassStatus
from gatepass.services.exceptions import InvalidTransition, NotFound, TransitionConflict


class DuplicateToken(Exception):
    """A transition tried to set a token that another pass already holds"""


class GatePassStore:
    """
    Reads and conditional writes for gate passes.

    Every read goes to the database (populate_existing) so callers never
    decide on state cached earlier in the session. State changes go through
    :meth:`transition`, a single compare-and-set UPDATE keyed on the current
    status, so two racing writers can never both succeed.
    """

    def __init__(self, db: Session):
        self.db = db

    def _begin_write(self) -> None:
        # Writes run in their own transaction, opened with the SQLite write lock held
        if self.db.in_transaction():
            self.db.commit()
        self.db.connection(execution_options={IMMEDIATE: True})

    def create(self, student_id: str, mentor_id: str, reason: str) -> GatePass:
        gate_pass = GatePass(
            student_id=student_id,
            mentor_id=mentor_id,
            reason=reason,
            status=GatePassStatus.PENDING,
            token=None,
            token_active=False,
        )
        self._begin_write()
        self.db.add(gate_pass)
        self.db.commit()
        self.db.refresh(gate_pass)
        return gate_pass

    def get_by_id(self, pass_id: str) -> GatePass:
        gate_pass = (
            self.db.query(GatePass)
            .populate_existing()
            .filter(GatePass.id == pass_id)
            .first()
        )
        if gate_pass is None:
            raise NotFound(f"Gate pass {pass_id} not found")
        return gate_pass

    def get_by_token(self, token: str) -> GatePass:
        # The token is deliberately left out of the error message
        gate_pass = (
            self.db.query(GatePass)
            .populate_existing()
            .filter(GatePass.token == token)
            .first()
        )
        if gate_pass is None:
            raise NotFound("No gate pass holds this credential")
        return gate_pass

    def transition(self, pass_id: str, expected_status: GatePassStatus, **fields) -> GatePass:
        """
        Conditionally update a pass.

        The UPDATE matches on both id and ``expected_status``; it only writes
        when the row is still in that status at the moment of the write.

        Args:
            pass_id: Pass to update
            expected_status: Status the caller observed and based its decision on
            **fields: Column values to write; must include the new ``status``

        Raises:
            InvalidTransition: the requested move is not an edge of the state machine
            TransitionConflict: the row was not in ``expected_status`` (no write happened)
            DuplicateToken: the new token is already held by another pass
        """
        new_status = fields.get("status")
        if new_status not in TRANSITIONS[expected_status]:
            raise InvalidTransition(f"Cannot move a gate pass from {expected_status.value} to {new_status}")

        self._begin_write()
        stmt = (
            update(GatePass)
            .where(GatePass.id == pass_id, GatePass.status == expected_status)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateToken(str(exc.orig)) from exc

        if result.rowcount != 1:
            self.db.rollback()
            raise TransitionConflict(f"Gate pass {pass_id} is no longer {expected_status.value}")

        self.db.commit()
        return self.get_by_id(pass_id)

    # ------------------------------------------------------------------
    # Read-only history queries
    # ------------------------------------------------------------------

    def _filtered(
        self,
        status: Optional[GatePassStatus] = None,
        student_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
    ) -> Query:
        query = self.db.query(GatePass)
        if status is not None:
            query = query.filter(GatePass.status == status)
        if student_id:
            query = query.filter(GatePass.student_id == student_id)
        if mentor_id:
            query = query.filter(GatePass.mentor_id == mentor_id)
        return query

    def list(
        self,
        status: Optional[GatePassStatus] = None,
        student_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[GatePass]:
        return (
            self._filtered(status, student_id, mentor_id)
            .order_by(GatePass.applied_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count(
        self,
        status: Optional[GatePassStatus] = None,
        student_id: Optional[str] = None,
        mentor_id: Optional[str] = None,
    ) -> int:
        return self._filtered(status, student_id, mentor_id).count()
