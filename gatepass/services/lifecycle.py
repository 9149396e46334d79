"""Gate pass lifecycle - apply and decide"""
import enum
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from gatepass.config import settings
from gatepass.middleware.monitoring import record_transition
from gatepass.models.gate_pass import GatePass, GatePassStatus
from gatepass.services.directory import Directory
from gatepass.services.exceptions import (
    InvalidTransition,
    NoApproverAssigned,
    TokenIssueError,
    TransitionConflict,
    Unauthorized,
    ValidationError,
)
from gatepass.services.store import DuplicateToken, GatePassStore
from gatepass.utils.credentials import generate_token
from gatepass.utils.logger import logger
from gatepass.utils.webhook import send_webhook

Notifier = Callable[[str, Dict[str, Any]], None]


class Decision(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


def notification_payload(gate_pass: GatePass) -> Dict[str, Any]:
    """Event body for the notification hook; never includes the token"""
    return {
        "pass_id": gate_pass.id,
        "student_id": gate_pass.student_id,
        "mentor_id": gate_pass.mentor_id,
        "reason": gate_pass.reason,
        "status": gate_pass.status.value,
        "applied_at": gate_pass.applied_at,
        "decided_at": gate_pass.decided_at,
        "redeemed_at": gate_pass.redeemed_at,
    }


def dispatch(notify: Notifier, event_type: str, gate_pass: GatePass) -> None:
    """Best-effort notification; a failing hook never undoes a committed transition"""
    try:
        notify(event_type, notification_payload(gate_pass))
    except Exception as exc:
        logger.warning(
            f"Notification hook failed: {exc}",
            extra={"pass_id": gate_pass.id, "event": event_type},
        )


def validate_reason(reason: Optional[str]) -> str:
    """Return the trimmed reason or raise ValidationError"""
    trimmed = (reason or "").strip()
    if len(trimmed) < settings.REASON_MIN_LENGTH:
        raise ValidationError(
            f"Reason must be at least {settings.REASON_MIN_LENGTH} characters"
        )
    if len(trimmed) > settings.REASON_MAX_LENGTH:
        raise ValidationError(
            f"Reason must be at most {settings.REASON_MAX_LENGTH} characters"
        )
    return trimmed


class LifecycleController:
    """
    The gate pass state machine.

        PENDING --approve--> APPROVED --redeem--> UTILIZED
           \\--reject--> REJECTED

    The actor is always an explicit argument. Preconditions are checked
    against a fresh read and then enforced again by the store's conditional
    write, so a decision that loses a race fails instead of overwriting.
    """

    def __init__(self, store: GatePassStore, directory: Directory, notify: Notifier = send_webhook):
        self.store = store
        self.directory = directory
        self.notify = notify

    def apply(self, student_id: str, reason: str) -> GatePass:
        """
        Create a PENDING gate pass for a student

        Raises:
            ValidationError: reason is empty or too short after trimming
            NoApproverAssigned: the directory has no approver for this student
        """
        trimmed = validate_reason(reason)

        mentor_id = self.directory.resolve_approver(student_id)
        if mentor_id is None:
            raise NoApproverAssigned("No approver is assigned to this student")

        gate_pass = self.store.create(student_id=student_id, mentor_id=mentor_id, reason=trimmed)

        logger.info(
            f"Gate pass applied: {gate_pass.id}",
            extra={"pass_id": gate_pass.id, "actor_id": student_id, "status": gate_pass.status.value},
        )
        dispatch(self.notify, "gatepass.applied", gate_pass)
        return gate_pass

    def decide(self, pass_id: str, approver_id: str, decision: Decision) -> GatePass:
        """
        Approve or reject a PENDING gate pass

        Raises:
            NotFound: no such pass
            Unauthorized: approver_id is not the pass's assigned approver
            InvalidTransition: the pass is not PENDING, including losing a race
                against a concurrent decision
        """
        decision = Decision(decision)
        gate_pass = self.store.get_by_id(pass_id)

        if gate_pass.mentor_id != approver_id:
            raise Unauthorized("Only the assigned approver can decide this gate pass")

        if gate_pass.status != GatePassStatus.PENDING:
            raise InvalidTransition(f"Gate pass is already {gate_pass.status.value}")

        try:
            if decision == Decision.APPROVE:
                gate_pass = self._approve(pass_id)
            else:
                gate_pass = self.store.transition(
                    pass_id,
                    GatePassStatus.PENDING,
                    status=GatePassStatus.REJECTED,
                    decided_at=datetime.now(timezone.utc),
                )
        except TransitionConflict:
            raise InvalidTransition("Gate pass was already decided")

        record_transition(GatePassStatus.PENDING, gate_pass.status)
        logger.info(
            f"Gate pass {gate_pass.status.value.lower()}: {pass_id}",
            extra={"pass_id": pass_id, "actor_id": approver_id, "status": gate_pass.status.value},
        )
        event = "gatepass.approved" if gate_pass.status == GatePassStatus.APPROVED else "gatepass.rejected"
        dispatch(self.notify, event, gate_pass)
        return gate_pass

    def _approve(self, pass_id: str) -> GatePass:
        # A unique-index hit means the fresh token collided; PENDING still holds, so try another
        for _ in range(settings.TOKEN_ISSUE_ATTEMPTS):
            now = datetime.now(timezone.utc)
            try:
                return self.store.transition(
                    pass_id,
                    GatePassStatus.PENDING,
                    status=GatePassStatus.APPROVED,
                    decided_at=now,
                    token=generate_token(),
                    token_issued_at=now,
                    token_active=True,
                )
            except DuplicateToken:
                logger.warning("Generated token collided, issuing another", extra={"pass_id": pass_id})
        raise TokenIssueError("Could not issue a unique token")

    def list_for_student(self, student_id: str) -> List[GatePass]:
        return self.store.list(student_id=student_id)

    def list_pending_for_approver(self, approver_id: str) -> List[GatePass]:
        return self.store.list(status=GatePassStatus.PENDING, mentor_id=approver_id)
