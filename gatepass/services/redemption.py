"""Checkpoint redemption of single-use gate pass credentials"""
import enum
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from gatepass.middleware.monitoring import record_redemption, record_transition
from gatepass.models.gate_pass import GatePass, GatePassStatus
from gatepass.services.exceptions import NotFound, TransitionConflict
from gatepass.services.lifecycle import Notifier, dispatch
from gatepass.services.store import GatePassStore
from gatepass.utils.credentials import RedemptionReference
from gatepass.utils.logger import logger
from gatepass.utils.webhook import send_webhook


class RedemptionOutcome(str, enum.Enum):
    """The only outcomes a checkpoint can tell apart"""
    ADMITTED = "admitted"
    INVALID = "invalid"
    ALREADY_USED = "already_used"


class RedemptionResult(NamedTuple):
    outcome: RedemptionOutcome
    gate_pass: Optional[GatePass] = None  # only set when admitted

    @property
    def admitted(self) -> bool:
        return self.outcome == RedemptionOutcome.ADMITTED


class RedemptionGate:
    """
    Admits or denies a presented redemption reference.

    Admission is a compare-and-set from APPROVED to UTILIZED at the store,
    never a read followed by an unconditional write, so any number of
    concurrent scans of one credential admit at most once.
    """

    def __init__(self, store: GatePassStore, notify: Notifier = send_webhook):
        self.store = store
        self.notify = notify

    def redeem(self, reference: RedemptionReference) -> RedemptionResult:
        try:
            gate_pass = self.store.get_by_token(reference.token)
        except NotFound:
            return self._deny(RedemptionOutcome.INVALID, reference.pass_id)

        if gate_pass.id != reference.pass_id:
            return self._deny(RedemptionOutcome.INVALID, reference.pass_id)

        if gate_pass.status != GatePassStatus.APPROVED or not gate_pass.token_active:
            if gate_pass.status == GatePassStatus.UTILIZED:
                return self._deny(RedemptionOutcome.ALREADY_USED, gate_pass.id)
            return self._deny(RedemptionOutcome.INVALID, gate_pass.id)

        try:
            gate_pass = self.store.transition(
                gate_pass.id,
                GatePassStatus.APPROVED,
                status=GatePassStatus.UTILIZED,
                token_active=False,
                redeemed_at=datetime.now(timezone.utc),
            )
        except TransitionConflict:
            # Another scan consumed the credential between the read and the write
            return self._deny(RedemptionOutcome.ALREADY_USED, gate_pass.id)

        record_transition(GatePassStatus.APPROVED, GatePassStatus.UTILIZED)
        record_redemption(RedemptionOutcome.ADMITTED.value)
        logger.info(
            f"Gate pass redeemed: {gate_pass.id}",
            extra={"pass_id": gate_pass.id, "outcome": RedemptionOutcome.ADMITTED.value},
        )
        dispatch(self.notify, "gatepass.redeemed", gate_pass)
        return RedemptionResult(RedemptionOutcome.ADMITTED, gate_pass)

    def _deny(self, outcome: RedemptionOutcome, pass_id: str) -> RedemptionResult:
        record_redemption(outcome.value)
        logger.info(
            "Gate pass redemption denied",
            extra={"pass_id": pass_id, "outcome": outcome.value},
        )
        return RedemptionResult(outcome)
