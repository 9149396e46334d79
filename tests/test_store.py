"""Tests for the gate pass store"""
from datetime import datetime, timezone

import pytest

from gatepass.models.gate_pass import GatePassStatus
from gatepass.services.exceptions import InvalidTransition, NotFound, TransitionConflict
from gatepass.services.store import DuplicateToken, GatePassStore


@pytest.fixture
def store(db) -> GatePassStore:
    return GatePassStore(db)


def _approve(store: GatePassStore, pass_id: str, token: str):
    now = datetime.now(timezone.utc)
    return store.transition(
        pass_id,
        GatePassStatus.PENDING,
        status=GatePassStatus.APPROVED,
        decided_at=now,
        token=token,
        token_issued_at=now,
        token_active=True,
    )


def test_create_pending(store, users):
    gate_pass = store.create(users.student.id, users.mentor.id, "Family function")

    assert gate_pass.id
    assert gate_pass.status == GatePassStatus.PENDING
    assert gate_pass.token is None
    assert gate_pass.token_active is False
    assert gate_pass.applied_at is not None
    assert gate_pass.decided_at is None
    assert gate_pass.redeemed_at is None


def test_get_by_id_not_found(store):
    with pytest.raises(NotFound):
        store.get_by_id("does-not-exist")


def test_get_by_token(store, users):
    gate_pass = store.create(users.student.id, users.mentor.id, "Family function")
    _approve(store, gate_pass.id, "AAAAAAAAAA")

    assert store.get_by_token("AAAAAAAAAA").id == gate_pass.id
    with pytest.raises(NotFound):
        store.get_by_token("BBBBBBBBBB")


def test_transition_applies_fields(store, users):
    gate_pass = store.create(users.student.id, users.mentor.id, "Family function")
    updated = _approve(store, gate_pass.id, "AAAAAAAAAA")

    assert updated.status == GatePassStatus.APPROVED
    assert updated.token == "AAAAAAAAAA"
    assert updated.token_active is True
    assert updated.decided_at is not None
    assert updated.token_issued_at is not None


def test_transition_conflict_writes_nothing(store, users):
    """Test that a stale expected status fails without touching the row"""
    gate_pass = store.create(users.student.id, users.mentor.id, "Family function")

    with pytest.raises(TransitionConflict):
        store.transition(
            gate_pass.id,
            GatePassStatus.APPROVED,
            status=GatePassStatus.UTILIZED,
            token_active=False,
            redeemed_at=datetime.now(timezone.utc),
        )

    reloaded = store.get_by_id(gate_pass.id)
    assert reloaded.status == GatePassStatus.PENDING
    assert reloaded.redeemed_at is None


def test_transition_rejects_backward_moves(store, users):
    gate_pass = store.create(users.student.id, users.mentor.id, "Family function")

    with pytest.raises(InvalidTransition):
        store.transition(gate_pass.id, GatePassStatus.REJECTED, status=GatePassStatus.PENDING)
    with pytest.raises(InvalidTransition):
        store.transition(gate_pass.id, GatePassStatus.UTILIZED, status=GatePassStatus.APPROVED)
    with pytest.raises(InvalidTransition):
        store.transition(gate_pass.id, GatePassStatus.PENDING, status=GatePassStatus.UTILIZED)


def test_second_transition_from_same_state_conflicts(store, users):
    gate_pass = store.create(users.student.id, users.mentor.id, "Family function")
    store.transition(
        gate_pass.id,
        GatePassStatus.PENDING,
        status=GatePassStatus.REJECTED,
        decided_at=datetime.now(timezone.utc),
    )

    with pytest.raises(TransitionConflict):
        _approve(store, gate_pass.id, "AAAAAAAAAA")
    assert store.get_by_id(gate_pass.id).token is None


def test_duplicate_token_is_refused(store, users):
    """Test that the unique index refuses a token another pass holds"""
    first = store.create(users.student.id, users.mentor.id, "Family function")
    second = store.create(users.student.id, users.mentor.id, "Dentist visit")
    _approve(store, first.id, "AAAAAAAAAA")

    with pytest.raises(DuplicateToken):
        _approve(store, second.id, "AAAAAAAAAA")

    reloaded = store.get_by_id(second.id)
    assert reloaded.status == GatePassStatus.PENDING
    assert reloaded.token is None


def test_list_and_count_filters(store, users):
    a = store.create(users.student.id, users.mentor.id, "Family function")
    store.create(users.student.id, users.mentor.id, "Dentist visit")
    store.create(users.unassigned_student.id, users.other_mentor.id, "Library trip")
    _approve(store, a.id, "AAAAAAAAAA")

    assert store.count() == 3
    assert store.count(status=GatePassStatus.PENDING) == 2
    assert store.count(student_id=users.student.id) == 2
    assert store.count(mentor_id=users.other_mentor.id) == 1
    assert [p.id for p in store.list(status=GatePassStatus.APPROVED)] == [a.id]
    assert len(store.list(limit=2)) == 2
