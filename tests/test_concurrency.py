"""Race tests against a file-backed database shared by many threads"""
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from gatepass.database import Base, create_db_engine
from gatepass.models.gate_pass import GatePassStatus
from gatepass.services.directory import Directory
from gatepass.services.exceptions import InvalidTransition
from gatepass.services.lifecycle import Decision, LifecycleController
from gatepass.services.redemption import RedemptionGate, RedemptionOutcome
from gatepass.services.store import GatePassStore
from gatepass.utils.credentials import RedemptionReference

from conftest import seed_directory


def _silent(event_type, payload):
    pass


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'race.db'}", poolclass=NullPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def seeded(session_factory):
    session = session_factory()
    try:
        users = seed_directory(session)
        lifecycle = LifecycleController(GatePassStore(session), Directory(session), notify=_silent)
        gate_pass = lifecycle.apply(users.student.id, "Medical appointment")
        return users.mentor.id, gate_pass.id
    finally:
        session.close()


def _run_concurrently(fn, count: int):
    barrier = threading.Barrier(count)

    def _worker(_):
        barrier.wait()
        return fn()

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(_worker, range(count)))


def test_concurrent_redeem_admits_exactly_once(session_factory, seeded):
    mentor_id, pass_id = seeded
    session = session_factory()
    try:
        lifecycle = LifecycleController(GatePassStore(session), Directory(session), notify=_silent)
        token = lifecycle.decide(pass_id, mentor_id, Decision.APPROVE).token
    finally:
        session.close()

    reference = RedemptionReference(pass_id, token)

    def redeem():
        db = session_factory()
        try:
            return RedemptionGate(GatePassStore(db), notify=_silent).redeem(reference).outcome
        finally:
            db.close()

    outcomes = Counter(_run_concurrently(redeem, 100))

    assert outcomes[RedemptionOutcome.ADMITTED] == 1
    assert outcomes[RedemptionOutcome.ALREADY_USED] == 99
    assert outcomes[RedemptionOutcome.INVALID] == 0

    session = session_factory()
    try:
        gate_pass = GatePassStore(session).get_by_id(pass_id)
        assert gate_pass.status == GatePassStatus.UTILIZED
        assert gate_pass.token_active is False
        assert gate_pass.redeemed_at is not None
    finally:
        session.close()


def test_concurrent_decide_has_one_winner(session_factory, seeded):
    """Test that racing approve/reject calls on one pending pass produce one decision"""
    mentor_id, pass_id = seeded
    decisions = [Decision.APPROVE, Decision.REJECT] * 10
    counter = iter(range(len(decisions)))
    lock = threading.Lock()

    def decide():
        with lock:
            decision = decisions[next(counter)]
        db = session_factory()
        try:
            lifecycle = LifecycleController(GatePassStore(db), Directory(db), notify=_silent)
            return lifecycle.decide(pass_id, mentor_id, decision).status
        except InvalidTransition:
            return "lost"
        finally:
            db.close()

    results = Counter(_run_concurrently(decide, len(decisions)))

    assert results["lost"] == len(decisions) - 1
    winners = [status for status in results if status != "lost"]
    assert len(winners) == 1

    session = session_factory()
    try:
        gate_pass = GatePassStore(session).get_by_id(pass_id)
        assert gate_pass.status == winners[0]
        assert (gate_pass.token is not None) == (gate_pass.status == GatePassStatus.APPROVED)
    finally:
        session.close()


def test_open_read_does_not_hold_the_write_lock(session_factory, seeded):
    """Test that a session which has only read leaves other writers free to commit"""
    mentor_id, pass_id = seeded
    reader = session_factory()
    writer = session_factory()
    try:
        assert GatePassStore(reader).get_by_id(pass_id).status == GatePassStatus.PENDING
        assert reader.in_transaction()

        lifecycle = LifecycleController(GatePassStore(writer), Directory(writer), notify=_silent)
        decided = lifecycle.decide(pass_id, mentor_id, Decision.REJECT)
        assert decided.status == GatePassStatus.REJECTED

        reader.commit()
        assert GatePassStore(reader).get_by_id(pass_id).status == GatePassStatus.REJECTED
    finally:
        reader.close()
        writer.close()
