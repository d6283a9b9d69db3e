from __future__ import annotations

import logging
import threading

import pytest

from pointledger.errors import InsufficientBalance
from pointledger.events import LedgerEvent
from pointledger.ledger import PointLedger

from .conftest import ADMIN, CONTRIBUTOR


def test_observer_sees_records_in_order(ledger: PointLedger) -> None:
    seen: list[LedgerEvent] = []
    unsubscribe = ledger.subscribe(seen.append)

    ledger.bulk_add_points(CONTRIBUTOR, ["a", "b", "a"], [1, 2, 3])
    with pytest.raises(InsufficientBalance):
        ledger.remove_points(CONTRIBUTOR, "b", 5)
    ledger.remove_points(CONTRIBUTOR, "a", 4)

    assert [(r.sequence, r.payload.get("to"), r.payload.get("from")) for r in seen] == [
        (3, "a", None),
        (4, "b", None),
        (5, "a", None),
        (6, None, "a"),
    ]

    unsubscribe()
    ledger.add_contributor(ADMIN, "dave")
    assert len(seen) == 4


def test_failing_observer_does_not_undo_commit(ledger: PointLedger, caplog: pytest.LogCaptureFixture) -> None:
    def broken(_record: LedgerEvent) -> None:
        raise RuntimeError("observer bug")

    ledger.subscribe(broken)
    with caplog.at_level(logging.ERROR, logger="pointledger.ledger"):
        ledger.add_points(CONTRIBUTOR, "a", 5)

    assert ledger.balance_of("a") == 5
    assert "Observer" in caplog.text


def test_rejections_are_logged(ledger: PointLedger, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="pointledger.ledger"):
        with pytest.raises(InsufficientBalance):
            ledger.remove_points(CONTRIBUTOR, "a", 1)

    assert "insufficient_balance" in caplog.text


def test_concurrent_callers_are_serialized(ledger: PointLedger) -> None:
    workers = 8
    per_worker = 50
    barrier = threading.Barrier(workers)

    def work(index: int) -> None:
        barrier.wait()
        for _ in range(per_worker):
            ledger.bulk_add_points(CONTRIBUTOR, [f"u{index}", "shared"], [1, 1])

    threads = [threading.Thread(target=work, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    state = ledger.state()
    assert state.balances["shared"] == workers * per_worker
    assert state.total_supply == 2 * workers * per_worker
    assert state.total_supply == sum(state.balances.values())

    sequences = [r.sequence for r in ledger.history()]
    assert sequences == list(range(1, len(sequences) + 1))
    # Each batch's two records stay adjacent.
    issued = ledger.history(since=2)
    for first, second in zip(issued[::2], issued[1::2]):
        assert first.payload["batch_index"] == 0
        assert second.payload["batch_index"] == 1
        assert second.payload["to"] == "shared"
