"""
==============================================================================
Concurrent Claim Tests
==============================================================================

Several pickers racing for the same item on a shared file database.
Each thread owns its own session, as request handlers do.

==============================================================================
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from picklist.core.exceptions import InvalidTransition
from picklist.db.database import DatabaseManager
from picklist.db.models import WorkItem
from picklist.services.catalog_service import WorkCatalog
from picklist.services.claim_service import ClaimCoordinator


PICKERS = 8


def _seed(db_manager: DatabaseManager, item_id: str, qty: int = 1) -> None:
    with db_manager.session_scope() as session:
        session.add(WorkItem(
            id=item_id,
            code=f"CODE-{item_id}",
            ordernum="BC000001",
            location="A1",
            qty=qty,
        ))


def _race(db_manager: DatabaseManager, item_id: str, action: str, workers: int):
    """Fire ``workers`` simultaneous transitions and collect the outcomes."""
    barrier = threading.Barrier(workers)

    def attempt() -> str:
        session = db_manager.get_session()
        try:
            barrier.wait()
            try:
                ClaimCoordinator(session).transition(item_id, action)
                return "won"
            except InvalidTransition as e:
                return e.code
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(attempt) for _ in range(workers)]
        return [future.result() for future in futures]


class TestConcurrentClaims:
    """Exactly one picker wins each item."""

    def test_single_winner_for_pick(self, file_db_manager: DatabaseManager):
        _seed(file_db_manager, "race-1")

        outcomes = _race(file_db_manager, "race-1", "pick", PICKERS)

        assert outcomes.count("won") == 1
        assert len(outcomes) == PICKERS
        assert all(
            outcome in ("ITEM_NOT_PICKABLE", "INVALID_TRANSITION")
            for outcome in outcomes if outcome != "won"
        )

        with file_db_manager.session_scope() as session:
            assert session.get(WorkItem, "race-1").qty == 0
            picks, _ = WorkCatalog(session).list_open_work()
            assert picks == []

    def test_single_winner_for_unpick(self, file_db_manager: DatabaseManager):
        _seed(file_db_manager, "race-2", qty=0)

        outcomes = _race(file_db_manager, "race-2", "unpick", PICKERS)

        assert outcomes.count("won") == 1

        with file_db_manager.session_scope() as session:
            assert session.get(WorkItem, "race-2").qty == 1

    def test_races_on_different_items_all_succeed(self, file_db_manager: DatabaseManager):
        item_ids = [f"item-{n}" for n in range(PICKERS)]
        for item_id in item_ids:
            _seed(file_db_manager, item_id)

        barrier = threading.Barrier(PICKERS)

        def attempt(item_id: str) -> str:
            session = file_db_manager.get_session()
            try:
                barrier.wait()
                return ClaimCoordinator(session).pick(item_id).status
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=PICKERS) as pool:
            statuses = list(pool.map(attempt, item_ids))

        assert statuses == ["picked"] * PICKERS
