"""
Session Module

LunchSession ties the pure functions to a store: each mutation builds a new
snapshot, swaps it in, and saves it. Balances are recomputed on every read.

Request flow for every mutation:
    1. Validate and build the new snapshot from the current one
    2. Replace the in-memory snapshot
    3. Save it to the store (failures are logged; memory stays authoritative)

Usage:
    session = LunchSession(MemoryStore())
    alice = session.add_person("Alice", "female")
    bob = session.add_person("Bob", "male", is_default_payer=True)
    session.add_order(alice.person_id, bob.person_id, 40000, "2024-05-01")
    session.balances  # {"P001": -40000, "P002": 40000}
"""

import logging
from typing import Optional

from lunch_tracker import orders as orders_ops
from lunch_tracker import people as people_ops
from lunch_tracker import settlements as settlements_ops
from lunch_tracker.snapshot import LunchData
from lunch_tracker.storage import (
    dump_snapshot,
    get_store,
    import_data,
    load_data,
    save_data,
)
from lunch_tracker.utils import today

logger = logging.getLogger(__name__)


class LunchSession:
    """
    Owns the current snapshot for one user session.

    Attributes:
        store: Key-value store the snapshot is saved to.
        key (str | None): Storage key (None means settings.STORAGE_KEY).
        data (LunchData): Current snapshot.
    """

    def __init__(self, store=None, key: Optional[str] = None):
        self.store = store if store is not None else get_store()
        self.key = key
        self.data = load_data(self.store, key)

    def _commit(self, data: LunchData) -> LunchData:
        self.data = data
        if not save_data(self.store, data, self.key):
            logger.warning("Snapshot kept in memory only; save failed")
        return data

    @property
    def balances(self) -> dict[str, int]:
        return self.data.balances()

    def reload(self) -> LunchData:
        """Re-read the snapshot from the store (e.g. after an import)."""
        self.data = load_data(self.store, self.key)
        return self.data

    # People

    def add_person(self, name: str, gender: str, is_default_payer: bool = False):
        people, person = people_ops.add_person(self.data.people, name, gender, is_default_payer)
        self._commit(self.data.replace(people=people))
        logger.info("Added person %s (%s)", person.person_id, person.name)
        return person

    def update_person(self, person_id: str, **updates):
        people = people_ops.update_person(self.data.people, person_id, **updates)
        self._commit(self.data.replace(people=people))
        return people_ops.get_person_by_id(people, person_id)

    def set_default_payer(self, person_id: Optional[str]) -> None:
        people = people_ops.set_default_payer(self.data.people, person_id)
        self._commit(self.data.replace(people=people))

    def delete_person(self, person_id: str) -> None:
        people, orders, settlements = people_ops.delete_person(
            self.data.people, self.data.orders, self.data.settlements, person_id
        )
        kept = {o.order_id for o in orders}
        settlements = settlements_ops.forget_orders(
            settlements, [o.order_id for o in self.data.orders if o.order_id not in kept]
        )
        removed = (len(self.data.orders) - len(orders), len(self.data.settlements) - len(settlements))
        self._commit(LunchData(people, orders, settlements))
        logger.info(
            "Deleted person %s with %d orders and %d settlements",
            person_id, removed[0], removed[1]
        )

    # Orders

    def add_order(
        self,
        person_id: str,
        payer_id: str,
        price: int,
        order_date: Optional[str] = None,
        note: Optional[str] = None
    ):
        orders, order = orders_ops.add_order(
            self.data.orders, self.data.people, person_id, payer_id,
            price, order_date or today(), note
        )
        self._commit(self.data.replace(orders=orders))
        return order

    def add_team_order(
        self,
        members: list[str],
        payer_id: str,
        price: int,
        order_date: Optional[str] = None,
        note: Optional[str] = None
    ):
        orders, order = orders_ops.add_team_order(
            self.data.orders, self.data.people, members, payer_id,
            price, order_date or today(), note
        )
        self._commit(self.data.replace(orders=orders))
        return order

    def delete_order(self, order_id: str) -> None:
        orders = orders_ops.delete_order(self.data.orders, order_id)
        settlements = settlements_ops.forget_orders(self.data.settlements, [order_id])
        self._commit(self.data.replace(orders=orders, settlements=settlements))

    # Settlements

    def add_settlement(
        self,
        from_person_id: str,
        to_person_id: str,
        amount: int,
        settlement_date: Optional[str] = None,
        note: Optional[str] = None
    ):
        settlements, orders, settlement = settlements_ops.add_settlement(
            self.data.settlements, self.data.orders, self.data.people,
            from_person_id, to_person_id, amount, settlement_date or today(), note
        )
        self._commit(self.data.replace(orders=orders, settlements=settlements))
        logger.info(
            "Recorded settlement %s: %s -> %s, %d (%d allocated)",
            settlement.settlement_id, from_person_id, to_person_id,
            amount, settlement.allocated_amount
        )
        return settlement

    def delete_settlement(self, settlement_id: str) -> None:
        settlements, orders = settlements_ops.delete_settlement(
            self.data.settlements, self.data.orders, settlement_id
        )
        self._commit(self.data.replace(orders=orders, settlements=settlements))

    # Import / export

    def export_text(self) -> str:
        """Current snapshot as pretty-printed JSON."""
        return dump_snapshot(self.data)

    def import_text(self, text: str) -> bool:
        """
        Replace the snapshot with imported JSON text.

        On failure nothing changes, in memory or in the store.
        """
        if not import_data(self.store, text, self.key):
            return False
        self.reload()
        return True
