"""
Settlements Module

This module handles recording and deleting settlement payments.

Features:
    - Record a payment from one person to another
    - Apply the payment to the orders it pays off (oldest first)
    - Delete settlements, releasing what they paid off

Data Model:
    Settlement (serialized with camelCase keys):
        - id: string (S001, S002, ... for new settlements)
        - fromPersonId: string (who paid)
        - toPersonId: string (who received)
        - amount: int (> 0)
        - date: string (YYYY-MM-DD)
        - note: string (omitted when empty)
        - allocations: {orderId: int} (what the payment paid off, per order)
        - allocatedAmount: int (sum of allocations)

Functions:
    add_settlement: Record a settlement and allocate it to orders.
    delete_settlement: Remove a settlement and release its allocations.
    forget_orders: Drop allocations to orders that no longer exist.
"""

import logging
from typing import Optional

from lunch_tracker.exceptions import PersonNotFoundError, ValidationError
from lunch_tracker.settlement import allocate_settlement, release_settlement
from lunch_tracker.utils import (
    generate_next_id,
    validate_amount,
    validate_date,
)

logger = logging.getLogger(__name__)


class Settlement:
    """
    A payment from one person to another.

    Attributes:
        settlement_id (str): Unique identifier.
        from_person_id (str): Who paid.
        to_person_id (str): Who received.
        amount (int): Amount paid.
        date (str): Payment date (YYYY-MM-DD).
        note (str | None): Optional note.
        allocations (dict): order_id -> amount applied to that order when recorded.
    """

    def __init__(
        self,
        settlement_id: str,
        from_person_id: str,
        to_person_id: str,
        amount: int,
        date: str,
        note: Optional[str] = None,
        allocations: Optional[dict] = None
    ):
        self.settlement_id = settlement_id
        self.from_person_id = from_person_id
        self.to_person_id = to_person_id
        self.amount = amount
        self.date = date
        self.note = note
        self.allocations = dict(allocations or {})

    @property
    def allocated_amount(self) -> int:
        """Portion of the payment applied to orders."""
        return sum(self.allocations.values())

    @property
    def unallocated_amount(self) -> int:
        """Portion of the payment that did not match any order."""
        return self.amount - self.allocated_amount

    def references(self, person_id: str) -> bool:
        return person_id in (self.from_person_id, self.to_person_id)

    def to_dict(self) -> dict:
        """Convert settlement to a JSON-ready dictionary."""
        data = {
            "id": self.settlement_id,
            "fromPersonId": self.from_person_id,
            "toPersonId": self.to_person_id,
            "amount": self.amount,
            "date": self.date,
            "allocatedAmount": self.allocated_amount,
            "allocations": dict(self.allocations)
        }
        if self.note:
            data["note"] = self.note
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Settlement":
        """
        Create a Settlement from a dictionary.

        Records without allocations (older exports) count in full toward
        balances.
        """
        return cls(
            settlement_id=data.get("id"),
            from_person_id=data.get("fromPersonId"),
            to_person_id=data.get("toPersonId"),
            amount=data.get("amount", 0),
            date=data.get("date"),
            note=data.get("note"),
            allocations=data.get("allocations")
        )

    def __repr__(self) -> str:
        return (
            f"Settlement(id='{self.settlement_id}', from='{self.from_person_id}', "
            f"to='{self.to_person_id}', amount={self.amount})"
        )


def add_settlement(
    settlements: list[Settlement],
    orders: list,
    people: list,
    from_person_id: str,
    to_person_id: str,
    amount: int,
    settlement_date: str,
    note: Optional[str] = None
) -> tuple[list[Settlement], list, Settlement]:
    """
    Record a settlement and apply it to the orders it pays off.

    The payment is allocated to the sender's unsettled orders paid for by the
    receiver, oldest first (see settlement.allocate_settlement). Whatever does
    not match an order stays on the settlement as an unallocated credit and is
    counted directly by the balance engine.

    Args:
        settlements: Current settlements.
        orders: Current orders.
        people: Current people.
        from_person_id: Who paid.
        to_person_id: Who received.
        amount: Amount paid (must be > 0).
        settlement_date: Date of the payment (YYYY-MM-DD).
        note: Optional note.

    Returns:
        tuple: (new settlements, new orders, the created Settlement).

    Raises:
        ValidationError: If amount or date is invalid, or sender == receiver.
        PersonNotFoundError: If either person is unknown.
    """
    validate_amount(amount, "amount")
    validate_date(settlement_date, "date")
    if from_person_id == to_person_id:
        raise ValidationError("a settlement needs two different people")

    known = {p.person_id for p in people}
    for person_id in (from_person_id, to_person_id):
        if person_id not in known:
            raise PersonNotFoundError(person_id)

    updated_orders, allocations, remaining = allocate_settlement(
        orders, from_person_id, to_person_id, amount
    )

    settlement = Settlement(
        settlement_id=generate_next_id((s.settlement_id for s in settlements), "S"),
        from_person_id=from_person_id,
        to_person_id=to_person_id,
        amount=amount,
        date=settlement_date,
        note=note.strip() if note and note.strip() else None,
        allocations=allocations
    )

    if remaining > 0:
        logger.info(
            "Settlement %s leaves %d unallocated as credit for %s",
            settlement.settlement_id, remaining, from_person_id
        )

    return settlements + [settlement], updated_orders, settlement


def delete_settlement(
    settlements: list[Settlement],
    orders: list,
    settlement_id: str
) -> tuple[list[Settlement], list]:
    """
    Delete a settlement and release what it paid off.

    The orders it was allocated to get those amounts back as unsettled, so
    balances return to what they were before the payment was recorded.
    Unknown IDs are a no-op.

    Returns:
        tuple: (new settlements, new orders).
    """
    target = None
    for settlement in settlements:
        if settlement.settlement_id == settlement_id:
            target = settlement
            break

    if target is None:
        return list(settlements), list(orders)

    remaining = [s for s in settlements if s.settlement_id != settlement_id]
    return remaining, release_settlement(orders, target)


def forget_orders(settlements: list[Settlement], order_ids) -> list[Settlement]:
    """
    Drop allocations to deleted orders.

    What a settlement paid toward a deleted order becomes unallocated credit
    again, so the balance engine keeps counting the payment.

    Args:
        settlements: Current settlements.
        order_ids: IDs of the orders that were removed.

    Returns:
        list: New list of settlements; untouched settlements are reused.
    """
    order_ids = set(order_ids)
    updated = []
    for settlement in settlements:
        if order_ids.isdisjoint(settlement.allocations):
            updated.append(settlement)
            continue
        updated.append(Settlement(
            settlement_id=settlement.settlement_id,
            from_person_id=settlement.from_person_id,
            to_person_id=settlement.to_person_id,
            amount=settlement.amount,
            date=settlement.date,
            note=settlement.note,
            allocations={
                order_id: portion
                for order_id, portion in settlement.allocations.items()
                if order_id not in order_ids
            }
        ))
    return updated
