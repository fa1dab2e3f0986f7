"""
Snapshot Module

The LunchData snapshot holds everything the tracker knows: people, orders and
settlements. It is the unit of persistence and of import/export.

Snapshots are treated as values. Mutations elsewhere in the package build a
new snapshot with replace() instead of changing an existing one.
"""

from lunch_tracker.orders import order_from_dict
from lunch_tracker.people import Person
from lunch_tracker.settlements import Settlement
from lunch_tracker.splitter import compute_balances


class LunchData:
    """
    A full data snapshot.

    Attributes:
        people (list[Person])
        orders (list[IndividualOrder | TeamOrder])
        settlements (list[Settlement])
    """

    def __init__(self, people=None, orders=None, settlements=None):
        self.people = list(people or [])
        self.orders = list(orders or [])
        self.settlements = list(settlements or [])

    @classmethod
    def empty(cls) -> "LunchData":
        return cls()

    def replace(self, **changes) -> "LunchData":
        """Return a new snapshot with the given collections swapped in."""
        return LunchData(
            people=changes.get("people", self.people),
            orders=changes.get("orders", self.orders),
            settlements=changes.get("settlements", self.settlements)
        )

    def balances(self) -> dict[str, int]:
        """Recompute every person's balance from scratch."""
        return compute_balances(self.people, self.orders, self.settlements)

    def to_dict(self) -> dict:
        """Convert snapshot to a JSON-ready dictionary."""
        return {
            "people": [p.to_dict() for p in self.people],
            "orders": [o.to_dict() for o in self.orders],
            "settlements": [s.to_dict() for s in self.settlements]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LunchData":
        """Create a snapshot from a dictionary with people/orders/settlements lists."""
        return cls(
            people=[Person.from_dict(p) for p in data.get("people", [])],
            orders=[order_from_dict(o) for o in data.get("orders", [])],
            settlements=[Settlement.from_dict(s) for s in data.get("settlements", [])]
        )

    def __repr__(self) -> str:
        return (
            f"LunchData(people={len(self.people)}, orders={len(self.orders)}, "
            f"settlements={len(self.settlements)})"
        )
