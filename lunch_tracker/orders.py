"""
Orders Module

This module handles all lunch-order operations for the lunch tracker.

Features:
    - Individual orders (one person eats, someone pays)
    - Team orders (one shared bill split evenly across members, one payer)
    - Per-order and per-member settlement tracking
    - Listing orders for a given date

Data Model:
    An order is either an IndividualOrder or a TeamOrder. Both serialize to
    the same flat record (camelCase keys):
        - id: string (O001, O002, ... for new orders)
        - personId: string (the eater; for team orders the primary member)
        - date: string (YYYY-MM-DD)
        - price: int (whole currency units; for team orders the total bill)
        - payerId: string
        - note: string (omitted when empty)
        - settledAmount: int (0 <= settledAmount <= price)
        - isTeamOrder: true                      (team orders only)
        - teamMembers: list of person IDs        (team orders only)
        - memberSettledAmounts: {personId: int}  (team orders only)

Functions:
    order_from_dict: Decode a record into the right order variant.
    add_order: Add an individual order.
    add_team_order: Add a team order.
    delete_order: Remove an order by ID.
    get_orders_for_date: Orders placed on a date.
"""

import copy
from abc import ABC, abstractmethod
from typing import Optional

from lunch_tracker.exceptions import PersonNotFoundError, ValidationError
from lunch_tracker.splitter import split_evenly
from lunch_tracker.utils import (
    generate_next_id,
    validate_amount,
    validate_date,
)


class LunchOrder(ABC):
    """
    Fields shared by both order variants.

    Attributes:
        order_id (str): Unique identifier.
        person_id (str): Person who ordered (primary member for team orders).
        date (str): Order date (YYYY-MM-DD).
        price (int): Price in whole currency units.
        payer_id (str): Person who paid the restaurant.
        note (str | None): Optional note.
    """

    is_team_order = False

    def __init__(
        self,
        order_id: str,
        person_id: str,
        date: str,
        price: int,
        payer_id: str,
        note: Optional[str] = None
    ):
        self.order_id = order_id
        self.person_id = person_id
        self.date = date
        self.price = price
        self.payer_id = payer_id
        self.note = note

    @property
    @abstractmethod
    def settled_amount(self) -> int:
        """Portion of the price already covered by settlements."""

    @property
    def unsettled_amount(self) -> int:
        """Portion of the price not yet covered by any settlement."""
        return self.price - self.settled_amount

    @abstractmethod
    def unsettled_for(self, person_id: str) -> int:
        """Amount person_id still owes the payer on this order."""

    @abstractmethod
    def settle(self, person_id: str, amount: int) -> "LunchOrder":
        """
        Return a copy with `amount` more settled on behalf of person_id.

        A negative amount releases a previous allocation. The result is
        clamped so settled amounts stay between 0 and what person_id owes.
        """

    def references(self, person_id: str) -> bool:
        return person_id == self.person_id or person_id == self.payer_id

    def _base_dict(self) -> dict:
        data = {
            "id": self.order_id,
            "personId": self.person_id,
            "date": self.date,
            "price": self.price,
            "payerId": self.payer_id,
            "settledAmount": self.settled_amount
        }
        if self.note:
            data["note"] = self.note
        return data


class IndividualOrder(LunchOrder):
    """A lunch eaten by one person and paid for by payer_id."""

    def __init__(
        self,
        order_id: str,
        person_id: str,
        date: str,
        price: int,
        payer_id: str,
        note: Optional[str] = None,
        settled_amount: int = 0
    ):
        super().__init__(order_id, person_id, date, price, payer_id, note)
        self._settled_amount = settled_amount

    @property
    def settled_amount(self) -> int:
        return self._settled_amount

    def unsettled_for(self, person_id: str) -> int:
        if person_id != self.person_id:
            return 0
        return self.unsettled_amount

    def settle(self, person_id: str, amount: int) -> "IndividualOrder":
        settled = copy.copy(self)
        settled._settled_amount = max(0, min(self.price, self._settled_amount + amount))
        return settled

    def to_dict(self) -> dict:
        """Convert order to a JSON-ready dictionary."""
        return self._base_dict()

    @classmethod
    def from_dict(cls, data: dict) -> "IndividualOrder":
        price = data.get("price", 0)
        return cls(
            order_id=data.get("id"),
            person_id=data.get("personId"),
            date=data.get("date"),
            price=price,
            payer_id=data.get("payerId"),
            note=data.get("note"),
            settled_amount=max(0, min(price, data.get("settledAmount") or 0))
        )

    def __repr__(self) -> str:
        return (
            f"IndividualOrder(id='{self.order_id}', person='{self.person_id}', "
            f"payer='{self.payer_id}', price={self.price}, settled={self.settled_amount})"
        )


class TeamOrder(LunchOrder):
    """
    A shared bill for several members with a single payer.

    The price is split evenly across members (see splitter.split_evenly).
    Settlement is tracked per member so that one member's payment never
    discharges another member's share.
    """

    is_team_order = True

    def __init__(
        self,
        order_id: str,
        members: list[str],
        date: str,
        price: int,
        payer_id: str,
        note: Optional[str] = None,
        member_settled: Optional[dict] = None,
        person_id: Optional[str] = None
    ):
        super().__init__(
            order_id,
            person_id or (members[0] if members else None),
            date,
            price,
            payer_id,
            note
        )
        self.members = list(members)
        # Clamp to each member's share; entries for non-members are dropped
        shares = self.shares()
        self.member_settled = {
            member: min(max(0, amount), shares[member])
            for member, amount in (member_settled or {}).items()
            if member in shares
        }

    @property
    def settled_amount(self) -> int:
        return sum(self.member_settled.values())

    def shares(self) -> dict[str, int]:
        """Each member's share of the price."""
        return split_evenly(self.price, self.members)

    def unsettled_for(self, person_id: str) -> int:
        share = self.shares().get(person_id, 0)
        return max(0, share - self.member_settled.get(person_id, 0))

    def settle(self, person_id: str, amount: int) -> "TeamOrder":
        shares = self.shares()
        settled = copy.copy(self)
        settled.member_settled = dict(self.member_settled)
        if person_id not in shares:
            return settled
        already = settled.member_settled.get(person_id, 0)
        settled.member_settled[person_id] = max(0, min(shares[person_id], already + amount))
        return settled

    def references(self, person_id: str) -> bool:
        return super().references(person_id) or person_id in self.members

    def to_dict(self) -> dict:
        """Convert order to a JSON-ready dictionary."""
        data = self._base_dict()
        data["isTeamOrder"] = True
        data["teamMembers"] = list(self.members)
        data["memberSettledAmounts"] = dict(self.member_settled)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "TeamOrder":
        members = list(data.get("teamMembers") or [])
        price = data.get("price", 0)
        member_settled = data.get("memberSettledAmounts")

        if member_settled is None:
            # Older records only carry the order total: spread it over the
            # members' shares in member order.
            member_settled = {}
            remaining = max(0, min(price, data.get("settledAmount") or 0))
            for member, share in split_evenly(price, members).items():
                if remaining <= 0:
                    break
                portion = min(share, remaining)
                member_settled[member] = portion
                remaining -= portion

        return cls(
            order_id=data.get("id"),
            members=members,
            date=data.get("date"),
            price=price,
            payer_id=data.get("payerId"),
            note=data.get("note"),
            member_settled=member_settled,
            person_id=data.get("personId")
        )

    def __repr__(self) -> str:
        return (
            f"TeamOrder(id='{self.order_id}', members={self.members}, "
            f"payer='{self.payer_id}', price={self.price}, settled={self.settled_amount})"
        )


def order_from_dict(data: dict) -> LunchOrder:
    """
    Decode an order record into IndividualOrder or TeamOrder.

    A record is a team order only if isTeamOrder is true and teamMembers is
    non-empty; anything else is an individual order.
    """
    if data.get("isTeamOrder") and data.get("teamMembers"):
        return TeamOrder.from_dict(data)
    return IndividualOrder.from_dict(data)


def _check_people_exist(people: list, person_ids: list[str]) -> None:
    known = {p.person_id for p in people}
    for person_id in person_ids:
        if person_id not in known:
            raise PersonNotFoundError(person_id)


def _next_order_id(orders: list[LunchOrder]) -> str:
    return generate_next_id((o.order_id for o in orders), "O")


def add_order(
    orders: list[LunchOrder],
    people: list,
    person_id: str,
    payer_id: str,
    price: int,
    order_date: str,
    note: Optional[str] = None
) -> tuple[list[LunchOrder], IndividualOrder]:
    """
    Add an individual order.

    Args:
        orders: Current orders.
        people: Current people (used to check person and payer exist).
        person_id: Who ate.
        payer_id: Who paid the restaurant.
        price: Price in whole currency units (must be > 0).
        order_date: Date of the order (YYYY-MM-DD).
        note: Optional note.

    Returns:
        tuple: (new list of orders, the created order).

    Raises:
        ValidationError: If price or date is invalid.
        PersonNotFoundError: If person or payer is unknown.
    """
    validate_amount(price, "price")
    validate_date(order_date, "date")
    _check_people_exist(people, [person_id, payer_id])

    order = IndividualOrder(
        order_id=_next_order_id(orders),
        person_id=person_id,
        date=order_date,
        price=price,
        payer_id=payer_id,
        note=note.strip() if note and note.strip() else None
    )
    return orders + [order], order


def add_team_order(
    orders: list[LunchOrder],
    people: list,
    members: list[str],
    payer_id: str,
    price: int,
    order_date: str,
    note: Optional[str] = None
) -> tuple[list[LunchOrder], TeamOrder]:
    """
    Add a team order whose total price is split evenly across members.

    The payer may or may not be one of the members. The first member is
    recorded as the order's primary person.

    Raises:
        ValidationError: If members is empty or has duplicates, or price/date is invalid.
        PersonNotFoundError: If a member or the payer is unknown.
    """
    if not isinstance(members, list) or len(members) == 0:
        raise ValidationError("members must be a non-empty list of person IDs")
    if len(set(members)) != len(members):
        raise ValidationError("members must not contain duplicates")
    validate_amount(price, "price")
    validate_date(order_date, "date")
    _check_people_exist(people, members + [payer_id])

    order = TeamOrder(
        order_id=_next_order_id(orders),
        members=members,
        date=order_date,
        price=price,
        payer_id=payer_id,
        note=note.strip() if note and note.strip() else None
    )
    return orders + [order], order


def delete_order(orders: list[LunchOrder], order_id: str) -> list[LunchOrder]:
    """Remove an order by ID. Unknown IDs are ignored."""
    return [o for o in orders if o.order_id != order_id]


def get_orders_for_date(orders: list[LunchOrder], on_date: str) -> list[LunchOrder]:
    """Return the orders placed on on_date, in collection order."""
    return [o for o in orders if o.date == on_date]
