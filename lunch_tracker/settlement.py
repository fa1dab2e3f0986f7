"""
Settlement Module

This module holds the settlement allocator for the lunch tracker.

Features:
    - Apply a payment to the specific orders it pays off, oldest first
    - Partial settlement of individual orders and team shares
    - Reverse an allocation when a settlement is deleted
    - Per-order settlement status
    - Suggested payments from net balances

Data Model:
    Input - orders: list of IndividualOrder / TeamOrder
    Input - settlement: Settlement (from_person_id, to_person_id, amount)

    Output - (updated_orders, remaining_amount)
        - updated_orders: new list, same order as the input
        - remaining_amount: part of the payment that matched no debt

Functions:
    unsettled_amount: price - settled_amount for an order.
    get_order_settlement_status: "unsettled", "partial" or "settled".
    allocate_settlement: Allocate a payment and report the per-order amounts.
    apply_settlement: Allocate a settlement; return orders and leftover.
    release_settlement: Undo a settlement's allocations.
    suggest_settlement_amount: Default amount for a payment between two people.
    suggest_settlements: Minimal list of payments that clears all balances.
"""

import logging

logger = logging.getLogger(__name__)

UNSETTLED = "unsettled"
PARTIAL = "partial"
SETTLED = "settled"


def unsettled_amount(order) -> int:
    """Return the portion of an order's price not yet covered by settlements."""
    return order.price - order.settled_amount


def get_order_settlement_status(order) -> str:
    """
    Derive the settlement status of an order.

    Returns:
        str: One of:
            - "unsettled": nothing settled yet
            - "settled": settled amount has reached the price
            - "partial": anything in between
    """
    settled = order.settled_amount

    if settled == 0:
        return UNSETTLED
    if settled >= order.price:
        return SETTLED
    return PARTIAL


def _is_relevant(order, from_person_id: str, to_person_id: str) -> bool:
    """True if the order is a debt from from_person_id to to_person_id."""
    if order.payer_id != to_person_id:
        return False
    if order.is_team_order:
        return from_person_id in order.members
    return order.person_id == from_person_id


def allocate_settlement(
    orders: list,
    from_person_id: str,
    to_person_id: str,
    amount: int
) -> tuple[list, dict[str, int], int]:
    """
    Allocate a payment against the sender's debts to the receiver.

    Greedy oldest-debt-first allocation:
        1. Select orders paid by to_person_id in which from_person_id ate
           (individual orders) or is a team member (team orders)
        2. Sort them by date ascending; the sort is stable, so orders on the
           same date keep their collection order
        3. For each one, settle min(remaining, what the sender still owes on
           it) and subtract that from remaining
        4. Stop as soon as nothing remains

    For a team order, what the sender still owes is their own share minus
    what they already settled; other members' shares are never touched.

    Args:
        orders: Current orders (not modified).
        from_person_id: Who paid.
        to_person_id: Who received.
        amount: Amount paid.

    Returns:
        tuple: (updated_orders, allocations, remaining_amount)
            - updated_orders: new list in the original order
            - allocations: order_id -> amount applied to that order
            - remaining_amount: unallocated part of the payment
    """
    updated_orders = list(orders)
    positions = {id(order): index for index, order in enumerate(orders)}

    relevant = [
        order for order in orders
        if _is_relevant(order, from_person_id, to_person_id)
    ]
    relevant.sort(key=lambda order: order.date)

    remaining = amount
    allocations = {}

    for order in relevant:
        if remaining <= 0:
            break

        owed = order.unsettled_for(from_person_id)
        if owed <= 0:
            continue

        portion = min(remaining, owed)
        updated_orders[positions[id(order)]] = order.settle(from_person_id, portion)
        allocations[order.order_id] = allocations.get(order.order_id, 0) + portion
        remaining -= portion

    logger.debug(
        "Allocated %d of %d from %s to %s across %d orders",
        amount - remaining, amount, from_person_id, to_person_id, len(allocations)
    )

    return updated_orders, allocations, remaining


def apply_settlement(orders: list, settlement, people: list) -> tuple[list, int]:
    """
    Apply a settlement payment to the orders it pays off.

    See allocate_settlement for the allocation rule.

    Args:
        orders: Current orders (not modified).
        settlement: The payment (from_person_id, to_person_id, amount).
        people: Current people (not consulted by the allocation rule).

    Returns:
        tuple: (updated_orders, remaining_amount). A remaining amount above
        zero is money paid beyond any known debt; the caller decides how to
        treat it (it is kept on the settlement as a credit).
    """
    updated_orders, _, remaining = allocate_settlement(
        orders,
        settlement.from_person_id,
        settlement.to_person_id,
        settlement.amount
    )
    return updated_orders, remaining


def release_settlement(orders: list, settlement) -> list:
    """
    Undo the allocations a settlement made when it was recorded.

    Orders that no longer exist are skipped.

    Returns:
        list: New list of orders.
    """
    allocations = settlement.allocations
    updated = []
    for order in orders:
        portion = allocations.get(order.order_id, 0)
        if portion:
            order = order.settle(settlement.from_person_id, -portion)
        updated.append(order)
    return updated


def suggest_settlement_amount(balances: dict, from_person_id: str, to_person_id: str) -> int:
    """
    Suggest how much from_person_id should pay to_person_id.

    Only when the sender owes money and the receiver is owed money; the
    suggestion is the smaller of the two. Otherwise 0.
    """
    from_balance = balances.get(from_person_id)
    to_balance = balances.get(to_person_id)

    if from_balance is None or to_balance is None:
        return 0
    if from_balance < 0 and to_balance > 0:
        return min(abs(from_balance), to_balance)
    return 0


def suggest_settlements(balances: dict) -> list[dict]:
    """
    Convert net balances into a minimal list of suggested payments.

    Uses a greedy algorithm:
        1. Separate people into debtors (balance < 0) and creditors (balance > 0)
        2. Sort both by size, largest first
        3. Match the largest debtor with the largest creditor, pay the smaller
           of the two amounts, and move on when either side reaches zero

    Args:
        balances: person_id -> int balance, as returned by compute_balances.

    Returns:
        list[dict]: Payments, each containing:
            - from_person_id: string (debtor who pays)
            - to_person_id: string (creditor who receives)
            - amount: int
    """
    debtors = [[pid, -amount] for pid, amount in balances.items() if amount < 0]
    creditors = [[pid, amount] for pid, amount in balances.items() if amount > 0]

    debtors.sort(key=lambda x: x[1], reverse=True)
    creditors.sort(key=lambda x: x[1], reverse=True)

    payments = []
    debtor_idx = 0
    creditor_idx = 0

    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor_id, debt = debtors[debtor_idx]
        creditor_id, credit = creditors[creditor_idx]

        payment = min(debt, credit)
        payments.append({
            "from_person_id": debtor_id,
            "to_person_id": creditor_id,
            "amount": payment
        })

        debtors[debtor_idx][1] = debt - payment
        creditors[creditor_idx][1] = credit - payment

        if debtors[debtor_idx][1] == 0:
            debtor_idx += 1
        if creditors[creditor_idx][1] == 0:
            creditor_idx += 1

    return payments
