"""
Analytics Module

This module provides the dashboard summary and per-person breakdowns for the
lunch tracker.

Features:
    - Totals owed and owing across the team
    - Creditors (largest first) and debtors (largest debt first)
    - Daily spending and the highest spending day
    - Per-payer totals
    - Settlement status counts
    - Line-by-line explanation of one person's balance

Data Model:
    Input - a LunchData snapshot (people, orders, settlements)

    Output - dict with:
        - total_owed, total_owing: int
        - creditors, debtors: list of {person_id, name, amount}
        - daily_spending: {date: int}
        - highest_spending_day: {date, amount}
        - average_daily_spending: float
        - payer_totals: {person_id: int}
        - order_status_counts: {unsettled, partial, settled}
        - total_orders, team_orders, total_settlements: int

Functions:
    generate_dashboard: Build the dashboard summary for a snapshot.
    explain_person_balance: Explain how one person's balance adds up.
"""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP

from lunch_tracker.people import get_person_by_id
from lunch_tracker.settlement import (
    PARTIAL,
    SETTLED,
    UNSETTLED,
    get_order_settlement_status,
)


def _round_decimal(value: Decimal) -> float:
    """Round a Decimal to 2 decimal places and convert to float."""
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _person_name(people: list, person_id: str) -> str:
    person = get_person_by_id(people, person_id)
    return person.name if person else "Unknown"


def generate_dashboard(data) -> dict:
    """
    Build the dashboard summary for a snapshot.

    Balances are recomputed from the snapshot. Spending figures use order
    prices (what was spent on lunch), not unsettled amounts.

    Args:
        data: LunchData snapshot.

    Returns:
        dict: See module docstring for the keys.

    Notes:
        - total_owed always equals total_owing (balances sum to zero)
        - Balances for IDs with no matching person are left out of the
          creditor and debtor lists
    """
    balances = data.balances()
    known = {p.person_id for p in data.people}

    creditors = [
        {"person_id": pid, "name": _person_name(data.people, pid), "amount": amount}
        for pid, amount in balances.items()
        if amount > 0 and pid in known
    ]
    debtors = [
        {"person_id": pid, "name": _person_name(data.people, pid), "amount": amount}
        for pid, amount in balances.items()
        if amount < 0 and pid in known
    ]
    creditors.sort(key=lambda x: x["amount"], reverse=True)
    debtors.sort(key=lambda x: x["amount"])

    daily_totals = defaultdict(int)
    payer_totals = defaultdict(int)
    status_counts = {UNSETTLED: 0, PARTIAL: 0, SETTLED: 0}

    for order in data.orders:
        daily_totals[order.date] += order.price
        payer_totals[order.payer_id] += order.price
        status_counts[get_order_settlement_status(order)] += 1

    highest_spending_day = {"date": None, "amount": 0}
    if daily_totals:
        max_date = max(daily_totals, key=daily_totals.get)
        highest_spending_day = {"date": max_date, "amount": daily_totals[max_date]}

    average_daily = 0.0
    if daily_totals:
        average_daily = _round_decimal(
            Decimal(sum(daily_totals.values())) / Decimal(len(daily_totals))
        )

    return {
        "total_owed": sum(amount for amount in balances.values() if amount > 0),
        "total_owing": abs(sum(amount for amount in balances.values() if amount < 0)),
        "creditors": creditors,
        "debtors": debtors,
        "daily_spending": dict(sorted(daily_totals.items())),
        "highest_spending_day": highest_spending_day,
        "average_daily_spending": average_daily,
        "payer_totals": dict(payer_totals),
        "order_status_counts": status_counts,
        "total_orders": len(data.orders),
        "team_orders": sum(1 for o in data.orders if o.is_team_order),
        "total_settlements": len(data.settlements)
    }


def explain_person_balance(data, person_id: str) -> dict:
    """
    Explain how a person's balance is made up.

    Each line is one order or settlement that moves the person's balance, in
    collection order, with the signed effect on the balance:
        - order eaten (or team share) -> negative, unsettled part only
        - order paid for others       -> positive, unsettled part only
        - settlement sent/received    -> unallocated part only

    Args:
        data: LunchData snapshot.
        person_id: ID of the person to explain.

    Returns:
        dict: Contains:
            - person_id: string
            - lines: list of {kind, id, date, description, effect}
            - balance: int (sum of effects; equals compute_balances)
    """
    lines = []

    for order in data.orders:
        effect = 0
        if order.is_team_order:
            shares = order.shares()
            if person_id in shares:
                effect -= shares[person_id] - order.member_settled.get(person_id, 0)
            role = "team share"
        else:
            if order.person_id == person_id:
                effect -= order.unsettled_amount
            role = "lunch"
        if order.payer_id == person_id:
            effect += order.unsettled_amount
            role = f"paid {role}"

        if effect or order.references(person_id):
            lines.append({
                "kind": "order",
                "id": order.order_id,
                "date": order.date,
                "description": role,
                "effect": effect
            })

    for settlement in data.settlements:
        if not settlement.references(person_id):
            continue
        open_amount = settlement.unallocated_amount
        if settlement.from_person_id == person_id:
            effect = open_amount
            description = f"paid {_person_name(data.people, settlement.to_person_id)}"
        else:
            effect = -open_amount
            description = f"received from {_person_name(data.people, settlement.from_person_id)}"
        lines.append({
            "kind": "settlement",
            "id": settlement.settlement_id,
            "date": settlement.date,
            "description": description,
            "effect": effect
        })

    return {
        "person_id": person_id,
        "lines": lines,
        "balance": sum(line["effect"] for line in lines)
    }
