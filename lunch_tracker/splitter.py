"""
Splitter Module

This module holds the balance engine for the lunch tracker.

Features:
    - Net balance per person from orders and settlements
    - Exact even split of team bills (no rounding drift)
    - Partial settlement awareness (only unsettled amounts count)

Data Model:
    Input - people: list of Person
    Input - orders: list of IndividualOrder / TeamOrder
    Input - settlements: list of Settlement

    Output - balances (dict keyed by person_id):
        - int, positive = is owed money, negative = owes money

Functions:
    split_evenly: Split a whole amount across members so shares sum exactly.
    compute_balances: Calculate per-person net balances.
"""


def split_evenly(total: int, members: list[str]) -> dict[str, int]:
    """
    Split a whole-unit amount evenly across members.

    The splitting algorithm never loses a unit:
        1. Base share = total // len(members)
        2. Remainder = total % len(members)
        3. The first `remainder` members (in list order) get one extra unit

    Example:
        >>> split_evenly(100, ["a", "b", "c"])
        {'a': 34, 'b': 33, 'c': 33}

    Args:
        total: Amount to split.
        members: Member IDs; order decides who absorbs the remainder.

    Returns:
        dict: member_id -> share. Empty if members is empty.
    """
    if not members:
        return {}

    base, remainder = divmod(total, len(members))

    shares = {}
    for i, member in enumerate(members):
        shares[member] = base + 1 if i < remainder else base
    return shares


def compute_balances(people: list, orders: list, settlements: list) -> dict[str, int]:
    """
    Calculate per-person net balances.

    For each individual order:
        - The eater is debited the unsettled amount (price - settled_amount)
        - The payer is credited the same amount

    For each team order:
        - Each member is debited their share minus what they have settled
        - The payer is credited price - settled_amount

    For each settlement:
        - Only the part not already applied to orders counts
          (amount - allocated_amount)
        - The sender's balance goes up, the receiver's goes down

    Args:
        people: List of Person; each starts at 0.
        orders: List of orders.
        settlements: List of Settlement.

    Returns:
        dict: person_id -> int balance.
            - Positive = person is owed money
            - Negative = person owes money

    Notes:
        - The balances always sum to exactly 0
        - IDs that reference deleted people still get a key; nothing raises
    """
    # Every known person starts at zero
    balances = {p.person_id: 0 for p in people}

    def _add(person_id: str, amount: int) -> None:
        balances[person_id] = balances.get(person_id, 0) + amount

    for order in orders:
        if order.is_team_order:
            for member, share in order.shares().items():
                _add(member, -(share - order.member_settled.get(member, 0)))
            _add(order.payer_id, order.price - order.settled_amount)
        else:
            unsettled = order.price - order.settled_amount
            _add(order.person_id, -unsettled)
            _add(order.payer_id, unsettled)

    for settlement in settlements:
        open_amount = settlement.amount - settlement.allocated_amount
        _add(settlement.from_person_id, open_amount)
        _add(settlement.to_person_id, -open_amount)

    return balances
