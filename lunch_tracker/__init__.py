"""
Lunch Tracker

Records team lunch orders, who paid for them and settlements between people,
and derives everyone's running balance.
"""

from lunch_tracker.orders import IndividualOrder, TeamOrder
from lunch_tracker.people import Person
from lunch_tracker.session import LunchSession
from lunch_tracker.settlement import apply_settlement, get_order_settlement_status
from lunch_tracker.settlements import Settlement
from lunch_tracker.snapshot import LunchData
from lunch_tracker.splitter import compute_balances, split_evenly
from lunch_tracker.storage import FileStore, MemoryStore

__all__ = [
    "FileStore",
    "IndividualOrder",
    "LunchData",
    "LunchSession",
    "MemoryStore",
    "Person",
    "Settlement",
    "TeamOrder",
    "apply_settlement",
    "compute_balances",
    "get_order_settlement_status",
    "split_evenly",
]
