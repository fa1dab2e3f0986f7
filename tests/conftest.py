import pytest

from lunch_tracker.exceptions import StorageError
from lunch_tracker.orders import IndividualOrder, TeamOrder
from lunch_tracker.people import Person
from lunch_tracker.session import LunchSession
from lunch_tracker.storage import MemoryStore


class FailingStore:
    """Store whose every operation fails, like an unavailable disk."""

    def get_item(self, key):
        raise StorageError("store unavailable")

    def set_item(self, key, value):
        raise StorageError("store unavailable")


@pytest.fixture
def alice():
    return Person("P001", "Alice", "female")


@pytest.fixture
def bob():
    return Person("P002", "Bob", "male", is_default_payer=True)


@pytest.fixture
def carol():
    return Person("P003", "Carol", "female")


@pytest.fixture
def people(alice, bob, carol):
    """Alice, Bob (default payer) and Carol."""
    return [alice, bob, carol]


@pytest.fixture
def make_order():
    """Build an individual order; defaults to Alice eating, Bob paying."""
    def _make(order_id="O001", person_id="P001", payer_id="P002",
              price=40000, date="2024-05-01", settled_amount=0):
        return IndividualOrder(
            order_id=order_id,
            person_id=person_id,
            date=date,
            price=price,
            payer_id=payer_id,
            settled_amount=settled_amount
        )
    return _make


@pytest.fixture
def make_team_order():
    """Build a team order; defaults to all three members, Bob paying."""
    def _make(order_id="O010", members=None, payer_id="P002",
              price=90000, date="2024-05-01", member_settled=None):
        return TeamOrder(
            order_id=order_id,
            members=members or ["P001", "P002", "P003"],
            date=date,
            price=price,
            payer_id=payer_id,
            member_settled=member_settled
        )
    return _make


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def session(store):
    """Session with Alice, Bob (default payer) and Carol already added."""
    session = LunchSession(store)
    session.add_person("Alice", "female")
    session.add_person("Bob", "male", is_default_payer=True)
    session.add_person("Carol", "female")
    return session
