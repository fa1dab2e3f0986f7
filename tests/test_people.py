"""
Tests for people management.
"""
import pytest

from lunch_tracker.exceptions import PersonNotFoundError, ValidationError
from lunch_tracker.people import (
    Person,
    add_person,
    delete_person,
    get_default_payer,
    get_person_by_id,
    set_default_payer,
    update_person,
)
from lunch_tracker.settlements import Settlement


def test_add_person_generates_sequential_ids():
    people, alice = add_person([], "  Alice ", "female")
    people, bob = add_person(people, "Bob", "male")

    assert alice.person_id == "P001"
    assert alice.name == "Alice"
    assert bob.person_id == "P002"
    assert len(people) == 2


def test_add_person_ignores_legacy_ids():
    """IDs from older exports do not follow the P### format."""
    legacy = Person("1712345678901abc", "Dana", "female")

    _, person = add_person([legacy], "Eve", "female")

    assert person.person_id == "P001"


@pytest.mark.parametrize("name,gender", [
    ("", "female"),
    ("   ", "male"),
    ("Alice", "other"),
])
def test_add_person_rejects_invalid_input(name, gender):
    with pytest.raises(ValidationError):
        add_person([], name, gender)


def test_add_default_payer_clears_previous(people):
    updated, dave = add_person(people, "Dave", "male", is_default_payer=True)

    assert dave.is_default_payer
    assert [p.person_id for p in updated if p.is_default_payer] == [dave.person_id]


def test_set_default_payer_is_exclusive(people):
    updated = set_default_payer(people, "P003")

    assert get_default_payer(updated).person_id == "P003"
    assert sum(1 for p in updated if p.is_default_payer) == 1
    # Input list untouched
    assert get_default_payer(people).person_id == "P002"


def test_set_default_payer_none_clears_everyone(people):
    updated = set_default_payer(people, None)

    assert get_default_payer(updated) is None


def test_set_default_payer_unknown_person(people):
    with pytest.raises(PersonNotFoundError):
        set_default_payer(people, "P999")


def test_update_person(people):
    updated = update_person(people, "P001", name="Alicia", is_default_payer=True)

    alicia = get_person_by_id(updated, "P001")
    assert alicia.name == "Alicia"
    assert alicia.gender == "female"
    assert get_default_payer(updated) is alicia
    assert get_person_by_id(people, "P001").name == "Alice"


def test_update_person_unset_default(people):
    updated = update_person(people, "P002", is_default_payer=False)

    assert get_default_payer(updated) is None


def test_update_unknown_person(people):
    with pytest.raises(PersonNotFoundError):
        update_person(people, "P999", name="Nobody")


def test_delete_person_cascades(people, make_order, make_team_order):
    orders = [
        make_order("O001", person_id="P001", payer_id="P002"),
        make_order("O002", person_id="P003", payer_id="P001"),
        make_order("O003", person_id="P003", payer_id="P002"),
        make_team_order("O004", members=["P001", "P003"], payer_id="P002"),
        make_team_order("O005", members=["P002", "P003"], payer_id="P002"),
    ]
    settlements = [
        Settlement("S001", "P001", "P002", 10000, "2024-05-02"),
        Settlement("S002", "P003", "P001", 10000, "2024-05-02"),
        Settlement("S003", "P003", "P002", 10000, "2024-05-02"),
    ]

    people_left, orders_left, settlements_left = delete_person(
        people, orders, settlements, "P001"
    )

    assert [p.person_id for p in people_left] == ["P002", "P003"]
    assert [o.order_id for o in orders_left] == ["O003", "O005"]
    assert [s.settlement_id for s in settlements_left] == ["S003"]


def test_delete_unknown_person_is_noop(people, make_order):
    orders = [make_order()]

    people_left, orders_left, _ = delete_person(people, orders, [], "P999")

    assert len(people_left) == 3
    assert len(orders_left) == 1


def test_person_dict_round_trip(bob):
    data = bob.to_dict()

    assert data == {"id": "P002", "name": "Bob", "gender": "male", "isDefaultPayer": True}
    assert Person.from_dict(data).to_dict() == data
