"""
People Module

This module handles all person-related operations for the lunch tracker.

Features:
    - Add/update/delete people
    - Cascade deletion of orders and settlements referencing a person
    - Default payer management (at most one default payer)
    - Person lookups

Data Model:
    Person (serialized with camelCase keys):
        - id: string (P001, P002, ... for new people)
        - name: string
        - gender: "male" or "female"
        - isDefaultPayer: bool

All functions are pure: they take lists and return new lists, leaving their
inputs untouched.

Functions:
    add_person: Add a new person.
    update_person: Change a person's fields.
    delete_person: Remove a person and everything that references them.
    set_default_payer: Make one person the default payer.
    get_person_by_id: Look up a person.
    get_default_payer: Get the current default payer, if any.
"""

import copy
from typing import Optional

from lunch_tracker.exceptions import PersonNotFoundError, ValidationError
from lunch_tracker.utils import generate_next_id, validate_non_empty_string


VALID_GENDERS = {"male", "female"}


class Person:
    """
    Represents a team member who orders or pays for lunch.

    Attributes:
        person_id (str): Unique identifier.
        name (str): Display name.
        gender (str): "male" or "female".
        is_default_payer (bool): Pre-selected payer in order entry.
    """

    def __init__(
        self,
        person_id: str,
        name: str,
        gender: str,
        is_default_payer: bool = False
    ):
        self.person_id = person_id
        self.name = name
        self.gender = gender
        self.is_default_payer = is_default_payer

    def to_dict(self) -> dict:
        """Convert person to a JSON-ready dictionary."""
        return {
            "id": self.person_id,
            "name": self.name,
            "gender": self.gender,
            "isDefaultPayer": self.is_default_payer
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Person":
        """Create a Person instance from a dictionary."""
        return cls(
            person_id=data.get("id"),
            name=data.get("name"),
            gender=data.get("gender"),
            is_default_payer=bool(data.get("isDefaultPayer", False))
        )

    def __repr__(self) -> str:
        return f"Person(id='{self.person_id}', name='{self.name}', default_payer={self.is_default_payer})"


def _validate_gender(gender: str) -> None:
    if gender not in VALID_GENDERS:
        raise ValidationError(f"gender must be one of {sorted(VALID_GENDERS)}, got: {gender}")


def get_person_by_id(people: list[Person], person_id: str) -> Optional[Person]:
    """Return the person with the given ID, or None."""
    for person in people:
        if person.person_id == person_id:
            return person
    return None


def get_default_payer(people: list[Person]) -> Optional[Person]:
    """Return the default payer, or None if nobody is flagged."""
    for person in people:
        if person.is_default_payer:
            return person
    return None


def set_default_payer(people: list[Person], person_id: Optional[str]) -> list[Person]:
    """
    Make one person the default payer.

    The flag is cleared on everyone else in the same step, so at most one
    person ever holds it. Passing None clears the flag on everybody.

    Args:
        people: Current people.
        person_id: ID of the new default payer, or None.

    Returns:
        list[Person]: New list of people.

    Raises:
        PersonNotFoundError: If person_id is given but unknown.
    """
    if person_id is not None and get_person_by_id(people, person_id) is None:
        raise PersonNotFoundError(person_id)

    updated = []
    for person in people:
        flag = person.person_id == person_id
        if person.is_default_payer != flag:
            person = copy.copy(person)
            person.is_default_payer = flag
        updated.append(person)
    return updated


def add_person(
    people: list[Person],
    name: str,
    gender: str,
    is_default_payer: bool = False
) -> tuple[list[Person], Person]:
    """
    Add a new person.

    Args:
        people: Current people.
        name: Display name (surrounding whitespace is stripped).
        gender: "male" or "female".
        is_default_payer: Make the new person the default payer.

    Returns:
        tuple: (new list of people, the created Person).

    Raises:
        ValidationError: If name or gender is invalid.
    """
    validate_non_empty_string(name, "name")
    _validate_gender(gender)

    person = Person(
        person_id=generate_next_id((p.person_id for p in people), "P"),
        name=name.strip(),
        gender=gender
    )
    updated = people + [person]

    if is_default_payer:
        updated = set_default_payer(updated, person.person_id)
        person = get_person_by_id(updated, person.person_id)

    return updated, person


def update_person(
    people: list[Person],
    person_id: str,
    name: Optional[str] = None,
    gender: Optional[str] = None,
    is_default_payer: Optional[bool] = None
) -> list[Person]:
    """
    Update a person's fields. Fields left as None keep their value.

    Setting is_default_payer=True goes through set_default_payer, so the
    previous default payer loses the flag.

    Raises:
        PersonNotFoundError: If the person does not exist.
        ValidationError: If a new name or gender is invalid.
    """
    if get_person_by_id(people, person_id) is None:
        raise PersonNotFoundError(person_id)
    if name is not None:
        validate_non_empty_string(name, "name")
    if gender is not None:
        _validate_gender(gender)

    updated = []
    for person in people:
        if person.person_id == person_id:
            person = copy.copy(person)
            if name is not None:
                person.name = name.strip()
            if gender is not None:
                person.gender = gender
            if is_default_payer is False:
                person.is_default_payer = False
        updated.append(person)

    if is_default_payer:
        updated = set_default_payer(updated, person_id)

    return updated


def delete_person(
    people: list,
    orders: list,
    settlements: list,
    person_id: str
) -> tuple[list, list, list]:
    """
    Delete a person and cascade to everything that references them.

    Removed along with the person:
        - orders where they ordered, paid, or are a team member
        - settlements where they are the sender or the receiver

    Deleting an unknown ID is a no-op.

    Args:
        people: Current people.
        orders: Current orders.
        settlements: Current settlements.
        person_id: ID of the person to delete.

    Returns:
        tuple: (people, orders, settlements) as new lists.
    """
    return (
        [p for p in people if p.person_id != person_id],
        [o for o in orders if not o.references(person_id)],
        [s for s in settlements if not s.references(person_id)]
    )
