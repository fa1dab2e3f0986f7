"""
Pydantic models for validating imported lunch data.

The models mirror the JSON records written by export (camelCase keys).
Unknown keys are ignored so exports from older versions still import.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class PersonPayload(BaseModel):
    """Imported person record."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Person ID")
    name: str = Field(..., min_length=1, description="Display name")
    gender: Literal["male", "female"]
    is_default_payer: bool = Field(False, alias="isDefaultPayer")


class OrderPayload(BaseModel):
    """Imported order record (individual or team)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Order ID")
    person_id: str = Field(..., alias="personId")
    date: str = Field(..., pattern=DATE_PATTERN, description="Order date (YYYY-MM-DD)")
    price: int = Field(..., ge=0, description="Price in whole currency units")
    payer_id: str = Field(..., alias="payerId")
    note: Optional[str] = None
    is_team_order: Optional[bool] = Field(None, alias="isTeamOrder")
    team_members: Optional[list[str]] = Field(None, alias="teamMembers")
    settled_amount: Optional[int] = Field(None, ge=0, alias="settledAmount")
    member_settled_amounts: Optional[dict[str, int]] = Field(None, alias="memberSettledAmounts")

    @model_validator(mode="after")
    def check_amounts(self) -> "OrderPayload":
        if self.settled_amount is not None and self.settled_amount > self.price:
            raise ValueError("settledAmount cannot exceed price")
        if self.is_team_order and not self.team_members:
            raise ValueError("teamMembers must be non-empty for a team order")
        if self.team_members and len(set(self.team_members)) != len(self.team_members):
            raise ValueError("teamMembers must not contain duplicates")
        if self.member_settled_amounts and any(v < 0 for v in self.member_settled_amounts.values()):
            raise ValueError("memberSettledAmounts cannot be negative")
        return self


class SettlementPayload(BaseModel):
    """Imported settlement record."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Settlement ID")
    from_person_id: str = Field(..., alias="fromPersonId")
    to_person_id: str = Field(..., alias="toPersonId")
    amount: int = Field(..., gt=0, description="Amount paid (must be > 0)")
    date: str = Field(..., pattern=DATE_PATTERN, description="Payment date (YYYY-MM-DD)")
    note: Optional[str] = None
    allocations: Optional[dict[str, int]] = None

    @model_validator(mode="after")
    def check_allocations(self) -> "SettlementPayload":
        if self.allocations:
            if any(v < 0 for v in self.allocations.values()):
                raise ValueError("allocations cannot be negative")
            if sum(self.allocations.values()) > self.amount:
                raise ValueError("allocations cannot exceed the settlement amount")
        return self


class SnapshotPayload(BaseModel):
    """A full exported snapshot: all three collections are required lists."""
    people: list[PersonPayload]
    orders: list[OrderPayload]
    settlements: list[SettlementPayload]
