"""Pydantic domain models for split-buddy."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ============================================================================
# Ledger Models
# ============================================================================


class SplitType(str, Enum):
    """How an expense is divided between its debtors."""

    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"


class Split(BaseModel):
    """One debtor's portion of an expense."""

    model_config = ConfigDict(frozen=True)

    debtor: str
    amount_owed: float


class Expense(BaseModel):
    """A single paid-and-split event within a group.

    The sum of ``splits`` is expected to match ``total_amount`` but nothing
    downstream relies on it.
    """

    model_config = ConfigDict(frozen=True)

    payer: str
    total_amount: float
    splits: tuple[Split, ...] = ()
    id: int | None = None
    group_id: str | None = None
    description: str = ""
    split_type: SplitType = SplitType.EXACT
    created_at: datetime = Field(default_factory=datetime.now)


class Transfer(BaseModel):
    """A one-directional payment from a debtor to a creditor."""

    model_config = ConfigDict(frozen=True)

    from_user: str
    to_user: str
    amount: float

    @model_validator(mode="after")
    def _check_direction_and_amount(self) -> "Transfer":
        if self.amount <= 0:
            raise ValueError(f"Transfer amount must be positive, got {self.amount}")
        if self.from_user == self.to_user:
            raise ValueError(f"Transfer from {self.from_user} to itself")
        return self


class UserSettlement(BaseModel):
    """The transfers touching one participant and their signed net position.

    ``amount`` is positive when the participant is owed money and negative
    when they owe.
    """

    model_config = ConfigDict(frozen=True)

    user: str
    transfers: tuple[Transfer, ...]
    amount: float


# ============================================================================
# Group Models
# ============================================================================


class Role(str, Enum):
    """Role granted to a member when added to a group."""

    ADMIN = "admin"
    MEMBER = "member"


class GroupMember(BaseModel):
    """Membership of one user in one group."""

    group_id: str
    email: str
    is_admin: bool = False
    is_active: bool = True


class Group(BaseModel):
    """A group of users sharing expenses."""

    id: str
    name: str
    description: str = ""
    created_by: str
    is_deleted: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    members: list[GroupMember] = Field(default_factory=list)


# ============================================================================
# Request / Response Models
# ============================================================================


class IndividualShare(BaseModel):
    """A requested share of a new expense."""

    owed_by: str
    amount_owed: float
    percentage: float | None = None  # only for PERCENTAGE splits


class ExpenseCreationRequest(BaseModel):
    """Request to record a new expense in a group."""

    description: str
    paid_by: str
    total_amount: float
    split_type: SplitType = SplitType.EXACT
    shares: list[IndividualShare]


class GroupExpense(BaseModel):
    """A group as seen by one member: their settlement amount and expenses."""

    group: Group
    settlement_amount: float = 0.0
    expenses: list[Expense] = Field(default_factory=list)


class GroupExpenseSummary(BaseModel):
    """Settlement position of one user across all their groups."""

    total_settlement_amount: float
    groups: list[GroupExpense]
