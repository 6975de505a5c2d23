"""split-buddy - Split group expenses and work out who owes whom."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .db import Database
from .models import (
    Expense,
    ExpenseCreationRequest,
    IndividualShare,
    Split,
    SplitType,
    Transfer,
    UserSettlement,
)
from .service import SplitService
from .settlement import (
    aggregate,
    minimize,
    settlement_amount,
    settlement_for,
    transfers_for,
)

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "Expense",
    "ExpenseCreationRequest",
    "IndividualShare",
    "Split",
    "SplitType",
    "Transfer",
    "UserSettlement",
    "SplitService",
    "aggregate",
    "minimize",
    "settlement_amount",
    "settlement_for",
    "transfers_for",
]
