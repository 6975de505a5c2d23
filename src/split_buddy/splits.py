"""Validation of incoming expense requests, one strategy per split type."""

import logging
from abc import ABC, abstractmethod

from .exceptions import InvalidInputError
from .models import ExpenseCreationRequest, IndividualShare, SplitType

logger = logging.getLogger(__name__)

# Shares are entered in cents, so anything closer than a cent is a match
AMOUNT_TOLERANCE = 0.01


class SplitValidationStrategy(ABC):
    """Base class for split validation strategies."""

    def validate(self, request: ExpenseCreationRequest) -> None:
        """
        Validate an expense request.

        Args:
            request: The expense creation request

        Raises:
            InvalidInputError: If the request does not describe a valid split
        """
        if request.total_amount <= 0:
            raise InvalidInputError(
                f"Total amount must be positive, got {request.total_amount}"
            )
        if not request.shares:
            raise InvalidInputError("Expense must have at least one share")
        for share in request.shares:
            if share.amount_owed < 0:
                raise InvalidInputError(
                    f"Share for {share.owed_by} is negative: {share.amount_owed}"
                )

        self.validate_shares(request)

    @abstractmethod
    def validate_shares(self, request: ExpenseCreationRequest) -> None:
        """Check the split-type specific rules."""
        pass


class ExactSplitStrategy(SplitValidationStrategy):
    """Shares are arbitrary amounts that must add up to the total."""

    def validate_shares(self, request: ExpenseCreationRequest) -> None:
        shares_total = sum(share.amount_owed for share in request.shares)
        if abs(shares_total - request.total_amount) > AMOUNT_TOLERANCE:
            raise InvalidInputError(
                f"Shares sum to {shares_total:.2f} but total is "
                f"{request.total_amount:.2f}"
            )


class EqualSplitStrategy(SplitValidationStrategy):
    """Every share is the total divided by the number of shares."""

    def validate_shares(self, request: ExpenseCreationRequest) -> None:
        expected = request.total_amount / len(request.shares)
        for share in request.shares:
            if abs(share.amount_owed - expected) > AMOUNT_TOLERANCE:
                raise InvalidInputError(
                    f"Share for {share.owed_by} is {share.amount_owed:.2f}, "
                    f"expected an equal share of {expected:.2f}"
                )


class PercentageSplitStrategy(SplitValidationStrategy):
    """Each share carries a percentage; percentages add up to 100."""

    def validate_shares(self, request: ExpenseCreationRequest) -> None:
        percentage_total = 0.0
        for share in request.shares:
            if share.percentage is None:
                raise InvalidInputError(
                    f"Share for {share.owed_by} is missing a percentage"
                )
            if share.percentage < 0:
                raise InvalidInputError(
                    f"Percentage for {share.owed_by} is negative: {share.percentage}"
                )

            expected = request.total_amount * share.percentage / 100
            if abs(share.amount_owed - expected) > AMOUNT_TOLERANCE:
                raise InvalidInputError(
                    f"Share for {share.owed_by} is {share.amount_owed:.2f}, "
                    f"but {share.percentage}% of {request.total_amount:.2f} "
                    f"is {expected:.2f}"
                )
            percentage_total += share.percentage

        if abs(percentage_total - 100) > AMOUNT_TOLERANCE:
            raise InvalidInputError(
                f"Percentages sum to {percentage_total}, expected 100"
            )


_STRATEGIES: dict[SplitType, SplitValidationStrategy] = {
    SplitType.EXACT: ExactSplitStrategy(),
    SplitType.EQUAL: EqualSplitStrategy(),
    SplitType.PERCENTAGE: PercentageSplitStrategy(),
}


def get_strategy(split_type: SplitType) -> SplitValidationStrategy:
    """Return the validation strategy for a split type."""
    try:
        return _STRATEGIES[split_type]
    except KeyError:
        raise InvalidInputError(f"Unsupported split type: {split_type}") from None


def equal_shares(total_amount: float, members: list[str]) -> list[IndividualShare]:
    """
    Split an amount equally in whole cents.

    The total is converted to cents and divided; the remainder is handed out
    one cent at a time to the first members so the shares add up exactly.

    Example:
        100.00 between three members gives 33.34, 33.33, 33.33

    Args:
        total_amount: Amount to split
        members: Emails of the members sharing the expense

    Returns:
        One share per member, in the given order

    Raises:
        InvalidInputError: If no members are given
    """
    if not members:
        raise InvalidInputError("At least one member required for an equal split")

    total_cents = round(total_amount * 100)
    base_cents, remainder = divmod(total_cents, len(members))

    shares = []
    for i, member in enumerate(members):
        cents = base_cents + 1 if i < remainder else base_cents
        shares.append(IndividualShare(owed_by=member, amount_owed=cents / 100))

    logger.debug(f"Split {total_amount:.2f} equally between {len(members)} members")
    return shares
