"""Settlement engine: net balances, greedy transfer matching and per-user views.

Everything here is a pure function of its arguments. Heaps and balance maps
are created per call, so the functions are safe to call from any thread.

    expenses -> aggregate() -> balances -> minimize() -> transfers
    transfers -> transfers_for() / settlement_amount()
"""

import heapq
from collections import defaultdict
from collections.abc import Iterable, Mapping

from .models import Expense, Transfer, UserSettlement

# Balances closer to zero than this are considered settled.
DEFAULT_TOLERANCE = 1e-9


def aggregate(expenses: Iterable[Expense]) -> dict[str, float]:
    """
    Fold expenses into a signed net balance per participant.

    The payer is credited with ``total_amount`` and every debtor is debited
    with their ``amount_owed``. Participants whose balance nets to zero are
    kept in the result.

    Args:
        expenses: Expense records in any order

    Returns:
        Mapping of participant to balance (positive = owed to them)
    """
    balances: defaultdict[str, float] = defaultdict(float)

    for expense in expenses:
        # Records without a payer cannot be attributed to anyone
        if not expense.payer:
            continue

        balances[expense.payer] += expense.total_amount

        for split in expense.splits:
            if not split.debtor:
                continue
            balances[split.debtor] -= split.amount_owed

    return dict(balances)


def minimize(
    balances: Mapping[str, float], tolerance: float = DEFAULT_TOLERANCE
) -> list[Transfer]:
    """
    Compute transfers that clear every balance using a greedy match.

    The largest remaining creditor is paired with the largest remaining
    debtor until one side runs out. Equal amounts are ordered by participant
    id, so the result is deterministic. This is a heuristic: it never emits
    more than ``n - 1`` transfers but is not guaranteed to find the fewest.

    Args:
        balances: Net balance per participant
        tolerance: Amounts at or below this are treated as zero

    Returns:
        Ordered list of transfers
    """
    tolerance = max(tolerance, 0.0)

    # Max-heaps via negated amounts; the participant id breaks ties ascending
    creditors: list[tuple[float, str]] = []
    debtors: list[tuple[float, str]] = []

    for participant, balance in balances.items():
        if balance > tolerance:
            creditors.append((-balance, participant))
        elif balance < -tolerance:
            debtors.append((balance, participant))

    heapq.heapify(creditors)
    heapq.heapify(debtors)

    transfers: list[Transfer] = []

    while creditors and debtors:
        credit_neg, creditor = heapq.heappop(creditors)
        debt_neg, debtor = heapq.heappop(debtors)

        credit = -credit_neg
        debt = -debt_neg
        amount = min(credit, debt)

        transfers.append(Transfer(from_user=debtor, to_user=creditor, amount=amount))

        remaining_credit = credit - amount
        remaining_debt = debt - amount

        if remaining_credit > tolerance:
            heapq.heappush(creditors, (-remaining_credit, creditor))
        if remaining_debt > tolerance:
            heapq.heappush(debtors, (-remaining_debt, debtor))

    # Whatever is left on one side is floating-point drift
    return transfers


def transfers_for(transfers: Iterable[Transfer], user: str) -> list[Transfer]:
    """Return the transfers paid or received by ``user``, order preserved."""
    return [t for t in transfers if t.from_user == user or t.to_user == user]


def settlement_amount(transfers: Iterable[Transfer], user: str) -> float:
    """
    Reduce transfers to one signed amount for ``user``.

    Returns:
        Total received minus total paid (positive = user is owed)
    """
    amount = 0.0
    for transfer in transfers:
        if transfer.to_user == user:
            amount += transfer.amount
        elif transfer.from_user == user:
            amount -= transfer.amount
    return amount


def settlement_for(
    expenses: Iterable[Expense], user: str, tolerance: float = DEFAULT_TOLERANCE
) -> UserSettlement:
    """Settle a ledger and project the result onto one participant."""
    transfers = transfers_for(minimize(aggregate(expenses), tolerance), user)
    return UserSettlement(
        user=user,
        transfers=transfers,
        amount=settlement_amount(transfers, user),
    )
