"""Service layer that composes persistence, membership checks and the settlement engine.

The settlement engine itself lives in :mod:`split_buddy.settlement` and knows
nothing about storage or users; this module loads expenses, enforces who may
see what, and sends notifications.
"""

import logging
import uuid
from datetime import datetime

from .config import Settings
from .db import Database
from .exceptions import (
    GroupNotFoundError,
    InvalidDataError,
    NotAdminError,
    NotAMemberError,
)
from .models import (
    Expense,
    ExpenseCreationRequest,
    Group,
    GroupExpense,
    GroupExpenseSummary,
    GroupMember,
    Role,
    Split,
    Transfer,
)
from .notifications import NotificationSink, NotificationType
from .settlement import aggregate, minimize, settlement_for
from .splits import get_strategy

logger = logging.getLogger(__name__)


def display_name(email: str) -> str:
    """Short name used in notifications (the local part of an email)."""
    return email.split("@")[0]


class SplitService:
    """Service for managing groups, expenses and settlements."""

    def __init__(
        self, settings: Settings, database: Database, notifier: NotificationSink
    ):
        """Initialize the split service."""
        self.settings = settings
        self.db = database
        self.notifier = notifier

    # ========================================================================
    # Access checks
    # ========================================================================

    def check_for_active_group(self, group_id: str) -> Group:
        """Return the group, or raise if it does not exist or was deleted."""
        group = self.db.get_active_group(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return group

    def assert_active_member(self, group_id: str, email: str) -> GroupMember:
        """Return the caller's membership, or raise if they are not active."""
        member = self.db.get_active_member(group_id, email)
        if member is None:
            raise NotAMemberError(email, group_id)
        return member

    def assert_admin(self, group_id: str, email: str) -> GroupMember:
        """Return the caller's membership, or raise if they are not an admin."""
        member = self.db.get_active_member(group_id, email)
        if member is None or not member.is_admin:
            raise NotAdminError(email, group_id)
        return member

    # ========================================================================
    # Groups
    # ========================================================================

    def create_group(
        self,
        creator: str,
        name: str,
        description: str = "",
        members: list[str] | None = None,
    ) -> Group:
        """
        Create a group and add its members.

        The creator is always a member and the group's only admin. Every other
        member is notified.

        Args:
            creator: Email of the user creating the group
            name: Group name
            description: Optional description
            members: Emails of the initial members

        Returns:
            The created group with its active members
        """
        emails = list(dict.fromkeys(members or []))
        if creator not in emails:
            emails.append(creator)

        now = datetime.now()
        group = Group(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            created_by=creator,
            created_at=now,
            updated_at=now,
        )
        self.db.save_group(group)

        logger.info(f"Creating group members for group id: {group.id}")
        for email in emails:
            self.db.save_member(
                GroupMember(group_id=group.id, email=email, is_admin=email == creator)
            )

        logger.info(f"Group created successfully for group name: {name}")

        for email in emails:
            if email != creator:
                self.notifier.notify_user(
                    NotificationType.GROUP_CREATED, email, name, creator
                )

        return self.check_for_active_group(group.id)

    def update_group(
        self, email: str, group_id: str, name: str, description: str = ""
    ) -> Group:
        """Rename a group (admin only)."""
        logger.info(f"Updating group information for group: {group_id}")
        self.check_for_active_group(group_id)
        self.assert_admin(group_id, email)

        self.db.update_group(group_id, name, description, datetime.now())
        return self.check_for_active_group(group_id)

    def delete_group(self, email: str, group_id: str):
        """Soft-delete a group (admin only)."""
        logger.info(f"Deleting group: {group_id}")
        self.check_for_active_group(group_id)
        self.assert_admin(group_id, email)

        self.db.mark_group_deleted(group_id, datetime.now())

    # ========================================================================
    # Members
    # ========================================================================

    def add_member(
        self,
        email: str,
        group_id: str,
        member_email: str,
        role: Role = Role.MEMBER,
    ) -> GroupMember:
        """
        Add a member to a group (admin only).

        A previously removed member is re-activated rather than duplicated.

        Raises:
            InvalidDataError: If the member is already active
        """
        logger.info(f"Adding member: {member_email} to group: {group_id}")
        group = self.check_for_active_group(group_id)
        self.assert_admin(group_id, email)

        existing = self.db.get_member(group_id, member_email)
        if existing and existing.is_active:
            raise InvalidDataError(f"{member_email} is already a member")

        member = GroupMember(
            group_id=group_id,
            email=member_email,
            is_admin=role == Role.ADMIN,
            is_active=True,
        )
        self.db.save_member(member)

        logger.info(f"Notifying member: {member_email}")
        self.notifier.notify_user(
            NotificationType.MEMBER_ADDED,
            member_email,
            display_name(member_email),
            group.name,
            email,
        )
        return member

    def remove_member(self, email: str, group_id: str, member_email: str):
        """Deactivate a member (admin only). Their expenses are kept."""
        logger.info(f"Deleting group member: {member_email} from group: {group_id}")
        self.check_for_active_group(group_id)
        self.assert_admin(group_id, email)

        member = self.assert_active_member(group_id, member_email)
        self.db.save_member(member.model_copy(update={"is_active": False}))

    # ========================================================================
    # Expenses
    # ========================================================================

    def add_expense(
        self, email: str, group_id: str, request: ExpenseCreationRequest
    ) -> Expense:
        """
        Record an expense in a group.

        The caller, the payer and every debtor must be active members, and
        the shares must be valid for the request's split type.

        Args:
            email: Email of the user recording the expense
            group_id: Group the expense belongs to
            request: The expense details

        Returns:
            The saved expense

        Raises:
            NotAMemberError: If any involved user is not an active member
            InvalidInputError: If the shares do not match the split type
        """
        logger.info(f"Adding expense to group id: {group_id}")
        group = self.check_for_active_group(group_id)

        self._validate_expense_request(email, group, request)
        get_strategy(request.split_type).validate(request)

        expense = Expense(
            group_id=group_id,
            description=request.description,
            payer=request.paid_by,
            total_amount=request.total_amount,
            split_type=request.split_type,
            splits=[
                Split(debtor=share.owed_by, amount_owed=share.amount_owed)
                for share in request.shares
            ],
        )
        expense_id = self.db.save_expense(expense)

        for share in request.shares:
            if share.amount_owed > 0:
                self.notifier.notify_user(
                    NotificationType.EXPENSE_ADDED,
                    share.owed_by,
                    display_name(share.owed_by),
                    share.amount_owed,
                    group.name,
                )

        return expense.model_copy(update={"id": expense_id})

    def _validate_expense_request(
        self, email: str, group: Group, request: ExpenseCreationRequest
    ):
        logger.info(f"Validating expense creation request for user: {email}")
        active = {member.email for member in group.members if member.is_active}

        if email not in active:
            raise NotAMemberError(email, group.id)
        if request.paid_by not in active:
            raise NotAMemberError(
                request.paid_by, group.id, "Payer is not a member of the group"
            )
        for share in request.shares:
            if share.owed_by not in active:
                raise NotAMemberError(share.owed_by, group.id)

    def get_group_information(self, email: str, group_id: str) -> GroupExpense:
        """Get a group with its expenses and the caller's settlement amount."""
        logger.info(f"Getting group information for group: {group_id}")
        group = self.check_for_active_group(group_id)
        self.assert_active_member(group_id, email)

        expenses = self.db.find_expenses_by_group(group_id)
        return GroupExpense(
            group=group,
            settlement_amount=self.calculate_settlement_amount(expenses, email),
            expenses=expenses,
        )

    # ========================================================================
    # Settlements
    # ========================================================================

    def calculate_settlement_amount(self, expenses: list[Expense], email: str) -> float:
        """Net amount the user is owed (positive) or owes (negative)."""
        logger.info(f"Calculating settlement amount for user: {email}")
        result = settlement_for(expenses, email, self.settings.settlement_tolerance)
        return result.amount

    def get_settlements(self, email: str, group_id: str) -> list[Transfer]:
        """Get the transfers the caller has to make or will receive."""
        logger.info(f"Getting settlements for user: {email} in group: {group_id}")
        self.check_for_active_group(group_id)
        self.assert_active_member(group_id, email)

        expenses = self.db.find_expenses_by_group(group_id)
        result = settlement_for(expenses, email, self.settings.settlement_tolerance)
        return list(result.transfers)

    def get_group_settlements(self, email: str, group_id: str) -> list[Transfer]:
        """Get every transfer needed to settle the group (admin only)."""
        logger.info(f"Getting all settlements for group: {group_id}")
        self.check_for_active_group(group_id)
        self.assert_admin(group_id, email)

        expenses = self.db.find_expenses_by_group(group_id)
        balances = aggregate(expenses)
        transfers = minimize(balances, self.settings.settlement_tolerance)

        logger.info(
            f"Settled {len(balances)} participants with {len(transfers)} transfers"
        )
        return transfers

    def fetch_all_group_summary(self, email: str) -> GroupExpenseSummary:
        """
        Get the user's settlement amount in every group they belong to.

        Raises:
            InvalidDataError: If a group's expenses cannot be settled
        """
        logger.info(f"Fetching all group summary for user: {email}")
        group_expenses = []
        for group in self.db.list_groups_for_member(email):
            try:
                expenses = self.db.find_expenses_by_group(group.id)
                amount = self.calculate_settlement_amount(expenses, email)
            except Exception as e:
                logger.error(
                    f"Error while fetching expense summary for group {group.id}: {e}"
                )
                raise InvalidDataError(
                    f"Could not compute settlement for group {group.name}"
                ) from e

            group_expenses.append(GroupExpense(group=group, settlement_amount=amount))

        return GroupExpenseSummary(
            total_settlement_amount=sum(g.settlement_amount for g in group_expenses),
            groups=group_expenses,
        )
