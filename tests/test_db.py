"""Tests for SQLite persistence."""

from datetime import datetime

from split_buddy.models import Expense, Group, GroupMember, Split, SplitType

ALICE = "alice@example.com"
BOB = "bob@example.com"


def make_group(group_id: str = "g1", name: str = "Trip") -> Group:
    return Group(id=group_id, name=name, created_by=ALICE)


class TestGroups:
    """Tests for group storage."""

    def test_save_and_get_group(self, db):
        db.save_group(make_group())
        db.save_member(GroupMember(group_id="g1", email=ALICE, is_admin=True))

        group = db.get_active_group("g1")

        assert group is not None
        assert group.name == "Trip"
        assert group.created_by == ALICE
        assert [m.email for m in group.members] == [ALICE]
        assert group.members[0].is_admin

    def test_missing_group(self, db):
        assert db.get_active_group("nope") is None

    def test_deleted_group_is_hidden(self, db):
        db.save_group(make_group())

        db.mark_group_deleted("g1", datetime.now())

        assert db.get_active_group("g1") is None

    def test_update_group(self, db):
        db.save_group(make_group())

        db.update_group("g1", "Ski trip", "Alps", datetime(2030, 1, 1))

        group = db.get_active_group("g1")
        assert group.name == "Ski trip"
        assert group.description == "Alps"
        assert group.updated_at == datetime(2030, 1, 1)

    def test_list_groups_for_member(self, db):
        db.save_group(make_group("g1", "Trip"))
        db.save_group(make_group("g2", "Flat"))
        db.save_group(make_group("g3", "Old"))
        db.save_member(GroupMember(group_id="g1", email=BOB))
        db.save_member(GroupMember(group_id="g2", email=BOB, is_active=False))
        db.save_member(GroupMember(group_id="g3", email=BOB))
        db.mark_group_deleted("g3", datetime.now())

        groups = db.list_groups_for_member(BOB)

        assert [g.id for g in groups] == ["g1"]


class TestMembers:
    """Tests for membership storage."""

    def test_save_member_upserts(self, db):
        db.save_group(make_group())
        db.save_member(GroupMember(group_id="g1", email=BOB))

        db.save_member(GroupMember(group_id="g1", email=BOB, is_admin=True))

        members = db.list_members("g1")
        assert len(members) == 1
        assert members[0].is_admin

    def test_get_active_member_ignores_inactive(self, db):
        db.save_group(make_group())
        db.save_member(GroupMember(group_id="g1", email=BOB, is_active=False))

        assert db.get_member("g1", BOB) is not None
        assert db.get_active_member("g1", BOB) is None


class TestExpenses:
    """Tests for expense storage."""

    def test_save_and_find_expenses(self, db):
        db.save_group(make_group())
        expense_id = db.save_expense(
            Expense(
                group_id="g1",
                description="Dinner",
                payer=ALICE,
                total_amount=90.0,
                split_type=SplitType.EQUAL,
                splits=[
                    Split(debtor=ALICE, amount_owed=45.0),
                    Split(debtor=BOB, amount_owed=45.0),
                ],
            )
        )

        expenses = db.find_expenses_by_group("g1")

        assert len(expenses) == 1
        expense = expenses[0]
        assert expense.id == expense_id
        assert expense.payer == ALICE
        assert expense.total_amount == 90.0
        assert expense.split_type == SplitType.EQUAL
        assert expense.splits == (
            Split(debtor=ALICE, amount_owed=45.0),
            Split(debtor=BOB, amount_owed=45.0),
        )

    def test_expenses_ordered_oldest_first(self, db):
        db.save_group(make_group())
        for description, created_at in [
            ("Second", datetime(2024, 1, 2)),
            ("First", datetime(2024, 1, 1)),
        ]:
            db.save_expense(
                Expense(
                    group_id="g1",
                    description=description,
                    payer=ALICE,
                    total_amount=10.0,
                    splits=[Split(debtor=BOB, amount_owed=10.0)],
                    created_at=created_at,
                )
            )

        expenses = db.find_expenses_by_group("g1")

        assert [e.description for e in expenses] == ["First", "Second"]

    def test_expense_without_splits(self, db):
        db.save_group(make_group())
        db.save_expense(Expense(group_id="g1", payer=ALICE, total_amount=5.0))

        expenses = db.find_expenses_by_group("g1")

        assert expenses[0].splits == ()

    def test_expenses_are_scoped_to_group(self, db):
        db.save_group(make_group("g1"))
        db.save_group(make_group("g2"))
        db.save_expense(Expense(group_id="g2", payer=ALICE, total_amount=5.0))

        assert db.find_expenses_by_group("g1") == []
