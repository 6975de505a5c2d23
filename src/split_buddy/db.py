"""SQLite database operations for split-buddy."""

import sqlite3
from datetime import datetime
from pathlib import Path

from .models import Expense, Group, GroupMember, Split, SplitType


class Database:
    """SQLite database manager."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS groups (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                created_by TEXT NOT NULL,
                is_deleted INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS group_members (
                group_id TEXT NOT NULL REFERENCES groups(id),
                email TEXT NOT NULL,
                is_admin INTEGER NOT NULL DEFAULT 0,
                is_active INTEGER NOT NULL DEFAULT 1,
                PRIMARY KEY (group_id, email)
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                group_id TEXT NOT NULL REFERENCES groups(id),
                description TEXT NOT NULL DEFAULT '',
                paid_by TEXT NOT NULL,
                total_amount REAL NOT NULL,
                split_type TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_splits (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                expense_id INTEGER NOT NULL REFERENCES expenses(id),
                owed_by TEXT NOT NULL,
                amount_owed REAL NOT NULL
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Group operations
    # ========================================================================

    def save_group(self, group: Group):
        """Insert a new group. Members are saved separately."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO groups (
                id, name, description, created_by, is_deleted,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                group.id,
                group.name,
                group.description,
                group.created_by,
                int(group.is_deleted),
                group.created_at.isoformat(),
                group.updated_at.isoformat(),
            ),
        )
        self.conn.commit()

    def get_active_group(self, group_id: str) -> Group | None:
        """Get a group that has not been deleted, with all its memberships."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, name, description, created_by, is_deleted,
                   created_at, updated_at
            FROM groups
            WHERE id = ? AND is_deleted = 0
            """,
            (group_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None

        return self._row_to_group(row)

    def update_group(
        self, group_id: str, name: str, description: str, updated_at: datetime
    ):
        """Update a group's name and description."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            UPDATE groups SET name = ?, description = ?, updated_at = ?
            WHERE id = ?
            """,
            (name, description, updated_at.isoformat(), group_id),
        )
        self.conn.commit()

    def mark_group_deleted(self, group_id: str, updated_at: datetime):
        """Soft-delete a group."""
        cursor = self.conn.cursor()
        cursor.execute(
            "UPDATE groups SET is_deleted = 1, updated_at = ? WHERE id = ?",
            (updated_at.isoformat(), group_id),
        )
        self.conn.commit()

    def list_groups_for_member(self, email: str) -> list[Group]:
        """Get every non-deleted group the user is an active member of."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT g.id, g.name, g.description, g.created_by, g.is_deleted,
                   g.created_at, g.updated_at
            FROM groups g
            JOIN group_members m ON m.group_id = g.id
            WHERE m.email = ? AND m.is_active = 1 AND g.is_deleted = 0
            ORDER BY g.created_at
            """,
            (email,),
        )
        return [self._row_to_group(row) for row in cursor.fetchall()]

    def _row_to_group(self, row: sqlite3.Row) -> Group:
        return Group(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_by=row["created_by"],
            is_deleted=bool(row["is_deleted"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            members=self.list_members(row["id"]),
        )

    # ========================================================================
    # Membership operations
    # ========================================================================

    def save_member(self, member: GroupMember):
        """Insert or update a membership."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO group_members (group_id, email, is_admin, is_active)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(group_id, email) DO UPDATE SET
                is_admin = excluded.is_admin,
                is_active = excluded.is_active
            """,
            (
                member.group_id,
                member.email,
                int(member.is_admin),
                int(member.is_active),
            ),
        )
        self.conn.commit()

    def get_member(self, group_id: str, email: str) -> GroupMember | None:
        """Get a membership regardless of whether it is active."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT group_id, email, is_admin, is_active
            FROM group_members
            WHERE group_id = ? AND email = ?
            """,
            (group_id, email),
        )
        row = cursor.fetchone()
        return self._row_to_member(row) if row else None

    def get_active_member(self, group_id: str, email: str) -> GroupMember | None:
        """Get a membership only if it is active."""
        member = self.get_member(group_id, email)
        return member if member and member.is_active else None

    def list_members(self, group_id: str) -> list[GroupMember]:
        """Get all memberships of a group, active or not."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT group_id, email, is_admin, is_active
            FROM group_members
            WHERE group_id = ?
            ORDER BY email
            """,
            (group_id,),
        )
        return [self._row_to_member(row) for row in cursor.fetchall()]

    @staticmethod
    def _row_to_member(row: sqlite3.Row) -> GroupMember:
        return GroupMember(
            group_id=row["group_id"],
            email=row["email"],
            is_admin=bool(row["is_admin"]),
            is_active=bool(row["is_active"]),
        )

    # ========================================================================
    # Expense operations
    # ========================================================================

    def save_expense(self, expense: Expense) -> int:
        """Save an expense and its splits in one transaction."""
        if expense.group_id is None:
            raise ValueError("Cannot save an expense without a group")

        with self.conn:
            cursor = self.conn.cursor()
            cursor.execute(
                """
                INSERT INTO expenses (
                    group_id, description, paid_by, total_amount,
                    split_type, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    expense.group_id,
                    expense.description,
                    expense.payer,
                    expense.total_amount,
                    expense.split_type.value,
                    expense.created_at.isoformat(),
                ),
            )
            expense_id = cursor.lastrowid
            if expense_id is None:
                raise RuntimeError("Failed to insert expense record")

            cursor.executemany(
                """
                INSERT INTO expense_splits (expense_id, owed_by, amount_owed)
                VALUES (?, ?, ?)
                """,
                [
                    (expense_id, split.debtor, split.amount_owed)
                    for split in expense.splits
                ],
            )

        return expense_id

    def find_expenses_by_group(self, group_id: str) -> list[Expense]:
        """Get all expenses of a group with their splits, oldest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT e.id AS expense_id, e.group_id, e.description, e.paid_by,
                   e.total_amount, e.split_type, e.created_at,
                   s.owed_by, s.amount_owed
            FROM expenses e
            LEFT JOIN expense_splits s ON s.expense_id = e.id
            WHERE e.group_id = ?
            ORDER BY e.created_at, e.id, s.id
            """,
            (group_id,),
        )

        rows_by_expense: dict[int, list[sqlite3.Row]] = {}
        for row in cursor.fetchall():
            rows_by_expense.setdefault(row["expense_id"], []).append(row)

        expenses = []
        for expense_id, rows in rows_by_expense.items():
            first = rows[0]
            expenses.append(
                Expense(
                    id=expense_id,
                    group_id=first["group_id"],
                    description=first["description"],
                    payer=first["paid_by"],
                    total_amount=first["total_amount"],
                    split_type=SplitType(first["split_type"]),
                    created_at=datetime.fromisoformat(first["created_at"]),
                    splits=[
                        Split(debtor=row["owed_by"], amount_owed=row["amount_owed"])
                        for row in rows
                        if row["owed_by"] is not None
                    ],
                )
            )
        return expenses
