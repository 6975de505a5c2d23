"""Tests for the split-buddy command line."""

import pytest
from typer.testing import CliRunner

from split_buddy.cli import app, format_money, parse_shares
from split_buddy.db import Database
from split_buddy.exceptions import InvalidInputError
from split_buddy.models import SplitType

ALICE = "alice@example.com"
BOB = "bob@example.com"

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the CLI at a temporary database."""
    path = tmp_path / "cli.db"
    monkeypatch.setenv("SPLIT_BUDDY_DATABASE_PATH", str(path))
    monkeypatch.setenv("SPLIT_BUDDY_NOTIFICATIONS_ENABLED", "false")
    return path


def group_id_for(db_path, email: str) -> str:
    db = Database(db_path)
    try:
        return db.list_groups_for_member(email)[0].id
    finally:
        db.close()


class TestFormatMoney:
    """Tests for accounting-style money formatting."""

    def test_positive(self):
        assert format_money(1234.5, use_color=False) == " 1,234.50 "

    def test_negative(self):
        assert format_money(-85.02, use_color=False) == "(85.02)"


class TestParseShares:
    """Tests for --share parsing."""

    def test_equal_takes_emails(self):
        shares = parse_shares([ALICE, BOB], SplitType.EQUAL, 10)

        assert [(s.owed_by, s.amount_owed) for s in shares] == [(ALICE, 5), (BOB, 5)]

    def test_exact_takes_amounts(self):
        shares = parse_shares([f"{ALICE}=3", f"{BOB}=7"], SplitType.EXACT, 10)

        assert [(s.owed_by, s.amount_owed) for s in shares] == [(ALICE, 3), (BOB, 7)]

    def test_percentage_computes_amounts(self):
        shares = parse_shares([f"{ALICE}=25", f"{BOB}=75"], SplitType.PERCENTAGE, 200)

        assert [(s.amount_owed, s.percentage) for s in shares] == [(50, 25), (150, 75)]

    def test_exact_requires_value(self):
        with pytest.raises(InvalidInputError, match="email=value"):
            parse_shares([ALICE], SplitType.EXACT, 10)

    def test_rejects_non_numeric_value(self):
        with pytest.raises(InvalidInputError, match="Not a number"):
            parse_shares([f"{ALICE}=lots"], SplitType.EXACT, 10)


class TestCommands:
    """End-to-end command tests against a temporary database."""

    def test_group_expense_and_settle(self, db_path):
        result = runner.invoke(
            app, ["create-group", "Trip", "--as", ALICE, "--member", BOB]
        )
        assert result.exit_code == 0, result.output
        assert "Created group Trip" in result.output

        group_id = group_id_for(db_path, ALICE)

        result = runner.invoke(
            app,
            [
                "add-expense", group_id, "Dinner", "--as", ALICE,
                "--amount", "100", "-s", ALICE, "-s", BOB,
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Recorded Dinner" in result.output

        result = runner.invoke(app, ["settle", group_id, "--as", BOB])
        assert result.exit_code == 0, result.output
        assert "50.00" in result.output

        result = runner.invoke(app, ["summary", "--as", ALICE])
        assert result.exit_code == 0, result.output
        assert "Trip" in result.output
        assert "50.00" in result.output

    def test_settled_group(self, db_path):
        runner.invoke(app, ["create-group", "Flat", "--as", ALICE, "-m", BOB])
        group_id = group_id_for(db_path, ALICE)

        result = runner.invoke(app, ["settle", group_id, "--as", ALICE, "--all"])

        assert result.exit_code == 0, result.output
        assert "All settled up" in result.output

    def test_non_member_gets_error(self, db_path):
        runner.invoke(app, ["create-group", "Flat", "--as", ALICE])
        group_id = group_id_for(db_path, ALICE)

        result = runner.invoke(app, ["settle", group_id, "--as", BOB])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_summary_without_groups(self, db_path):
        result = runner.invoke(app, ["summary", "--as", BOB])

        assert result.exit_code == 0
        assert "not in any groups" in result.output

    def test_user_text_is_printed_literally(self, db_path):
        result = runner.invoke(
            app, ["create-group", "Flat [/bold] [red]", "--as", ALICE, "-m", BOB]
        )

        assert result.exit_code == 0, result.output
        assert "Flat [/bold] [red]" in result.output

        group_id = group_id_for(db_path, ALICE)
        result = runner.invoke(app, ["show-group", group_id, "--as", BOB])

        assert result.exit_code == 0, result.output
        assert "Flat [/bold] [red]" in result.output
