from datetime import timedelta

import pytest
from typer.testing import CliRunner

from cli import app
from config.settings import get_today
from utils.date_format import format_date

runner = CliRunner()

EMAIL = "cli@example.com"


@pytest.fixture
def cli_user():
    result = runner.invoke(app, ["create-user", EMAIL, "--password", "password123"])
    assert result.exit_code == 0, result.output
    return EMAIL


def _deadline(days=14):
    return format_date(get_today() + timedelta(days=days))


def _goal_id_from(output):
    return output.strip().rsplit(" ", 1)[-1]


def test_init_db():
    result = runner.invoke(app, ["init-db"])

    assert result.exit_code == 0
    assert "Database initialized." in result.output


def test_create_user_rejects_duplicates(cli_user):
    result = runner.invoke(app, ["create-user", EMAIL, "--password", "password123"])

    assert result.exit_code == 1
    assert "An account with this email already exists" in result.output


def test_create_user_validates_password():
    result = runner.invoke(app, ["create-user", "short@example.com", "--password", "short", "--lang", "pl"])

    assert result.exit_code == 1
    assert "Hasło musi mieć co najmniej 8 znaków." in result.output


def test_create_and_show_goal(cli_user):
    deadline = _deadline()
    created = runner.invoke(
        app,
        ["create-goal", "--user", cli_user, "--name", " Walk 50 km ", "--target", "50", "--deadline", deadline],
    )
    assert created.exit_code == 0, created.output
    goal_id = _goal_id_from(created.output)

    shown = runner.invoke(app, ["show-goal", goal_id, "--user", cli_user])

    assert shown.exit_code == 0, shown.output
    assert "Walk 50 km [active]" in shown.output
    assert "Progress: 0/50 (0%)" in shown.output
    assert f"Deadline: {deadline} (14 days remaining)" in shown.output


def test_create_goal_reports_form_errors(cli_user):
    result = runner.invoke(
        app,
        ["create-goal", "--user", cli_user, "--name", "Walk", "--target", "-3", "--deadline", "2020-01-01"],
    )

    assert result.exit_code == 1
    assert "Value must be a positive number." in result.output
    assert "Deadline must be in dd.MM.yyyy format." in result.output


def test_list_goals(cli_user):
    runner.invoke(app, ["create-goal", "--user", cli_user, "--name", "Walk", "--target", "5", "--deadline", _deadline()])

    result = runner.invoke(app, ["list-goals", "--user", cli_user, "--status", "active"])

    assert result.exit_code == 0
    assert "Walk  [active]  0/5 (0%)" in result.output


def test_unknown_user():
    result = runner.invoke(app, ["list-goals", "--user", "ghost@example.com"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_sync_statuses(cli_user, overdue_goal, auth_client):
    goal_id = overdue_goal()

    result = runner.invoke(app, ["sync-statuses"])

    assert result.exit_code == 0, result.output
    assert f"goal {goal_id} active -> completed_failure" in result.output
    assert "Updated 1 goal(s)." in result.output
