#!/usr/bin/env python3
"""
Command line interface for GoalTracker.

Administrative tasks (database setup, accounts) plus a small goal workflow
that goes through the same form validators and services as the web client.
sync-statuses is meant to be run from cron.
"""

import asyncio
import uuid
from decimal import Decimal
from typing import Optional

import typer

from api.locales import get_message
from database import crud
from database.database import SessionLocal, init_db
from database.models import GoalStatus, User
from services import goal_lifecycle, goal_service, validation
from services.exceptions import GoalTrackerError
from services.metrics import compute_goal_metrics, format_decimal
from utils.date_format import format_date, format_datetime, parse_date

app = typer.Typer(help="GoalTracker CLI")

LANG_OPTION = typer.Option("en", "--lang", help="Language for messages (en or pl)")

def _fail(message: str):
    typer.secho(f"Error: {message}", fg=typer.colors.RED)
    raise typer.Exit(code=1)

def _get_user_or_exit(db, email: str) -> User:
    user = crud.get_user_by_email(db, email)
    if user is None:
        _fail(f"User '{email}' not found.")
    return user

def _parse_id(value: str, lang: str) -> str:
    try:
        return str(uuid.UUID(value))
    except ValueError:
        _fail(get_message("invalid_path_params", lang))

@app.command("init-db")
def init_database():
    """Create the database tables."""
    init_db()
    typer.secho("Database initialized.", fg=typer.colors.GREEN)

@app.command("create-user")
def create_user(
    email: str = typer.Argument(..., help="Email address of the new user"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password for the new user"),
    lang: str = LANG_OPTION,
):
    """Create a new user account."""
    error = validation.validate_email(email, lang) or validation.validate_password(password, lang)
    if error:
        _fail(error)

    db = SessionLocal()
    try:
        if crud.get_user_by_email(db, email):
            _fail(get_message("email_already_in_use", lang))
        user = crud.create_user(db, email=email, password=password)
        typer.secho(f"Successfully created user '{user.email}' with ID {user.id}", fg=typer.colors.GREEN)
    finally:
        db.close()

@app.command("create-goal")
def create_goal(
    email: str = typer.Option(..., "--user", help="Email of the goal owner"),
    name: str = typer.Option(..., "--name", help="Goal name"),
    target_value: str = typer.Option(..., "--target", help="Target value, a positive number"),
    deadline: str = typer.Option(..., "--deadline", help="Deadline in dd.MM.yyyy format"),
    parent_goal_id: Optional[str] = typer.Option(None, "--parent", help="ID of the goal this one continues"),
    lang: str = LANG_OPTION,
):
    """Create a goal, validated like the web form."""
    errors = [
        error
        for error in (
            validation.validate_goal_name(name, lang),
            validation.validate_target_value(target_value, lang),
            validation.validate_deadline_future(deadline, lang),
        )
        if error
    ]
    if errors:
        for error in errors:
            typer.secho(f"Error: {error}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    db = SessionLocal()
    try:
        user = _get_user_or_exit(db, email)
        try:
            goal = goal_service.create_goal(
                db,
                user.id,
                name=validation.normalize_trim(name),
                target_value=Decimal(validation.normalize_trim(target_value)),
                deadline=parse_date(deadline),
                parent_goal_id=_parse_id(parent_goal_id, lang) if parent_goal_id else None,
            )
        except GoalTrackerError as e:
            _fail(get_message(e.code, lang))
        typer.secho(f"Created goal '{goal['name']}' with ID {goal['id']}", fg=typer.colors.GREEN)
    finally:
        db.close()

@app.command("list-goals")
def list_goals(
    email: str = typer.Option(..., "--user", help="Email of the goal owner"),
    status: Optional[GoalStatus] = typer.Option(None, "--status", help="Only goals with this status"),
):
    """List a user's goals with their progress."""
    db = SessionLocal()
    try:
        user = _get_user_or_exit(db, email)
        result = goal_service.list_goals(db, user.id, status=status.value if status else None, page_size=100)
        if not result["items"]:
            typer.echo("No goals found.")
            return

        typer.echo(f"\n--- Goals of {user.email} ({result['total']}) ---")
        for goal in result["items"]:
            computed = goal["computed"]
            typer.echo(
                f"{goal['id']}  {goal['name']}  [{goal['status']}]  "
                f"{computed['current_value']}/{goal['target_value']} ({computed['progress_percent']}%)  "
                f"due {format_date(goal['deadline'])}"
            )
    finally:
        db.close()

@app.command("show-goal")
def show_goal(
    goal_id: str = typer.Argument(..., help="ID of the goal"),
    email: str = typer.Option(..., "--user", help="Email of the goal owner"),
    lang: str = LANG_OPTION,
):
    """Show a goal with its metrics and progress entries."""
    db = SessionLocal()
    try:
        user = _get_user_or_exit(db, email)
        goal = crud.get_goal(db, _parse_id(goal_id, lang), user.id)
        if goal is None:
            _fail(get_message("goal_not_found", lang))

        entries = crud.get_goal_progress_entries(db, goal.id)
        metrics = compute_goal_metrics(goal, [entry.value for entry in entries])

        typer.echo(f"\n{goal.name} [{goal.status.value}]")
        typer.echo(f"Progress: {format_decimal(metrics.current_value)}/{format_decimal(goal.target_value)} ({metrics.progress_percent}%)")
        typer.echo(f"Deadline: {format_date(goal.deadline)} ({metrics.days_remaining} days remaining)")
        if metrics.is_locked:
            typer.echo("Name, target and deadline are locked.")
        if goal.abandonment_reason:
            typer.echo(f"Abandoned: {goal.abandonment_reason}")
        if goal.reflection_notes:
            typer.echo(f"Reflection: {goal.reflection_notes}")
        if goal.ai_summary:
            typer.echo(f"\nAI summary:\n{goal.ai_summary}")

        if entries:
            typer.echo("\nEntries:")
            for entry in entries:
                notes = f"  {entry.notes}" if entry.notes else ""
                typer.echo(f"  {format_datetime(entry.created_at)}  +{format_decimal(entry.value)}{notes}")
    finally:
        db.close()

@app.command("sync-statuses")
def sync_statuses(
    email: Optional[str] = typer.Option(None, "--user", help="Only sync this user's goals"),
):
    """Fail active goals whose deadline has passed without reaching the target."""
    db = SessionLocal()
    try:
        if email:
            users = [_get_user_or_exit(db, email)]
        else:
            users = crud.get_users(db, limit=None)

        total = 0
        for user in users:
            result = asyncio.run(goal_lifecycle.sync_statuses(db, user.id))
            for change in result["updated"]:
                typer.echo(f"{user.email}: goal {change['id']} {change['from']} -> {change['to']}")
            total += len(result["updated"])
        typer.secho(f"Updated {total} goal(s).", fg=typer.colors.GREEN)
    finally:
        db.close()

if __name__ == "__main__":
    app()
