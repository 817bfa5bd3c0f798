"""Management commands for the clinic scheduling backend."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Optional

import click

from clinic.core import config
from clinic.core.logging_config import setup_logging
from clinic.db.session import atomic, create_tables, get_db
from clinic.domain.entities import DoctorBlock, TimeSlot, User, UserRole
from clinic.repositories.doctor_block_repo import DoctorBlockRepository
from clinic.repositories.user_repo import UserRepository
from clinic.services.appointment_service import build_appointment_service

logger = logging.getLogger("clinic.manage")

TIME_SLOT_CHOICE = click.Choice([slot.value for slot in TimeSlot])

open_session = contextmanager(get_db)


@click.group()
def cli() -> None:
    """Entry point for management commands."""
    setup_logging(
        log_level=config.LOG_LEVEL,
        enable_sql_echo=config.SQL_ECHO,
        log_to_file=config.LOG_TO_FILE,
        use_json_format=config.LOG_JSON,
    )
    config.log_config()


@cli.command("init-db")
def init_db() -> None:
    """Create all tables that do not exist yet."""
    create_tables()
    logger.info("Database tables created")


@cli.command("create-user")
@click.option("--name", required=True)
@click.option("--email", default="")
@click.option(
    "--role",
    type=click.Choice([role.value for role in UserRole]),
    default=UserRole.PATIENT.value,
    show_default=True,
)
def create_user(name: str, email: str, role: str) -> None:
    """Register a doctor or patient."""
    with open_session() as session:
        repo = UserRepository(session)
        if email and repo.get_by_email(email):
            raise click.ClickException(
                f"A user with email '{email}' already exists."
            )
        try:
            with atomic(session):
                user = repo.create(User(name=name, email=email, role=role))
        except ValueError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"Created {user.role.value} {user.name} with id {user.id}")


@cli.command("block-slot")
@click.option("--doctor-id", type=int, required=True)
@click.option(
    "--date",
    "on_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    required=True,
)
@click.option(
    "--time-slot",
    type=TIME_SLOT_CHOICE,
    default=None,
    help="Slot to block. Omit to block the whole day.",
)
@click.option("--reason", default=None)
def block_slot(
    doctor_id: int, on_date, time_slot: Optional[str], reason: Optional[str]
) -> None:
    """Block a doctor's slot (or whole day) against new bookings."""
    with open_session() as session:
        doctor = UserRepository(session).get_by_id(doctor_id)
        if doctor is None or not doctor.is_doctor:
            raise click.ClickException(f"No doctor found with ID {doctor_id}.")
        with atomic(session):
            block = DoctorBlockRepository(session).add(
                DoctorBlock(
                    doctor_id=doctor_id,
                    date=on_date.date(),
                    time_slot=time_slot,
                    reason=reason,
                )
            )
        scope = block.time_slot.label if block.time_slot else "whole day"
        click.echo(f"Blocked {scope} on {block.date.isoformat()} (block id {block.id})")


@cli.command("available-slots")
@click.option("--doctor-id", type=int, required=True)
@click.option(
    "--date",
    "on_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    required=True,
)
def available_slots(doctor_id: int, on_date) -> None:
    """List a doctor's free slots on a date."""
    with open_session() as session:
        service = build_appointment_service(session)
        day: date = on_date.date()
        slots = service.get_available_time_slots(doctor_id, day)
        if not slots:
            click.echo(f"No free slots on {day.isoformat()}")
            return
        for slot in slots:
            click.echo(f"{slot.value}\t{slot.label}")


if __name__ == "__main__":
    cli()
