"""
Central pytest configuration for the clinic scheduling tests.

This file provides common fixtures, test markers, and setup
for both unit and integration tests.
"""

import os
from datetime import date
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Test database configuration (set early so import-time engines use it)
TEST_DATABASE_URL = "sqlite:///:memory:"  # In-memory SQLite for fast tests
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"

from clinic.db import base as models  # noqa: E402
from clinic.db.session import Base  # noqa: E402
from clinic.domain.entities import Appointment, TimeSlot, User  # noqa: E402
from clinic.services.appointment_service import (  # noqa: E402
    build_appointment_service,
)
from tests.config.markers import *  # noqa: E402,F401,F403
from tests.factories.repository_factories import (  # noqa: E402
    AppointmentRepositoryFactory,
    AvailabilityRepositoryFactory,
    DoctorBlockCheckerFactory,
    UserRepositoryFactory,
)

APPOINTMENT_DATE = date(2024, 6, 1)


# =====================================================
# BASIC MOCK FIXTURES
# =====================================================


@pytest.fixture
def doctor():
    return User(
        id=7, name="Dr. Gregory House", email="house@clinic.test", role="doctor"
    )


@pytest.fixture
def patient():
    return User(id=3, name="Lisa Cuddy", email="cuddy@example.com", role="patient")


@pytest.fixture
def booked_appointment():
    """A BOOKED appointment for doctor 7 / patient 3 on 2024-06-01 MORNING_1."""
    return Appointment(
        id=1,
        doctor_id=7,
        patient_id=3,
        date=APPOINTMENT_DATE,
        time_slot=TimeSlot.MORNING_1,
    )


@pytest.fixture
def mock_db_session():
    """Create a mock database session for testing."""
    session = Mock()
    session.commit = Mock()
    session.rollback = Mock()
    session.close = Mock()
    return session


@pytest.fixture
def mock_appointment_repo():
    return AppointmentRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_availability_repo():
    return AvailabilityRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_user_repo(doctor, patient):
    return UserRepositoryFactory.create_populated_mock([doctor, patient])


@pytest.fixture
def mock_block_checker():
    return DoctorBlockCheckerFactory.create_mock()


@pytest.fixture
def service(
    mock_db_session,
    mock_appointment_repo,
    mock_availability_repo,
    mock_user_repo,
    mock_block_checker,
):
    """Initialize AppointmentService with mocked collaborators."""
    from clinic.services.appointment_service import AppointmentService

    return AppointmentService(
        session=mock_db_session,
        appointment_repo=mock_appointment_repo,
        availability_repo=mock_availability_repo,
        user_repo=mock_user_repo,
        block_checker=mock_block_checker,
    )


# =====================================================
# DATABASE FIXTURES
# =====================================================


@pytest.fixture
def db_session():
    """Provide a session on a fresh in-memory database, isolated per test."""
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def db_doctor(db_session):
    """Persisted doctor with id 7."""
    user = models.User(
        id=7, name="Dr. Gregory House", email="house@clinic.test", role="doctor"
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def db_patient(db_session):
    """Persisted patient with id 3."""
    user = models.User(
        id=3, name="Lisa Cuddy", email="cuddy@example.com", role="patient"
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def db_service(db_session, db_doctor, db_patient):
    """AppointmentService wired to SQLAlchemy repositories."""
    return build_appointment_service(db_session)
