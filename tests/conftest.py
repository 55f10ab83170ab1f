"""
Shared fixtures: a file-backed SQLite database per test and the wired engine.
"""

import pytest

from mentorbook.adapters.availability_store import AvailabilityStore
from mentorbook.adapters.database import Database
from mentorbook.adapters.session_store import SessionStore
from mentorbook.adapters.user_directory import ConfigUserDirectory, UserSummary
from mentorbook.domain.models import UserRole
from mentorbook.services.availability_resolver import AvailabilityResolver
from mentorbook.services.booking_service import BookingService


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'mentorbook.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def availability_store(database):
    return AvailabilityStore(database.session_factory, slot_width_minutes=30)


@pytest.fixture
def session_store(database):
    return SessionStore(database.session_factory)


@pytest.fixture
def users():
    return ConfigUserDirectory(
        [
            UserSummary(id="ada", name="Ada Lovelace", role=UserRole.MENTOR),
            UserSummary(id="alan", name="Alan Turing", role=UserRole.MENTOR),
            UserSummary(id="grace", name="Grace Hopper", role=UserRole.MENTEE),
            UserSummary(id="linus", name="Linus Torvalds", role=UserRole.MENTEE),
        ]
    )


@pytest.fixture
def resolver(availability_store, session_store):
    return AvailabilityResolver(
        availability_store=availability_store,
        session_store=session_store,
        timezone="Europe/Berlin",
    )


@pytest.fixture
def service(users, resolver, availability_store, session_store):
    return BookingService(
        users=users,
        resolver=resolver,
        availability_store=availability_store,
        session_store=session_store,
    )
