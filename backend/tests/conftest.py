"""
Pytest fixtures for booking backend tests.

Provides test database setup, a two-store tenant layout, and test client.

Dates: 2030-01-07 is a Monday; Europe/Lisbon is UTC+0 in January, so local
wall-clock times and UTC instants coincide on that day.
"""

from datetime import date, datetime

import pytest
from agenda import create_app
from agenda.extensions import db
from agenda.models import Store, Staff, Service
from agenda.services import working_hours_service


MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
MONDAY_8AM = datetime(2030, 1, 7, 8, 0)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DEFAULT_STORE_TIMEZONE': 'Europe/Lisbon',
        'BOOKING_STEP_MINUTES': 15,
        'BOOKING_LEAD_MINUTES': 120,
        'BOOKING_BUFFER_MINUTES': 0,
        'BOOKING_SERVICE_MINUTES': 30,
        'MAX_SERVICE_MINUTES': 480,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    """Store A: the store most tests book against."""
    store = Store(slug="barbearia-central", name="Barbearia Central", timezone="Europe/Lisbon")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def other_store(db_session):
    """Store B: a second tenant, for isolation checks."""
    store = Store(slug="salao-norte", name="Salao Norte", timezone="Europe/Lisbon")
    db_session.add(store)
    db_session.commit()
    return store


@pytest.fixture(scope='function')
def staff(db_session, store):
    member = Staff(store_id=store.id, name="Ana")
    db_session.add(member)
    db_session.commit()
    return member


@pytest.fixture(scope='function')
def second_staff(db_session, store):
    member = Staff(store_id=store.id, name="Bruno")
    db_session.add(member)
    db_session.commit()
    return member


@pytest.fixture(scope='function')
def other_staff(db_session, other_store):
    """Staff member of Store B."""
    member = Staff(store_id=other_store.id, name="Carla")
    db_session.add(member)
    db_session.commit()
    return member


@pytest.fixture(scope='function')
def service(db_session, store):
    """30-minute haircut."""
    svc = Service(store_id=store.id, name="Corte", duration_minutes=30, price_cents=1500)
    db_session.add(svc)
    db_session.commit()
    return svc


@pytest.fixture(scope='function')
def long_service(db_session, store):
    svc = Service(store_id=store.id, name="Coloracao", duration_minutes=90, price_cents=4500)
    db_session.add(svc)
    db_session.commit()
    return svc


@pytest.fixture(scope='function')
def other_service(db_session, other_store):
    svc = Service(store_id=other_store.id, name="Manicure", duration_minutes=30, price_cents=1000)
    db_session.add(svc)
    db_session.commit()
    return svc


def open_day(store, staff, day_of_week, *ranges):
    """Give `staff` open shifts on a weekday: open_day(store, staff, 0, ("09:00", "13:00"))."""
    return working_hours_service.set_day_shifts(
        store.slug,
        staff.id,
        day_of_week,
        [{"is_open": True, "start": start, "end": end} for start, end in ranges],
    )


@pytest.fixture(scope='function')
def monday_schedule(store, staff):
    """Monday 09:00-13:00 and 14:00-18:00; every other day closed."""
    return open_day(store, staff, 0, ("09:00", "13:00"), ("14:00", "18:00"))
