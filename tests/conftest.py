"""
Pytest configuration and shared fixtures for the FitBook API tests.

Every test gets a fresh in-memory SQLite database; fixtures and requests
share the app context pushed by the `app` fixture, so rows committed here
are visible to the API under test.
"""

import os

os.environ["TESTING"] = "True"
os.environ["FLASK_ENV"] = "testing"

import datetime  # noqa: E402

import pytest  # noqa: E402
from flask import Flask  # noqa: E402

from main import create_app  # noqa: E402
from fitbook.auth.passwords import hash_password  # noqa: E402
from fitbook.auth.tokens import issue_token  # noqa: E402
from fitbook.extensions import db as database  # noqa: E402
from fitbook.models import (  # noqa: E402
    AllowedDuration,
    Base,
    Booking,
    Category,
    Review,
    Service,
    User,
    Zone,
)
from fitbook.utils.timeutils import utcnow  # noqa: E402

TEST_PASSWORD = "Password123!"


@pytest.fixture
def app():
    """Create a test app bound to a fresh in-memory database."""
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "JWT_SECRET": "test-secret-key-for-testing-only-0123456789",
            "BCRYPT_LOG_ROUNDS": 4,
        }
    )

    with app.app_context():
        Base.metadata.create_all(bind=database.engine)

        yield app

        database.session.remove()
        Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def db_session(app: Flask):
    return database.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def reference_data(db_session):
    """Categories, zones and durations the catalog validates against."""
    categories = [Category(name="Boxing"), Category(name="Yoga")]
    zones = [
        Zone(name="North"),
        Zone(name="South"),
        Zone(name="East"),
        Zone(name="West"),
    ]
    durations = [AllowedDuration(minutes=60), AllowedDuration(minutes=30)]
    db_session.add_all(categories + zones + durations)
    db_session.commit()

    return {
        "boxing": categories[0].id,
        "yoga": categories[1].id,
        "zones": [z.id for z in zones],
        "minutes_60": durations[0].id,
        "minutes_30": durations[1].id,
    }


@pytest.fixture
def make_user(db_session):
    def _make_user(email, role="client", first_name="Test", last_name="User"):
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(TEST_PASSWORD),
            birth_date=datetime.date(1990, 5, 17),
            gender="female",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def client_user(make_user):
    return make_user("client@example.com", "client", "Carla", "Client")


@pytest.fixture
def other_client(make_user):
    return make_user("other.client@example.com", "client", "Bruno", "Bystander")


@pytest.fixture
def trainer(make_user):
    return make_user("trainer@example.com", "trainer", "Tomás", "Trainer")


@pytest.fixture
def other_trainer(make_user):
    return make_user("other.trainer@example.com", "trainer", "Olga", "Outsider")


@pytest.fixture
def auth_headers(app):
    """Build bearer headers for a user without going through /login."""

    def _headers(user):
        return {"Authorization": f"Bearer {issue_token(user)}"}

    return _headers


@pytest.fixture
def make_service(db_session, reference_data):
    def _make_service(
        trainer,
        title="Morning boxing",
        price=40,
        category="boxing",
        zone_count=2,
        is_virtual=False,
        is_published=True,
    ):
        zones = db_session.query(Zone).filter(
            Zone.id.in_(reference_data["zones"][:zone_count])
        ).all()
        service = Service(
            trainer_id=trainer.id,
            title=title,
            description=f"{title} sessions",
            price=price,
            category_id=reference_data[category],
            duration_id=reference_data["minutes_60"],
            is_virtual=is_virtual,
            is_published=is_published,
            zones=zones,
        )
        db_session.add(service)
        db_session.commit()
        return service

    return _make_service


@pytest.fixture
def service(make_service, trainer):
    return make_service(trainer)


@pytest.fixture
def make_booking(db_session):
    def _make_booking(service, client, status="pending", days_ahead=3, notes=None):
        booking = Booking(
            service_id=service.id,
            client_id=client.id,
            scheduled_date=utcnow() + datetime.timedelta(days=days_ahead),
            notes=notes,
            status=status,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _make_booking


@pytest.fixture
def make_review(db_session):
    def _make_review(booking, rating=5, comment="Great session"):
        review = Review(booking_id=booking.id, rating=rating, comment=comment)
        db_session.add(review)
        db_session.commit()
        return review

    return _make_review


@pytest.fixture
def future_date():
    return (utcnow() + datetime.timedelta(days=7)).replace(microsecond=0).isoformat()


@pytest.fixture
def test_user_data():
    """Provide a dictionary of user data for register/login tests."""
    return {
        "firstName": "New",
        "lastName": "User",
        "email": "newuser@example.com",
        "password": "Str0ng!Pass",
        "birthDate": "1995-03-02",
        "gender": "male",
        "role": "client",
    }
