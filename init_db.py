from sqlalchemy import select
from fitbook.extensions import db
from fitbook.models import AllowedDuration, Base, Category, Zone
from main import create_app

CATEGORIES = [
    "Strength training",
    "Functional training",
    "Yoga",
    "Pilates",
    "Running",
    "Boxing",
    "Nutrition coaching",
]

ZONES = [
    "North",
    "South",
    "East",
    "West",
    "Downtown",
    "Online",
]

DURATIONS = [30, 45, 60, 90, 120]


def seed_reference_data(session):
    """Insert categories, zones and durations that are not there yet."""
    existing = set(session.scalars(select(Category.name)))
    session.add_all(Category(name=name) for name in CATEGORIES if name not in existing)

    existing = set(session.scalars(select(Zone.name)))
    session.add_all(Zone(name=name) for name in ZONES if name not in existing)

    existing = set(session.scalars(select(AllowedDuration.minutes)))
    session.add_all(
        AllowedDuration(minutes=minutes) for minutes in DURATIONS if minutes not in existing
    )
    session.commit()


if __name__ == "__main__":
    app = create_app()

    with app.app_context():
        Base.metadata.create_all(bind=db.engine)
        seed_reference_data(db.session)

    print("Database tables created and reference data seeded!")
