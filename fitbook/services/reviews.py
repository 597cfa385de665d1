from flask import current_app
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from ..errors import Conflict, Forbidden, InvalidState, NotFound
from ..models import Booking, Review, Service
from ..utils.timeutils import isoformat
from . import lifecycle

STAR_FIELDS = {
    5: "five_stars",
    4: "four_stars",
    3: "three_stars",
    2: "two_stars",
    1: "one_star",
}


def serialize_review(review):
    booking = review.booking
    service = booking.service if booking else None
    client = booking.client if booking else None
    return {
        "id": review.id,
        "booking_id": review.booking_id,
        "service_id": booking.service_id if booking else None,
        "client_id": booking.client_id if booking else None,
        "trainer_id": service.trainer_id if service else None,
        "rating": review.rating,
        "comment": review.comment,
        "trainer_reply": review.trainer_reply,
        "service_title": service.title if service else None,
        "category_name": service.category.name if service and service.category else None,
        "client_first_name": client.first_name if client else None,
        "client_last_name": client.last_name if client else None,
        "created_at": isoformat(review.created_at),
        "updated_at": isoformat(review.updated_at),
    }


class ReviewBook:
    """One review per completed booking, with an optional trainer reply."""

    def __init__(self, session):
        self.session = session

    def _joined(self):
        return select(Review).options(
            joinedload(Review.booking)
            .joinedload(Booking.service)
            .joinedload(Service.category),
            joinedload(Review.booking).joinedload(Booking.client),
        )

    def find(self, review_id):
        review = self.session.scalar(self._joined().where(Review.id == review_id))
        if review is None:
            raise NotFound(f"No review found with ID {review_id}")
        return review

    def get(self, review_id):
        return serialize_review(self.find(review_id))

    def list_recent(self, limit=50):
        reviews = self.session.scalars(
            self._joined().order_by(Review.created_at.desc(), Review.id.desc()).limit(limit)
        ).all()
        return [serialize_review(r) for r in reviews]

    def by_service(self, service_id):
        reviews = self.session.scalars(
            self._joined()
            .join(Review.booking)
            .where(Booking.service_id == service_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        ).all()
        return [serialize_review(r) for r in reviews]

    def by_trainer(self, trainer_id):
        reviews = self.session.scalars(
            self._joined()
            .join(Review.booking)
            .join(Booking.service)
            .where(Service.trainer_id == trainer_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        ).all()
        return [serialize_review(r) for r in reviews]

    def create(self, booking_id, rating, comment=None, client_id=None):
        try:
            booking = self.session.scalar(
                select(Booking).where(Booking.id == booking_id).with_for_update()
            )
            if booking is None:
                raise NotFound(f"No booking found with ID {booking_id}")
            if client_id is not None and booking.client_id != client_id:
                raise Forbidden("Only the client of a booking can review it")
            if booking.status != lifecycle.COMPLETED:
                raise InvalidState("Only completed bookings can be reviewed")

            existing = self.session.scalar(
                select(Review.id).where(Review.booking_id == booking_id)
            )
            if existing is not None:
                raise Conflict("A review already exists for this booking")

            review = Review(booking_id=booking_id, rating=rating, comment=comment)
            self.session.add(review)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("A review already exists for this booking")
        except Exception:
            self.session.rollback()
            raise

        current_app.logger.info(f"Review {review.id} posted for booking {booking_id}")
        return self.get(review.id)

    def _check_author(self, review, client_id):
        if review.booking.client_id != client_id:
            raise Forbidden("You can only modify your own review")

    def update(self, review_id, client_id, rating=None, comment=None):
        try:
            review = self.find(review_id)
            self._check_author(review, client_id)
            if rating is not None:
                review.rating = rating
            if comment is not None:
                review.comment = comment
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.get(review_id)

    def delete(self, review_id, client_id):
        try:
            review = self.find(review_id)
            self._check_author(review, client_id)
            self.session.delete(review)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def add_trainer_reply(self, review_id, reply):
        """Set (or overwrite) the trainer's reply. Callers enforce the trainer role."""
        try:
            review = self.find(review_id)
            review.trainer_reply = reply
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.get(review_id)

    def service_stats(self, service_id):
        stmt = (
            select(
                func.count(Review.id).label("total_reviews"),
                func.avg(Review.rating).label("average_rating"),
                *[
                    func.count(case((Review.rating == stars, 1))).label(field)
                    for stars, field in STAR_FIELDS.items()
                ],
            )
            .select_from(Review)
            .join(Booking, Review.booking_id == Booking.id)
            .where(Booking.service_id == service_id)
        )
        row = self.session.execute(stmt).one()._mapping
        stats = {
            "service_id": service_id,
            "total_reviews": int(row["total_reviews"] or 0),
            "average_rating": (
                round(float(row["average_rating"]), 2)
                if row["average_rating"] is not None
                else None
            ),
        }
        for field in STAR_FIELDS.values():
            stats[field] = int(row[field] or 0)
        return stats
