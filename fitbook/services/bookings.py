from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from ..auth.policy import policy
from ..errors import Forbidden, InvalidArgument, NotFound
from ..models import BOOKING_STATUSES, Booking, Service
from ..utils.timeutils import isoformat, to_naive_utc, utcnow
from . import lifecycle


def serialize_booking(booking):
    service = booking.service
    trainer = service.trainer if service else None
    client = booking.client
    return {
        "id": booking.id,
        "service_id": booking.service_id,
        "client_id": booking.client_id,
        "trainer_id": service.trainer_id if service else None,
        "scheduled_date": isoformat(booking.scheduled_date),
        "notes": booking.notes,
        "status": booking.status,
        "cancel_reason": booking.cancel_reason,
        "created_at": isoformat(booking.created_at),
        "updated_at": isoformat(booking.updated_at),
        "service_title": service.title if service else None,
        "service_description": service.description if service else None,
        "service_price": float(service.price) if service else None,
        "category_name": service.category.name if service and service.category else None,
        "duration_minutes": (
            service.duration.minutes if service and service.duration else None
        ),
        "client_first_name": client.first_name if client else None,
        "client_last_name": client.last_name if client else None,
        "trainer_first_name": trainer.first_name if trainer else None,
        "trainer_last_name": trainer.last_name if trainer else None,
        "has_review": booking.review is not None,
    }


class BookingLifecycle:
    """
    Bookings between a client and a trainer's service.

    Every write reads its preconditions and writes inside one transaction;
    the booking row is locked for the duration so concurrent status changes
    on the same booking are serialized by the database.
    """

    def __init__(self, session):
        self.session = session

    def _joined(self):
        return select(Booking).options(
            joinedload(Booking.service).joinedload(Service.category),
            joinedload(Booking.service).joinedload(Service.duration),
            joinedload(Booking.service).joinedload(Service.trainer),
            joinedload(Booking.client),
            joinedload(Booking.review),
        )

    def _lock(self, booking_id):
        booking = self.session.scalar(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        )
        if booking is None:
            raise NotFound(f"No booking found with ID {booking_id}")
        return booking

    def find(self, booking_id):
        booking = self.session.scalar(self._joined().where(Booking.id == booking_id))
        if booking is None:
            raise NotFound(f"No booking found with ID {booking_id}")
        return booking

    def get_for(self, booking_id, user_id):
        booking = self.find(booking_id)
        policy.check_booking_party(user_id, booking)
        return serialize_booking(booking)

    def by_client(self, client_id):
        bookings = self.session.scalars(
            self._joined()
            .where(Booking.client_id == client_id)
            .order_by(Booking.scheduled_date.desc(), Booking.id.desc())
        ).all()
        return [serialize_booking(b) for b in bookings]

    def by_trainer(self, trainer_id):
        bookings = self.session.scalars(
            self._joined()
            .join(Booking.service)
            .where(Service.trainer_id == trainer_id)
            .order_by(Booking.scheduled_date.desc(), Booking.id.desc())
        ).all()
        return [serialize_booking(b) for b in bookings]

    def create(self, service_id, client_id, scheduled_date, notes=None):
        try:
            service = self.session.get(Service, service_id)
            if service is None:
                raise NotFound(f"No service found with ID {service_id}")

            scheduled_date = to_naive_utc(scheduled_date)
            if scheduled_date <= utcnow():
                raise InvalidArgument("The scheduled date must be in the future")

            booking = Booking(
                service_id=service_id,
                client_id=client_id,
                scheduled_date=scheduled_date,
                notes=notes,
                status=lifecycle.PENDING,
            )
            self.session.add(booking)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        current_app.logger.info(
            f"Booking {booking.id} created by client {client_id} for service {service_id}"
        )
        return serialize_booking(self.find(booking.id))

    def update_status(self, booking_id, status, user_id, cancel_reason=None):
        if status not in BOOKING_STATUSES:
            raise InvalidArgument(f"Unknown booking status '{status}'")

        try:
            booking = self._lock(booking_id)
            policy.check_booking_party(user_id, booking)

            actor = (
                lifecycle.TRAINER
                if policy.is_booking_trainer(user_id, booking)
                else lifecycle.CLIENT
            )
            previous = booking.status
            lifecycle.check_transition(previous, status, actor)

            booking.status = status
            if status == lifecycle.CANCELLED and cancel_reason:
                booking.cancel_reason = cancel_reason
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        current_app.logger.info(
            f"Booking {booking_id} moved from {previous} to {status} by user {user_id}"
        )
        return serialize_booking(self.find(booking_id))

    def delete(self, booking_id, user_id, is_trainer):
        try:
            booking = self._lock(booking_id)
            allowed = (
                policy.is_booking_trainer(user_id, booking)
                if is_trainer
                else policy.is_booking_client(user_id, booking)
            )
            if not allowed:
                raise Forbidden("You do not have permission to delete this booking")

            self.session.delete(booking)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        current_app.logger.info(f"Booking {booking_id} deleted by user {user_id}")
