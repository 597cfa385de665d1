# Book services, move bookings through their lifecycle, list and delete them
from flask import Blueprint, jsonify

from ..auth.policy import current_user, policy
from ..extensions import db
from ..schemas import BookingCreateRequest, BookingStatusRequest, parse_body
from ..services.bookings import BookingLifecycle

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


@bookings_bp.route("", methods=["POST"])
@policy.roles_required("client")
def create_booking():
    """
    Book a service
    ---
    summary: Create a pending booking for the calling client
    tags:
      - Bookings
    parameters:
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/BookingPayload'
    responses:
      201:
        description: Booking created with status pending
      400:
        description: Validation error or scheduled date not in the future
        schema:
          $ref: '#/definitions/Error'
      403:
        description: Caller is not a client
        schema:
          $ref: '#/definitions/Error'
      404:
        description: Service not found
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(BookingCreateRequest)
    booking = BookingLifecycle(db.session).create(
        service_id=data.service_id,
        client_id=current_user().id,
        scheduled_date=data.scheduled_date,
        notes=data.notes,
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": "Booking created successfully",
                "booking": booking,
            }
        ),
        201,
    )


@bookings_bp.route("/my-bookings", methods=["GET"])
@policy.login_required
def get_my_bookings():
    """
    GET /api/bookings/my-bookings
    Purpose: Bookings of the caller, most recent scheduled date first.
    Behavior:
    - Trainers get the bookings made against their services.
    - Everyone else gets the bookings they made as a client.
    """
    user = current_user()
    lifecycle = BookingLifecycle(db.session)
    if user.role == "trainer":
        bookings = lifecycle.by_trainer(user.id)
    else:
        bookings = lifecycle.by_client(user.id)
    return jsonify(bookings), 200


@bookings_bp.route("/<int:booking_id>", methods=["GET"])
@policy.login_required
def get_booking(booking_id):
    booking = BookingLifecycle(db.session).get_for(booking_id, current_user().id)
    return jsonify(booking), 200


@bookings_bp.route("/<int:booking_id>/status", methods=["PUT"])
@policy.login_required
def update_booking_status(booking_id):
    """
    Move a booking to a new status
    ---
    tags:
      - Bookings
    description: >
      The trainer owning the service accepts, rejects or completes;
      the client cancels (optionally with cancelReason).
    parameters:
      - in: path
        name: booking_id
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/BookingStatusPayload'
    responses:
      200:
        description: Status updated
      403:
        description: Caller is not a party, or not the party allowed to take this step
        schema:
          $ref: '#/definitions/Error'
      404:
        description: Booking not found
        schema:
          $ref: '#/definitions/Error'
      422:
        description: Transition not allowed from the current status
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(BookingStatusRequest)
    booking = BookingLifecycle(db.session).update_status(
        booking_id,
        data.status,
        current_user().id,
        cancel_reason=data.cancel_reason,
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": "Booking status updated",
                "booking": booking,
            }
        ),
        200,
    )


@bookings_bp.route("/<int:booking_id>", methods=["DELETE"])
@policy.login_required
def delete_booking(booking_id):
    user = current_user()
    BookingLifecycle(db.session).delete(
        booking_id, user.id, is_trainer=user.role == "trainer"
    )
    return jsonify({"status": "success", "message": "Booking deleted successfully"}), 200
