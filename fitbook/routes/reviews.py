# Reviews on completed bookings, trainer replies and rating stats
from flask import Blueprint, jsonify, request

from ..auth.policy import current_user, policy
from ..extensions import db
from ..schemas import (
    ReviewCreateRequest,
    ReviewReplyRequest,
    ReviewUpdateRequest,
    parse_body,
)
from ..services.reviews import ReviewBook

reviews_bp = Blueprint("reviews", __name__, url_prefix="/api/reviews")


@reviews_bp.route("", methods=["GET"])
def list_reviews():
    limit = request.args.get("limit", 50, type=int)
    limit = max(1, min(limit, 200))
    return jsonify(ReviewBook(db.session).list_recent(limit)), 200


@reviews_bp.route("/service/<int:service_id>", methods=["GET"])
def get_service_reviews(service_id):
    return jsonify(ReviewBook(db.session).by_service(service_id)), 200


@reviews_bp.route("/trainer/<int:trainer_id>", methods=["GET"])
def get_trainer_reviews(trainer_id):
    return jsonify(ReviewBook(db.session).by_trainer(trainer_id)), 200


@reviews_bp.route("/stats/service/<int:service_id>", methods=["GET"])
def get_service_stats(service_id):
    """
    Rating statistics for a service
    ---
    tags:
      - Reviews
    parameters:
      - in: path
        name: service_id
        type: integer
        required: true
    responses:
      200:
        description: Review count, average rating and count per star value
        schema:
          $ref: '#/definitions/ReviewStats'
    """
    return jsonify(ReviewBook(db.session).service_stats(service_id)), 200


@reviews_bp.route("/<int:review_id>", methods=["GET"])
def get_review(review_id):
    return jsonify(ReviewBook(db.session).get(review_id)), 200


@reviews_bp.route("", methods=["POST"])
@policy.roles_required("client")
def post_review():
    """
    Review a completed booking
    ---
    tags:
      - Reviews
    parameters:
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/ReviewPayload'
    responses:
      201:
        description: Review posted
      400:
        description: Validation error (rating must be between 1 and 5)
        schema:
          $ref: '#/definitions/Error'
      403:
        description: Caller is not the client of the booking
        schema:
          $ref: '#/definitions/Error'
      404:
        description: Booking not found
        schema:
          $ref: '#/definitions/Error'
      409:
        description: The booking already has a review
        schema:
          $ref: '#/definitions/Error'
      422:
        description: The booking is not completed
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(ReviewCreateRequest)
    review = ReviewBook(db.session).create(
        booking_id=data.booking_id,
        rating=data.rating,
        comment=data.comment,
        client_id=current_user().id,
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": "Review posted successfully",
                "review": review,
            }
        ),
        201,
    )


@reviews_bp.route("/<int:review_id>", methods=["PUT"])
@policy.login_required
def update_review(review_id):
    data = parse_body(ReviewUpdateRequest)
    review = ReviewBook(db.session).update(
        review_id, current_user().id, rating=data.rating, comment=data.comment
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": "Review updated successfully",
                "review": review,
            }
        ),
        200,
    )


@reviews_bp.route("/<int:review_id>", methods=["DELETE"])
@policy.login_required
def delete_review(review_id):
    ReviewBook(db.session).delete(review_id, current_user().id)
    return jsonify({"status": "success", "message": "Review deleted successfully"}), 200


@reviews_bp.route("/<int:review_id>/reply", methods=["POST"])
@policy.roles_required("trainer")
def reply_to_review(review_id):
    """
    POST /api/reviews/<review_id>/reply
    Purpose: Let trainers answer a review.
    Input:
        - review_id (integer) from the URL path
        - JSON body with:
          * reply (required): The reply text

    Behavior:
    - Any trainer may reply; ownership of the reviewed service is not checked
    - Calling again overwrites the previous reply
    - Returns the review with its trainer_reply
    """
    data = parse_body(ReviewReplyRequest)
    review = ReviewBook(db.session).add_trainer_reply(review_id, data.reply)
    return (
        jsonify(
            {
                "status": "success",
                "message": "Reply saved successfully",
                "review": review,
            }
        ),
        200,
    )
