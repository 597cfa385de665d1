from flask import Blueprint, current_app, jsonify

from ..auth.policy import current_user, policy
from ..extensions import db
from ..schemas import PasswordChangeRequest, ProfileUpdateRequest, parse_body
from ..services.users import UserStore, serialize_trainer, serialize_user
from .auth import login_user, register_user

users_bp = Blueprint("users", __name__, url_prefix="/api/users")

# The web client signs up and logs in under /api/users
users_bp.add_url_rule("/register", "register", register_user, methods=["POST"])
users_bp.add_url_rule("/login", "login", login_user, methods=["POST"])


@users_bp.route("/profile", methods=["GET"])
@policy.login_required
def get_profile():
    """
    GET /api/users/profile
    Purpose: Return the caller's own user record (never the password hash).
    """
    return jsonify(serialize_user(current_user())), 200


@users_bp.route("/profile", methods=["PUT"])
@policy.login_required
def update_profile():
    """
    PUT /api/users/profile
    Purpose: Update the caller's profile.
    Input: JSON body with any of firstName, lastName, birthDate, gender,
           profileImage. Omitted fields are left untouched.
    """
    data = parse_body(ProfileUpdateRequest)
    user = UserStore(db.session).update_profile(
        current_user(), **data.model_dump(exclude_unset=True)
    )

    return (
        jsonify(
            {
                "status": "success",
                "message": "Profile updated successfully",
                "user": serialize_user(user),
            }
        ),
        200,
    )


@users_bp.route("/profile/password", methods=["PUT"])
@policy.login_required
def change_password():
    """
    Change the caller's password
    ---
    tags:
      - Users
    parameters:
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/PasswordChangePayload'
    responses:
      200:
        description: Password updated successfully
        schema:
          $ref: '#/definitions/Success'
      400:
        description: Current password incorrect or new password too weak
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(PasswordChangeRequest)
    UserStore(db.session).change_password(
        current_user(), data.current_password, data.new_password
    )
    return (
        jsonify({"status": "success", "message": "Password updated successfully"}),
        200,
    )


@users_bp.route("/profile", methods=["DELETE"])
@policy.login_required
def delete_account():
    user = current_user()
    user_id = user.id
    UserStore(db.session).delete(user)
    current_app.logger.info(f"User {user_id} deleted their account")
    return jsonify({"status": "success", "message": "Account deleted successfully"}), 200


@users_bp.route("/trainers", methods=["GET"])
def list_trainers():
    trainers = UserStore(db.session).list_trainers()
    return jsonify([serialize_trainer(t) for t in trainers]), 200


@users_bp.route("/trainers/<int:trainer_id>", methods=["GET"])
def get_trainer(trainer_id):
    """
    GET /api/users/trainers/<trainer_id>
    Purpose: Public trainer card with the trainer's published services.
    Behavior:
    - Returns 404 when the id is unknown or does not belong to a trainer.
    """
    trainer, services = UserStore(db.session).get_trainer(trainer_id)
    return jsonify(serialize_trainer(trainer, services)), 200
