from flask import Blueprint, current_app, jsonify

from ..auth.tokens import issue_token
from ..extensions import db
from ..schemas import LoginRequest, RegisterRequest, parse_body
from ..services.users import UserStore, serialize_user

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/register", methods=["POST"])
def register_user():
    """
    Register a client or trainer account
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/RegisterPayload'
    responses:
      201:
        description: User registered, token issued
      400:
        description: Validation error (missing fields, weak password, bad role)
        schema:
          $ref: '#/definitions/Error'
      409:
        description: Email already exists
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(RegisterRequest)

    user = UserStore(db.session).create(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
        birth_date=data.birth_date,
        gender=data.gender,
        role=data.role,
    )
    current_app.logger.info(f"User {user.id} registered as {user.role}")

    return (
        jsonify(
            {
                "status": "success",
                "message": "User registered successfully",
                "token": issue_token(user),
                "user": serialize_user(user),
            }
        ),
        201,
    )


@auth_bp.route("/login", methods=["POST"])
def login_user():
    """
    Exchange email and password for a bearer token
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/LoginPayload'
    responses:
      200:
        description: Login successful
      400:
        description: Email and password required
        schema:
          $ref: '#/definitions/Error'
      401:
        description: Invalid credentials
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(LoginRequest)
    user = UserStore(db.session).authenticate(data.email, data.password)

    return (
        jsonify(
            {
                "status": "success",
                "message": "Login successful",
                "token": issue_token(user),
                "user": {
                    "id": user.id,
                    "first_name": user.first_name,
                    "last_name": user.last_name,
                    "email": user.email,
                    "role": user.role,
                },
            }
        ),
        200,
    )
