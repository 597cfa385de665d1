"""
Authorization policy used by every blueprint.

Authentication resolves the bearer token to a stored user and keeps it on
`flask.g.current_user`. Role checks compare against that stored record, not
the role claim in the token. Ownership predicates are pure functions of the
caller and the target row, so the data-access components can run them inside
their own transaction.
"""

from functools import wraps

from flask import g, request

from ..errors import Forbidden, Unauthenticated
from ..extensions import db
from ..models import User
from .tokens import decode_token


class AccessPolicy:
    def bearer_token(self):
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthenticated("No authentication token provided")
        return token.strip()

    def resolve_user(self):
        payload = decode_token(self.bearer_token())
        user = db.session.get(User, payload["user_id"])
        if user is None:
            raise Unauthenticated("User not found")
        return user

    def optional_user(self):
        """The caller when a bearer token is sent, otherwise None."""
        if not request.headers.get("Authorization"):
            return None
        return self.resolve_user()

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = self.resolve_user()
            return view(*args, **kwargs)

        return wrapper

    def roles_required(self, *roles):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                g.current_user = self.resolve_user()
                self.check_role(g.current_user, *roles)
                return view(*args, **kwargs)

            return wrapper

        return decorator

    # Role and ownership predicates

    @staticmethod
    def check_role(user, *roles):
        if user.role not in roles:
            raise Forbidden(f"Access denied. Required role: {' or '.join(roles)}")

    @staticmethod
    def owns_service(user_id, service):
        return service.trainer_id == user_id

    @staticmethod
    def is_booking_client(user_id, booking):
        return booking.client_id == user_id

    @staticmethod
    def is_booking_trainer(user_id, booking):
        return booking.service.trainer_id == user_id

    def is_booking_party(self, user_id, booking):
        return self.is_booking_client(user_id, booking) or self.is_booking_trainer(
            user_id, booking
        )

    def check_service_owner(self, user_id, service):
        if not self.owns_service(user_id, service):
            raise Forbidden("You do not have permission to modify this service")

    def check_booking_party(self, user_id, booking):
        if not self.is_booking_party(user_id, booking):
            raise Forbidden("You do not have permission to access this booking")


policy = AccessPolicy()


def current_user():
    return g.current_user
