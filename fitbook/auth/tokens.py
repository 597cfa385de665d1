import datetime

import jwt
from flask import current_app

from ..errors import Unauthenticated


def issue_token(user):
    """Sign an identity token for `user` carrying its id, email and role."""
    payload = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.datetime.now(datetime.timezone.utc)
        + datetime.timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"]),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def decode_token(token):
    """
    Verify signature and expiry and return the token payload.

    Raises Unauthenticated for expired, tampered or malformed tokens.
    """
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token has expired")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token")

    if "user_id" not in payload:
        raise Unauthenticated("Invalid token")
    return payload
