from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..auth.passwords import hash_password, verify_password
from ..errors import Conflict, InvalidArgument, NotFound, Unauthenticated
from ..models import Service, User
from ..utils.timeutils import isoformat


def serialize_user(user):
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "birth_date": isoformat(user.birth_date),
        "gender": user.gender,
        "role": user.role,
        "profile_image": user.profile_image,
        "created_at": isoformat(user.created_at),
        "updated_at": isoformat(user.updated_at),
    }


def serialize_trainer(user, services=None):
    data = {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "gender": user.gender,
        "profile_image": user.profile_image,
    }
    if services is not None:
        data["services"] = [
            {
                "id": s.id,
                "title": s.title,
                "price": float(s.price),
                "is_virtual": s.is_virtual,
                "category_name": s.category.name if s.category else None,
            }
            for s in services
        ]
    return data


class UserStore:
    """User records: registration, credentials, profile and account deletion."""

    def __init__(self, session):
        self.session = session

    def find_by_email(self, email):
        return self.session.scalar(select(User).where(User.email == email))

    def get(self, user_id):
        user = self.session.get(User, user_id)
        if user is None:
            raise NotFound(f"No user found with ID {user_id}")
        return user

    def create(
        self, first_name, last_name, email, password, birth_date, role, gender=None
    ):
        if self.find_by_email(email):
            raise Conflict("Email already exists")

        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password),
            birth_date=birth_date,
            gender=gender,
            role=role,
        )
        try:
            self.session.add(user)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise Conflict("Email already exists")
        return user

    def authenticate(self, email, password):
        user = self.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise Unauthenticated("Invalid credentials")
        return user

    def update_profile(self, user, **fields):
        allowed = ("first_name", "last_name", "birth_date", "gender", "profile_image")
        for name in allowed:
            if name in fields:
                setattr(user, name, fields[name])
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return user

    def change_password(self, user, current_password, new_password):
        if not verify_password(current_password, user.password_hash):
            raise InvalidArgument("The current password is incorrect")
        user.password_hash = hash_password(new_password)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def delete(self, user):
        # ORM cascades remove the user's services, bookings and their reviews
        try:
            self.session.delete(user)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def list_trainers(self):
        return self.session.scalars(
            select(User)
            .where(User.role == "trainer")
            .order_by(User.last_name, User.first_name)
        ).all()

    def get_trainer(self, trainer_id):
        trainer = self.session.get(User, trainer_id)
        if trainer is None or trainer.role != "trainer":
            raise NotFound(f"No trainer found with ID {trainer_id}")
        services = self.session.scalars(
            select(Service)
            .where(Service.trainer_id == trainer_id, Service.is_published.is_(True))
            .order_by(Service.id.desc())
        ).all()
        return trainer, services
