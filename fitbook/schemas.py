"""Request schemas - pydantic models validated before any business logic runs"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Literal, Optional

from flask import request
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .errors import InvalidArgument
from .models import BOOKING_STATUSES
from .utils.timeutils import to_naive_utc, utcnow

ORDER_KEYS = ("price_asc", "price_desc", "rating_asc", "rating_desc", "newest")


def normalize_email(v):
    # Emails are stored lowercase; EmailStr checks the format afterwards
    if isinstance(v, str):
        return v.strip().lower()
    return v


def validate_password_strength(v: str) -> str:
    if len(v) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one number")
    if not re.search(r"[^A-Za-z0-9]", v):
        raise ValueError("Password must contain at least one special character")
    return v


class RequestSchema(BaseModel):
    """Accepts camelCase keys from the web client as well as snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True
    )


# Users


class RegisterRequest(RequestSchema):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str
    birth_date: date
    gender: Optional[str] = Field(default=None, max_length=20)
    role: Literal["client", "trainer"]

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class LoginRequest(RequestSchema):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return normalize_email(v)


class ProfileUpdateRequest(RequestSchema):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(default=None, max_length=20)
    profile_image: Optional[str] = Field(default=None, max_length=500)

    @field_validator("first_name", "last_name")
    @classmethod
    def check_name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Name cannot be null")
        return v


class PasswordChangeRequest(RequestSchema):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


# Service catalog


class ServiceRequest(RequestSchema):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    category_id: int
    duration_id: int
    zones: List[int] = Field(min_length=1, max_length=3)
    is_virtual: bool

    @field_validator("zones")
    @classmethod
    def check_distinct_zones(cls, v: List[int]) -> List[int]:
        if len(set(v)) != len(v):
            raise ValueError("Zones must not repeat")
        return v


class PublishRequest(RequestSchema):
    published: Optional[bool] = None


class ServiceFilters(RequestSchema):
    category_id: Optional[int] = None
    zone_id: Optional[int] = None
    duration_id: Optional[int] = None
    is_virtual: Optional[bool] = None
    modality: Optional[Literal["virtual", "presential"]] = None
    order_by: Literal[ORDER_KEYS] = "newest"


# Bookings


class BookingCreateRequest(RequestSchema):
    service_id: int
    scheduled_date: datetime
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("scheduled_date")
    @classmethod
    def check_future(cls, v: datetime) -> datetime:
        v = to_naive_utc(v)
        if v <= utcnow():
            raise ValueError("The scheduled date must be in the future")
        return v


class BookingStatusRequest(RequestSchema):
    status: Literal[BOOKING_STATUSES]
    cancel_reason: Optional[str] = Field(default=None, max_length=500)


# Reviews


def round_rating(v: float) -> int:
    # Half-point ratings from the UI are stored as whole stars, rounding up
    return int(Decimal(str(v)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ReviewCreateRequest(RequestSchema):
    booking_id: int
    rating: float = Field(ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("rating")
    @classmethod
    def check_rating(cls, v: float) -> int:
        return round_rating(v)


class ReviewUpdateRequest(RequestSchema):
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("rating")
    @classmethod
    def check_rating(cls, v: Optional[float]) -> Optional[int]:
        return None if v is None else round_rating(v)


class ReviewReplyRequest(RequestSchema):
    reply: str = Field(min_length=1)


# Flask helpers


def validate(schema, data):
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidArgument(
            "Validation error",
            errors=[
                {
                    "field": ".".join(str(part) for part in err["loc"]) or "body",
                    "message": err["msg"],
                }
                for err in e.errors()
            ],
        )


def parse_body(schema):
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object")
    return validate(schema, data)


def parse_args(schema):
    return validate(schema, request.args.to_dict())
