from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column, relationship

Base = declarative_base()
metadata = Base.metadata

USER_ROLES = ("client", "trainer", "admin")
BOOKING_STATUSES = ("pending", "accepted", "rejected", "completed", "cancelled")


service_zones = Table(
    "service_zones",
    metadata,
    Column(
        "service_id",
        Integer,
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "zone_id", Integer, ForeignKey("zones.id", ondelete="CASCADE"), primary_key=True
    ),
)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("users_email", "email", unique=True),)

    id = mapped_column(Integer, primary_key=True)
    first_name = mapped_column(String(100), nullable=False)
    last_name = mapped_column(String(100), nullable=False)
    email = mapped_column(String(255), nullable=False)
    password_hash = mapped_column(LargeBinary(72), nullable=False)
    birth_date = mapped_column(Date)
    gender = mapped_column(String(20))
    role = mapped_column(Enum(*USER_ROLES, name="user_role"), nullable=False)
    profile_image = mapped_column(String(500))
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    services: Mapped[List["Service"]] = relationship(
        "Service",
        uselist=True,
        back_populates="trainer",
        cascade="all, delete-orphan",
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking",
        uselist=True,
        back_populates="client",
        cascade="all, delete-orphan",
    )


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (Index("categories_name", "name", unique=True),)

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(100), nullable=False)

    services: Mapped[List["Service"]] = relationship(
        "Service", uselist=True, back_populates="category"
    )


class Zone(Base):
    __tablename__ = "zones"
    __table_args__ = (Index("zones_name", "name", unique=True),)

    id = mapped_column(Integer, primary_key=True)
    name = mapped_column(String(100), nullable=False)

    services: Mapped[List["Service"]] = relationship(
        "Service", secondary=service_zones, back_populates="zones"
    )


class AllowedDuration(Base):
    __tablename__ = "allowed_durations"
    __table_args__ = (Index("allowed_durations_minutes", "minutes", unique=True),)

    id = mapped_column(Integer, primary_key=True)
    minutes = mapped_column(Integer, nullable=False)

    services: Mapped[List["Service"]] = relationship(
        "Service", uselist=True, back_populates="duration"
    )


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (
        Index("services_trainer_id", "trainer_id"),
        Index("services_category_id", "category_id"),
    )

    id = mapped_column(Integer, primary_key=True)
    trainer_id = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title = mapped_column(String(200), nullable=False)
    description = mapped_column(Text, nullable=False)
    price = mapped_column(Numeric(10, 2), nullable=False)
    category_id = mapped_column(Integer, ForeignKey("categories.id"), nullable=False)
    duration_id = mapped_column(
        Integer, ForeignKey("allowed_durations.id"), nullable=False
    )
    is_virtual = mapped_column(Boolean, nullable=False, default=False)
    is_published = mapped_column(Boolean, nullable=False, default=True)
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    trainer: Mapped["User"] = relationship("User", back_populates="services")
    category: Mapped["Category"] = relationship("Category", back_populates="services")
    duration: Mapped["AllowedDuration"] = relationship(
        "AllowedDuration", back_populates="services"
    )
    zones: Mapped[List["Zone"]] = relationship(
        "Zone", secondary=service_zones, back_populates="services", order_by="Zone.id"
    )
    bookings: Mapped[List["Booking"]] = relationship(
        "Booking",
        uselist=True,
        back_populates="service",
        cascade="all, delete-orphan",
    )

    @property
    def is_presential(self) -> bool:
        return not self.is_virtual


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("bookings_client_id", "client_id"),
        Index("bookings_service_id", "service_id"),
    )

    id = mapped_column(Integer, primary_key=True)
    service_id = mapped_column(
        Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False
    )
    client_id = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    scheduled_date = mapped_column(DateTime, nullable=False)
    notes = mapped_column(String(500))
    status = mapped_column(
        Enum(*BOOKING_STATUSES, name="booking_status"),
        nullable=False,
        default="pending",
    )
    cancel_reason = mapped_column(String(500))
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    service: Mapped["Service"] = relationship("Service", back_populates="bookings")
    client: Mapped["User"] = relationship("User", back_populates="bookings")
    review: Mapped[Optional["Review"]] = relationship(
        "Review",
        uselist=False,
        back_populates="booking",
        cascade="all, delete-orphan",
    )

    @property
    def trainer_id(self) -> int:
        return self.service.trainer_id


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (Index("reviews_booking_id", "booking_id", unique=True),)

    id = mapped_column(Integer, primary_key=True)
    booking_id = mapped_column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
    )
    rating = mapped_column(Integer, nullable=False)
    comment = mapped_column(Text)
    trainer_reply = mapped_column(Text)
    created_at = mapped_column(
        DateTime, nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=func.now(),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="review")
