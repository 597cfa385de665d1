from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.orm import joinedload, selectinload

from ..auth.policy import policy
from ..errors import Conflict, InvalidArgument, NotFound
from ..models import AllowedDuration, Booking, Category, Review, Service, Zone
from ..utils.timeutils import isoformat

MAX_ZONES = 3


def rating_summary():
    """Average rating and review count per service, joined through bookings."""
    return (
        select(
            Booking.service_id.label("service_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .join(Review, Review.booking_id == Booking.id)
        .group_by(Booking.service_id)
        .subquery()
    )


def serialize_service(service, average_rating=None, review_count=0):
    return {
        "id": service.id,
        "trainer_id": service.trainer_id,
        "trainer_first_name": service.trainer.first_name if service.trainer else None,
        "trainer_last_name": service.trainer.last_name if service.trainer else None,
        "title": service.title,
        "description": service.description,
        "price": float(service.price) if service.price is not None else None,
        "category_id": service.category_id,
        "category_name": service.category.name if service.category else None,
        "duration_id": service.duration_id,
        "duration_minutes": service.duration.minutes if service.duration else None,
        "zones": [{"id": z.id, "name": z.name} for z in service.zones],
        "is_virtual": service.is_virtual,
        "is_presential": service.is_presential,
        "is_published": service.is_published,
        "average_rating": (
            round(float(average_rating), 2) if average_rating is not None else None
        ),
        "review_count": int(review_count or 0),
        "created_at": isoformat(service.created_at),
        "updated_at": isoformat(service.updated_at),
    }


class ServiceCatalog:
    """Service listings owned by trainers, plus the reference data they use."""

    def __init__(self, session):
        self.session = session

    # Reference data

    def categories(self):
        return self.session.scalars(select(Category).order_by(Category.name)).all()

    def zones(self):
        return self.session.scalars(select(Zone).order_by(Zone.name)).all()

    def durations(self):
        return self.session.scalars(
            select(AllowedDuration).order_by(AllowedDuration.minutes)
        ).all()

    def _resolve_references(self, category_id, duration_id, zone_ids):
        if not 1 <= len(zone_ids) <= MAX_ZONES:
            raise InvalidArgument(f"A service needs between 1 and {MAX_ZONES} zones")
        if len(set(zone_ids)) != len(zone_ids):
            raise InvalidArgument("Zones must not repeat")

        if self.session.get(Category, category_id) is None:
            raise InvalidArgument(f"Unknown category {category_id}")
        if self.session.get(AllowedDuration, duration_id) is None:
            raise InvalidArgument(f"Unknown duration {duration_id}")

        zones = self.session.scalars(select(Zone).where(Zone.id.in_(zone_ids))).all()
        missing = set(zone_ids) - {z.id for z in zones}
        if missing:
            raise InvalidArgument(f"Unknown zones: {sorted(missing)}")
        return zones

    # Reads

    def _base_query(self):
        summary = rating_summary()
        stmt = (
            select(Service, summary.c.average_rating, summary.c.review_count)
            .outerjoin(summary, summary.c.service_id == Service.id)
            .options(
                joinedload(Service.trainer),
                joinedload(Service.category),
                joinedload(Service.duration),
                selectinload(Service.zones),
            )
        )
        return stmt, summary

    def get(self, service_id, for_update=False):
        stmt = select(Service).where(Service.id == service_id)
        if for_update:
            stmt = stmt.with_for_update()
        service = self.session.scalar(stmt)
        if service is None:
            raise NotFound(f"No service found with ID {service_id}")
        return service

    def get_detail(self, service_id):
        stmt, _ = self._base_query()
        row = self.session.execute(stmt.where(Service.id == service_id)).first()
        if row is None:
            raise NotFound(f"No service found with ID {service_id}")
        return serialize_service(*row)

    def get_visible(self, service_id, viewer_id=None):
        """Detail of a service; drafts are only shown to their trainer."""
        detail = self.get_detail(service_id)
        if not detail["is_published"] and detail["trainer_id"] != viewer_id:
            raise NotFound(f"No service found with ID {service_id}")
        return detail

    def list_published(self, filters):
        stmt, summary = self._base_query()
        stmt = stmt.where(Service.is_published.is_(True))

        if filters.category_id is not None:
            stmt = stmt.where(Service.category_id == filters.category_id)
        if filters.zone_id is not None:
            stmt = stmt.where(Service.zones.any(Zone.id == filters.zone_id))
        if filters.duration_id is not None:
            stmt = stmt.where(Service.duration_id == filters.duration_id)
        if filters.is_virtual is not None:
            stmt = stmt.where(Service.is_virtual.is_(filters.is_virtual))
        if filters.modality is not None:
            stmt = stmt.where(Service.is_virtual.is_(filters.modality == "virtual"))

        if filters.order_by == "price_asc":
            stmt = stmt.order_by(Service.price.asc(), Service.id.asc())
        elif filters.order_by == "price_desc":
            stmt = stmt.order_by(Service.price.desc(), Service.id.desc())
        elif filters.order_by == "rating_asc":
            stmt = stmt.order_by(
                summary.c.average_rating.is_(None), summary.c.average_rating.asc()
            )
        elif filters.order_by == "rating_desc":
            stmt = stmt.order_by(
                summary.c.average_rating.is_(None), summary.c.average_rating.desc()
            )
        else:
            stmt = stmt.order_by(Service.created_at.desc(), Service.id.desc())

        return [serialize_service(*row) for row in self.session.execute(stmt).all()]

    def list_by_trainer(self, trainer_id):
        stmt, _ = self._base_query()
        stmt = stmt.where(Service.trainer_id == trainer_id).order_by(Service.id.desc())
        return [serialize_service(*row) for row in self.session.execute(stmt).all()]

    # Writes

    def create(
        self,
        trainer_id,
        title,
        description,
        price,
        category_id,
        duration_id,
        zones,
        is_virtual,
    ):
        try:
            zone_rows = self._resolve_references(category_id, duration_id, zones)
            service = Service(
                trainer_id=trainer_id,
                title=title,
                description=description,
                price=price,
                category_id=category_id,
                duration_id=duration_id,
                is_virtual=is_virtual,
                is_published=True,
                zones=zone_rows,
            )
            self.session.add(service)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        current_app.logger.info(f"Service {service.id} created by trainer {trainer_id}")
        return self.get_detail(service.id)

    def update(
        self,
        service_id,
        trainer_id,
        title,
        description,
        price,
        category_id,
        duration_id,
        zones,
        is_virtual,
    ):
        try:
            service = self.get(service_id, for_update=True)
            policy.check_service_owner(trainer_id, service)
            zone_rows = self._resolve_references(category_id, duration_id, zones)

            service.title = title
            service.description = description
            service.price = price
            service.category_id = category_id
            service.duration_id = duration_id
            service.is_virtual = is_virtual

            # Replace the zone set: drop every link, then insert the new ones
            service.zones.clear()
            self.session.flush()
            service.zones.extend(zone_rows)

            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        return self.get_detail(service_id)

    def set_published(self, service_id, trainer_id, published=None):
        try:
            service = self.get(service_id, for_update=True)
            policy.check_service_owner(trainer_id, service)
            service.is_published = (
                not service.is_published if published is None else published
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.get_detail(service_id)

    def duplicate(self, service_id, trainer_id):
        try:
            source = self.get(service_id)
            policy.check_service_owner(trainer_id, source)
            copy = Service(
                trainer_id=source.trainer_id,
                title=f"{source.title} (copy)",
                description=source.description,
                price=source.price,
                category_id=source.category_id,
                duration_id=source.duration_id,
                is_virtual=source.is_virtual,
                is_published=False,
                zones=list(source.zones),
            )
            self.session.add(copy)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self.get_detail(copy.id)

    def delete(self, service_id, trainer_id):
        try:
            service = self.get(service_id, for_update=True)
            policy.check_service_owner(trainer_id, service)

            booking_count = self.session.scalar(
                select(func.count(Booking.id)).where(Booking.service_id == service_id)
            )
            if booking_count:
                raise Conflict("The service has bookings and cannot be deleted")

            self.session.delete(service)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        current_app.logger.info(f"Service {service_id} deleted by trainer {trainer_id}")
