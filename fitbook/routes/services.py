from flask import Blueprint, jsonify

from ..auth.policy import current_user, policy
from ..extensions import db
from ..schemas import (
    PublishRequest,
    ServiceFilters,
    ServiceRequest,
    parse_args,
    parse_body,
)
from ..services.catalog import ServiceCatalog

services_bp = Blueprint("services", __name__, url_prefix="/api/services")


@services_bp.route("", methods=["GET"])
def list_services():
    """
    List published services
    ---
    tags:
      - Services
    parameters:
      - in: query
        name: categoryId
        type: integer
      - in: query
        name: zoneId
        type: integer
      - in: query
        name: durationId
        type: integer
      - in: query
        name: isVirtual
        type: boolean
      - in: query
        name: modality
        type: string
        enum: [virtual, presential]
      - in: query
        name: orderBy
        type: string
        enum: [price_asc, price_desc, rating_asc, rating_desc, newest]
    responses:
      200:
        description: Matching services, filtered and sorted server-side
        schema:
          type: array
          items:
            $ref: '#/definitions/Service'
      400:
        description: Invalid filter value
        schema:
          $ref: '#/definitions/Error'
    """
    filters = parse_args(ServiceFilters)
    return jsonify(ServiceCatalog(db.session).list_published(filters)), 200


@services_bp.route("/categories", methods=["GET"])
def get_categories():
    categories = ServiceCatalog(db.session).categories()
    return jsonify([{"id": c.id, "name": c.name} for c in categories]), 200


@services_bp.route("/zones", methods=["GET"])
def get_zones():
    zones = ServiceCatalog(db.session).zones()
    return jsonify([{"id": z.id, "name": z.name} for z in zones]), 200


@services_bp.route("/durations", methods=["GET"])
def get_durations():
    durations = ServiceCatalog(db.session).durations()
    return jsonify([{"id": d.id, "minutes": d.minutes} for d in durations]), 200


@services_bp.route("/trainer", methods=["GET"])
@policy.roles_required("trainer")
def get_my_services():
    """
    GET /api/services/trainer
    Purpose: The calling trainer's services, published or not.
    """
    return jsonify(ServiceCatalog(db.session).list_by_trainer(current_user().id)), 200


@services_bp.route("/<int:service_id>", methods=["GET"])
def get_service(service_id):
    """
    GET /api/services/<service_id>
    Purpose: Public service detail.
    Behavior:
    - Unpublished services answer 404 unless the bearer token belongs to their trainer.
    """
    viewer = policy.optional_user()
    detail = ServiceCatalog(db.session).get_visible(
        service_id, viewer.id if viewer else None
    )
    return jsonify(detail), 200


@services_bp.route("", methods=["POST"])
@policy.roles_required("trainer")
def create_service():
    """
    Publish a new service
    ---
    tags:
      - Services
    parameters:
      - in: body
        name: body
        required: true
        schema:
          $ref: '#/definitions/ServicePayload'
    responses:
      201:
        description: Service created
      400:
        description: Validation error (price, zones between 1 and 3, unknown references)
        schema:
          $ref: '#/definitions/Error'
      403:
        description: Caller is not a trainer
        schema:
          $ref: '#/definitions/Error'
    """
    data = parse_body(ServiceRequest)
    service = ServiceCatalog(db.session).create(
        trainer_id=current_user().id, **data.model_dump()
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": "Service created successfully",
                "service": service,
            }
        ),
        201,
    )


@services_bp.route("/<int:service_id>", methods=["PUT"])
@policy.roles_required("trainer")
def update_service(service_id):
    """
    PUT /api/services/<service_id>
    Purpose: Replace every field of a service owned by the caller.
    Behavior:
    - The zone list replaces the stored one; it is never merged.
    - 403 when the caller does not own the service, 404 when it does not exist.
    """
    data = parse_body(ServiceRequest)
    service = ServiceCatalog(db.session).update(
        service_id, trainer_id=current_user().id, **data.model_dump()
    )
    return (
        jsonify(
            {
                "status": "success",
                "message": "Service updated successfully",
                "service": service,
            }
        ),
        200,
    )


@services_bp.route("/<int:service_id>/publish", methods=["PATCH"])
@policy.roles_required("trainer")
def publish_service(service_id):
    """
    PATCH /api/services/<service_id>/publish
    Input: optional JSON body {"published": bool}; without it the flag toggles.
    """
    data = parse_body(PublishRequest)
    service = ServiceCatalog(db.session).set_published(
        service_id, current_user().id, data.published
    )
    return jsonify({"status": "success", "service": service}), 200


@services_bp.route("/duplicate/<int:service_id>", methods=["POST"])
@policy.roles_required("trainer")
def duplicate_service(service_id):
    service = ServiceCatalog(db.session).duplicate(service_id, current_user().id)
    return (
        jsonify(
            {
                "status": "success",
                "message": "Service duplicated successfully",
                "service": service,
            }
        ),
        201,
    )


@services_bp.route("/<int:service_id>", methods=["DELETE"])
@policy.roles_required("trainer")
def delete_service(service_id):
    ServiceCatalog(db.session).delete(service_id, current_user().id)
    return jsonify({"status": "success", "message": "Service deleted successfully"}), 200
