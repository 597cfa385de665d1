"""
Swagger/OpenAPI configuration for the FitBook API
"""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec",
            "route": "/apispec.json",
            "rule_filter": lambda rule: True,
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "FitBook API",
        "description": "REST API for browsing and booking personal-training services: authentication, service catalog, bookings and reviews",
        "version": "1.0.0",
    },
    "host": "",
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
        }
    },
    "security": [{"Bearer": []}],
    "tags": [
        {"name": "Authentication", "description": "Registration and login"},
        {"name": "Users", "description": "Profile and trainer directory"},
        {"name": "Services", "description": "Service catalog management"},
        {"name": "Bookings", "description": "Booking lifecycle"},
        {"name": "Reviews", "description": "Reviews, trainer replies and stats"},
        {"name": "Utility", "description": "Health check"},
    ],
    "definitions": {
        "Error": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "error"},
                "error": {"type": "string", "example": "invalid_argument"},
                "message": {"type": "string"},
                "errors": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "field": {"type": "string"},
                            "message": {"type": "string"},
                        },
                    },
                },
            },
        },
        "Success": {
            "type": "object",
            "properties": {
                "status": {"type": "string", "example": "success"},
                "message": {"type": "string"},
            },
        },
        "RegisterPayload": {
            "type": "object",
            "required": [
                "firstName",
                "lastName",
                "email",
                "password",
                "birthDate",
                "role",
            ],
            "properties": {
                "firstName": {"type": "string", "example": "Ana"},
                "lastName": {"type": "string", "example": "García"},
                "email": {"type": "string", "example": "ana@example.com"},
                "password": {"type": "string", "example": "Secret123!"},
                "birthDate": {"type": "string", "format": "date"},
                "gender": {"type": "string"},
                "role": {"type": "string", "enum": ["client", "trainer"]},
            },
        },
        "LoginPayload": {
            "type": "object",
            "required": ["email", "password"],
            "properties": {
                "email": {"type": "string"},
                "password": {"type": "string"},
            },
        },
        "PasswordChangePayload": {
            "type": "object",
            "required": ["currentPassword", "newPassword"],
            "properties": {
                "currentPassword": {"type": "string"},
                "newPassword": {"type": "string"},
            },
        },
        "ServicePayload": {
            "type": "object",
            "required": [
                "title",
                "description",
                "price",
                "categoryId",
                "durationId",
                "zones",
                "isVirtual",
            ],
            "properties": {
                "title": {"type": "string"},
                "description": {"type": "string"},
                "price": {"type": "number", "format": "float", "example": 35.0},
                "categoryId": {"type": "integer"},
                "durationId": {"type": "integer"},
                "zones": {
                    "type": "array",
                    "items": {"type": "integer"},
                    "minItems": 1,
                    "maxItems": 3,
                },
                "isVirtual": {"type": "boolean"},
            },
        },
        "Service": {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "trainer_id": {"type": "integer"},
                "title": {"type": "string"},
                "description": {"type": "string"},
                "price": {"type": "number", "format": "float"},
                "category_name": {"type": "string"},
                "duration_minutes": {"type": "integer"},
                "zones": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "integer"},
                            "name": {"type": "string"},
                        },
                    },
                },
                "is_virtual": {"type": "boolean"},
                "is_presential": {"type": "boolean"},
                "is_published": {"type": "boolean"},
                "average_rating": {"type": "number", "format": "float"},
                "review_count": {"type": "integer"},
            },
        },
        "BookingPayload": {
            "type": "object",
            "required": ["serviceId", "scheduledDate"],
            "properties": {
                "serviceId": {"type": "integer"},
                "scheduledDate": {
                    "type": "string",
                    "format": "date-time",
                    "example": "2030-01-15T10:00:00",
                },
                "notes": {"type": "string", "maxLength": 500},
            },
        },
        "BookingStatusPayload": {
            "type": "object",
            "required": ["status"],
            "properties": {
                "status": {
                    "type": "string",
                    "enum": ["accepted", "rejected", "completed", "cancelled"],
                },
                "cancelReason": {"type": "string", "maxLength": 500},
            },
        },
        "ReviewPayload": {
            "type": "object",
            "required": ["bookingId", "rating"],
            "properties": {
                "bookingId": {"type": "integer"},
                "rating": {"type": "number", "minimum": 1, "maximum": 5},
                "comment": {"type": "string"},
            },
        },
        "ReviewStats": {
            "type": "object",
            "properties": {
                "service_id": {"type": "integer"},
                "total_reviews": {"type": "integer"},
                "average_rating": {"type": "number", "format": "float"},
                "five_stars": {"type": "integer"},
                "four_stars": {"type": "integer"},
                "three_stars": {"type": "integer"},
                "two_stars": {"type": "integer"},
                "one_star": {"type": "integer"},
            },
        },
    },
}
