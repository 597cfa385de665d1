from fitbook.routes.auth import auth_bp
from fitbook.routes.users import users_bp
from fitbook.routes.services import services_bp
from fitbook.routes.bookings import bookings_bp
from fitbook.routes.reviews import reviews_bp
from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from flasgger import Swagger
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE
import os

load_dotenv()
from fitbook.config import Config  # noqa: E402
from fitbook.errors import register_error_handlers  # noqa: E402
from fitbook.extensions import db  # noqa: E402


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    CORS(app)
    db.init_app(app)

    # Determine host based on environment
    host = os.environ.get("API_HOST", "127.0.0.1:5000")
    swagger_template = SWAGGER_TEMPLATE.copy()
    swagger_template["host"] = host
    Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)

    register_error_handlers(app)

    blueprints = [
        auth_bp,
        users_bp,
        services_bp,
        bookings_bp,
        reviews_bp,
    ]

    for bp in blueprints:
        app.register_blueprint(bp)
        app.logger.debug(f"  ✓ {bp.name} registered")

    @app.route("/")
    def home():
        """
        Root endpoint - API status
        ---
        tags:
          - Utility
        responses:
          200:
            description: API is running
            schema:
              type: object
              properties:
                status:
                  type: string
                message:
                  type: string
        """
        return {"status": "ok", "message": "Backend is running!"}, 200

    app.logger.info(
        f"App created with {len(list(app.url_map.iter_rules()))} routes "
        f"(testing={app.config.get('TESTING')})"
    )
    return app


app = create_app()


if __name__ == "__main__":
    # Create a .env containing:
    #       DATABASE_URL=mysql+pymysql://<USER>:<PASSWORD>@<HOST>:<PORT>/fitbook
    #       SECRET_KEY=<random string>
    port = int(os.environ.get("PORT", 5000))
    app.run(
        host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") != "production"
    )
