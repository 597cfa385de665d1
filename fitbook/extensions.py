from flask_sqlalchemy import SQLAlchemy

# Bound to the app in create_app(); sessions are scoped to the app context.
db = SQLAlchemy()
