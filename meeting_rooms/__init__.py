from flask import Flask
from meeting_rooms.config import DevelopmentConfig
from meeting_rooms.extensions import db, migrate

def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported before create_all / migrations see the metadata
    from meeting_rooms import models  # noqa: F401

    # Register Blueprints
    from meeting_rooms.api.routes.auth import auth_bp
    from meeting_rooms.api.routes.rooms import rooms_bp
    from meeting_rooms.api.routes.reservations import reservations_bp
    from meeting_rooms.api.routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(rooms_bp, url_prefix='/api/rooms')
    app.register_blueprint(reservations_bp, url_prefix='/api/reservations')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route('/health')
    def health():
        return {"status": "ok", "app": "MeetingRooms"}

    return app
