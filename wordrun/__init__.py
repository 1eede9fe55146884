"""
WordRun Server Application Package

A shared daily puzzle and endless Wordle-style runs, solo or in a
two-player cooperative mode with alternating turns, served over HTTP
with real-time room events on Socket.IO.
"""

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config


def create_app(config_class=Config, services=None):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use
        services: Prebuilt service container; built from ``config_class``
            with a Socket.IO notifier when omitted

    Returns:
        (app, socketio) with all extensions, blueprints and handlers registered
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app)
    socketio = SocketIO(app, cors_allowed_origins="*", logger=False, engineio_logger=False)

    from .container import build_services
    from .websocket.notifier import SocketIONotifier
    from .websocket.registry import RoomSocketRegistry

    if services is None:
        services = build_services(config_class, notifier=SocketIONotifier(socketio))

    app.services = services
    app.socketio = socketio
    app.room_registry = RoomSocketRegistry()

    # Register blueprints
    from .controllers.auth_controller import auth_bp
    from .controllers.infinite_controller import infinite_bp
    from .controllers.coop_controller import coop_bp
    from .controllers.daily_controller import daily_bp
    from .controllers.health_controller import health_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(infinite_bp, url_prefix='/api/infinite')
    app.register_blueprint(coop_bp, url_prefix='/api/infinite/coop')
    app.register_blueprint(daily_bp, url_prefix='/api/words')
    app.register_blueprint(health_bp, url_prefix='/api')

    # Register WebSocket handlers
    from .websocket.handlers import register_websocket_handlers
    register_websocket_handlers(socketio, services, app.room_registry)

    return app, socketio
