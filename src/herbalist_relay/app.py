"""
Flask application factory and main application entry point.

This module creates and configures the Flask application instance
with Socket.IO support for relaying gameplay events between two players.
"""

from flask import Flask
from flask_socketio import SocketIO
from flask_cors import CORS
from loguru import logger

from .room_registry import RoomRegistry

DEFAULT_CONFIG = {
    'SECRET_KEY': 'dev-key-change-in-production',
    'DEBUG': False,
    'CORS_ORIGINS': '*',
    'LOG_LEVEL': 'INFO',
    'ROOM_CODE_LENGTH': 5,
    'HEALTH_MESSAGE': 'Herbalist Wizards realtime server running',
}


def create_app(config=None):
    """
    Create and configure the Flask application.

    Args:
        config: Mapping of configuration overrides

    Returns:
        Tuple of (Flask application, SocketIO instance)
    """
    app = Flask(__name__)

    app.config.update(DEFAULT_CONFIG)
    if config:
        app.config.update(config)

    # Configure logging
    logger.remove()  # Remove default handler
    logger.add(
        lambda msg: print(msg, end=''),
        format="{time} | {level} | {message}",
        level=app.config['LOG_LEVEL'],
        colorize=True
    )
    logger.info("Starting Herbalist Wizards relay server")

    origins = app.config['CORS_ORIGINS']

    # Enable CORS for all HTTP requests
    CORS(app, origins=origins)

    # Initialize SocketIO for WebSocket support
    socketio = SocketIO(app, cors_allowed_origins=origins)

    # One registry per app; handlers get it injected rather than importing it
    registry = RoomRegistry(code_length=app.config['ROOM_CODE_LENGTH'])
    app.extensions['room_registry'] = registry

    from . import routes
    app.register_blueprint(routes.bp)

    from . import websocket_handlers
    websocket_handlers.init_socketio_handlers(socketio, registry)

    return app, socketio
