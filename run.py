"""
Server entry point.

Run this script to start the relay with Socket.IO support. HOST, PORT,
LOG_LEVEL, CORS_ORIGINS (comma-separated) and DEBUG are read from the
environment.
"""

import os

from herbalist_relay.app import create_app


def config_from_env(environ=os.environ):
    """Build create_app() overrides from environment variables."""
    config = {}
    if 'LOG_LEVEL' in environ:
        config['LOG_LEVEL'] = environ['LOG_LEVEL'].upper()
    origins = environ.get('CORS_ORIGINS', '').strip()
    if origins and origins != '*':
        config['CORS_ORIGINS'] = [o.strip() for o in origins.split(',') if o.strip()]
    config['DEBUG'] = environ.get('DEBUG', '').lower() in ('1', 'true', 'yes')
    return config


if __name__ == '__main__':
    app, socketio = create_app(config_from_env())
    host = os.environ.get('HOST', '0.0.0.0')
    port = int(os.environ.get('PORT', '3000'))
    socketio.run(app, debug=app.config['DEBUG'], host=host, port=port,
                 allow_unsafe_werkzeug=True)
