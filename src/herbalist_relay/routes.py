"""
HTTP routes.

The relay speaks Socket.IO; the only plain HTTP endpoint is a health check
for load balancers and uptime probes.
"""

from flask import Blueprint, current_app

bp = Blueprint('main', __name__)

@bp.route('/')
def index():
    """Health check."""
    return current_app.config['HEALTH_MESSAGE'], 200, {'Content-Type': 'text/plain; charset=utf-8'}
