"""
Cross-Post Module
=================

Publishes one post (text + images) to several platforms in parallel:
- Bluesky (AT Protocol, app password)
- Twitter/X (API v2, OAuth 1.0a)

Usage:
    from crossposter.modules.crosspost import crosspost_bp, CrossPostService

    app.register_blueprint(crosspost_bp)  # Registers at /api
"""

from flask import Blueprint

crosspost_bp = Blueprint('crosspost', __name__, url_prefix='/api')

from . import routes
from .crosspost_service import CrossPostService

__all__ = ['crosspost_bp', 'CrossPostService']
