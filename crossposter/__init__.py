"""
Crossposter - Post once, publish everywhere
===========================================

A small Flask service that takes one post (text + up to 4 images) and
publishes it to Bluesky and Twitter/X in parallel.

Usage:
    from flask import Flask
    from crossposter import CrossPoster

    app = Flask(__name__)
    CrossPoster(app)

    # or
    from crossposter import create_app
    app = create_app({'UPLOAD_FOLDER': '/tmp/uploads'})
"""

import os
import logging

from flask import Flask
from flask_cors import CORS

from .core import Config
from .modules.crosspost import CrossPostService, crosspost_bp

__version__ = '0.1.0'

logger = logging.getLogger(__name__)


class CrossPoster:
    """Flask extension: applies config, builds the service, registers the API."""

    def __init__(self, app=None, config=None):
        self._config = config or {}
        self.service = CrossPostService()
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        # Base config first, so anything the host app already set wins
        for key in dir(Config):
            if key.isupper():
                app.config.setdefault(key, getattr(Config, key))
        app.config.update(self._config)

        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

        self.service.init_app(app)

        CORS(app, resources={r"/api/*": {"origins": app.config.get('CROSSPOST_ALLOWED_ORIGINS', [])}})
        app.register_blueprint(crosspost_bp)

        app.extensions['crossposter'] = self
        logger.info(f"Crossposter initialised with targets: {', '.join(self.get_registered_targets())}")

    def get_registered_targets(self):
        return list(self.service.targets)


def create_app(config=None):
    """Create a Flask app with Crossposter registered."""
    app = Flask(__name__)
    CrossPoster(app, config)
    return app


__all__ = ['CrossPoster', 'create_app', 'CrossPostService']
