"""
Run the Crossposter development server.

    python -m crossposter

Visit:
    POST http://localhost:5000/api/post?services=bluesky,twitter
    GET  http://localhost:5000/api/targets
"""

import logging

from . import create_app
from .core import Config

logging.basicConfig(level=logging.INFO)

app = create_app()

if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("Crossposter")
    print("=" * 60)
    print(f"Targets:  {', '.join(app.extensions['crossposter'].get_registered_targets())}")
    print(f"Post:     http://localhost:{Config.port}/api/post")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=Config.port, debug=True)
