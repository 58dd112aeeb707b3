import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for Crossposter.
    Credentials come from environment variables (or a .env file).
    """
    # Flask settings
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'uploads'))
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # 4 images x 10MB, plus room for the form fields
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', str(41 * 1024 * 1024)))

    # Bluesky (use an app password, not the account password)
    CROSSPOST_BLUESKY_SERVICE = os.getenv('BLUESKY_SERVICE', 'https://bsky.social')
    CROSSPOST_BLUESKY_IDENTIFIER = os.getenv('BLUESKY_IDENTIFIER', '')
    CROSSPOST_BLUESKY_PASSWORD = os.getenv('BLUESKY_PASSWORD', '')

    # Twitter/X OAuth 1.0a
    CROSSPOST_TWITTER_API_KEY = os.getenv('TWITTER_API_KEY', '')
    CROSSPOST_TWITTER_API_SECRET = os.getenv('TWITTER_KEY_SECRET', '')
    CROSSPOST_TWITTER_ACCESS_TOKEN = os.getenv('TWITTER_ACCESS_TOKEN', '')
    CROSSPOST_TWITTER_ACCESS_TOKEN_SECRET = os.getenv('TWITTER_ACCESS_TOKEN_SECRET', '')

    # Pipeline limits
    CROSSPOST_TARGET_TIMEOUT = float(os.getenv('CROSSPOST_TARGET_TIMEOUT', '120'))
    CROSSPOST_MAX_WORKERS = int(os.getenv('CROSSPOST_MAX_WORKERS', '8'))

    # Origins allowed to call /api/* from a browser
    CROSSPOST_ALLOWED_ORIGINS = [
        o.strip() for o in os.getenv('CROSSPOST_ALLOWED_ORIGINS', 'http://localhost:5173').split(',')
        if o.strip()
    ]

    # Port for local server
    port = int(os.getenv('PORT', '5000'))
