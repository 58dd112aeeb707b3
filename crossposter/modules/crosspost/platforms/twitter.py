"""
Twitter/X Platform Adapter
===========================

Posts tweets via the Twitter API v2 using OAuth 1.0a.
Images go through the v1.1 media upload endpoint; alt texts are attached
with the v1.1 media metadata endpoint before the tweet is created.
"""

from dataclasses import dataclass

import requests
from requests_oauthlib import OAuth1, OAuth1Session

from .base import Target
from ..errors import AuthError, PlatformError, PostError, UploadError


API_BASE = "https://api.twitter.com/2"
UPLOAD_URL = "https://upload.twitter.com/1.1/media/upload.json"
METADATA_URL = "https://upload.twitter.com/1.1/media/metadata/create.json"
REQUEST_TOKEN_URL = "https://api.twitter.com/oauth/request_token?x_auth_access_type=write"
AUTHORIZE_URL = "https://api.twitter.com/oauth/authorize"
MAX_ALT_TEXT_LENGTH = 1000


@dataclass
class TwitterConfig:
    consumer_key: str = ''
    consumer_secret: str = ''
    access_token: str = ''
    access_token_secret: str = ''


class TwitterTarget(Target):
    name = 'twitter'
    max_attachments = 4

    def __init__(self, config):
        super().__init__()
        self.config = config
        self._auth = None

    def validate_config(self):
        has_tokens = bool(self.config.access_token and self.config.access_token_secret)
        return bool(
            self.config.consumer_key
            and self.config.consumer_secret
            and (self.is_authenticated() or has_tokens)
        )

    def _login(self):
        """Use the configured access tokens, or start the PIN flow if there are none."""
        if self.config.access_token and self.config.access_token_secret:
            self._auth = OAuth1(
                self.config.consumer_key,
                self.config.consumer_secret,
                self.config.access_token,
                self.config.access_token_secret,
            )
            return

        oauth = OAuth1Session(
            self.config.consumer_key,
            client_secret=self.config.consumer_secret,
            callback_uri='oob',
        )
        oauth.fetch_request_token(REQUEST_TOKEN_URL, timeout=30)
        authorize_url = oauth.authorization_url(AUTHORIZE_URL)
        raise AuthError(
            f'Twitter requires manual PIN authorization: visit {authorize_url}'
        )

    def _clear_session(self):
        self._auth = None

    def upload_media(self, path, mime_type):
        """Upload one image. Returns the media_id string."""
        auth = self._auth
        if not self.is_authenticated() or auth is None:
            raise UploadError('Not authenticated with Twitter')

        ext = mime_type.split('/')[-1].replace('jpeg', 'jpg')
        with open(path, 'rb') as f:
            try:
                resp = requests.post(
                    UPLOAD_URL,
                    auth=auth,
                    files={"media": (f"image.{ext}", f, mime_type)},
                    timeout=60,
                )
            except requests.RequestException as e:
                raise UploadError(f'Twitter upload error: {e}') from e

        try:
            self._raise_for_response(resp, 'upload')
        except PlatformError as e:
            raise UploadError(str(e)) from e

        media_id = resp.json().get("media_id_string")
        if not media_id:
            raise UploadError('Twitter upload returned no media_id')
        return media_id

    def _set_alt_text(self, auth, media_id, alt_text):
        try:
            resp = requests.post(
                METADATA_URL,
                auth=auth,
                json={"media_id": media_id, "alt_text": {"text": alt_text[:MAX_ALT_TEXT_LENGTH]}},
                timeout=30,
            )
        except requests.RequestException as e:
            raise PlatformError(f'Twitter metadata error: {e}') from e
        self._raise_for_response(resp, 'metadata')

    def create_post(self, text, media_refs, alt_texts):
        """
        Post a tweet with the uploaded media attached.

        Returns:
            dict with the tweet's {id, text, url}
        """
        auth = self._auth
        if not self.is_authenticated() or auth is None:
            raise PostError('Not authenticated with Twitter')

        for i, media_id in enumerate(media_refs):
            if i < len(alt_texts) and alt_texts[i]:
                self._set_alt_text(auth, media_id, alt_texts[i])

        tweet_payload = {"text": text}
        if media_refs:
            tweet_payload["media"] = {"media_ids": list(media_refs)}

        try:
            resp = requests.post(
                f"{API_BASE}/tweets",
                json=tweet_payload,
                auth=auth,
                timeout=30,
            )
        except requests.RequestException as e:
            raise PlatformError(f'Twitter API error: {e}') from e

        self._raise_for_response(resp, 'API')
        data = resp.json().get('data', {})
        tweet_id = data.get('id', '')
        data['url'] = f"https://x.com/i/web/status/{tweet_id}" if tweet_id else ''
        return data
