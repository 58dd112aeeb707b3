"""
Bluesky Platform Adapter
========================

Posts to Bluesky over the AT Protocol XRPC endpoints.
Logs in with an app password, uploads images as blobs and attaches
them with the app.bsky.embed.images embed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

import requests

from .base import Target
from ..errors import AuthError, PlatformError, PostError, UploadError


DEFAULT_SERVICE = "https://bsky.social"
ALT_TEXT_FALLBACK_LENGTH = 300


@dataclass
class BlueskyConfig:
    service: str = DEFAULT_SERVICE
    identifier: str = ''
    password: str = ''


class BlueskyTarget(Target):
    name = 'bluesky'
    max_attachments = 4

    def __init__(self, config):
        super().__init__()
        self.config = config
        self._session = None

    def _xrpc(self, method):
        service = (self.config.service or DEFAULT_SERVICE).rstrip('/')
        return f"{service}/xrpc/{method}"

    def _headers(self, session):
        return {"Authorization": f"Bearer {session['accessJwt']}"}

    def validate_config(self):
        return bool(self.config.identifier and self.config.password)

    def _login(self):
        try:
            resp = requests.post(
                self._xrpc("com.atproto.server.createSession"),
                json={
                    "identifier": self.config.identifier,
                    "password": self.config.password,
                },
                timeout=30,
            )
        except requests.RequestException as e:
            raise AuthError(f'Bluesky login error: {e}') from e

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise AuthError(f'Bluesky login error: {e} {resp.text}'.strip()) from e

        session = resp.json()
        if not session.get('accessJwt') or not session.get('did'):
            raise AuthError('Bluesky login returned no session')
        self._session = session

    def _clear_session(self):
        self._session = None

    def upload_media(self, path, mime_type):
        """Upload one image as a blob. Returns the blob reference."""
        session = self._session
        if not self.is_authenticated() or session is None:
            raise UploadError('Not authenticated with Bluesky')

        with open(path, 'rb') as f:
            image_data = f.read()

        try:
            resp = requests.post(
                self._xrpc("com.atproto.repo.uploadBlob"),
                data=image_data,
                headers={**self._headers(session), "Content-Type": mime_type},
                timeout=60,
            )
        except requests.RequestException as e:
            raise UploadError(f'Bluesky upload error: {e}') from e

        try:
            self._raise_for_response(resp, 'upload')
        except PlatformError as e:
            raise UploadError(str(e)) from e
        return resp.json()["blob"]

    def create_post(self, text, media_refs, alt_texts):
        """
        Create an app.bsky.feed.post record.

        Images without an alt text get the first 300 chars of the post text.

        Returns:
            dict with {uri, cid}
        """
        session = self._session
        if not self.is_authenticated() or session is None:
            raise PostError('Not authenticated with Bluesky')

        record = {
            "$type": "app.bsky.feed.post",
            "text": text,
            "createdAt": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }
        if media_refs:
            record["embed"] = {
                "$type": "app.bsky.embed.images",
                "images": [
                    {
                        "image": blob,
                        "alt": (alt_texts[i] if i < len(alt_texts) else '')
                        or text[:ALT_TEXT_FALLBACK_LENGTH],
                    }
                    for i, blob in enumerate(media_refs)
                ],
            }

        try:
            resp = requests.post(
                self._xrpc("com.atproto.repo.createRecord"),
                json={
                    "repo": session["did"],
                    "collection": "app.bsky.feed.post",
                    "record": record,
                },
                headers=self._headers(session),
                timeout=30,
            )
        except requests.RequestException as e:
            raise PlatformError(f'Bluesky API error: {e}') from e

        self._raise_for_response(resp, 'post')
        data = resp.json()
        return {'uri': data.get('uri'), 'cid': data.get('cid')}
