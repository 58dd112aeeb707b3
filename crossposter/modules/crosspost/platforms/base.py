"""
Target Base Class
=================

Interface every publishing destination implements. Session state lives on
the target instance and is guarded by a lock, since one instance is shared
by every request the app serves.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List

import requests

from ..errors import AuthError, PlatformError

logger = logging.getLogger(__name__)


class Target(ABC):
    """A platform posts can be published to."""

    name = ''
    max_attachments = 4

    def __init__(self):
        self._authenticated = False
        self._lock = threading.Lock()

    @abstractmethod
    def validate_config(self) -> bool:
        """True if the credentials needed to authenticate are present. No I/O."""

    @abstractmethod
    def _login(self) -> None:
        """Perform the platform handshake. Raise on failure; don't touch auth state."""

    @abstractmethod
    def upload_media(self, path: str, mime_type: str) -> Any:
        """Upload one processed image and return the platform's media reference."""

    @abstractmethod
    def create_post(self, text: str, media_refs: List[Any], alt_texts: List[str]) -> Dict[str, Any]:
        """Publish the post and return a JSON-serialisable receipt."""

    def authenticate(self) -> None:
        with self._lock:
            # Another request may have logged in while we waited for the lock
            if self._authenticated:
                return
            try:
                self._login()
            except AuthError:
                self._authenticated = False
                self._clear_session()
                logger.error(f"Failed to authenticate with {self.name}")
                raise
            except Exception as e:
                self._authenticated = False
                self._clear_session()
                logger.error(f"Failed to authenticate with {self.name}: {e}")
                raise AuthError(str(e)) from e
            self._authenticated = True
        logger.info(f"Successfully authenticated with {self.name}")

    def is_authenticated(self) -> bool:
        return self._authenticated

    def invalidate(self) -> None:
        """Forget the session so the next request authenticates again."""
        with self._lock:
            self._authenticated = False
            self._clear_session()

    def _clear_session(self) -> None:
        pass

    def _raise_for_response(self, resp, action):
        """Turn a non-2xx response into PlatformError, dropping stale sessions on 401."""
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            if resp.status_code == 401:
                self.invalidate()
            raise PlatformError(
                f'{self.name} {action} error: {e} {resp.text}'.strip(),
                status_code=resp.status_code,
            ) from e
