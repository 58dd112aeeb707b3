"""
Shared fixtures for the Crossposter test suite.
"""

import os
import threading

import pytest
from PIL import Image

from crossposter.modules.crosspost.models import UploadedFile
from crossposter.modules.crosspost.platforms.base import Target


MIME_FORMATS = {'image/jpeg': 'JPEG', 'image/png': 'PNG', 'image/gif': 'GIF'}


def write_image(path, size=(640, 480), mime_type='image/jpeg', noisy=False, mode='RGB'):
    """Write a test image to disk and return its path."""
    width, height = size
    if noisy:
        img = Image.frombytes('RGB', size, os.urandom(width * height * 3))
        if mode != 'RGB':
            img = img.convert(mode)
    else:
        img = Image.new(mode, size, (200, 40, 40, 255)[:len(mode)] if mode != 'L' else 128)
    img.save(path, format=MIME_FORMATS[mime_type])
    return str(path)


class FakeTarget(Target):
    """In-memory target recording every call the service makes."""

    def __init__(self, name, configured=True, login_error=None, upload_error=None,
                 post_error=None, max_attachments=4, block=None, login_block=None):
        super().__init__()
        self.name = name
        self.max_attachments = max_attachments
        self.configured = configured
        self.login_error = login_error
        self.upload_error = upload_error
        self.post_error = post_error
        self.block = block
        self.login_block = login_block
        self.logins = 0
        self.uploads = []
        self.posts = []
        self._uploads_lock = threading.Lock()

    def validate_config(self):
        return self.configured

    def _login(self):
        self.logins += 1
        if self.login_block is not None:
            self.login_block.wait(5)
        if self.login_error is not None:
            raise self.login_error

    def upload_media(self, path, mime_type):
        assert os.path.exists(path), f"{path} was removed before upload"
        if self.upload_error is not None:
            raise self.upload_error
        with self._uploads_lock:
            self.uploads.append((path, mime_type))
            return f"{self.name}-media-{len(self.uploads)}"

    def create_post(self, text, media_refs, alt_texts):
        if self.block is not None:
            self.block.wait(5)
        if self.post_error is not None:
            raise self.post_error
        self.posts.append((text, list(media_refs), list(alt_texts)))
        return {'id': f'{self.name}-post', 'media': len(media_refs)}


@pytest.fixture
def request_dir(tmp_path):
    """Per-request upload directory, as the upload layer would create it."""
    d = tmp_path / "uploads" / "req-1"
    d.mkdir(parents=True)
    return d


@pytest.fixture
def make_uploads(request_dir):
    """Factory: create n uploaded JPEGs inside request_dir."""
    def _make(n, size=(640, 480), mime_type='image/jpeg'):
        uploads = []
        for i in range(n):
            path = write_image(request_dir / f"upload-{i}", size=size, mime_type=mime_type)
            uploads.append(UploadedFile(path=path, mime_type=mime_type, size_bytes=os.path.getsize(path)))
        return uploads
    return _make
