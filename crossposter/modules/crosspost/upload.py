"""
Upload handling for the cross-post endpoint.

Saves multipart images into a fresh per-request directory so that no two
requests share a temporary path, and enforces the type/count/size limits
before anything reaches the service.
"""

import os
import json
import uuid
import logging

from .cleanup import cleanup_files
from .errors import ValidationError
from .models import ALLOWED_MIME_TYPES, UploadedFile

logger = logging.getLogger(__name__)

MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # raw upload limit, images are resized later
MAX_FILES = 4

EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/gif': '.gif',
}


def _discard(saved, request_dir):
    cleanup_files([u.path for u in saved])
    try:
        os.rmdir(request_dir)
    except OSError:
        pass


def save_uploads(files, upload_root, max_files=MAX_FILES, max_upload_size=MAX_UPLOAD_SIZE):
    """
    Save werkzeug FileStorage objects to disk.

    Args:
        files: FileStorage list from request.files.getlist('images')
        upload_root: Base upload folder
        max_files: Maximum number of images per request
        max_upload_size: Maximum raw size of one image in bytes

    Returns:
        list of UploadedFile

    Raises:
        ValidationError: too many files, wrong type or too large. Anything
            already written is removed before raising.
    """
    files = [f for f in files if f and f.filename]
    if not files:
        return []

    if len(files) > max_files:
        raise ValidationError(f'Too many images. Maximum is {max_files}')

    for f in files:
        if f.mimetype not in ALLOWED_MIME_TYPES:
            raise ValidationError('Invalid file type. Only JPEG, PNG and GIF are allowed')

    request_dir = os.path.join(upload_root, uuid.uuid4().hex)
    os.makedirs(request_dir, exist_ok=True)

    saved = []
    try:
        for f in files:
            path = os.path.join(request_dir, f"{uuid.uuid4().hex}{EXTENSIONS[f.mimetype]}")
            f.save(path)
            size = os.path.getsize(path)
            saved.append(UploadedFile(path=path, mime_type=f.mimetype, size_bytes=size))
            if size > max_upload_size:
                raise ValidationError(
                    f'File too large. Maximum upload size is {max_upload_size // (1024 * 1024)}MB'
                )
    except ValidationError:
        _discard(saved, request_dir)
        raise
    except OSError as e:
        _discard(saved, request_dir)
        logger.error(f"Failed to save upload: {e}")
        raise

    return saved


def parse_alt_texts(raw):
    """Alt texts arrive as a JSON array; anything else is a single alt text."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return [raw]
    if isinstance(parsed, list):
        return ['' if a is None else str(a) for a in parsed]
    return [str(parsed)]


def parse_targets(raw):
    """'bluesky, Twitter' -> ['bluesky', 'twitter'] (order kept, duplicates dropped)."""
    targets = []
    for name in (raw or '').lower().split(','):
        name = name.strip()
        if name and name not in targets:
            targets.append(name)
    return targets
