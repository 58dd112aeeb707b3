"""
Temporary file cleanup for cross-post requests.
"""

import os
import logging
from contextlib import contextmanager

logger = logging.getLogger(__name__)


def cleanup_files(paths):
    """Delete each path and its parent directory if that leaves it empty.

    Best-effort: failures are logged and the remaining paths are still
    processed. Never raises.
    """
    for path in paths:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Error deleting file {path}: {e}")
            continue

        parent = os.path.dirname(path)
        if not parent:
            continue
        try:
            if not os.listdir(parent):
                os.rmdir(parent)
        except OSError:
            pass


@contextmanager
def cleanup_scope(paths=()):
    """Track temporary files for one request and delete them on exit.

    Yields a list the caller appends to; every path in it is cleaned up
    exactly once when the block exits, whatever the exit path.
    """
    tracked = list(paths)
    try:
        yield tracked
    finally:
        cleanup_files(tracked)
