"""
Image Processing
================

Resizes and re-encodes uploaded images so every target accepts them.

Images are fitted inside MAX_IMAGE_DIMENSION on their longer edge, then
re-encoded. If the result is still over MAX_FILE_SIZE, one corrective
pass at a lower quality is made. There is no second pass, so the size
budget is a best effort and not a guarantee.
"""

import os
import math
import logging

from PIL import Image

from .errors import TranscodeError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 975 * 1024  # stays under Bluesky's 1MB blob limit
MAX_IMAGE_DIMENSION = 2000
DEFAULT_QUALITY = 80
CORRECTION_FACTOR = 70

PIL_FORMATS = {
    'image/jpeg': 'JPEG',
    'image/png': 'PNG',
    'image/gif': 'GIF',
}

# Types with a quality knob; everything else is re-encoded as-is
QUALITY_TYPES = ('image/jpeg', 'image/png')


def _fit_inside(image, max_dimension):
    """Scale down so the longer edge is max_dimension. Never enlarges."""
    width, height = image.size
    longest = max(width, height)
    if longest <= max_dimension:
        return image

    ratio = max_dimension / longest
    size = (max(1, round(width * ratio)), max(1, round(height * ratio)))
    return image.resize(size, Image.LANCZOS)


def _encode(image, output_path, mime_type, quality):
    """Write image to output_path in the format matching mime_type."""
    fmt = PIL_FORMATS.get(mime_type)
    if fmt is None:
        raise TranscodeError(f'Unsupported image type: {mime_type}')

    if fmt == 'JPEG':
        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')
        image.save(output_path, format='JPEG', quality=quality, optimize=True)
    elif fmt == 'PNG':
        # PNG quality is the palette size: 80 keeps 205 colours
        if image.mode not in ('RGB', 'RGBA'):
            image = image.convert('RGBA')
        colors = max(2, round(256 * quality / 100))
        image = image.quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
        image.save(output_path, format='PNG', optimize=True)
    else:
        image.save(output_path, format=fmt)


def transcode(input_path, output_path, mime_type,
              max_file_size=MAX_FILE_SIZE, max_dimension=MAX_IMAGE_DIMENSION):
    """
    Resize and re-encode one image.

    Args:
        input_path: Original upload on disk (left untouched)
        output_path: Where the processed copy is written
        mime_type: image/jpeg, image/png or image/gif
        max_file_size: Byte budget that triggers the corrective pass
        max_dimension: Longest allowed edge in pixels

    Raises:
        TranscodeError: input cannot be decoded or output cannot be written
    """
    try:
        with Image.open(input_path) as source:
            source.load()
            image = _fit_inside(source.copy(), max_dimension)

        _encode(image, output_path, mime_type, DEFAULT_QUALITY)

        size = os.path.getsize(output_path)
        if size > max_file_size and mime_type in QUALITY_TYPES:
            quality = max(1, math.floor((max_file_size / size) * CORRECTION_FACTOR))
            logger.info(
                f"{os.path.basename(input_path)} is {size} bytes after encode, "
                f"re-encoding at quality {quality}"
            )
            _encode(image, output_path, mime_type, quality)
    except TranscodeError:
        raise
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise TranscodeError(f'Failed to process image {os.path.basename(input_path)}: {e}') from e
