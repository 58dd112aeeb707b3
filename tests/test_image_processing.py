"""
Image processing tests
======================

Run with: pytest tests/test_image_processing.py -v
"""

import os
from unittest.mock import patch

import pytest
from PIL import Image

from crossposter.modules.crosspost import image_processing
from crossposter.modules.crosspost.errors import TranscodeError
from crossposter.modules.crosspost.image_processing import (
    MAX_FILE_SIZE, MAX_IMAGE_DIMENSION, transcode,
)

from conftest import write_image


# ---------------------------------------------------------------------------
# 1. Constants
# ---------------------------------------------------------------------------

def test_limits():
    assert MAX_FILE_SIZE == 975 * 1024
    assert MAX_IMAGE_DIMENSION == 2000


# ---------------------------------------------------------------------------
# 2. Small images keep their dimensions
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("mime_type,fmt", [
    ('image/jpeg', 'JPEG'),
    ('image/png', 'PNG'),
    ('image/gif', 'GIF'),
])
def test_small_image_keeps_dimensions(tmp_path, mime_type, fmt):
    """An image already inside the budget is re-encoded without resizing."""
    src = write_image(tmp_path / "in", size=(800, 600), mime_type=mime_type)
    out = str(tmp_path / "out")

    transcode(src, out, mime_type)

    with Image.open(out) as img:
        assert img.size == (800, 600)
        assert img.format == fmt
    assert os.path.exists(src), "input must not be deleted"


# ---------------------------------------------------------------------------
# 3. Large images are fitted inside MAX_IMAGE_DIMENSION
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("size,expected", [
    ((3000, 1500), (2000, 1000)),
    ((1200, 4000), (600, 2000)),
    ((2001, 2001), (2000, 2000)),
])
def test_large_image_downscaled(tmp_path, size, expected):
    src = write_image(tmp_path / "in", size=size)
    out = str(tmp_path / "out")

    transcode(src, out, 'image/jpeg')

    with Image.open(out) as img:
        assert img.size == expected


def test_no_upscaling(tmp_path):
    src = write_image(tmp_path / "in", size=(40, 30))
    out = str(tmp_path / "out")

    transcode(src, out, 'image/jpeg', max_dimension=2000)

    with Image.open(out) as img:
        assert img.size == (40, 30)


def test_png_transparency_survives_resize(tmp_path):
    src = Image.new('RGBA', (2400, 1200), (0, 0, 0, 0))
    src.paste((200, 40, 40, 255), (1200, 0, 2400, 1200))
    src_path = str(tmp_path / "in")
    src.save(src_path, format='PNG')
    out = str(tmp_path / "out")

    transcode(src_path, out, 'image/png')

    with Image.open(out) as img:
        assert img.size == (2000, 1000)
        rgba = img.convert('RGBA')
        assert rgba.getpixel((0, 0))[3] == 0
        assert rgba.getpixel((1999, 999))[3] == 255


# ---------------------------------------------------------------------------
# 4. Corrective pass -- exactly one extra encode, only when over budget
# ---------------------------------------------------------------------------

def test_single_encode_when_under_budget(tmp_path):
    src = write_image(tmp_path / "in", size=(300, 300))
    out = str(tmp_path / "out")

    with patch.object(image_processing, '_encode', wraps=image_processing._encode) as encode:
        transcode(src, out, 'image/jpeg')

    assert encode.call_count == 1
    assert encode.call_args[0][3] == 80


def test_one_corrective_pass_when_over_budget(tmp_path):
    """Noise does not compress, so the first encode is over the tiny budget."""
    src = write_image(tmp_path / "in", size=(600, 600), noisy=True)
    out = str(tmp_path / "out")
    budget = 20 * 1024

    sizes = []
    real_encode = image_processing._encode

    def recording_encode(image, output_path, mime_type, quality):
        real_encode(image, output_path, mime_type, quality)
        sizes.append(os.path.getsize(output_path))

    with patch.object(image_processing, '_encode', side_effect=recording_encode) as encode:
        transcode(src, out, 'image/jpeg', max_file_size=budget)

    assert encode.call_count == 2, "exactly one corrective re-encode"
    expected_quality = max(1, int((budget / sizes[0]) * 70))
    assert encode.call_args_list[1][0][3] == expected_quality
    assert sizes[1] < sizes[0]


def test_corrective_pass_is_not_a_guarantee(tmp_path):
    """With an impossible budget the output is still written, just over budget."""
    src = write_image(tmp_path / "in", size=(600, 600), noisy=True)
    out = str(tmp_path / "out")

    with patch.object(image_processing, '_encode', wraps=image_processing._encode) as encode:
        transcode(src, out, 'image/jpeg', max_file_size=100)

    assert encode.call_count == 2
    assert os.path.getsize(out) > 100


def test_png_first_pass_is_quality_80_palette(tmp_path):
    """A photo-like PNG fits the budget after the first, quantized encode."""
    src = write_image(tmp_path / "in", size=(300, 300), mime_type='image/png', noisy=True)
    out = str(tmp_path / "out")

    with patch.object(image_processing, '_encode', wraps=image_processing._encode) as encode:
        transcode(src, out, 'image/png')

    assert encode.call_count == 1
    assert encode.call_args[0][3] == 80
    with Image.open(out) as img:
        assert img.mode == 'P'
        assert len(img.getcolors(256)) <= 205


def test_png_corrective_pass_quantizes(tmp_path):
    src = write_image(tmp_path / "in", size=(300, 300), mime_type='image/png', noisy=True)
    out = str(tmp_path / "out")

    transcode(src, out, 'image/png', max_file_size=10 * 1024)

    with Image.open(out) as img:
        assert img.format == 'PNG'
        assert img.mode == 'P'
        assert img.size == (300, 300)


def test_gif_has_no_corrective_pass(tmp_path):
    src = write_image(tmp_path / "in", size=(400, 400), mime_type='image/gif', noisy=True)
    out = str(tmp_path / "out")

    with patch.object(image_processing, '_encode', wraps=image_processing._encode) as encode:
        transcode(src, out, 'image/gif', max_file_size=100)

    assert encode.call_count == 1


# ---------------------------------------------------------------------------
# 5. Failures surface as TranscodeError
# ---------------------------------------------------------------------------

def test_undecodable_input(tmp_path):
    src = tmp_path / "broken"
    src.write_bytes(b"definitely not an image")

    with pytest.raises(TranscodeError):
        transcode(str(src), str(tmp_path / "out"), 'image/jpeg')


def test_missing_input(tmp_path):
    with pytest.raises(TranscodeError):
        transcode(str(tmp_path / "nope"), str(tmp_path / "out"), 'image/jpeg')


def test_unwritable_output(tmp_path):
    src = write_image(tmp_path / "in", size=(100, 100))

    with pytest.raises(TranscodeError):
        transcode(src, str(tmp_path / "missing-dir" / "out"), 'image/jpeg')


def test_unsupported_mime_type(tmp_path):
    src = write_image(tmp_path / "in", size=(100, 100))

    with pytest.raises(TranscodeError):
        transcode(src, str(tmp_path / "out"), 'image/webp')
