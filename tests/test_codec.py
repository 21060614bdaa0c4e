from io import BytesIO

import pytest
from PIL import Image, ImageOps

from shrinkray.core.codec import encode_image, open_image, preprocess, resize_to_width, trim_borders
from shrinkray.core.errors import DecodeError, EncodeError


def test_open_image_reports_metadata(noise_png):
    im, info = open_image(noise_png)
    assert info.format == "PNG"
    assert (info.width, info.height) == (400, 300)
    assert info.frames == 1
    assert not info.animated
    assert im.size == (400, 300)


def test_open_image_detects_animation(animated_gif):
    _, info = open_image(animated_gif)
    assert info.format == "GIF"
    assert info.frames == 3
    assert info.animated


def test_open_image_treats_mpo_as_still(mpo_jpeg):
    _, info = open_image(mpo_jpeg)
    assert info.format == "MPO"
    assert info.frames == 2
    assert not info.animated


def test_open_image_rejects_garbage():
    with pytest.raises(DecodeError) as info:
        open_image(b"definitely not an image")
    assert info.value.stage == "decode"


def test_trim_removes_uniform_border():
    canvas = Image.new("RGB", (100, 80), (255, 255, 255))
    canvas.paste(Image.new("RGB", (40, 30), (10, 20, 30)), (20, 25))
    trimmed = trim_borders(canvas)
    assert trimmed.size == (40, 30)


def test_trim_keeps_dark_artwork_on_transparent_canvas():
    canvas = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    canvas.paste(Image.new("RGBA", (20, 20), (0, 0, 0, 255)), (5, 5))
    canvas.paste(Image.new("RGBA", (20, 20), (255, 0, 0, 255)), (70, 70))
    assert trim_borders(canvas).size == (85, 85)


def test_trim_compares_alpha_on_opaque_background():
    canvas = Image.new("RGBA", (60, 60), (255, 255, 255, 255))
    canvas.paste(Image.new("RGBA", (10, 10), (255, 255, 255, 0)), (30, 20))
    assert trim_borders(canvas).size == (10, 10)


def test_trim_keeps_blank_image():
    blank = Image.new("RGB", (50, 50), (0, 0, 0))
    assert trim_borders(blank).size == (50, 50)


def test_resize_is_down_only_and_keeps_aspect_ratio():
    small = Image.new("RGB", (300, 200))
    assert resize_to_width(small, 600).size == (300, 200)

    large = Image.new("RGB", (2000, 1000))
    assert resize_to_width(large, 600).size == (600, 300)


def test_preprocess_converts_palette_with_transparency_to_rgba():
    im = Image.new("P", (20, 20), 0)
    im.info["transparency"] = 0
    assert preprocess(im, max_width=100, trim=False).mode == "RGBA"


def test_preprocess_quantizes_when_asked(noise_png):
    im, _ = open_image(noise_png)
    out = preprocess(im, max_width=200, quantize_colors=16)
    assert out.mode == "RGB"
    assert out.width == 200
    assert len(out.getcolors(maxcolors=256) or []) <= 16


def test_preprocess_applies_exif_orientation():
    im = Image.new("RGB", (60, 30), (0, 128, 0))
    exif = im.getexif()
    exif[0x0112] = 6  # rotate 90 CW on display
    buf = BytesIO()
    im.save(buf, format="JPEG", exif=exif)
    decoded, _ = open_image(buf.getvalue())
    assert preprocess(decoded, max_width=1000, trim=False).size == ImageOps.exif_transpose(decoded).size == (30, 60)


def test_encode_webp():
    encoded = encode_image(Image.new("RGB", (64, 64), (90, 120, 200)), "webp", 70, 4)
    assert encoded.codec == "webp"
    assert encoded.quality == 70
    assert encoded.content_type == "image/webp"
    assert encoded.data[:4] == b"RIFF"
    assert Image.open(BytesIO(encoded.data)).format == "WEBP"


def test_encode_unknown_codec():
    with pytest.raises(EncodeError):
        encode_image(Image.new("RGB", (8, 8)), "jpegxl", 50)
