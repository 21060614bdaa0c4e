"""
Pillow helpers: decode, preprocess and encode.

Everything here is blocking; callers run it in worker threads.
"""

from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageChops, ImageOps, UnidentifiedImageError

from .errors import DecodeError, EncodeError
from .models import EncodedImage, ImageInfo

PIL_FORMATS = {
    "avif": "AVIF",
    "webp": "WEBP",
}

# Containers whose extra frames are not animation (MPO: stereo/preview pictures).
STILL_MULTIFRAME_FORMATS = ("MPO",)


def open_image(data: bytes) -> Tuple[Image.Image, ImageInfo]:
    """Decode `data` and report its metadata; raise DecodeError if Pillow can't."""
    try:
        im = Image.open(BytesIO(data))
        im.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeError(f"cannot decode image: {exc}")
    frames = getattr(im, "n_frames", 1)
    info = ImageInfo(
        format=im.format,
        width=im.width,
        height=im.height,
        frames=frames,
        animated=frames > 1 and im.format not in STILL_MULTIFRAME_FORMATS,
    )
    return im, info


def _working_mode(im: Image.Image) -> str:
    if im.mode in ("RGBA", "LA", "PA") or "transparency" in im.info:
        return "RGBA"
    return "RGB"


def trim_borders(im: Image.Image, threshold: int = 10) -> Image.Image:
    """
    Crop away a uniform border, using the top-left pixel as background.

    Every band counts, alpha included. On a fully transparent background
    only alpha is compared, since the colour of invisible pixels is noise.
    """
    corner = im.getpixel((0, 0))
    if im.mode == "RGBA" and corner[3] == 0:
        bands = [im.getchannel("A")]
    else:
        background = Image.new(im.mode, im.size, corner)
        bands = ImageChops.difference(im, background).split()
    diff = bands[0]
    for band in bands[1:]:
        diff = ImageChops.lighter(diff, band)
    diff = diff.point(lambda value: 255 if value > threshold else 0)
    bbox = diff.getbbox()
    if not bbox or bbox == (0, 0, im.width, im.height):
        # Blank image or no border: nothing to trim.
        return im
    return im.crop(bbox)


def resize_to_width(im: Image.Image, max_width: int) -> Image.Image:
    """Shrink to `max_width` keeping aspect ratio; never enlarge."""
    if im.width <= max_width:
        return im
    height = max(1, round(im.height * max_width / im.width))
    return im.resize((max_width, height), Image.Resampling.LANCZOS)


def quantize(im: Image.Image, colors: int) -> Image.Image:
    mode = im.mode
    method = Image.Quantize.FASTOCTREE if mode == "RGBA" else Image.Quantize.MEDIANCUT
    return im.quantize(colors=colors, method=method).convert(mode)


def preprocess(
    im: Image.Image,
    max_width: int,
    trim: bool = True,
    trim_threshold: int = 10,
    quantize_colors: Optional[int] = None,
) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    im = im.convert(_working_mode(im))
    if trim:
        im = trim_borders(im, trim_threshold)
    im = resize_to_width(im, max_width)
    if quantize_colors:
        im = quantize(im, quantize_colors)
    return im


def encode_image(im: Image.Image, codec: str, quality: int, effort: Optional[int] = None) -> EncodedImage:
    """
    Encode `im` with `codec` at `quality`.

    `effort` maps to AVIF `speed` (0 slowest .. 10 fastest) or WebP `method`
    (0 fastest .. 6 slowest).
    """
    fmt = PIL_FORMATS.get(codec)
    if fmt is None:
        raise EncodeError(f"unsupported codec {codec!r}")

    options = {"quality": quality}
    if effort is not None:
        options["speed" if codec == "avif" else "method"] = effort

    buf = BytesIO()
    try:
        im.save(buf, format=fmt, **options)
    except (KeyError, OSError, ValueError) as exc:
        raise EncodeError(f"{codec} encode failed: {exc}")
    return EncodedImage(data=buf.getvalue(), codec=codec, quality=quality)
