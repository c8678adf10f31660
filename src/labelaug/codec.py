# codec.py
"""
Pixel buffer decoding and encoding.

The engine works on uint8 RGB numpy arrays. Dataset images may arrive already
decoded, as encoded bytes, or as the base64 data URL a browser canvas produces;
everything is normalised here so the transform stages never see anything else.
"""
import base64
import binascii
import io
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"


def _to_uint8(image_array):
    """
    Normalize an image array to 8-bit range (0-255).
    Flat images come back as zeros.
    """
    if image_array.dtype == np.uint8:
        return image_array
    if image_array.dtype == np.bool_:
        return image_array.astype(np.uint8) * 255

    min_val = float(np.min(image_array))
    max_val = float(np.max(image_array))
    range_val = max_val - min_val
    if not np.isfinite(range_val):
        raise DecodeFailure(f"Image contains non-finite values (dtype {image_array.dtype}).")
    if range_val == 0:
        return np.zeros_like(image_array, dtype=np.uint8)

    normalized = (image_array.astype(np.float64) - min_val) / range_val
    return np.clip(normalized * 255.0, 0, 255).round().astype(np.uint8)


def _to_rgb(image_array):
    if image_array.ndim == 2:
        return np.stack([image_array] * 3, axis=-1)
    if image_array.ndim == 3:
        channels = image_array.shape[2]
        if channels == 1:
            return np.repeat(image_array, 3, axis=2)
        if channels == 3:
            return image_array
        if channels == 4:  # RGBA, alpha dropped
            return image_array[:, :, :3]
    raise DecodeFailure(f"Unsupported image shape {image_array.shape}.")


def _decode_bytes(data):
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return np.array(img.convert("RGB"))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Could not decode image bytes: {e}") from e


def _decode_data_url(url):
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith(DATA_URL_PREFIX) or not header.endswith(";base64"):
        raise DecodeFailure("Pixel source is a string but not a base64 data URL.")
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"Invalid base64 payload in data URL: {e}") from e
    return _decode_bytes(raw)


def decode_pixels(data):
    """
    Turns any supported pixel source into a uint8 RGB array.

    Args:
        data: numpy array (HxW, HxWx1, HxWx3 or HxWx4), encoded image bytes,
              or a ``data:image/...;base64,`` URL.

    Returns:
        np.ndarray: Array of shape (H, W, 3), dtype uint8. May share memory
                    with ``data`` when no conversion was needed; callers must
                    not write to it.

    Raises:
        DecodeFailure: If the source cannot be read.
    """
    if data is None:
        raise DecodeFailure("Pixel source is missing.")

    if isinstance(data, np.ndarray):
        image = data
    elif isinstance(data, (bytes, bytearray, memoryview)):
        image = _decode_bytes(bytes(data))
    elif isinstance(data, str):
        image = _decode_data_url(data.strip())
    else:
        raise DecodeFailure(f"Unsupported pixel source type: {type(data).__name__}.")

    if image.size == 0 or image.ndim < 2 or image.shape[0] == 0 or image.shape[1] == 0:
        raise DecodeFailure(f"Empty image buffer (shape {image.shape}).")

    return np.ascontiguousarray(_to_uint8(_to_rgb(image)))


def read_image(path):
    """Reads an image file from disk as a uint8 RGB array."""
    try:
        with Image.open(path) as img:
            img.load()
            # Grayscale / high bit-depth modes are normalised by decode_pixels
            if img.mode not in ("L", "I", "F", "I;16", "I;16B", "I;16L", "RGB"):
                img = img.convert("RGB")
            image = np.array(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Could not read image {path}: {e}") from e
    logger.debug("Loaded image %s, shape %s, dtype %s", path, image.shape, image.dtype)
    return decode_pixels(image)


def encode_jpeg(pixels, quality=92):
    """Encodes an RGB buffer as JPEG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def to_data_url(pixels, quality=92):
    """Encodes an RGB buffer as a ``data:image/jpeg;base64,...`` URL."""
    payload = base64.b64encode(encode_jpeg(pixels, quality=quality)).decode("ascii")
    return f"data:image/jpeg;base64,{payload}"
