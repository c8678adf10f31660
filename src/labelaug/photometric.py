# photometric.py
"""
Colour jitter applied to a rendered RGB canvas.

Per pixel, in this fixed order: brightness, contrast, then hue rotation in HSL
space. Each step clamps to 0-255 before the next one runs, so the order changes
the visible result and must stay as is. Coordinates are never touched here.
"""
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

CONTRAST_PIVOT = 128.0


def adjust_brightness(values, brightness):
    """c' = clamp(c * brightness/100, 0, 255) on a float array."""
    return np.clip(values * (brightness / 100.0), 0, 255)


def adjust_contrast(values, contrast):
    """c'' = clamp((c' - 128) * contrast/100 + 128, 0, 255) on a float array."""
    return np.clip((values - CONTRAST_PIVOT) * (contrast / 100.0) + CONTRAST_PIVOT, 0, 255)


def rotate_hue(values, hue):
    """
    Rotates hue by ``hue`` degrees, keeping lightness and saturation.

    Args:
        values (np.ndarray): float32 RGB array in 0-255.
        hue (float): Rotation in degrees; any value, taken modulo 360.

    Returns:
        np.ndarray: float32 RGB array in 0-255.
    """
    # float32 input keeps full precision: H in [0, 360), L and S in [0, 1]
    hls = cv2.cvtColor(values.astype(np.float32) / 255.0, cv2.COLOR_RGB2HLS)
    hls[:, :, 0] = np.mod(hls[:, :, 0] + np.float32(hue), 360.0)
    rgb = cv2.cvtColor(hls, cv2.COLOR_HLS2RGB)
    return np.clip(rgb * 255.0, 0, 255)


def apply_photometric(pixels, brightness=100.0, contrast=100.0, hue=0.0):
    """
    Applies brightness, contrast and hue rotation to an RGB buffer.

    Args:
        pixels (np.ndarray): uint8 array of shape (H, W, 3), RGB order.
        brightness (float): Percent, 100 = unchanged.
        contrast (float): Percent, 100 = unchanged.
        hue (float): Degrees, 0 = unchanged.

    Returns:
        np.ndarray: New uint8 array with the same shape. Neutral settings give
                    an exact copy of the input.
    """
    image = np.asarray(pixels)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an RGB buffer of shape (H, W, 3), got {image.shape}")

    if brightness == 100 and contrast == 100 and hue % 360 == 0:
        return image.astype(np.uint8, copy=True)

    work = image.astype(np.float32)
    if brightness != 100:
        work = adjust_brightness(work, brightness)
    if contrast != 100:
        work = adjust_contrast(work, contrast)
    if hue % 360 != 0:
        work = rotate_hue(work, hue)
    logger.debug("Photometric pass: brightness=%s contrast=%s hue=%s", brightness, contrast, hue)
    return np.clip(np.rint(work), 0, 255).astype(np.uint8)


def apply_photometric_config(pixels, config):
    """Runs :func:`apply_photometric` with the levels from an AugmentationConfig."""
    return apply_photometric(pixels, brightness=config.brightness,
                             contrast=config.contrast, hue=config.hue)
