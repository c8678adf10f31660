# geometric.py
"""
Single-image geometric augmentation: zoom-crop and horizontal flip.

Pixels and boxes go through the same StageTransform; crop runs before flip.
"""
import logging

import cv2

from .codec import decode_pixels
from .coordinates import CANVAS_SIZE, StageTransform

logger = logging.getLogger(__name__)


def single_image_stage(crop=False, flip=False):
    """Composite stage for one image: optional crop, then optional flip."""
    stage = StageTransform.identity()
    if crop:
        stage = stage.then(StageTransform.crop())
    if flip:
        stage = stage.then(StageTransform.hflip())
    return stage


def warp_to_canvas(image, stage, canvas_size=CANVAS_SIZE):
    """
    Samples ``image`` onto a new square canvas through ``stage``.

    Args:
        image (np.ndarray): Decoded uint8 RGB source at any resolution.
        stage (StageTransform): Box-space map from source frame to canvas frame.
        canvas_size (int): Side of the output canvas.

    Returns:
        np.ndarray: New (canvas_size, canvas_size, 3) uint8 array.
    """
    h, w = image.shape[:2]
    M = stage.pixel_matrix(w, h, canvas_size)
    # Edge samples reflect, no black fill along the canvas border
    return cv2.warpAffine(image, M, (canvas_size, canvas_size),
                          flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_REFLECT_101)


def warp_region(image, stage, x0, y0, size, canvas_size=CANVAS_SIZE):
    """
    Renders only the ``size`` x ``size`` window of the warped canvas that starts
    at pixel (x0, y0). Same samples as slicing :func:`warp_to_canvas`'s output.
    """
    h, w = image.shape[:2]
    M = stage.pixel_matrix(w, h, canvas_size)
    M[0, 2] -= x0
    M[1, 2] -= y0
    return cv2.warpAffine(image, M, (size, size),
                          flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_REFLECT_101)


def render_single(pixels, crop=False, flip=False):
    """Renders the 640x640 canvas for one source image."""
    image = decode_pixels(pixels)
    return warp_to_canvas(image, single_image_stage(crop, flip))


def sanitize_boxes(boxes):
    """
    Drops boxes lying entirely outside the 0-1000 frame and clamps the rest.

    Partially visible slivers are kept, however thin.
    """
    kept = []
    for box in boxes:
        box = box.ordered()
        if box.is_outside():
            continue
        kept.append(box.clamped())
    return tuple(kept)


def crop_boxes(boxes):
    """Zoom-crop remap ``x' = (x - 100) * 1.25`` followed by drop and clamp."""
    stage = StageTransform.crop()
    return sanitize_boxes(stage.map_box(box) for box in boxes)


def flip_boxes(boxes):
    """Horizontal flip: ``xmin' = 1000 - xmax``, ``xmax' = 1000 - xmin``."""
    stage = StageTransform.hflip()
    return tuple(stage.map_box(box) for box in boxes)


def remap_single(boxes, crop=False, flip=False):
    """Box path matching :func:`render_single`. Disabled stages are skipped."""
    boxes = tuple(boxes)
    if crop:
        before = len(boxes)
        boxes = crop_boxes(boxes)
        if len(boxes) != before:
            logger.debug("Crop dropped %d of %d boxes outside the window", before - len(boxes), before)
    if flip:
        boxes = flip_boxes(boxes)
    return boxes


def transform_single(pixels, boxes, crop=False, flip=False):
    """
    Geometric transform of one labelled image.

    Returns:
        tuple: (canvas, boxes) - the 640x640 uint8 RGB canvas and the remapped boxes.
    """
    canvas = render_single(pixels, crop=crop, flip=flip)
    return canvas, remap_single(boxes, crop=crop, flip=flip)
