# mosaic.py
"""
4-way mosaic: four source images tiled 2x2 onto one 640x640 canvas.

Candidates are placed in the order given (top-left, top-right, bottom-left,
bottom-right), so each tile's boxes are remapped with that tile's offset.
"""
import logging
import random

import cv2
import numpy as np

from .annotations import SourceImage
from .codec import decode_pixels
from .coordinates import CANVAS_SIZE, TILE_SIZE, StageTransform
from .errors import InsufficientPool, InvalidConfig
from .geometric import warp_region

logger = logging.getLogger(__name__)

MOSAIC_TILES = 4
TILE_OFFSETS = ((0, 0), (TILE_SIZE, 0), (0, TILE_SIZE), (TILE_SIZE, TILE_SIZE))


def _same_image(a, b):
    if a is b:
        return True
    return bool(a.image_id) and a.image_id == b.image_id


def select_candidates(pool, selected=None, rng=None):
    """
    Draws the four mosaic candidates, uniformly without replacement.

    Args:
        pool (sequence of SourceImage): Read-only dataset snapshot.
        selected (SourceImage, optional): Image that must be part of the mosaic.
            It takes the top-left tile; the other three are drawn from the rest.
        rng (random.Random, optional): Random source. Pass a seeded instance
            for reproducible draws.

    Returns:
        tuple: Four SourceImage instances in placement order.

    Raises:
        InsufficientPool: If fewer than four distinct images are available.
    """
    pool = tuple(pool)
    if rng is None:
        rng = random.Random()

    if selected is not None:
        rest = [img for img in pool if not _same_image(img, selected)]
        if len(rest) + 1 < MOSAIC_TILES:
            raise InsufficientPool(len(rest) + 1, MOSAIC_TILES)
        return (selected,) + tuple(rng.sample(rest, MOSAIC_TILES - 1))

    if len(pool) < MOSAIC_TILES:
        raise InsufficientPool(len(pool), MOSAIC_TILES)
    return tuple(rng.sample(pool, MOSAIC_TILES))


def remap_tile(boxes, px, py):
    """``xmin' = xmin * 0.5 + px/640*1000``, likewise for xmax and for y with ``py``."""
    stage = StageTransform.tile(px, py)
    return tuple(stage.map_box(box) for box in boxes)


def check_selection(selection, pool, selected=None):
    """
    Validates an explicit mosaic selection against the pool snapshot.

    Args:
        selection (sequence of SourceImage): Four distinct pool images, in placement order.
        pool (sequence of SourceImage): Read-only dataset snapshot.
        selected (SourceImage, optional): Image the caller already chose; it
            must be one of the four.

    Returns:
        tuple: The four candidates.

    Raises:
        InvalidConfig: With ``field="selection"`` when any of the above does not hold.
    """
    candidates = tuple(selection)
    if len(candidates) != MOSAIC_TILES:
        raise InvalidConfig(f"Mosaic selection needs exactly {MOSAIC_TILES} images, got {len(candidates)}",
                            field="selection")
    for i, candidate in enumerate(candidates):
        if not isinstance(candidate, SourceImage):
            raise InvalidConfig(f"Mosaic selection entry {i} is a {type(candidate).__name__}, not a SourceImage",
                                field="selection")
        if not any(_same_image(candidate, img) for img in pool):
            raise InvalidConfig(f"Mosaic selection entry {i} is not part of the pool", field="selection")
        if any(_same_image(candidate, other) for other in candidates[i + 1:]):
            raise InvalidConfig(f"Mosaic selection entry {i} appears more than once", field="selection")
    if selected is not None and not any(_same_image(selected, c) for c in candidates):
        raise InvalidConfig("Selected image is missing from the mosaic selection", field="selection")
    return candidates


def _shrink_for_tile(image):
    # Box space is resolution independent, so a full-frame resize keeps every box valid
    h, w = image.shape[:2]
    if h > TILE_SIZE or w > TILE_SIZE:
        return cv2.resize(image, (min(w, TILE_SIZE), min(h, TILE_SIZE)), interpolation=cv2.INTER_AREA)
    return image


def compose_mosaic(candidates):
    """
    Builds the mosaic canvas and the merged annotation list.

    Every candidate is decoded before anything is drawn, so a DecodeFailure
    on any of them leaves no partial canvas behind.

    Args:
        candidates (sequence of SourceImage): Exactly four images, in placement order.

    Returns:
        tuple: (canvas, boxes) - 640x640 uint8 RGB canvas and all tiles' boxes.
    """
    candidates = tuple(candidates)
    if len(candidates) < MOSAIC_TILES:
        raise InsufficientPool(len(candidates), MOSAIC_TILES)
    if len(candidates) > MOSAIC_TILES:
        raise InvalidConfig(f"Mosaic takes exactly {MOSAIC_TILES} candidates, got {len(candidates)}",
                            field="selection")
    for i, candidate in enumerate(candidates):
        if not isinstance(candidate, SourceImage):
            raise InvalidConfig(f"Mosaic candidate {i} is a {type(candidate).__name__}, not a SourceImage",
                                field="selection")

    images = [decode_pixels(candidate.pixels) for candidate in candidates]

    canvas = np.zeros((CANVAS_SIZE, CANVAS_SIZE, 3), dtype=np.uint8)
    boxes = []
    for candidate, image, (px, py) in zip(candidates, images, TILE_OFFSETS):
        stage = StageTransform.tile(px, py)
        tile = warp_region(_shrink_for_tile(image), stage, px, py, TILE_SIZE)
        canvas[py:py + TILE_SIZE, px:px + TILE_SIZE] = tile
        boxes.extend(remap_tile(candidate.annotations, px, py))
        logger.debug("Tile at (%d, %d): %s, %d boxes", px, py,
                     candidate.image_id or "<unnamed>", len(candidate.annotations))
    return canvas, tuple(boxes)
