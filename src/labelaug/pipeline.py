# pipeline.py
"""
The one operation callers use: :func:`augment`.

Mode selection (mosaic vs. single image), geometric stage, photometric stage,
box post-filtering. Failures come back inside an AugmentOutcome instead of as
a partially built canvas.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .annotations import AugmentedResult
from .config import AugmentationConfig
from .errors import AugmentError, InsufficientPool, NoSourceSelected
from .geometric import sanitize_boxes, transform_single
from .mosaic import MOSAIC_TILES, check_selection, compose_mosaic, select_candidates
from .photometric import apply_photometric_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AugmentOutcome:
    result: Optional[AugmentedResult] = None
    error: Optional[AugmentError] = None

    @property
    def ok(self):
        return self.error is None

    def unwrap(self):
        """Returns the result, or raises the stored error."""
        if self.error is not None:
            raise self.error
        return self.result


def _finish(canvas, boxes, config, mode, sources):
    pixels = apply_photometric_config(canvas, config)
    pixels.setflags(write=False)
    return AugmentedResult(
        pixels=pixels,
        annotations=sanitize_boxes(boxes),
        mode=mode,
        source_ids=tuple(src.image_id for src in sources),
    )


def _run(config, selected, pool, rng, selection):
    if not isinstance(config, AugmentationConfig):
        config = AugmentationConfig.from_dict(config)
    else:
        config.validate()

    if config.mosaic:
        if len(pool) < MOSAIC_TILES:
            raise InsufficientPool(len(pool), MOSAIC_TILES)
        if selection is not None:
            candidates = check_selection(selection, pool, selected=selected)
        else:
            candidates = select_candidates(pool, selected=selected, rng=rng)
        logger.info("Processing mosaic from %d candidates (crop/flip ignored)", len(candidates))
        canvas, boxes = compose_mosaic(candidates)
        return _finish(canvas, boxes, config, "mosaic", candidates)

    if selected is None:
        raise NoSourceSelected()

    logger.info("Processing %s (crop=%s, flip=%s)",
                selected.image_id or "selected image", config.crop, config.flip)
    canvas, boxes = transform_single(selected.pixels, selected.annotations,
                                     crop=config.crop, flip=config.flip)
    return _finish(canvas, boxes, config, "single", (selected,))


def augment(config, selected=None, pool=(), rng=None, selection=None):
    """
    Produces one augmented (image, annotations) pair.

    Args:
        config (AugmentationConfig or dict): Settings for this render.
        selected (SourceImage, optional): Image for single mode. In mosaic mode
            it is guaranteed one of the four tiles.
        pool (sequence of SourceImage): Dataset snapshot used for mosaic. It is
            only read, never modified.
        rng (random.Random, optional): Random source for the mosaic draw.
        selection (sequence of SourceImage, optional): Four explicit mosaic
            candidates in placement order, all taken from ``pool``; skips the
            random draw. When ``selected`` is also given it must be one of them.

    Returns:
        AugmentOutcome: ``result`` on success, otherwise ``error`` holding a
        DecodeFailure, InsufficientPool, NoSourceSelected or InvalidConfig.
    """
    pool = tuple(pool or ())
    try:
        result = _run(config, selected, pool, rng, selection)
    except AugmentError as e:
        logger.warning("Warning: augmentation failed (%s): %s", e.kind, e)
        return AugmentOutcome(error=e)

    logger.info("Augmentation complete: %s mode, %d boxes", result.mode, len(result.annotations))
    return AugmentOutcome(result=result)
