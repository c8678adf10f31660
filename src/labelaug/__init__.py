#__init__.py

"""
labelaug
========
Bounding-box aware augmentation for object-detection datasets.
This package renders flip, zoom-crop, 4-way mosaic and colour jitter
augmentations onto a fixed 640x640 canvas and remaps the annotation
boxes (0-1000 box space) so labels stay attached to the right pixels.
"""
import logging

__version__ = "0.3.0"

from .annotations import AugmentedResult, BoundingBox, SourceImage
from .config import AugmentationConfig, DEFAULT_CONFIG, load_config
from .coordinates import StageTransform, to_box, to_pixel
from .errors import (AugmentError, DecodeFailure, InsufficientPool,
                     InvalidConfig, NoSourceSelected)
from .pipeline import AugmentOutcome, augment

# Handlers are left to the application
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ['augment', 'AugmentOutcome', 'AugmentationConfig', 'DEFAULT_CONFIG',
           'load_config', 'BoundingBox', 'SourceImage', 'AugmentedResult',
           'StageTransform', 'to_box', 'to_pixel', 'AugmentError',
           'DecodeFailure', 'InsufficientPool', 'NoSourceSelected', 'InvalidConfig']
