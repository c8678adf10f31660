# errors.py
"""Failure kinds reported by the augmentation engine."""


class AugmentError(Exception):
    """Base error for known augmentation failures."""

    kind = "AugmentError"


class DecodeFailure(AugmentError):
    """Raised when a source pixel buffer cannot be read."""

    kind = "DecodeFailure"


class InsufficientPool(AugmentError):
    """Raised when mosaic is requested with fewer images than tiles."""

    kind = "InsufficientPool"

    def __init__(self, available, required=4):
        super().__init__(f"Mosaic unavailable: needs {required} images, pool has {available}.")
        self.available = available
        self.required = required


class NoSourceSelected(AugmentError):
    """Raised when single-image mode has no image to work on."""

    kind = "NoSourceSelected"

    def __init__(self, message="No source image selected and mosaic is disabled."):
        super().__init__(message)


class InvalidConfig(AugmentError, ValueError):
    """Raised when an augmentation setting is missing or out of range."""

    kind = "InvalidConfig"

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field
