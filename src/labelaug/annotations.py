# annotations.py
"""
Value records passed in and out of the augmentation engine.

Boxes are immutable; every transform hands back new instances. Coordinates are
in the 0-1000 box space (see :mod:`labelaug.coordinates`).
"""
import time
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .codec import to_data_url
from .coordinates import BOX_SPACE


def _clip(v, lo=0.0, hi=BOX_SPACE):
    return min(hi, max(lo, v))


@dataclass(frozen=True)
class BoundingBox:
    label: str
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    confidence: Optional[float] = None

    @classmethod
    def from_dict(cls, data):
        """
        Builds a box from a dataset annotation record.

        Args:
            data (dict): {'label', 'xmin', 'ymin', 'xmax', 'ymax'[, 'confidence']}.

        Returns:
            BoundingBox: The parsed box.
        """
        confidence = data.get("confidence")
        return cls(
            label=str(data["label"]),
            xmin=float(data["xmin"]),
            ymin=float(data["ymin"]),
            xmax=float(data["xmax"]),
            ymax=float(data["ymax"]),
            confidence=None if confidence is None else float(confidence),
        )

    @classmethod
    def from_box_2d(cls, label, box_2d, confidence=None):
        """Builds a box from a detector's ``[ymin, xmin, ymax, xmax]`` list."""
        ymin, xmin, ymax, xmax = (float(v) for v in box_2d)
        return cls(label=label, xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax,
                   confidence=confidence).ordered()

    def to_dict(self):
        data = {"label": self.label, "xmin": self.xmin, "ymin": self.ymin,
                "xmax": self.xmax, "ymax": self.ymax}
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    @property
    def width(self):
        return max(0.0, self.xmax - self.xmin)

    @property
    def height(self):
        return max(0.0, self.ymax - self.ymin)

    @property
    def area(self):
        return self.width * self.height

    def with_coords(self, xmin, ymin, xmax, ymax):
        return replace(self, xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax)

    def ordered(self):
        """Swaps any inverted min/max pair."""
        return self.with_coords(min(self.xmin, self.xmax), min(self.ymin, self.ymax),
                                max(self.xmin, self.xmax), max(self.ymin, self.ymax))

    def is_outside(self):
        """True when the box lies entirely outside the 0-1000 frame."""
        return (self.xmax <= 0 or self.xmin >= BOX_SPACE or
                self.ymax <= 0 or self.ymin >= BOX_SPACE)

    def clamped(self):
        return self.with_coords(_clip(self.xmin), _clip(self.ymin),
                                _clip(self.xmax), _clip(self.ymax))

    def is_valid(self):
        return (0 <= self.xmin <= self.xmax <= BOX_SPACE and
                0 <= self.ymin <= self.ymax <= BOX_SPACE)


def _as_boxes(annotations):
    boxes = []
    for ann in annotations or ():
        boxes.append(ann if isinstance(ann, BoundingBox) else BoundingBox.from_dict(ann))
    return tuple(boxes)


@dataclass(frozen=True, eq=False)
class SourceImage:
    """
    One labelled dataset image.

    ``pixels`` is either a decoded numpy array or the encoded image (bytes or a
    base64 data URL); :func:`labelaug.codec.decode_pixels` accepts both.
    """

    pixels: object
    annotations: Tuple[BoundingBox, ...] = ()
    image_id: Optional[str] = None
    created_at: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "annotations", _as_boxes(self.annotations))

    @classmethod
    def from_dict(cls, record):
        """Builds a source image from a dataset record {'id', 'src', 'annotations', 'createdAt'}."""
        return cls(
            pixels=record["src"],
            annotations=record.get("annotations", ()),
            image_id=record.get("id"),
            created_at=record.get("createdAt"),
        )


@dataclass(frozen=True, eq=False)
class AugmentedResult:
    pixels: object  # (640, 640, 3) uint8 RGB
    annotations: Tuple[BoundingBox, ...]
    mode: str = "single"
    source_ids: Tuple[Optional[str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "annotations", _as_boxes(self.annotations))
        object.__setattr__(self, "source_ids", tuple(self.source_ids))

    def to_source_image(self, image_id=None, created_at=None):
        """
        Wraps the result as a new dataset image. Storing it is up to the caller.

        Args:
            image_id (str, optional): Id for the new image. Defaults to ``aug_<epoch ms>``.
            created_at (int, optional): Creation time in epoch milliseconds.

        Returns:
            SourceImage: A new record; the engine never adds it to any pool.
        """
        if created_at is None:
            created_at = int(time.time() * 1000)
        if image_id is None:
            image_id = f"aug_{created_at}"
        return SourceImage(pixels=self.pixels, annotations=self.annotations,
                           image_id=image_id, created_at=created_at)

    def to_record(self, image_id=None, created_at=None, quality=92):
        """Dataset record dict with the canvas encoded as a JPEG data URL."""
        image = self.to_source_image(image_id=image_id, created_at=created_at)
        return {
            "id": image.image_id,
            "src": to_data_url(self.pixels, quality=quality),
            "annotations": [box.to_dict() for box in self.annotations],
            "createdAt": image.created_at,
        }
