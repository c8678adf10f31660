# coordinates.py
"""
Box space <-> canvas pixel space conversion.

Annotation boxes live in a normalised box space spanning 0-1000 on both axes,
whatever the native resolution of the image. Every rendered canvas is 640x640,
so ``pixel = box / 1000 * 640``.

Each geometric stage is declared once as a :class:`StageTransform` (a per-axis
affine map in box space). The same coefficients drive both the box remap and
the ``cv2.warpAffine`` matrix used to sample pixels, so the two paths cannot
drift apart.
"""
from dataclasses import dataclass

import numpy as np

BOX_SPACE = 1000.0
CANVAS_SIZE = 640
TILE_SIZE = CANVAS_SIZE // 2
CROP_MARGIN = 100.0  # 10% of the box space trimmed from each edge


def to_pixel(v, canvas_size=CANVAS_SIZE):
    """Box-space coordinate -> canvas pixel coordinate."""
    return v / BOX_SPACE * canvas_size


def to_box(p, canvas_size=CANVAS_SIZE):
    """Canvas pixel coordinate -> box-space coordinate."""
    return p / canvas_size * BOX_SPACE


def to_pixel_bbox(box, canvas_size=CANVAS_SIZE):
    """
    Converts a box-space annotation to a COCO style pixel bbox on the canvas.

    Args:
        box (BoundingBox): Annotation in 0-1000 box space.
        canvas_size (int): Side of the square canvas in pixels.

    Returns:
        list: [x_min, y_min, width, height] in canvas pixels.
    """
    x_min = to_pixel(box.xmin, canvas_size)
    y_min = to_pixel(box.ymin, canvas_size)
    width = max(0.0, to_pixel(box.xmax, canvas_size) - x_min)
    height = max(0.0, to_pixel(box.ymax, canvas_size) - y_min)
    return [float(x_min), float(y_min), float(width), float(height)]


@dataclass(frozen=True)
class StageTransform:
    """
    Per-axis affine map ``(x, y) -> (ax*x + bx, ay*y + by)`` in box space.

    A negative scale (a flip) reverses the order of a min/max pair, so
    :meth:`map_box` re-sorts the pair in that case.
    """

    ax: float = 1.0
    bx: float = 0.0
    ay: float = 1.0
    by: float = 0.0

    @classmethod
    def identity(cls):
        return cls()

    @classmethod
    def crop(cls, margin=CROP_MARGIN):
        # Visible window [margin, 1000 - margin] stretched over [0, 1000].
        scale = BOX_SPACE / (BOX_SPACE - 2 * margin)
        return cls(ax=scale, bx=-margin * scale, ay=scale, by=-margin * scale)

    @classmethod
    def hflip(cls):
        return cls(ax=-1.0, bx=BOX_SPACE)

    @classmethod
    def tile(cls, px, py, canvas_size=CANVAS_SIZE, tile_size=TILE_SIZE):
        """Shrinks the full frame into the tile whose top-left pixel is (px, py)."""
        scale = tile_size / canvas_size
        return cls(ax=scale, bx=to_box(px, canvas_size), ay=scale, by=to_box(py, canvas_size))

    @property
    def is_identity(self):
        return (self.ax, self.bx, self.ay, self.by) == (1.0, 0.0, 1.0, 0.0)

    def then(self, other):
        """Composition: apply ``self`` first, then ``other``."""
        return StageTransform(
            ax=other.ax * self.ax,
            bx=other.ax * self.bx + other.bx,
            ay=other.ay * self.ay,
            by=other.ay * self.by + other.by,
        )

    def map_x(self, x):
        return self.ax * x + self.bx

    def map_y(self, y):
        return self.ay * y + self.by

    def map_box(self, box):
        """Returns a new box with both coordinate pairs pushed through the map."""
        xmin, xmax = self.map_x(box.xmin), self.map_x(box.xmax)
        ymin, ymax = self.map_y(box.ymin), self.map_y(box.ymax)
        if self.ax < 0:
            xmin, xmax = xmax, xmin
        if self.ay < 0:
            ymin, ymax = ymax, ymin
        return box.with_coords(xmin, ymin, xmax, ymax)

    def pixel_matrix(self, src_w, src_h, canvas_size=CANVAS_SIZE):
        """
        Builds the forward 2x3 matrix for ``cv2.warpAffine``.

        A source pixel column ``u`` (continuous, 0..src_w) sits at box
        coordinate ``u / src_w * 1000``; the stage maps it, and the result is
        scaled onto the canvas. Pixel indices address pixel centres, hence the
        half-pixel shifts.

        Args:
            src_w (int): Source width in pixels.
            src_h (int): Source height in pixels.
            canvas_size (int): Side of the square output canvas.

        Returns:
            np.ndarray: float64 array of shape (2, 3).
        """
        sx = self.ax * canvas_size / src_w
        sy = self.ay * canvas_size / src_h
        tx = to_pixel(self.bx, canvas_size)
        ty = to_pixel(self.by, canvas_size)
        return np.array([
            [sx, 0.0, tx + 0.5 * sx - 0.5],
            [0.0, sy, ty + 0.5 * sy - 0.5],
        ], dtype=np.float64)
