import numpy as np
import pytest

from labelaug import BoundingBox, SourceImage


def solid(color, height=100, width=100):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    return image


@pytest.fixture
def make_solid():
    return solid


@pytest.fixture
def gradient_canvas():
    """640x640 RGB buffer where every pixel differs from its mirror image."""
    ys, xs = np.mgrid[0:640, 0:640]
    image = np.stack([xs % 256, ys % 256, (xs * 3 + ys) % 256], axis=-1)
    return image.astype(np.uint8)


@pytest.fixture
def colored_pool():
    colors = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 255, 255)]
    sizes = [(100, 100), (120, 80), (64, 200), (50, 50), (90, 90)]
    pool = []
    for i, (color, (h, w)) in enumerate(zip(colors, sizes)):
        pool.append(SourceImage(
            pixels=solid(color, h, w),
            annotations=(BoundingBox(f"obj{i}", 0, 0, 1000, 1000),),
            image_id=f"img{i}",
        ))
    return pool
