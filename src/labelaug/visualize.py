# visualize.py
"""Box overlay for previewing an augmented canvas."""
import cv2
import numpy as np

from .coordinates import to_pixel

AMBER = (251, 191, 36)  # RGB


def draw_annotations(pixels, boxes, color=AMBER, thickness=2, show_labels=True):
    """
    Draws boxes (and their labels) onto a copy of an RGB canvas.

    Args:
        pixels (np.ndarray): uint8 RGB array; box space is scaled to its size.
        boxes (iterable of BoundingBox): Annotations in 0-1000 box space.
        color (tuple): RGB stroke colour.
        thickness (int): Stroke width in pixels.
        show_labels (bool): Draw the label text above each box.

    Returns:
        np.ndarray: Annotated copy; the input is left untouched.
    """
    overlay = np.ascontiguousarray(pixels, dtype=np.uint8).copy()
    h, w = overlay.shape[:2]
    for box in boxes:
        # Box space is square; scale each axis to the buffer's own side
        p1 = (int(round(to_pixel(box.xmin, w))), int(round(to_pixel(box.ymin, h))))
        p2 = (int(round(to_pixel(box.xmax, w))), int(round(to_pixel(box.ymax, h))))
        cv2.rectangle(overlay, p1, p2, color, thickness)
        if show_labels and box.label:
            text_y = max(p1[1] - 5, 12)
            cv2.putText(overlay, box.label, (p1[0], text_y), cv2.FONT_HERSHEY_SIMPLEX,
                        0.5, color, 1, cv2.LINE_AA)
    return overlay
