"""
Annotation helpers shared by the detectors and the display overlay
"""

import cv2
import numpy as np

from .status import Rect

# BGR palette
ACCENT_COLOR = (147, 167, 255)
EYE_COLOR = (239, 190, 98)
SMILE_COLOR = (98, 214, 239)
TEXT_COLOR = (255, 255, 255)

LABEL_FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_SCALE = 0.7
LABEL_THICKNESS = 1


def frame_color(image: np.ndarray, color):
    """Extend a BGR colour with an opaque alpha for 4-channel frames"""
    if image.ndim == 3 and image.shape[2] == 4:
        return tuple(color) + (255,)
    return color


def draw_label(image: np.ndarray, label: str, left: int, top: int):
    """
    Draw a filled label tag with white text whose top-left corner is (left, top)

    The tag is pushed down so it never leaves the top edge of the image.
    """
    (text_width, text_height), baseline = cv2.getTextSize(
        label, LABEL_FONT, LABEL_SCALE, LABEL_THICKNESS
    )
    top = max(top, text_height)
    cv2.rectangle(
        image,
        (left, top),
        (left + text_width, top + text_height + baseline),
        frame_color(image, ACCENT_COLOR),
        cv2.FILLED
    )
    cv2.putText(
        image,
        label,
        (left, top + text_height),
        LABEL_FONT,
        LABEL_SCALE,
        frame_color(image, TEXT_COLOR),
        LABEL_THICKNESS
    )


def draw_box(image: np.ndarray, rect: Rect, label: str = None):
    """Draw a bounding box and, optionally, its label tag"""
    top_left, bottom_right = rect.corners
    cv2.rectangle(image, top_left, bottom_right, frame_color(image, ACCENT_COLOR), 2)
    if label:
        draw_label(image, label, rect.x, rect.y)


def display_info(image: np.ndarray, key: str, value: str, position):
    """Write a 'key: value' line at position, outlined so it reads on any background"""
    text = f"{key}: {value}"
    cv2.putText(image, text, position, LABEL_FONT, 0.6, frame_color(image, (0, 0, 0)), 3)
    cv2.putText(image, text, position, LABEL_FONT, 0.6, frame_color(image, TEXT_COLOR), 1)
