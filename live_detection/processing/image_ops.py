"""
Classic image-processing filters applied from an OperationState

Operations run in a fixed order so the same state always renders the same
frame: grayscale conversion (once) -> histogram equalization -> binary
threshold -> adaptive threshold -> back to colour -> zero threshold -> edge
detection -> horizontal flip -> vertical flip.
"""

import cv2
import numpy as np

from .history import OperationState

EDGE_LOW_THRESHOLD = 50
EDGE_HIGH_THRESHOLD = 150
ADAPTIVE_C = 2


def to_bgr(frame: np.ndarray) -> np.ndarray:
    """Return a 3-channel BGR view of a grayscale, BGR or BGRA frame"""
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    if frame.shape[2] == 1:
        return cv2.cvtColor(frame[:, :, 0], cv2.COLOR_GRAY2BGR)
    if frame.shape[2] == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    return frame


def to_gray(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return frame
    return cv2.cvtColor(to_bgr(frame), cv2.COLOR_BGR2GRAY)


def adaptive_block_size(level: int) -> int:
    """Adaptive thresholding needs an odd block size of at least 3"""
    block = max(3, int(level))
    return block if block % 2 == 1 else block + 1


def apply_operations(frame: np.ndarray, state: OperationState) -> np.ndarray:
    """
    Apply every active operation of state to frame

    Args:
        frame: Grayscale, BGR or BGRA image; it is not modified
        state: Operation toggles and levels to apply

    Returns:
        A new 3-channel BGR frame
    """
    image = to_bgr(frame).copy()

    if state.needs_grayscale:
        gray = to_gray(image)
        if state.histogram_equalization:
            gray = cv2.equalizeHist(gray)
        if state.binary_threshold:
            _, gray = cv2.threshold(gray, state.binary_threshold, 255, cv2.THRESH_BINARY)
        if state.adaptive_threshold:
            gray = cv2.adaptiveThreshold(
                gray,
                255,
                cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                cv2.THRESH_BINARY,
                adaptive_block_size(state.adaptive_threshold),
                ADAPTIVE_C
            )
        image = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)

    if state.zero_threshold:
        _, image = cv2.threshold(image, state.zero_threshold, 255, cv2.THRESH_TOZERO)

    if state.detect_edges:
        edges = cv2.Canny(to_gray(image), EDGE_LOW_THRESHOLD, EDGE_HIGH_THRESHOLD)
        image = cv2.cvtColor(edges, cv2.COLOR_GRAY2BGR)

    if state.flip_horizontal:
        image = cv2.flip(image, 1)
    if state.flip_vertical:
        image = cv2.flip(image, 0)

    return np.ascontiguousarray(image)
