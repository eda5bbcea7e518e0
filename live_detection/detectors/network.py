"""
Deep neural network payload: single-pass object localization through cv2.dnn
"""

import logging
import os
from collections import Counter
from typing import List, Sequence, Tuple

import cv2
import numpy as np

from .drawing import draw_box
from .status import EMPTY_RECT, DetectionError, LoadStatus, Rect

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.5
DEFAULT_INPUT_SIZE = 320


def read_class_names(path: str) -> List[str]:
    """Read one class label per line; line N is class id N (id 0 is background)"""
    with open(path, 'r', encoding='utf-8') as f:
        return [line.rstrip('\r\n') for line in f]


def sort_class_names(class_ids: Sequence[int], class_names: Sequence[str]) -> List[str]:
    """
    Order class names by how often they appear in this frame's detections

    Classes seen in the frame come first, most frequent first (ties keep file
    order). Classes without detections follow in their original file order.

    Args:
        class_ids: Class id of every detection row (1-based)
        class_names: Known class names in file order

    Returns:
        Every known class name exactly once
    """
    counts = Counter(
        class_id for class_id in class_ids if 1 <= class_id <= len(class_names)
    )
    seen = sorted(counts, key=lambda class_id: (-counts[class_id], class_id))

    ordered = [class_names[class_id - 1] for class_id in seen]
    seen_names = set(ordered)
    ordered.extend(name for name in class_names if name not in seen_names)
    return ordered


class NetworkModel:
    """
    Object detector backed by an SSD-style network.

    The network output is read as rows of
    (batch, class_id, confidence, x1, y1, x2, y2) in normalized coordinates.
    """

    def __init__(self,
                 framework: str,
                 inf_graph_path: str,
                 model_path: str,
                 classes_path: str = "",
                 swap_rb: bool = False,
                 mean_values: Tuple[float, float, float] = (0.0, 0.0, 0.0),
                 input_size: int = DEFAULT_INPUT_SIZE):
        """
        Args:
            framework: cv2.dnn framework hint ('tensorflow', 'caffe', ...)
            inf_graph_path: Path to the inference graph / config file
            model_path: Path to the weights file
            classes_path: Path to the class-names text file
            swap_rb: Swap red and blue channels when building the input blob
            mean_values: Per-channel mean subtracted from the input
            input_size: Side of the square network input
        """
        self.framework = framework or ""
        self.inf_graph_path = inf_graph_path or ""
        self.model_path = model_path or ""
        self.classes_path = classes_path or ""
        self.swap_rb = bool(swap_rb)
        self.mean_values = tuple(mean_values)
        self.input_size = int(input_size)

        self.net = None
        self.class_names: List[str] = []
        self.class_enabled: List[bool] = []
        self.sorted_class_names: List[str] = []
        self.min_confidence = DEFAULT_MIN_CONFIDENCE

        self.notices: List[str] = []
        self.last_rect = EMPTY_RECT
        self.last_label = ""

    def load(self) -> LoadStatus:
        if not self.model_path:
            logger.error("Network entry has no model path")
            return LoadStatus.MODEL_PATH_EMPTY
        if not self.inf_graph_path:
            logger.error("Network entry has no inference graph path")
            return LoadStatus.INF_GRAPH_PATH_EMPTY

        self._load_class_names()

        try:
            net = cv2.dnn.readNet(self.inf_graph_path, self.model_path, self.framework)
        except cv2.error as e:
            logger.error("Inference engine rejected %s / %s: %s",
                         self.inf_graph_path, self.model_path, e)
            return LoadStatus.CANNOT_READ_NETWORK
        if net is None or net.empty():
            logger.error("Inference engine returned an empty network for %s", self.model_path)
            return LoadStatus.CANNOT_READ_NETWORK

        self.net = net
        return LoadStatus.SUCCESS

    def _load_class_names(self):
        if not self.classes_path or not os.path.exists(self.classes_path):
            message = f"Class names file not found: {self.classes_path or '<none>'}; labels will show class ids"
            logger.warning(message)
            self.notices.append(message)
            return

        try:
            self.class_names = read_class_names(self.classes_path)
        except (OSError, UnicodeDecodeError) as e:
            message = f"Class names file {self.classes_path} could not be read ({e}); labels will show class ids"
            logger.warning(message)
            self.notices.append(message)
            return
        self.class_enabled = [True] * len(self.class_names)
        self.sorted_class_names = list(self.class_names)

    def set_min_confidence(self, value: float):
        """Values outside the open interval (0, 1) are ignored"""
        if 0 < value < 1:
            self.min_confidence = float(value)

    def set_class_enabled(self, name: str, enabled: bool):
        for index, class_name in enumerate(self.class_names):
            if class_name == name:
                self.class_enabled[index] = bool(enabled)

    def set_enabled_classes(self, flags: Sequence[bool]):
        """Set every class flag at once, in file order; missing trailing flags leave classes unchanged"""
        for index, flag in enumerate(flags[:len(self.class_names)]):
            self.class_enabled[index] = bool(flag)

    def is_class_enabled(self, class_id: int) -> bool:
        if 1 <= class_id <= len(self.class_enabled):
            return self.class_enabled[class_id - 1]
        return True

    def class_label(self, class_id: int) -> str:
        if 1 <= class_id <= len(self.class_names):
            return self.class_names[class_id - 1]
        return f"class {class_id}"

    def forward(self, image: np.ndarray) -> np.ndarray:
        """Run one inference pass and return the detection rows as an (N, 7+) array"""
        try:
            blob = cv2.dnn.blobFromImage(
                image,
                1.0,
                (self.input_size, self.input_size),
                self.mean_values,
                self.swap_rb,
                False
            )
            self.net.setInput(blob)
            output = self.net.forward()
        except cv2.error as e:
            raise DetectionError(f"Inference failed: {e}") from e

        output = np.asarray(output)
        if output.ndim != 4 or output.shape[-1] < 7:
            raise DetectionError(f"Unexpected network output shape {output.shape}")
        return output.reshape(-1, output.shape[-1])

    @staticmethod
    def _decode_rows(rows: np.ndarray, width: int, height: int) -> List[Tuple[int, float, Rect]]:
        """Convert normalized rows to (class_id, confidence, pixel rect)"""
        detections = []
        try:
            for row in rows:
                box_x = int(row[3] * width)
                box_y = int(row[4] * height)
                box_width = int(row[5] * width - box_x)
                box_height = int(row[6] * height - box_y)
                detections.append((int(row[1]), float(row[2]),
                                   Rect(box_x, box_y, box_width, box_height)))
        except (ValueError, OverflowError, IndexError) as e:
            raise DetectionError(f"Malformed detection row: {e}") from e
        return detections

    def detect(self, image: np.ndarray, show_confidence: bool):
        """Draw every enabled detection above the confidence threshold; the last one drawn is remembered"""
        self.last_rect = EMPTY_RECT
        self.last_label = ""

        if image.ndim == 2 or image.shape[2] == 1:
            raise DetectionError("Network detectors need a colour frame, got a single-channel image")

        source = image
        if image.shape[2] == 4:
            source = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

        height, width = image.shape[:2]
        detections = self._decode_rows(self.forward(source), width, height)
        self.sorted_class_names = sort_class_names(
            [class_id for class_id, _, _ in detections], self.class_names
        )

        for class_id, confidence, rect in detections:
            if confidence <= self.min_confidence or not self.is_class_enabled(class_id):
                continue

            label = self.class_label(class_id)
            self.last_rect = rect
            self.last_label = label
            if show_confidence:
                label += f" : confidence = {int(confidence * 100)}%"
            draw_box(image, rect, label)

    def release(self):
        self.net = None
