"""
Frame pipeline: operation history -> image filters -> active detector
"""

import logging
import os
from typing import List, Optional

import cv2
import numpy as np

from ..detectors import Detector, DetectionError, DetectorKind, LoadStatus
from ..processing import Operation, OperationHistory, OperationState, apply_operations
from ..registry import ModelRegistry

logger = logging.getLogger(__name__)

NO_DETECTOR = "None"


def aux_flag_for(detector: Detector, state: OperationState) -> bool:
    """Cascades read the feature toggle, networks the confidence toggle"""
    if detector.get_type() is DetectorKind.CASCADE:
        return state.show_features
    return state.show_confidence


def format_detection(label: str, rect) -> str:
    return (f"Detected {label} at: <{rect.x} {rect.y}> - "
            f"<{rect.x + rect.width} {rect.y + rect.height}>")


class FramePipeline:
    """
    Turns raw frames into annotated frames.

    Owns the operation history and at most one active detector. Switching
    detectors builds the new one first and then releases the old one.
    """

    def __init__(self, registry: ModelRegistry, min_confidence: Optional[float] = None):
        """
        Args:
            registry: Registry used to build detectors by name
            min_confidence: Initial confidence applied to every network detector selected
        """
        self.registry = registry
        self.history = OperationHistory()
        self.min_confidence = min_confidence

        self.detector: Optional[Detector] = None
        self.source_path: Optional[str] = None

        self.status_message = ""
        self.last_error = ""
        self.notices: List[str] = []

    # ----------------------------------------------------------------- detectors

    @property
    def detector_name(self) -> str:
        return self.detector.name if self.detector is not None else NO_DETECTOR

    def select_detector(self, name: Optional[str]) -> LoadStatus:
        """
        Make the named registry detector the active one

        None or 'None' switches detection off. On failure no detector is
        active and the status says why.
        """
        self.notices = []
        self.last_error = ""

        if not name or name == NO_DETECTOR:
            self.release_detector()
            return LoadStatus.SUCCESS

        new_detector, status = self.registry.instantiate_by_name(name)
        self.release_detector()

        if new_detector is None:
            logger.error("Detector '%s' did not load: %s", name, status.describe())
            self.last_error = f"{name}: {status.describe()}"
            return status

        if self.min_confidence is not None:
            new_detector.set_min_confidence(self.min_confidence)
        self.detector = new_detector
        self.notices = new_detector.notices
        logger.info("Active detector: %s (%s)", name, new_detector.get_type().value)
        return status

    def release_detector(self):
        if self.detector is not None:
            logger.debug("Releasing detector %s", self.detector.name)
            self.detector.release()
            self.detector = None

    def set_min_confidence(self, value: float):
        """Forwarded to network detectors; values outside (0, 1) are ignored"""
        if 0 < value < 1:
            self.min_confidence = value
        if self.detector is not None:
            self.detector.set_min_confidence(value)

    # ------------------------------------------------------------------- history

    def apply(self, operation: Operation, value) -> OperationState:
        state = self.history.add(operation, value)
        self.status_message = self.history.last_changed_field_description()
        return state

    def undo(self) -> OperationState:
        state = self.history.undo()
        self.status_message = self.history.last_changed_field_description()
        return state

    def redo(self) -> OperationState:
        state = self.history.redo()
        self.status_message = self.history.last_changed_field_description()
        return state

    def reset_operations(self):
        self.history.reset()
        self.status_message = ""

    # -------------------------------------------------------------------- source

    def set_source_image(self, path: str):
        """Switch to a static image; every processed frame re-reads it from disk"""
        if not os.path.exists(path) or cv2.imread(path) is None:
            raise FileNotFoundError(f"Could not read image: {path}")
        self.source_path = path
        self.status_message = f"Uploaded file: {path}"

    def clear_source_image(self):
        self.source_path = None

    @property
    def is_static_source(self) -> bool:
        return self.source_path is not None

    # ---------------------------------------------------------------- processing

    def process_frame(self, frame: Optional[np.ndarray] = None) -> Optional[np.ndarray]:
        """
        Run one frame through the pipeline

        Args:
            frame: Raw camera frame; ignored when a static source image is set

        Returns:
            Annotated BGR frame, or None when there is nothing to process
        """
        if self.is_static_source:
            frame = cv2.imread(self.source_path)
            if frame is None:
                logger.error("Source image disappeared: %s", self.source_path)
                self.last_error = f"Could not read image: {self.source_path}"
                return None
        if frame is None or frame.size == 0:
            return None

        state = self.history.current()
        output = apply_operations(frame, state)

        if self.detector is not None:
            self._run_detector(output, state)

        return output

    def _run_detector(self, frame: np.ndarray, state: OperationState):
        detector = self.detector
        try:
            detector.detect(frame, aux_flag_for(detector, state))
        except DetectionError as e:
            logger.error("Detection with '%s' failed, detector disabled: %s", detector.name, e)
            self.last_error = f"There was an error while running the detection model: {e}"
            self.release_detector()
            return

        rect, label = detector.get_last_detection()
        if not rect.is_empty:
            self.status_message = format_detection(label, rect)
        elif self.status_message.startswith("Detected "):
            self.status_message = ""
