"""
Haar cascade payload: face detection with optional eye and smile sub-classifiers
"""

import logging
from typing import List, Optional

import cv2
import numpy as np

from .drawing import EYE_COLOR, SMILE_COLOR, draw_box, frame_color
from .status import EMPTY_RECT, DetectionError, LoadStatus, Rect

logger = logging.getLogger(__name__)

FACE_LABEL = "Face"


def _load_cascade(path: str) -> Optional[cv2.CascadeClassifier]:
    """Load a cascade file, returning None when OpenCV rejects it"""
    try:
        classifier = cv2.CascadeClassifier(path)
    except cv2.error as e:
        logger.debug("CascadeClassifier(%s) raised: %s", path, e)
        return None
    if classifier.empty():
        return None
    return classifier


def _detect_multi_scale(classifier, image: np.ndarray, **kwargs):
    try:
        return classifier.detectMultiScale(image, **kwargs)
    except cv2.error as e:
        raise DetectionError(f"Cascade detection failed: {e}") from e


def _to_gray(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


class CascadeModel:
    """
    Face detector backed by Haar cascades.

    The face cascade is mandatory. Eye and smile cascades are optional and a
    failure to load them only reduces the capability set.
    """

    def __init__(self,
                 face_path: str,
                 eyes_path: str = "",
                 smile_path: str = "",
                 scale_factor: float = 1.1,
                 min_neighbors: int = 5):
        """
        Args:
            face_path: Path to the face cascade XML
            eyes_path: Optional path to an eye cascade XML
            smile_path: Optional path to a smile cascade XML
            scale_factor: Scale step for multi-scale face detection
            min_neighbors: Minimum neighbours for a face candidate
        """
        self.face_path = face_path or ""
        self.eyes_path = eyes_path or ""
        self.smile_path = smile_path or ""
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors

        self.face_classifier = None
        self.eye_classifier = None
        self.smile_classifier = None

        self.notices: List[str] = []
        self.last_rect = EMPTY_RECT
        self.last_label = ""

    def load(self) -> LoadStatus:
        if not self.face_path:
            logger.error("Cascade entry has no face cascade path")
            return LoadStatus.INVALID_CASCADE

        self.face_classifier = _load_cascade(self.face_path)
        if self.face_classifier is None:
            logger.error("Couldn't load face classifier from %s", self.face_path)
            return LoadStatus.INVALID_CASCADE

        if self.eyes_path:
            self.eye_classifier = _load_cascade(self.eyes_path)
            if self.eye_classifier is None:
                self._notice(f"Couldn't load eye classifier from {self.eyes_path}; eye detection disabled")
        if self.smile_path:
            self.smile_classifier = _load_cascade(self.smile_path)
            if self.smile_classifier is None:
                self._notice(f"Couldn't load smile classifier from {self.smile_path}; smile detection disabled")

        return LoadStatus.SUCCESS

    def _notice(self, message: str):
        logger.warning(message)
        self.notices.append(message)

    @property
    def can_detect_eyes(self) -> bool:
        return self.eye_classifier is not None

    @property
    def can_detect_smiles(self) -> bool:
        return self.smile_classifier is not None

    def detect(self, image: np.ndarray, show_features: bool):
        """Annotate every face in image; with show_features also mark eyes and smiles inside each face"""
        self.last_rect = EMPTY_RECT
        self.last_label = ""

        gray = _to_gray(image)
        faces = _detect_multi_scale(
            self.face_classifier,
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors
        )

        for (x, y, w, h) in faces:
            face = Rect(int(x), int(y), int(w), int(h))
            draw_box(image, face, FACE_LABEL)
            self.last_rect = face
            self.last_label = FACE_LABEL

            if not show_features:
                continue

            face_roi = gray[face.y:face.y + face.height, face.x:face.x + face.width]
            if self.eye_classifier is not None:
                self._draw_eyes(image, face, face_roi)
            if self.smile_classifier is not None:
                self._draw_smiles(image, face, face_roi)

    def _draw_eyes(self, image: np.ndarray, face: Rect, face_roi: np.ndarray):
        eyes = _detect_multi_scale(self.eye_classifier, face_roi)
        for (ex, ey, ew, eh) in eyes:
            center = (int(face.x + ex + ew // 2), int(face.y + ey + eh // 2))
            radius = int(round((ew + eh) * 0.25))
            cv2.circle(image, center, radius, frame_color(image, EYE_COLOR), 3)

    def _draw_smiles(self, image: np.ndarray, face: Rect, face_roi: np.ndarray):
        smiles = _detect_multi_scale(
            self.smile_classifier, face_roi, scaleFactor=1.7, minNeighbors=20
        )
        for (sx, sy, sw, sh) in smiles:
            top_left = (int(face.x + sx), int(face.y + sy))
            bottom_right = (int(face.x + sx + sw), int(face.y + sy + sh))
            cv2.rectangle(image, top_left, bottom_right, frame_color(image, SMILE_COLOR), 2)

    def release(self):
        self.face_classifier = None
        self.eye_classifier = None
        self.smile_classifier = None
