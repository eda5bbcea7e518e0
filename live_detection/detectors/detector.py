"""
Unified detector over the two supported backends (Haar cascade, DNN).
Provides a consistent interface for the frame pipeline.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .cascade import CascadeModel
from .network import DEFAULT_INPUT_SIZE, NetworkModel
from .status import DetectionError, DetectorKind, LoadStatus, Rect

logger = logging.getLogger(__name__)

LOAD_FAILURE = {
    DetectorKind.CASCADE: LoadStatus.INVALID_CASCADE,
    DetectorKind.NETWORK: LoadStatus.CANNOT_READ_NETWORK,
}


class Detector:
    """
    A detector is one of a closed set of variants selected by `kind`.

    The variant-specific state lives in `payload` (a CascadeModel or a
    NetworkModel); every public method dispatches on `kind`.
    """

    def __init__(self, kind: DetectorKind, payload, name: str = ""):
        """
        Args:
            kind: Detector variant
            payload: CascadeModel for CASCADE, NetworkModel for NETWORK
            name: Registry name, used for messages only
        """
        expected = CascadeModel if kind is DetectorKind.CASCADE else NetworkModel
        if not isinstance(payload, expected):
            raise TypeError(f"{kind.name} detector needs a {expected.__name__} payload")

        self.kind = kind
        self.payload = payload
        self.name = name
        self._status: Optional[LoadStatus] = None

    @staticmethod
    def create_cascade(face_path: str, eyes_path: str = "", smile_path: str = "",
                       name: str = "") -> 'Detector':
        """Factory method for a Haar cascade detector (not yet initialized)"""
        return Detector(DetectorKind.CASCADE, CascadeModel(face_path, eyes_path, smile_path), name)

    @staticmethod
    def create_network(framework: str, inf_graph_path: str, model_path: str,
                       classes_path: str = "", swap_rb: bool = False,
                       mean_values: Tuple[float, float, float] = (0.0, 0.0, 0.0),
                       input_size: int = DEFAULT_INPUT_SIZE,
                       name: str = "") -> 'Detector':
        """Factory method for a DNN object detector (not yet initialized)"""
        payload = NetworkModel(framework, inf_graph_path, model_path, classes_path,
                               swap_rb, mean_values, input_size)
        return Detector(DetectorKind.NETWORK, payload, name)

    def init(self) -> LoadStatus:
        """
        Load classifier or network files.

        Expected configuration problems come back as a LoadStatus. Calling
        init() again returns the first outcome without reloading.
        """
        if self._status is None:
            try:
                self._status = self.payload.load()
            except (OSError, ValueError) as e:
                logger.error("Loading detector '%s' failed: %s", self.name, e)
                self._status = LOAD_FAILURE[self.kind]
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is LoadStatus.SUCCESS

    def get_type(self) -> DetectorKind:
        return self.kind

    @property
    def notices(self) -> List[str]:
        """Informational load messages (reduced capability, missing class list)"""
        return list(self.payload.notices)

    def detect(self, frame: np.ndarray, aux_flag: bool = False):
        """
        Annotate frame in place.

        Args:
            frame: BGR or BGRA image (grayscale is accepted by cascades only)
            aux_flag: CASCADE - also locate eyes and smiles;
                      NETWORK - append the confidence to each label

        Raises:
            DetectionError: the detector is not loaded or the frame could not be processed
        """
        if not self.is_ready:
            raise DetectionError(f"Detector '{self.name}' is not initialized")

        if self.kind is DetectorKind.CASCADE:
            self.payload.detect(frame, aux_flag)
        elif self.kind is DetectorKind.NETWORK:
            self.payload.detect(frame, aux_flag)
        else:
            raise AssertionError(f"Unhandled detector kind: {self.kind}")

    def can_detect_eyes(self) -> bool:
        if self.kind is DetectorKind.CASCADE:
            return self.payload.can_detect_eyes
        return False

    def can_detect_smiles(self) -> bool:
        if self.kind is DetectorKind.CASCADE:
            return self.payload.can_detect_smiles
        return False

    def set_min_confidence(self, value: float):
        """Network only; ignored for cascades and for values outside (0, 1)"""
        if self.kind is DetectorKind.NETWORK:
            self.payload.set_min_confidence(value)

    def get_min_confidence(self) -> Optional[float]:
        if self.kind is DetectorKind.NETWORK:
            return self.payload.min_confidence
        return None

    def set_class_enabled(self, name: str, enabled: bool):
        if self.kind is DetectorKind.NETWORK:
            self.payload.set_class_enabled(name, enabled)

    def set_enabled_classes(self, flags):
        if self.kind is DetectorKind.NETWORK:
            self.payload.set_enabled_classes(flags)

    def get_class_names(self) -> List[str]:
        if self.kind is DetectorKind.NETWORK:
            return list(self.payload.class_names)
        return []

    def get_sorted_class_names(self) -> List[str]:
        """Class names ordered by frequency in the most recent frame"""
        if self.kind is DetectorKind.NETWORK:
            return list(self.payload.sorted_class_names)
        return []

    def get_last_rect(self) -> Rect:
        return self.payload.last_rect

    def get_last_detection(self) -> Tuple[Rect, str]:
        return self.payload.last_rect, self.payload.last_label

    def release(self):
        """Drop loaded classifier / network state; the detector must not be used afterwards"""
        self.payload.release()
        self._status = None

    def get_detector_info(self) -> Dict[str, Any]:
        """Get information about the detector"""
        info = {'name': self.name, 'type': self.kind.value, 'ready': self.is_ready}

        if self.kind is DetectorKind.CASCADE:
            info.update({
                'eyes': self.can_detect_eyes(),
                'smiles': self.can_detect_smiles(),
                'model_type': 'Haar Cascade'
            })
        elif self.kind is DetectorKind.NETWORK:
            info.update({
                'framework': self.payload.framework,
                'min_confidence': self.payload.min_confidence,
                'classes': len(self.payload.class_names),
                'model_type': 'DNN'
            })

        return info
