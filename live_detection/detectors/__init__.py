"""
Detector backends

- Detector: unified wrapper dispatching on DetectorKind
- CascadeModel: Haar cascade faces with optional eyes and smiles
- NetworkModel: cv2.dnn object detection
"""

from .status import LoadStatus, DetectorKind, Rect, EMPTY_RECT, DetectionError
from .cascade import CascadeModel
from .network import NetworkModel, sort_class_names, DEFAULT_MIN_CONFIDENCE
from .detector import Detector

__all__ = [
    'Detector',
    'CascadeModel',
    'NetworkModel',
    'LoadStatus',
    'DetectorKind',
    'Rect',
    'EMPTY_RECT',
    'DetectionError',
    'sort_class_names',
    'DEFAULT_MIN_CONFIDENCE'
]
