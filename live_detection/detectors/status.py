"""
Shared detector types: load outcomes, detector kinds and the last-detection rectangle
"""

from enum import Enum, IntEnum
from typing import NamedTuple


class LoadStatus(IntEnum):
    """Outcome of building or initializing a detector"""
    SUCCESS = 1
    NAME_NOT_FOUND = -1
    MODEL_PATH_EMPTY = -2
    TYPE_NOT_PROVIDED = -3
    INF_GRAPH_PATH_EMPTY = -4
    CANNOT_READ_NETWORK = -5
    INVALID_CASCADE = -6

    @property
    def ok(self) -> bool:
        return self is LoadStatus.SUCCESS

    def describe(self) -> str:
        """Human-readable explanation for message boxes and the console"""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    LoadStatus.SUCCESS: "Detector loaded successfully",
    LoadStatus.NAME_NOT_FOUND: "No detector with this name exists in the registry",
    LoadStatus.MODEL_PATH_EMPTY: "The network entry has no model (weights) path",
    LoadStatus.TYPE_NOT_PROVIDED: "The registry entry has no recognized 'type'",
    LoadStatus.INF_GRAPH_PATH_EMPTY: "The network entry has no inference graph path",
    LoadStatus.CANNOT_READ_NETWORK: "The network files could not be read by the inference engine",
    LoadStatus.INVALID_CASCADE: "The face cascade file is missing or could not be loaded",
}


class DetectorKind(Enum):
    """Closed set of detector variants"""
    CASCADE = "cascade"
    NETWORK = "network"


class Rect(NamedTuple):
    """Axis-aligned box in pixel coordinates"""
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def corners(self):
        return (self.x, self.y), (self.x + self.width, self.y + self.height)


EMPTY_RECT = Rect()


class DetectionError(RuntimeError):
    """Raised when a single frame cannot be run through a detector"""
