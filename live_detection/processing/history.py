"""
Undo/redo history of image operation states
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import List, Union


class Operation(Enum):
    """Every toggle or level that affects how a frame is rendered"""
    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"
    SHOW_FEATURES = "show_features"
    SHOW_CONFIDENCE = "show_confidence"
    HISTOGRAM_EQUALIZATION = "histogram_equalization"
    BINARY_THRESHOLD = "binary_threshold"
    ZERO_THRESHOLD = "zero_threshold"
    ADAPTIVE_THRESHOLD = "adaptive_threshold"
    DETECT_EDGES = "detect_edges"

    @property
    def is_level(self) -> bool:
        return self in LEVEL_OPERATIONS

    @property
    def title(self) -> str:
        return self.value.replace('_', ' ').capitalize()


LEVEL_OPERATIONS = (
    Operation.BINARY_THRESHOLD,
    Operation.ZERO_THRESHOLD,
    Operation.ADAPTIVE_THRESHOLD,
)


@dataclass(frozen=True)
class OperationState:
    """
    Immutable snapshot of the rendering controls

    Threshold levels are 0 when the mode is off. At most one threshold mode
    is meant to be active, but the state stores whatever it is given.
    """
    flip_horizontal: bool = False
    flip_vertical: bool = False
    show_features: bool = False
    show_confidence: bool = False
    histogram_equalization: bool = False
    binary_threshold: int = 0
    zero_threshold: int = 0
    adaptive_threshold: int = 0
    detect_edges: bool = False

    def get(self, operation: Operation) -> Union[bool, int]:
        return getattr(self, operation.value)

    def with_value(self, operation: Operation, value) -> 'OperationState':
        return replace(self, **{operation.value: value})

    @property
    def active_threshold(self):
        """The first threshold operation with a non-zero level, or None"""
        for operation in LEVEL_OPERATIONS:
            if self.get(operation):
                return operation
        return None

    @property
    def needs_grayscale(self) -> bool:
        return bool(self.binary_threshold or self.histogram_equalization or self.adaptive_threshold)

    def diff(self, other: 'OperationState') -> List[Operation]:
        """Operations whose value differs between self and other"""
        return [
            Operation(f.name) for f in fields(self)
            if getattr(self, f.name) != getattr(other, f.name)
        ]


def _coerce(operation: Operation, value) -> Union[bool, int]:
    if not isinstance(operation, Operation):
        raise ValueError(f"Unknown operation: {operation!r}")
    if operation.is_level:
        level = int(value)
        if level < 0:
            raise ValueError(f"{operation.title} level must be >= 0, got {level}")
        return level
    return bool(value)


def _describe(operation: Operation, state: OperationState) -> str:
    value = state.get(operation)
    if operation.is_level:
        return f"{operation.title} set to {value}" if value else f"{operation.title} disabled"
    return f"{operation.title} {'enabled' if value else 'disabled'}"


class OperationHistory:
    """
    Linear undo/redo history with a cursor

    add() prunes any redo branch, appends the new state and moves the cursor
    to it. undo() and redo() are no-ops at the ends of the history.
    """

    def __init__(self):
        self._states: List[OperationState] = [OperationState()]
        self._cursor = 0
        self._previous = None
        self._last_action = ""

    def __len__(self) -> int:
        return len(self._states)

    @property
    def cursor(self) -> int:
        return self._cursor

    def current(self) -> OperationState:
        return self._states[self._cursor]

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._states) - 1

    def add(self, operation: Operation, value) -> OperationState:
        """Record a new state equal to the current one with operation set to value"""
        new_state = self.current().with_value(operation, _coerce(operation, value))
        del self._states[self._cursor + 1:]
        self._states.append(new_state)
        self._previous = self._cursor
        self._cursor = len(self._states) - 1
        self._last_action = ""
        return new_state

    def undo(self) -> OperationState:
        if self.can_undo():
            self._previous = self._cursor
            self._cursor -= 1
            self._last_action = "Undo"
        return self.current()

    def redo(self) -> OperationState:
        if self.can_redo():
            self._previous = self._cursor
            self._cursor += 1
            self._last_action = "Redo"
        return self.current()

    def reset(self):
        self._states = [OperationState()]
        self._cursor = 0
        self._previous = None
        self._last_action = ""

    def last_changed_field_description(self) -> str:
        """
        Describe the change made by the last add, undo or redo

        Undo and redo are prefixed, e.g. 'Undo: Flip vertical disabled'.
        Returns '' before any movement.
        """
        if self._previous is None or self._previous == self._cursor:
            return ""

        left = self._states[self._previous]
        arrived = self.current()
        changes = ", ".join(_describe(op, arrived) for op in arrived.diff(left))
        if self._last_action:
            return f"{self._last_action}: {changes}"
        return changes
