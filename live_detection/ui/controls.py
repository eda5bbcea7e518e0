"""
Keyboard controls for the live detection window
"""

from enum import Enum
from typing import Callable, Dict, List, Optional


class ControlAction(Enum):
    """Enumeration of available control actions"""
    QUIT = "quit"
    SCREENSHOT = "screenshot"
    HELP = "help"
    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"
    UNDO = "undo"
    REDO = "redo"
    RESET = "reset"
    TOGGLE_FEATURES = "toggle_features"
    TOGGLE_CONFIDENCE = "toggle_confidence"
    TOGGLE_HISTOGRAM = "toggle_histogram"
    TOGGLE_BINARY_THRESHOLD = "toggle_binary_threshold"
    TOGGLE_ZERO_THRESHOLD = "toggle_zero_threshold"
    TOGGLE_ADAPTIVE_THRESHOLD = "toggle_adaptive_threshold"
    INCREASE_THRESHOLD = "increase_threshold"
    DECREASE_THRESHOLD = "decrease_threshold"
    TOGGLE_EDGES = "toggle_edges"
    INCREASE_CONFIDENCE = "increase_confidence"
    DECREASE_CONFIDENCE = "decrease_confidence"
    SELECT_DETECTOR = "select_detector"


class ControlsManager:
    """
    Maps cv2.waitKey codes to actions and runs the registered callbacks
    """

    def __init__(self, detector_names: Optional[List[str]] = None):
        """
        Args:
            detector_names: Registry names bound to keys 1-9, in order
        """
        self.key_mappings = {
            ord('q'): ControlAction.QUIT,
            ord('Q'): ControlAction.QUIT,
            27: ControlAction.QUIT,  # ESC key
            ord('s'): ControlAction.SCREENSHOT,
            ord('S'): ControlAction.SCREENSHOT,
            ord('?'): ControlAction.HELP,
            ord('h'): ControlAction.FLIP_HORIZONTAL,
            ord('H'): ControlAction.FLIP_HORIZONTAL,
            ord('v'): ControlAction.FLIP_VERTICAL,
            ord('V'): ControlAction.FLIP_VERTICAL,
            ord('u'): ControlAction.UNDO,
            26: ControlAction.UNDO,  # Ctrl+Z
            ord('y'): ControlAction.REDO,
            25: ControlAction.REDO,  # Ctrl+Y
            ord('r'): ControlAction.RESET,
            ord('R'): ControlAction.RESET,
            ord('f'): ControlAction.TOGGLE_FEATURES,
            ord('F'): ControlAction.TOGGLE_FEATURES,
            ord('c'): ControlAction.TOGGLE_CONFIDENCE,
            ord('C'): ControlAction.TOGGLE_CONFIDENCE,
            ord('e'): ControlAction.TOGGLE_HISTOGRAM,
            ord('E'): ControlAction.TOGGLE_HISTOGRAM,
            ord('b'): ControlAction.TOGGLE_BINARY_THRESHOLD,
            ord('B'): ControlAction.TOGGLE_BINARY_THRESHOLD,
            ord('z'): ControlAction.TOGGLE_ZERO_THRESHOLD,
            ord('Z'): ControlAction.TOGGLE_ZERO_THRESHOLD,
            ord('a'): ControlAction.TOGGLE_ADAPTIVE_THRESHOLD,
            ord('A'): ControlAction.TOGGLE_ADAPTIVE_THRESHOLD,
            ord(']'): ControlAction.INCREASE_THRESHOLD,
            ord('['): ControlAction.DECREASE_THRESHOLD,
            ord('d'): ControlAction.TOGGLE_EDGES,
            ord('D'): ControlAction.TOGGLE_EDGES,
            ord('+'): ControlAction.INCREASE_CONFIDENCE,
            ord('='): ControlAction.INCREASE_CONFIDENCE,  # + without shift
            ord('-'): ControlAction.DECREASE_CONFIDENCE,
            ord('_'): ControlAction.DECREASE_CONFIDENCE,  # - with shift
        }
        for digit in range(10):
            self.key_mappings[ord(str(digit))] = ControlAction.SELECT_DETECTOR

        self.detector_names = list(detector_names or [])[:9]

        # Action callbacks
        self.action_callbacks: Dict[ControlAction, Callable] = {}

        self.enabled = True

    def register_callback(self, action: ControlAction, callback: Callable):
        """
        Register callback for control action

        SELECT_DETECTOR callbacks receive the detector name (None for key 0).
        """
        self.action_callbacks[action] = callback

    def detector_for_key(self, key_code: int) -> Optional[str]:
        """Detector name bound to a digit key; key 0 and unbound digits give None"""
        index = key_code - ord('1')
        if 0 <= index < len(self.detector_names):
            return self.detector_names[index]
        return None

    def remove_detector(self, name: Optional[str]) -> bool:
        """Unbind a detector name; later names move down one key"""
        if name not in self.detector_names:
            return False
        self.detector_names.remove(name)
        return True

    def handle_key(self, key_code: int) -> Optional[ControlAction]:
        """
        Handle keyboard input

        Args:
            key_code: Key code from cv2.waitKey()

        Returns:
            ControlAction if key was handled, None otherwise
        """
        if not self.enabled or key_code == -1:
            return None

        key_code &= 0xFF
        action = self.key_mappings.get(key_code)
        if action is None:
            return None

        callback = self.action_callbacks.get(action)
        if action is ControlAction.SELECT_DETECTOR:
            if key_code != ord('0') and self.detector_for_key(key_code) is None:
                return None
            if callback is not None:
                callback(self.detector_for_key(key_code))
        elif callback is not None:
            callback()

        return action

    def get_help_text(self) -> str:
        """
        Get formatted help text for controls

        Returns:
            Multi-line help text string
        """
        help_lines = [
            "=== LIVE DETECTION CONTROLS ===",
            "",
            "Basic Controls:",
            "  Q / ESC    - Quit application",
            "  S          - Save screenshot",
            "  ?          - Show this help",
            "",
            "Detector Selection:",
            "  0          - No detector",
        ]
        for index, name in enumerate(self.detector_names):
            help_lines.append(f"  {index + 1}          - {name}")

        help_lines += [
            "",
            "Image Operations:",
            "  H / V      - Flip horizontally / vertically",
            "  E          - Histogram equalization",
            "  B / Z / A  - Binary / to-zero / adaptive thresholding",
            "  [ / ]      - Lower / raise the active threshold level",
            "  D          - Detect edges",
            "  U / Y      - Undo / redo",
            "  R          - Reset all operations",
            "",
            "Detection Display:",
            "  F          - Detect eyes and smiles (cascades)",
            "  C          - Show confidences (networks)",
            "  + / =      - Increase minimum confidence",
            "  - / _      - Decrease minimum confidence",
            "",
            "================================"
        ]

        return "\n".join(help_lines)

    def print_help(self):
        """Print help text to console"""
        print(self.get_help_text())

    def set_enabled(self, enabled: bool):
        """Enable or disable controls"""
        self.enabled = enabled

    def get_key_for_action(self, action: ControlAction) -> Optional[int]:
        """
        Get key code for action

        Args:
            action: Action to find key for

        Returns:
            Key code if found, None otherwise
        """
        for key_code, mapped_action in self.key_mappings.items():
            if mapped_action == action:
                return key_code
        return None

    def step_confidence(self, current: float, step: float) -> Optional[float]:
        """
        Move the confidence by step, staying inside the open interval (0, 1)

        Returns:
            The new value, or None when the step would leave the interval
        """
        value = round(current + step, 4)
        if 0 < value < 1:
            return value
        return None
