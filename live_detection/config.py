"""
Application configuration
"""

import argparse
from dataclasses import dataclass
from typing import Optional

from .detectors import DEFAULT_MIN_CONFIDENCE


@dataclass
class AppConfig:
    """Settings for the live detection application"""
    registry_path: str = 'data/detectors.json'
    camera_index: int = 0
    frame_width: int = 640
    frame_height: int = 480
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    confidence_step: float = 0.05
    threshold_level: int = 127
    threshold_step: int = 10
    adaptive_block_size: int = 11
    initial_detector: Optional[str] = None
    image_path: Optional[str] = None
    screenshot_dir: str = '.'
    fps_window: int = 60
    verbose: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'AppConfig':
        """Build a config from parsed command line arguments, keeping defaults for absent flags"""
        config = cls()
        mapping = {
            'registry': 'registry_path',
            'camera': 'camera_index',
            'width': 'frame_width',
            'height': 'frame_height',
            'confidence': 'min_confidence',
            'detector': 'initial_detector',
            'image': 'image_path',
            'screenshots': 'screenshot_dir',
            'verbose': 'verbose',
        }
        for arg_name, field_name in mapping.items():
            value = getattr(args, arg_name, None)
            if value is not None:
                setattr(config, field_name, value)
        return config


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Live camera/image viewer with pluggable detectors')

    parser.add_argument('--registry', type=str, default=None,
                        help='Path to the detector registry JSON (default: data/detectors.json)')

    parser.add_argument('--camera', type=int, default=None,
                        help='Camera index (default: 0)')

    parser.add_argument('--width', type=int, default=None,
                        help='Frame width (default: 640)')

    parser.add_argument('--height', type=int, default=None,
                        help='Frame height (default: 480)')

    parser.add_argument('--confidence', type=float, default=None,
                        help='Minimum confidence for network detectors (default: 0.5)')

    parser.add_argument('--detector', type=str, default=None,
                        help='Name of the registry detector to start with')

    parser.add_argument('--image', type=str, default=None,
                        help='Process a static image instead of the camera')

    parser.add_argument('--screenshots', type=str, default=None,
                        help='Directory for saved screenshots (default: current directory)')

    parser.add_argument('--list', action='store_true',
                        help='List the registry detector names and exit')

    parser.add_argument('--verbose', action='store_true', default=None,
                        help='Enable debug logging')

    return parser
