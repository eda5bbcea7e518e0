"""
Live Detection

A camera / image viewer with pluggable object and face detection and a few
classic image-processing filters.

Main Components:
- ModelRegistry: reads the JSON registry and builds detectors by name
- Detector: Haar cascade (faces, eyes, smiles) or DNN object detection
- OperationHistory: undo/redo of image operation states
- FramePipeline: applies operations and runs the active detector per frame
- LiveDetectionApp: capture loop, display window and keyboard controls

Usage:
    from live_detection import AppConfig, LiveDetectionApp, list_names

    config = AppConfig(registry_path='data/detectors.json')
    app = LiveDetectionApp(config, list_names(config.registry_path))
    app.run()
"""

from .config import AppConfig
from .detectors import Detector, DetectorKind, LoadStatus, Rect, DetectionError
from .registry import ModelRegistry, list_names, load_all, instantiate_by_name, find_config_by_name
from .processing import Operation, OperationState, OperationHistory, apply_operations
from .pipeline import FramePipeline
from .app import LiveDetectionApp, main

__version__ = "1.0.0"

__all__ = [
    'AppConfig',
    'Detector',
    'DetectorKind',
    'LoadStatus',
    'Rect',
    'DetectionError',
    'ModelRegistry',
    'list_names',
    'load_all',
    'instantiate_by_name',
    'find_config_by_name',
    'Operation',
    'OperationState',
    'OperationHistory',
    'apply_operations',
    'FramePipeline',
    'LiveDetectionApp',
    'main'
]
