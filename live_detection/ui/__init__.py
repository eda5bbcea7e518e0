"""
UI modules: keyboard controls and the OpenCV display window
"""

from .controls import ControlsManager, ControlAction
from .display import FrameDisplay, FpsCounter

__all__ = ['ControlsManager', 'ControlAction', 'FrameDisplay', 'FpsCounter']
