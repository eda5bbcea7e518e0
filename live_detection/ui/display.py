"""
Display window, FPS measurement and on-frame overlays
"""

import os
import time
from collections import deque
from typing import Optional

import cv2
import numpy as np

from ..detectors.drawing import display_info


class FpsCounter:
    """
    Frames-per-second from the duration of each loop iteration, with a
    rolling average over the last `window` iterations
    """

    def __init__(self, window: int = 60, clock=time.perf_counter):
        self.clock = clock
        self.samples = deque(maxlen=window)
        self.fps = 0
        self._start = None

    def start(self):
        self._start = self.clock()

    def stop(self):
        if self._start is None:
            return
        duration = self.clock() - self._start
        self._start = None
        if duration > 0:
            self.fps = int(1 / duration)
            self.samples.append(self.fps)

    @property
    def average(self) -> int:
        if not self.samples:
            return 0
        return int(sum(self.samples) / len(self.samples))


class FrameDisplay:
    """
    Shows processed frames in an OpenCV window with status overlays
    """

    def __init__(self,
                 window_name: str = "Live Detection",
                 show_fps: bool = True,
                 show_resolution: bool = True):
        """
        Args:
            window_name: Name of the display window
            show_fps: Whether to draw FPS and average FPS
            show_resolution: Whether to draw the frame resolution
        """
        self.window_name = window_name
        self.show_fps = show_fps
        self.show_resolution = show_resolution
        self._window_open = False

    def open(self):
        if not self._window_open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            self._window_open = True

    def add_overlays(self,
                     frame: np.ndarray,
                     fps: Optional[int] = None,
                     average_fps: Optional[int] = None,
                     status: str = "",
                     detector_name: str = "") -> np.ndarray:
        """Draw info lines on the top-left and the status bar on the bottom of frame"""
        line = 0

        def next_position():
            nonlocal line
            position = (10, 30 + line * 30)
            line += 1
            return position

        if self.show_resolution:
            height, width = frame.shape[:2]
            display_info(frame, "Resolution", f"{width}x{height}", next_position())
        if self.show_fps and fps is not None:
            display_info(frame, "FPS", str(fps), next_position())
            display_info(frame, "Average FPS", str(average_fps or 0), next_position())
        if detector_name:
            display_info(frame, "Detector", detector_name, next_position())

        if status:
            self._add_status_bar(frame, status)
        return frame

    def _add_status_bar(self, frame: np.ndarray, status: str):
        height, width = frame.shape[:2]
        cv2.rectangle(frame, (0, height - 28), (width, height), (40, 40, 40), -1)
        cv2.putText(
            frame,
            status,
            (10, height - 9),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            (255, 255, 255),
            1
        )

    def show_frame(self, frame: np.ndarray, wait_ms: int = 1) -> int:
        """
        Show frame and poll the keyboard

        Returns:
            Key code from cv2.waitKey (-1 when no key was pressed)
        """
        self.open()
        cv2.imshow(self.window_name, frame)
        return cv2.waitKey(wait_ms)

    def is_visible(self) -> bool:
        if not self._window_open:
            return True
        return cv2.getWindowProperty(self.window_name, cv2.WND_PROP_VISIBLE) >= 1

    def save_screenshot(self, frame: np.ndarray, directory: str = ".") -> str:
        """Save frame as a timestamped PNG and return its path"""
        os.makedirs(directory, exist_ok=True)
        filename = os.path.join(directory, f"screenshot_{int(time.time() * 1000)}.png")
        cv2.imwrite(filename, frame)
        return filename

    def close(self):
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False
