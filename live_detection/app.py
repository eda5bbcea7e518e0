"""
Live detection application
Drives the capture loop (camera or static image), the frame pipeline and the controls
"""

import logging
import time
from typing import List, Optional

import cv2
import numpy as np

from .config import AppConfig, build_arg_parser
from .detectors import DEFAULT_MIN_CONFIDENCE, DetectorKind
from .pipeline import FramePipeline
from .processing import Operation
from .registry import ModelRegistry, list_names
from .ui import ControlAction, ControlsManager, FpsCounter, FrameDisplay

logger = logging.getLogger(__name__)

TOGGLE_ACTIONS = {
    ControlAction.FLIP_HORIZONTAL: Operation.FLIP_HORIZONTAL,
    ControlAction.FLIP_VERTICAL: Operation.FLIP_VERTICAL,
    ControlAction.TOGGLE_CONFIDENCE: Operation.SHOW_CONFIDENCE,
    ControlAction.TOGGLE_HISTOGRAM: Operation.HISTOGRAM_EQUALIZATION,
    ControlAction.TOGGLE_EDGES: Operation.DETECT_EDGES,
}

THRESHOLD_ACTIONS = {
    ControlAction.TOGGLE_BINARY_THRESHOLD: Operation.BINARY_THRESHOLD,
    ControlAction.TOGGLE_ZERO_THRESHOLD: Operation.ZERO_THRESHOLD,
    ControlAction.TOGGLE_ADAPTIVE_THRESHOLD: Operation.ADAPTIVE_THRESHOLD,
}


class LiveDetectionApp:
    """
    Single-threaded viewer: every iteration reads a frame, runs the pipeline,
    shows the result and handles one key press before the next frame.
    """

    def __init__(self, config: AppConfig, detector_names: Optional[List[str]] = None):
        """
        Args:
            config: Application settings
            detector_names: Registry names for the selection keys, as returned by list_names()
        """
        self.config = config
        self.detector_names = list(detector_names or [])

        self.pipeline = FramePipeline(ModelRegistry(config.registry_path), config.min_confidence)
        self.controls = ControlsManager(self.detector_names)
        self.display = FrameDisplay()
        self.fps = FpsCounter(config.fps_window)
        self._setup_controls()

        self.cap = None
        self.is_running = False
        self.needs_refresh = True
        self._current_display_frame: Optional[np.ndarray] = None

        self.session_start_time = None
        self.total_frames = 0

    def _setup_controls(self):
        """Setup keyboard controls and callbacks"""
        self.controls.register_callback(ControlAction.QUIT, self._quit)
        self.controls.register_callback(ControlAction.SCREENSHOT, self._take_screenshot)
        self.controls.register_callback(ControlAction.HELP, self.controls.print_help)
        self.controls.register_callback(ControlAction.UNDO, self._undo)
        self.controls.register_callback(ControlAction.REDO, self._redo)
        self.controls.register_callback(ControlAction.RESET, self._reset_operations)
        self.controls.register_callback(ControlAction.SELECT_DETECTOR, self.select_detector)
        self.controls.register_callback(ControlAction.TOGGLE_FEATURES, self._toggle_features)
        self.controls.register_callback(ControlAction.INCREASE_CONFIDENCE,
                                        lambda: self._step_confidence(self.config.confidence_step))
        self.controls.register_callback(ControlAction.DECREASE_CONFIDENCE,
                                        lambda: self._step_confidence(-self.config.confidence_step))
        self.controls.register_callback(ControlAction.INCREASE_THRESHOLD,
                                        lambda: self._step_threshold(1))
        self.controls.register_callback(ControlAction.DECREASE_THRESHOLD,
                                        lambda: self._step_threshold(-1))

        for action, operation in TOGGLE_ACTIONS.items():
            self.controls.register_callback(action, lambda op=operation: self._toggle(op))
        for action, operation in THRESHOLD_ACTIONS.items():
            self.controls.register_callback(action, lambda op=operation: self._toggle_threshold(op))

    # ------------------------------------------------------------------ actions

    def _quit(self):
        self.is_running = False

    def _take_screenshot(self):
        if self._current_display_frame is None:
            print("No frame available for screenshot")
            return
        filename = self.display.save_screenshot(self._current_display_frame, self.config.screenshot_dir)
        self.pipeline.status_message = f"Saved file: {filename}"
        print(f"Screenshot saved: {filename}")

    def _undo(self):
        self.pipeline.undo()
        self.needs_refresh = True

    def _redo(self):
        self.pipeline.redo()
        self.needs_refresh = True

    def _reset_operations(self):
        self.pipeline.reset_operations()
        self.needs_refresh = True

    def _toggle(self, operation: Operation):
        state = self.pipeline.history.current()
        self.pipeline.apply(operation, not state.get(operation))
        self.needs_refresh = True

    def _toggle_features(self):
        """Eyes and smiles can only be shown by a cascade that loaded at least one of them"""
        state = self.pipeline.history.current()
        detector = self.pipeline.detector
        if not state.show_features and (
                detector is None or not (detector.can_detect_eyes() or detector.can_detect_smiles())):
            self.pipeline.status_message = "The active detector cannot find eyes or smiles"
            return
        self._toggle(Operation.SHOW_FEATURES)

    def _default_level(self, operation: Operation) -> int:
        if operation is Operation.ADAPTIVE_THRESHOLD:
            return self.config.adaptive_block_size
        return self.config.threshold_level

    def _toggle_threshold(self, operation: Operation):
        """Threshold modes are mutually exclusive: another active mode must be switched off first"""
        state = self.pipeline.history.current()
        if state.get(operation):
            self.pipeline.apply(operation, 0)
        else:
            active = state.active_threshold
            if active is not None:
                self.pipeline.status_message = f"Disable {active.title.lower()} first"
                return
            self.pipeline.apply(operation, self._default_level(operation))
        self.needs_refresh = True

    def _step_threshold(self, direction: int):
        state = self.pipeline.history.current()
        active = state.active_threshold
        if active is None:
            self.pipeline.status_message = "No thresholding is active"
            return

        step = 2 if active is Operation.ADAPTIVE_THRESHOLD else self.config.threshold_step
        minimum = 3 if active is Operation.ADAPTIVE_THRESHOLD else 1
        level = min(255, max(minimum, state.get(active) + direction * step))
        if level != state.get(active):
            self.pipeline.apply(active, level)
            self.needs_refresh = True

    def _step_confidence(self, step: float):
        detector = self.pipeline.detector
        if detector is None or detector.get_type() is not DetectorKind.NETWORK:
            return
        current = detector.get_min_confidence() or DEFAULT_MIN_CONFIDENCE
        value = self.controls.step_confidence(current, step)
        if value is None:
            return
        self.pipeline.set_min_confidence(value)
        self.pipeline.status_message = f"Minimum confidence: {value:.2f}"
        self.needs_refresh = True

    def select_detector(self, name: Optional[str]):
        """Switch the active detector; failures are reported and leave detection off"""
        status = self.pipeline.select_detector(name)
        if not status.ok:
            print(f"The selected detector did not load: {name} ({status.describe()}). "
                  f"Check the paths set in {self.config.registry_path}")
            if self.controls.remove_detector(name):
                self.detector_names = list(self.controls.detector_names)
                print("It was removed from the detector keys for this session")
            self.pipeline.status_message = f"Could not load {name}"
        else:
            for notice in self.pipeline.notices:
                print(f"Note: {notice}")
            self.pipeline.status_message = f"Detector: {self.pipeline.detector_name}"
        self.needs_refresh = True
        return status

    # ---------------------------------------------------------------- main loop

    def _report_errors(self):
        if self.pipeline.last_error:
            print(self.pipeline.last_error)
            self.pipeline.last_error = ""

    def _render(self, output: np.ndarray, show_fps: bool) -> np.ndarray:
        return self.display.add_overlays(
            output,
            fps=self.fps.fps if show_fps else None,
            average_fps=self.fps.average if show_fps else None,
            status=self.pipeline.status_message,
            detector_name=self.pipeline.detector_name
        )

    def start_camera(self) -> bool:
        """Initialize camera capture"""
        self.cap = cv2.VideoCapture(self.config.camera_index)

        if not self.cap.isOpened():
            logger.error("Could not open camera %s", self.config.camera_index)
            return False

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.frame_width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.frame_height)

        logger.info("Camera %s opened successfully", self.config.camera_index)
        return True

    def stop_camera(self):
        """Release camera, detector and window"""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        self.pipeline.release_detector()
        self.display.close()
        self.is_running = False

    def run_camera(self):
        if not self.start_camera():
            return

        self.is_running = True
        self.session_start_time = time.time()
        try:
            while self.is_running and self.display.is_visible():
                self.fps.start()
                ret, frame = self.cap.read()
                if not ret:
                    logger.error("Could not read frame from camera")
                    break

                output = self.pipeline.process_frame(frame)
                self._report_errors()
                if output is None:
                    continue

                display_frame = self._render(output, show_fps=True)
                self._current_display_frame = display_frame
                key = self.display.show_frame(display_frame)
                self.controls.handle_key(key)
                self.total_frames += 1
                self.fps.stop()

        except KeyboardInterrupt:
            print("\nInterrupted by user")

        finally:
            self.stop_camera()
            self._print_session_summary()

    def run_image(self, path: str):
        try:
            self.pipeline.set_source_image(path)
        except FileNotFoundError as e:
            print(e)
            return

        self.is_running = True
        self.session_start_time = time.time()
        try:
            while self.is_running and self.display.is_visible():
                if self.needs_refresh:
                    output = self.pipeline.process_frame()
                    self._report_errors()
                    if output is None:
                        break
                    self._current_display_frame = self._render(output, show_fps=False)
                    self.needs_refresh = False
                    self.total_frames += 1

                key = self.display.show_frame(self._current_display_frame, wait_ms=50)
                self.controls.handle_key(key)

        except KeyboardInterrupt:
            print("\nInterrupted by user")

        finally:
            self.pipeline.clear_source_image()
            self.stop_camera()
            self._print_session_summary()

    def run(self):
        """Run the viewer on the configured image, or on the camera"""
        print("\n" + "=" * 60)
        print("LIVE DETECTION")
        print("=" * 60)
        self.controls.print_help()

        if self.config.initial_detector:
            self.select_detector(self.config.initial_detector)

        if self.config.image_path:
            self.run_image(self.config.image_path)
        else:
            self.run_camera()

    def _print_session_summary(self):
        """Print session summary statistics"""
        if not self.session_start_time:
            return
        duration = time.time() - self.session_start_time

        print("\n" + "=" * 60)
        print("SESSION SUMMARY")
        print("=" * 60)
        print(f"Duration: {duration:.1f} seconds")
        print(f"Frames processed: {self.total_frames}")
        if self.config.image_path is None:
            print(f"Average FPS: {self.fps.average}")
        print(f"Operations in history: {len(self.pipeline.history)}")
        print("=" * 60)


def main(argv=None):
    """Main function with command line interface"""
    args = build_arg_parser().parse_args(argv)
    config = AppConfig.from_args(args)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    detector_names = list_names(config.registry_path)

    if args.list:
        for name in detector_names:
            print(name)
        return

    app = LiveDetectionApp(config, detector_names)
    app.run()


if __name__ == '__main__':
    main()
