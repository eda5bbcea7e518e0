"""
Unit tests for the application controller
"""

import unittest
import numpy as np
import os
from unittest.mock import Mock, patch

import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from live_detection.app import LiveDetectionApp, main
from live_detection.config import AppConfig, build_arg_parser
from live_detection.detectors import DetectorKind, LoadStatus
from live_detection.ui import ControlAction


class TestLiveDetectionApp(unittest.TestCase):
    """Test key-driven actions without opening a window"""

    def setUp(self):
        """Set up test fixtures"""
        self.config = AppConfig(registry_path=[])
        self.app = LiveDetectionApp(self.config, [])
        self.history = self.app.pipeline.history

    def press(self, key):
        return self.app.controls.handle_key(ord(key))

    def test_toggle_flip(self):
        self.press('h')
        self.assertTrue(self.history.current().flip_horizontal)
        self.press('h')
        self.assertFalse(self.history.current().flip_horizontal)
        self.assertEqual(len(self.history), 3)

    def test_threshold_uses_default_level(self):
        self.press('b')
        self.assertEqual(self.history.current().binary_threshold, 127)

        self.press('b')
        self.assertEqual(self.history.current().binary_threshold, 0)

    def test_second_threshold_refused(self):
        """Only one threshold mode may be switched on at a time"""
        self.press('b')
        self.press('a')

        state = self.history.current()
        self.assertEqual(state.binary_threshold, 127)
        self.assertEqual(state.adaptive_threshold, 0)
        self.assertEqual(self.app.pipeline.status_message, "Disable binary threshold first")

    def test_step_threshold(self):
        self.press(']')
        self.assertEqual(self.app.pipeline.status_message, "No thresholding is active")

        self.press('z')
        self.press(']')
        self.assertEqual(self.history.current().zero_threshold, 137)

        self.press('u')
        self.assertEqual(self.history.current().zero_threshold, 127)

    def test_adaptive_step_keeps_odd_block(self):
        self.press('a')
        self.press('[')
        self.assertEqual(self.history.current().adaptive_threshold, 9)

    def test_select_unknown_detector(self):
        with patch('builtins.print') as mock_print:
            status = self.app.select_detector("Cars")

        self.assertEqual(status, LoadStatus.NAME_NOT_FOUND)
        self.assertIsNone(self.app.pipeline.detector)
        self.assertEqual(self.app.pipeline.status_message, "Could not load Cars")
        mock_print.assert_called()

    def test_failed_detector_unbound(self):
        """A detector that fails to load no longer has a selection key"""
        app = LiveDetectionApp(self.config, ["Cars", "Faces"])
        with patch('builtins.print'):
            app.select_detector("Cars")

        self.assertEqual(app.controls.detector_names, ["Faces"])
        self.assertEqual(app.controls.detector_for_key(ord('1')), "Faces")

    def test_features_need_capable_detector(self):
        """Eye and smile marks are refused without a detector that finds them"""
        self.press('f')
        self.assertFalse(self.history.current().show_features)
        self.assertEqual(self.app.pipeline.status_message,
                         "The active detector cannot find eyes or smiles")

        detector = Mock()
        detector.can_detect_eyes.return_value = False
        detector.can_detect_smiles.return_value = False
        self.app.pipeline.detector = detector
        self.press('f')
        self.assertEqual(len(self.history), 1)

        detector.can_detect_smiles.return_value = True
        self.press('f')
        self.assertTrue(self.history.current().show_features)

        detector.can_detect_smiles.return_value = False
        self.press('f')
        self.assertFalse(self.history.current().show_features)

    def test_confidence_keys_need_network(self):
        detector = Mock()
        detector.get_type.return_value = DetectorKind.NETWORK
        detector.get_min_confidence.return_value = 0.5
        self.app.pipeline.detector = detector

        self.press('+')

        detector.set_min_confidence.assert_called_once_with(0.55)
        self.assertEqual(self.app.pipeline.status_message, "Minimum confidence: 0.55")

    def test_screenshot_without_frame(self):
        with patch('builtins.print'):
            self.assertEqual(self.press('s'), ControlAction.SCREENSHOT)

    def test_quit(self):
        self.app.is_running = True
        self.press('q')
        self.assertFalse(self.app.is_running)

    @patch('cv2.VideoCapture')
    def test_camera_not_opened(self, mock_capture):
        mock_capture.return_value.isOpened.return_value = False
        with self.assertLogs('live_detection.app', level='ERROR'):
            self.assertFalse(self.app.start_camera())

    @patch('cv2.waitKey')
    @patch('cv2.imshow')
    @patch('cv2.namedWindow')
    @patch('cv2.getWindowProperty', return_value=1)
    @patch('cv2.VideoCapture')
    def test_camera_loop_until_quit(self, mock_capture, mock_property, mock_window, mock_show, mock_wait):
        """Frames are processed and shown until the quit key is pressed"""
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        capture = mock_capture.return_value
        capture.isOpened.return_value = True
        capture.read.return_value = (True, frame)
        mock_wait.side_effect = [-1, ord('h'), ord('q')]

        with patch('builtins.print'), patch('cv2.destroyWindow'):
            self.app.run_camera()

        self.assertEqual(self.app.total_frames, 3)
        self.assertTrue(self.history.current().flip_horizontal)
        capture.release.assert_called_once()


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = AppConfig.from_args(build_arg_parser().parse_args([]))
        self.assertEqual(config.registry_path, 'data/detectors.json')
        self.assertEqual(config.min_confidence, 0.5)
        self.assertIsNone(config.image_path)

    def test_arguments(self):
        args = build_arg_parser().parse_args(
            ['--registry', 'other.json', '--camera', '1', '--confidence', '0.7', '--detector', 'Faces'])
        config = AppConfig.from_args(args)

        self.assertEqual(config.registry_path, 'other.json')
        self.assertEqual(config.camera_index, 1)
        self.assertEqual(config.min_confidence, 0.7)
        self.assertEqual(config.initial_detector, 'Faces')

    def test_list_names(self):
        with patch('live_detection.app.list_names', return_value=["Faces", "Objects"]), \
                patch('builtins.print') as mock_print, \
                patch('logging.basicConfig'):
            main(['--list'])

        mock_print.assert_any_call("Faces")
        mock_print.assert_any_call("Objects")


if __name__ == '__main__':
    unittest.main()
