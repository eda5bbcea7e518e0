"""
Unit tests for keyboard controls and display helpers
"""

import unittest
import os
from unittest.mock import Mock

import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from live_detection.ui import ControlAction, ControlsManager, FpsCounter


class TestControlsManager(unittest.TestCase):
    """Test key handling"""

    def setUp(self):
        """Set up test fixtures"""
        self.controls = ControlsManager(["Faces", "Objects"])

    def test_quit_keys(self):
        for key in (ord('q'), ord('Q'), 27):
            self.assertEqual(self.controls.handle_key(key), ControlAction.QUIT)

    def test_no_key(self):
        self.assertIsNone(self.controls.handle_key(-1))
        self.assertIsNone(self.controls.handle_key(ord('x')))

    def test_callback_called(self):
        callback = Mock()
        self.controls.register_callback(ControlAction.FLIP_HORIZONTAL, callback)

        self.assertEqual(self.controls.handle_key(ord('h')), ControlAction.FLIP_HORIZONTAL)
        callback.assert_called_once_with()

    def test_high_bits_masked(self):
        """Some platforms report modifier bits above the low byte"""
        self.assertEqual(self.controls.handle_key(0x100000 | ord('u')), ControlAction.UNDO)

    def test_ctrl_shortcuts(self):
        self.assertEqual(self.controls.handle_key(26), ControlAction.UNDO)
        self.assertEqual(self.controls.handle_key(25), ControlAction.REDO)

    def test_select_detector_by_digit(self):
        callback = Mock()
        self.controls.register_callback(ControlAction.SELECT_DETECTOR, callback)

        self.controls.handle_key(ord('2'))
        callback.assert_called_once_with("Objects")

    def test_zero_selects_no_detector(self):
        callback = Mock()
        self.controls.register_callback(ControlAction.SELECT_DETECTOR, callback)

        self.assertEqual(self.controls.handle_key(ord('0')), ControlAction.SELECT_DETECTOR)
        callback.assert_called_once_with(None)

    def test_unbound_digit_ignored(self):
        callback = Mock()
        self.controls.register_callback(ControlAction.SELECT_DETECTOR, callback)

        self.assertIsNone(self.controls.handle_key(ord('5')))
        callback.assert_not_called()

    def test_remove_detector(self):
        self.assertTrue(self.controls.remove_detector("Faces"))
        self.assertFalse(self.controls.remove_detector("Faces"))
        self.assertEqual(self.controls.detector_for_key(ord('1')), "Objects")
        self.assertIsNone(self.controls.detector_for_key(ord('2')))

    def test_disabled(self):
        self.controls.set_enabled(False)
        self.assertIsNone(self.controls.handle_key(ord('q')))

    def test_help_lists_detectors(self):
        help_text = self.controls.get_help_text()
        self.assertIn("1          - Faces", help_text)
        self.assertIn("2          - Objects", help_text)

    def test_get_key_for_action(self):
        self.assertEqual(self.controls.get_key_for_action(ControlAction.SCREENSHOT), ord('s'))

    def test_step_confidence(self):
        self.assertEqual(self.controls.step_confidence(0.5, 0.05), 0.55)
        self.assertEqual(self.controls.step_confidence(0.1, -0.05), 0.05)
        self.assertIsNone(self.controls.step_confidence(0.05, -0.05))
        self.assertIsNone(self.controls.step_confidence(0.95, 0.05))


class TestFpsCounter(unittest.TestCase):

    def test_fps_from_duration(self):
        clock = Mock(side_effect=[0.0, 0.0625, 1.0, 1.125])
        counter = FpsCounter(window=10, clock=clock)

        counter.start()
        counter.stop()
        self.assertEqual(counter.fps, 16)

        counter.start()
        counter.stop()
        self.assertEqual(counter.fps, 8)
        self.assertEqual(counter.average, 12)

    def test_stop_without_start(self):
        counter = FpsCounter()
        counter.stop()
        self.assertEqual(counter.fps, 0)
        self.assertEqual(counter.average, 0)


if __name__ == '__main__':
    unittest.main()
