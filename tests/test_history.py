"""
Unit tests for the operation history
"""

import unittest
import os

import sys
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from live_detection.processing import Operation, OperationHistory, OperationState


class TestOperationHistory(unittest.TestCase):
    """Test undo/redo behaviour"""

    def setUp(self):
        """Set up test fixtures"""
        self.history = OperationHistory()

    def test_initial_state(self):
        """A new history holds one default state"""
        self.assertEqual(len(self.history), 1)
        self.assertEqual(self.history.cursor, 0)
        self.assertEqual(self.history.current(), OperationState())
        self.assertFalse(self.history.can_undo())
        self.assertFalse(self.history.can_redo())

    def test_undo_at_start_is_noop(self):
        state = self.history.undo()
        self.assertEqual(state, OperationState())
        self.assertEqual(self.history.cursor, 0)

    def test_redo_at_end_is_noop(self):
        self.history.add(Operation.FLIP_HORIZONTAL, True)
        state = self.history.redo()
        self.assertTrue(state.flip_horizontal)
        self.assertEqual(self.history.cursor, 1)

    def test_flip_undo_sequence(self):
        """Undo returns to the state before the last add"""
        self.history.add(Operation.FLIP_HORIZONTAL, True)
        self.history.add(Operation.FLIP_VERTICAL, True)

        state = self.history.undo()

        self.assertTrue(state.flip_horizontal)
        self.assertFalse(state.flip_vertical)
        self.assertTrue(self.history.can_redo())

        state = self.history.redo()
        self.assertTrue(state.flip_vertical)

    def test_add_prunes_redo_branch(self):
        """Adding after an undo discards the undone states"""
        self.history.add(Operation.FLIP_HORIZONTAL, True)
        self.history.add(Operation.FLIP_VERTICAL, True)
        self.history.undo()

        self.history.add(Operation.DETECT_EDGES, True)

        self.assertFalse(self.history.can_redo())
        self.assertEqual(len(self.history), 3)
        current = self.history.current()
        self.assertTrue(current.detect_edges)
        self.assertFalse(current.flip_vertical)

    def test_add_copies_other_fields(self):
        self.history.add(Operation.HISTOGRAM_EQUALIZATION, True)
        state = self.history.add(Operation.BINARY_THRESHOLD, 127)

        self.assertTrue(state.histogram_equalization)
        self.assertEqual(state.binary_threshold, 127)

    def test_states_are_snapshots(self):
        """Earlier states are unchanged by later adds"""
        first = self.history.add(Operation.FLIP_HORIZONTAL, True)
        self.history.add(Operation.FLIP_HORIZONTAL, False)
        self.assertTrue(first.flip_horizontal)

    def test_reset(self):
        self.history.add(Operation.FLIP_HORIZONTAL, True)
        self.history.add(Operation.ZERO_THRESHOLD, 100)

        self.history.reset()

        self.assertEqual(len(self.history), 1)
        self.assertEqual(self.history.current(), OperationState())
        self.assertEqual(self.history.last_changed_field_description(), "")

    def test_threshold_modes_not_enforced(self):
        """The history stores whatever it is given"""
        self.history.add(Operation.BINARY_THRESHOLD, 100)
        state = self.history.add(Operation.ZERO_THRESHOLD, 50)

        self.assertEqual(state.binary_threshold, 100)
        self.assertEqual(state.zero_threshold, 50)
        self.assertEqual(state.active_threshold, Operation.BINARY_THRESHOLD)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            self.history.add("rotate", True)
        with self.assertRaises(ValueError):
            self.history.add(Operation.BINARY_THRESHOLD, -1)
        self.assertEqual(len(self.history), 1)


class TestChangeDescription(unittest.TestCase):
    """Test last_changed_field_description"""

    def setUp(self):
        self.history = OperationHistory()

    def test_empty_before_any_change(self):
        self.assertEqual(self.history.last_changed_field_description(), "")

    def test_add_description(self):
        self.history.add(Operation.FLIP_VERTICAL, True)
        self.assertEqual(self.history.last_changed_field_description(), "Flip vertical enabled")

    def test_level_description(self):
        self.history.add(Operation.BINARY_THRESHOLD, 90)
        self.assertEqual(self.history.last_changed_field_description(),
                         "Binary threshold set to 90")

        self.history.add(Operation.BINARY_THRESHOLD, 0)
        self.assertEqual(self.history.last_changed_field_description(),
                         "Binary threshold disabled")

    def test_undo_redo_description(self):
        self.history.add(Operation.FLIP_HORIZONTAL, True)
        self.history.add(Operation.FLIP_VERTICAL, True)

        self.history.undo()
        self.assertEqual(self.history.last_changed_field_description(),
                         "Undo: Flip vertical disabled")

        self.history.redo()
        self.assertEqual(self.history.last_changed_field_description(),
                         "Redo: Flip vertical enabled")

    def test_noop_add_has_no_description(self):
        """Setting a field to its current value changes nothing"""
        self.history.add(Operation.DETECT_EDGES, False)
        self.assertEqual(self.history.last_changed_field_description(), "")


class TestOperationState(unittest.TestCase):

    def test_needs_grayscale(self):
        self.assertFalse(OperationState().needs_grayscale)
        self.assertFalse(OperationState(zero_threshold=10).needs_grayscale)
        self.assertTrue(OperationState(histogram_equalization=True).needs_grayscale)
        self.assertTrue(OperationState(adaptive_threshold=11).needs_grayscale)

    def test_diff(self):
        a = OperationState(flip_horizontal=True)
        b = OperationState(detect_edges=True)
        self.assertEqual(a.diff(b), [Operation.FLIP_HORIZONTAL, Operation.DETECT_EDGES])

    def test_level_operations(self):
        self.assertTrue(Operation.ADAPTIVE_THRESHOLD.is_level)
        self.assertFalse(Operation.SHOW_FEATURES.is_level)


if __name__ == '__main__':
    unittest.main()
