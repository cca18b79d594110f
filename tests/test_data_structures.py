"""
Tests for compartment state containers.
"""

import unittest

from core.data_structures import CompartmentState, PatientDays, QueueState


class TestQueueState(unittest.TestCase):

    def test_sizes_and_total(self):
        queues = QueueState.from_sizes((1.0, 2.0, 3.0, 4.0))
        self.assertEqual(queues.sizes(), (1.0, 2.0, 3.0, 4.0))
        self.assertEqual(queues.size(2), 3.0)
        self.assertEqual(queues.total(), 10.0)


class TestPatientDays(unittest.TestCase):

    def test_total(self):
        days = PatientDays(informal=1, l0=2, l1=3, l2=4, l3=5)
        self.assertEqual(days.total(), 15)
        self.assertEqual(PatientDays().total(), 0.0)


class TestCompartmentState(unittest.TestCase):
    """Test cases for the weekly snapshot."""

    def setUp(self):
        self.state = CompartmentState(
            week=3, u=1.0, i=2.0, l0=3.0, l1=4.0, l2=5.0, l3=6.0,
            queues=QueueState(0.5, 0.5, 0.0, 0.0), r=7.0, d=1.0,
            cumulative_new=30.0,
        )

    def test_initial_state_is_empty(self):
        """A fresh state holds nobody."""
        self.assertEqual(CompartmentState().population_total(), 0.0)

    def test_population_total(self):
        """Active patients plus resolved plus dead."""
        self.assertEqual(self.state.active_patients(), 22.0)
        self.assertEqual(self.state.population_total(), 30.0)

    def test_as_record(self):
        """Flat record carries every compartment and the day counters."""
        record = self.state.as_record()
        self.assertEqual(record["week"], 3)
        self.assertEqual(record["L3"], 6.0)
        self.assertEqual(record["Q0"], 0.5)
        self.assertEqual(record["R"], 7.0)
        self.assertIn("days_informal", record)
        self.assertIn("days_l3", record)
        self.assertNotIn("days_untreated", record)


if __name__ == '__main__':
    unittest.main()
