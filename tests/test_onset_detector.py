import unittest

from tonal_beat.analysis.onset_detector import OnsetDetector, OnsetPhase


class TestOnsetDetector(unittest.TestCase):
    def test_warm_up_gate(self):
        detector = OnsetDetector(threshold=1.3, history_size=40, cooldown_ms=100)
        # Huge readings still cannot fire before the history is full
        for i in range(39):
            self.assertFalse(detector.observe(1000.0 * (i + 1), now_ms=i * 20.0))
            self.assertEqual(detector.phase(i * 20.0), OnsetPhase.WARMING_UP)
        self.assertEqual(detector.history_length, 39)

    def test_first_full_history_reading_can_fire(self):
        detector = OnsetDetector(threshold=1.3, history_size=4)
        for t in range(3):
            detector.observe(10.0, now_ms=t)
        self.assertTrue(detector.observe(100.0, now_ms=3))

    def test_threshold_boundary_is_strict(self):
        # Average includes the current reading: (1 + 1 + 1 + 3) / 4 * 2.0 == 3.0
        detector = OnsetDetector(threshold=2.0, history_size=4)
        for t in range(3):
            detector.observe(1.0, now_ms=t * 1000)
        self.assertFalse(detector.observe(3.0, now_ms=3000))

        detector = OnsetDetector(threshold=2.0, history_size=4)
        for t in range(3):
            detector.observe(1.0, now_ms=t * 1000)
        self.assertTrue(detector.observe(3.0001, now_ms=3000))

    def test_constant_energy_never_fires(self):
        detector = OnsetDetector(threshold=1.0, history_size=5)
        fired = [detector.observe(42.0, now_ms=t * 10) for t in range(50)]
        self.assertFalse(any(fired))

    def test_cooldown_enforced(self):
        detector = OnsetDetector(threshold=1.5, history_size=5, cooldown_ms=100)
        for t in range(4):
            detector.observe(10.0, now_ms=t)
        self.assertTrue(detector.observe(100.0, now_ms=100))
        self.assertEqual(detector.last_event_ms, 100)
        self.assertEqual(detector.phase(150), OnsetPhase.COOLDOWN)

        # Still above threshold, but inside the cooldown window
        self.assertFalse(detector.observe(1000.0, now_ms=150))
        self.assertFalse(detector.observe(5000.0, now_ms=199.9))
        # Cooldown has elapsed exactly
        self.assertTrue(detector.observe(50000.0, now_ms=200))
        self.assertEqual(detector.last_event_ms, 200)

    def test_no_cooldown_before_first_event(self):
        # A clock starting near zero must not be treated as inside a cooldown
        detector = OnsetDetector(threshold=1.3, history_size=2, cooldown_ms=100)
        detector.observe(1.0, now_ms=0)
        detector.observe(1.0, now_ms=0)
        self.assertEqual(detector.phase(0), OnsetPhase.ARMED)
        self.assertTrue(detector.observe(10.0, now_ms=1))

    def test_history_is_bounded(self):
        detector = OnsetDetector(history_size=3)
        for t, energy in enumerate([1.0, 2.0, 3.0, 4.0, 5.0]):
            detector.observe(energy, now_ms=t)
        self.assertEqual(detector.history_length, 3)
        self.assertAlmostEqual(detector.average, 4.0)

    def test_threshold_is_read_each_tick(self):
        detector = OnsetDetector(threshold=1.3, history_size=4)
        for t in range(3):
            detector.observe(10.0, now_ms=t)
        detector.threshold = 5.0
        self.assertFalse(detector.observe(20.0, now_ms=3))

    def test_reset(self):
        detector = OnsetDetector(threshold=1.3, history_size=2)
        detector.observe(1.0, now_ms=0)
        detector.observe(10.0, now_ms=1)
        detector.reset()
        self.assertEqual(detector.history_length, 0)
        self.assertIsNone(detector.last_event_ms)
        self.assertEqual(detector.average, 0.0)
        self.assertEqual(detector.phase(2), OnsetPhase.WARMING_UP)

    def test_invalid_construction(self):
        with self.assertRaises(ValueError):
            OnsetDetector(history_size=0)
        with self.assertRaises(ValueError):
            OnsetDetector(cooldown_ms=-1)


if __name__ == "__main__":
    unittest.main()
