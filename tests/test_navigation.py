"""
Tests for the constant-speed navigation simulator.
"""

import unittest

from gcs_sim.geo import Coordinate, distance_meters
from gcs_sim.navigation import NavigationSimulator

from helpers import HOME, north_of


class TestAdvance(unittest.TestCase):
    """Test per-tick motion integration."""

    def setUp(self):
        self.nav = NavigationSimulator(HOME, speed_mps=10.0)

    def test_no_target_holds_position(self):
        result = self.nav.advance(100)
        self.assertEqual(result.position, HOME)
        self.assertEqual(result.speed, 0.0)
        self.assertFalse(result.arrived)

    def test_target_within_step_snaps_exactly(self):
        target = north_of(HOME, 0.6)
        self.nav.set_target(target)

        result = self.nav.advance(100)

        self.assertTrue(result.arrived)
        self.assertEqual(result.position, target)
        self.assertEqual(self.nav.position, target)
        self.assertEqual(result.target, target)
        self.assertEqual(result.speed, 0.0)
        self.assertIsNone(self.nav.target)

    def test_target_equal_to_position_arrives_without_moving(self):
        self.nav.set_target(HOME)
        result = self.nav.advance(100)
        self.assertTrue(result.arrived)
        self.assertEqual(result.position, HOME)

    def test_step_moves_exactly_one_step(self):
        self.nav.set_target(Coordinate(26.9300, 75.8350))
        result = self.nav.advance(100)
        self.assertFalse(result.arrived)
        self.assertAlmostEqual(distance_meters(HOME, result.position), 1.0, places=3)

    def test_speed_converges_to_nominal(self):
        self.nav.set_target(Coordinate(26.9300, 75.8350))
        for _ in range(50):
            result = self.nav.advance(100)
            self.assertAlmostEqual(result.speed, 10.0, delta=0.01)

    def test_moves_toward_target(self):
        target = Coordinate(26.9300, 75.8350)
        self.nav.set_target(target)
        before = distance_meters(HOME, target)
        self.nav.advance(100)
        after = distance_meters(self.nav.position, target)
        self.assertAlmostEqual(before - after, 1.0, places=3)

    def test_multi_tick_arrival_is_exact(self):
        target = north_of(HOME, 25.5)
        self.nav.set_target(target)

        ticks = 0
        result = self.nav.advance(100)
        while not result.arrived:
            ticks += 1
            self.assertLess(ticks, 100)
            result = self.nav.advance(100)

        self.assertEqual(self.nav.position, target)
        self.assertEqual(ticks, 25)

    def test_zero_tick_duration_does_not_move(self):
        self.nav.set_target(north_of(HOME, 50))
        result = self.nav.advance(0)
        self.assertEqual(result.position, HOME)
        self.assertEqual(result.speed, 0.0)
        self.assertFalse(result.arrived)

    def test_zero_tick_duration_still_arrives_at_current_position(self):
        self.nav.set_target(HOME)
        self.assertTrue(self.nav.advance(0).arrived)

    def test_reset_clears_target_and_speed(self):
        self.nav.set_target(north_of(HOME, 50))
        self.nav.advance(100)
        self.nav.reset(HOME)
        self.assertEqual(self.nav.position, HOME)
        self.assertIsNone(self.nav.target)
        self.assertEqual(self.nav.speed, 0.0)


if __name__ == '__main__':
    unittest.main()
