"""
Tests for the vehicle session: the full tick pipeline driven by the manual clock.
"""

import unittest

from gcs_sim.geo import Coordinate, distance_meters
from gcs_sim.geofence import CrossingKind
from gcs_sim.lifecycle import ConnectionState

from helpers import HOME, make_session, north_of


class TestSessionConnect(unittest.TestCase):
    """Test session start and idle behaviour."""

    def setUp(self):
        self.session = make_session()

    def test_disconnected_session_does_not_tick(self):
        before = self.session.snapshot
        self.assertEqual(self.session.scheduler.advance(5000), 0)
        self.assertIs(self.session.snapshot, before)
        self.assertIs(self.session.tick(), before)

    def test_connect_starts_timers(self):
        self.assertTrue(self.session.connect())
        self.assertTrue(self.session.scheduler.running)
        self.assertEqual(self.session.scheduler.advance(1000), 10)

    def test_initial_snapshot(self):
        self.session.connect()
        snap = self.session.snapshot
        self.assertEqual(snap.altitude, 200.0)
        self.assertEqual(snap.battery, 90.0)
        self.assertEqual(snap.speed, 0.0)
        self.assertEqual(snap.position, HOME)

    def test_idle_ticks_drain_idle_rate(self):
        self.session.connect()
        self.session.scheduler.step(10)
        self.assertAlmostEqual(self.session.snapshot.battery, 90 - 10 * 0.005)
        self.assertEqual(self.session.snapshot.speed, 0.0)

    def test_snapshot_replaced_each_tick(self):
        self.session.connect()
        first = self.session.snapshot
        self.session.scheduler.step(1)
        self.assertIsNot(self.session.snapshot, first)
        self.assertEqual(first.battery, 90.0)

    def test_path_history_grows_per_tick(self):
        self.session.connect()
        self.session.scheduler.step(7)
        self.assertEqual(len(self.session.path()), 7)


class TestSessionNavigation(unittest.TestCase):
    """Test motion, drain and targets through the session."""

    def setUp(self):
        self.session = make_session()
        self.session.connect()

    def test_target_rejected_when_disconnected(self):
        session = make_session()
        self.assertFalse(session.set_target(north_of(HOME, 10)))
        self.assertIsNone(session.target)

    def test_steady_travel_reports_nominal_speed(self):
        self.session.set_target(Coordinate(26.9300, 75.8350))
        for _ in range(20):
            self.session.scheduler.step(1)
            self.assertAlmostEqual(self.session.snapshot.speed, 10.0, delta=0.01)

    def test_moving_drains_moving_rate(self):
        self.session.set_target(north_of(HOME, 100))
        self.session.scheduler.step(10)
        self.assertAlmostEqual(self.session.snapshot.battery, 90 - 10 * 0.02)

    def test_arrival_is_exact_and_clears_target(self):
        target = north_of(HOME, 12.3)
        self.session.set_target(target)
        self.session.scheduler.step(20)

        self.assertEqual(self.session.snapshot.position, target)
        self.assertEqual(self.session.snapshot.speed, 0.0)
        self.assertIsNone(self.session.target)
        self.assertIn('navigation.arrived', [e.type for e in self.session.event_router.recent()])

    def test_battery_monotonic_and_non_negative(self):
        session = make_session(initial_battery=0.5)
        session.connect()
        session.set_target(north_of(HOME, 30))

        previous = session.snapshot.battery
        for _ in range(200):
            session.scheduler.step(1)
            battery = session.snapshot.battery
            self.assertLessEqual(battery, previous)
            self.assertGreaterEqual(battery, 0.0)
            previous = battery
        self.assertEqual(previous, 0.0)

    def test_low_battery_reported_once(self):
        session = make_session(initial_battery=10.01)
        session.connect()
        session.scheduler.step(10)

        self.assertTrue(session.snapshot.battery_low)
        low_events = [e for e in session.event_router.recent(100) if e.type == 'power.battery.low']
        self.assertEqual(len(low_events), 1)


class TestSessionGeofence(unittest.TestCase):
    """Test geofence logging through the tick pipeline."""

    def test_out_and_back_logs_exit_then_enter(self):
        session = make_session()
        session.connect()

        session.set_target(north_of(HOME, 300))
        session.scheduler.step(320)
        self.assertTrue(session.snapshot.outside_geofence)

        self.assertTrue(session.set_target(HOME))
        session.scheduler.step(320)
        self.assertFalse(session.snapshot.outside_geofence)

        entries = session.geofence_log()
        self.assertEqual([e.kind for e in entries], [CrossingKind.EXIT, CrossingKind.ENTER])

        exit_dist = distance_meters(entries[0].position, HOME)
        enter_dist = distance_meters(entries[1].position, HOME)
        self.assertGreater(exit_dist, 200)
        self.assertLess(exit_dist, 201.001)
        self.assertLessEqual(enter_dist, 200)
        self.assertGreater(enter_dist, 198.999)

        path = session.path()
        self.assertIn(entries[0].position, path)
        self.assertIn(entries[1].position, path)

        fence_events = [e.type for e in session.event_router.recent(1000) if e.type.startswith('geofence.')]
        self.assertEqual(fence_events, ['geofence.exit', 'geofence.enter'])

    def test_history_limit_bounds_path(self):
        session = make_session(history_limit=5)
        session.connect()
        session.scheduler.step(50)
        self.assertEqual(len(session.path()), 5)


class TestSessionLifecycle(unittest.TestCase):
    """Test deferred disconnect, return home and reconnect."""

    def setUp(self):
        self.session = make_session()
        self.session.connect()
        self.session.set_target(north_of(HOME, 50))
        self.session.scheduler.step(60)

    def test_deferred_disconnect(self):
        self.assertTrue(self.session.disconnect())
        self.session.scheduler.step(20)
        self.assertTrue(self.session.connected)
        self.assertEqual(self.session.state, ConnectionState.RETURNING_HOME)

        self.session.scheduler.step(100)
        self.assertEqual(self.session.state, ConnectionState.DISCONNECTED)
        self.assertIsNone(self.session.target)
        self.assertEqual(self.session.snapshot.position, HOME)
        self.assertFalse(self.session.scheduler.running)

    def test_no_mutation_after_disconnect(self):
        self.session.disconnect()
        self.session.scheduler.step(100)
        frozen = self.session.snapshot

        self.assertEqual(self.session.scheduler.advance(10000), 0)
        self.assertIs(self.session.snapshot, frozen)

    def test_disconnect_mid_flight_redirects_home(self):
        self.session.set_target(north_of(HOME, 150))
        self.session.scheduler.step(10)
        self.assertTrue(self.session.disconnect())
        self.assertEqual(self.session.target, HOME)
        self.session.scheduler.step(200)
        self.assertEqual(self.session.state, ConnectionState.DISCONNECTED)

    def test_return_home_rejected_while_moving(self):
        far = north_of(HOME, 150)
        self.session.set_target(far)
        self.session.scheduler.step(3)

        self.assertFalse(self.session.return_home())
        self.assertEqual(self.session.state, ConnectionState.CONNECTED)
        self.assertEqual(self.session.target, far)

    def test_return_home_accepted_when_stopped(self):
        self.assertEqual(self.session.snapshot.speed, 0.0)
        self.assertTrue(self.session.return_home())
        self.assertEqual(self.session.target, HOME)
        self.assertEqual(self.session.state, ConnectionState.RETURNING_HOME)

        self.session.scheduler.step(100)
        self.assertEqual(self.session.state, ConnectionState.CONNECTED)
        self.assertEqual(self.session.snapshot.position, HOME)

    def test_click_ignored_while_returning_home(self):
        self.session.return_home()
        self.assertFalse(self.session.set_target(north_of(HOME, 80)))
        self.assertEqual(self.session.target, HOME)

    def test_reconnect_starts_fresh(self):
        self.session.disconnect()
        self.session.scheduler.step(100)
        generation = self.session.scheduler.generation

        self.assertTrue(self.session.connect())
        self.assertGreater(self.session.scheduler.generation, generation)
        self.assertEqual(self.session.snapshot.battery, 90.0)
        self.assertEqual(self.session.path(), [])
        self.assertEqual(self.session.geofence_log(), [])
        self.assertEqual(self.session.scheduler.step(3), 3)


class TestSessionJitter(unittest.TestCase):
    """Test the link jitter timer."""

    def setUp(self):
        self.session = make_session()
        self.session.connect()

    def test_jitter_sampled_on_slow_cadence(self):
        self.session.scheduler.advance(999)
        self.assertEqual(self.session.snapshot.link_jitter_ms, 0.0)

        self.session.scheduler.advance(1)
        jitter = self.session.snapshot.link_jitter_ms
        self.assertGreaterEqual(jitter, 0.0)
        self.assertLess(jitter, 120.0)

    def test_stable_link_pins_jitter(self):
        self.assertTrue(self.session.toggle_stable_link())
        self.session.scheduler.advance(1000)
        self.assertEqual(self.session.snapshot.link_jitter_ms, 10.0)

        self.assertFalse(self.session.toggle_stable_link())
        self.assertFalse(self.session.stable_link)


if __name__ == '__main__':
    unittest.main()
