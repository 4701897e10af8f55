import unittest
from mediroute.domain.models import (
    AmbulanceSnapshot, EmergencyStatus, LightState, RouteDirection, SignalStatus, TrafficSignal
)
from mediroute.systems.signal_system import SignalSystem, default_directions

def make_ambulance(status=EmergencyStatus.ACTIVE, direction=RouteDirection.N_S, heading=180.0):
    return AmbulanceSnapshot(
        id="AMB-1", currentLat=30.7, currentLng=76.75,
        headingDegrees=heading, emergencyStatus=status, routeDirection=direction
    )

class TestSignalSystem(unittest.TestCase):
    def setUp(self):
        self.system = SignalSystem()
        self.signal = TrafficSignal(id="SIG-1", locationLat=30.698, locationLng=76.75)

    def assertDefaultPattern(self, resolution):
        self.assertEqual(resolution.directions, default_directions())
        self.assertIsNone(resolution.priorityDirection)

    def test_priority_within_activate_distance(self):
        for d in [0.0, 100.0, 249.9, 250.0]:
            res = self.system.resolve(self.signal, make_ambulance(), d)
            self.assertEqual(res.status, SignalStatus.PRIORITY, msg=str(d))

    def test_prepare_between_thresholds(self):
        for d in [250.0001, 500.0, 999.9, 1000.0]:
            res = self.system.resolve(self.signal, make_ambulance(), d)
            self.assertEqual(res.status, SignalStatus.PREPARE, msg=str(d))

    def test_normal_beyond_prepare_distance(self):
        res = self.system.resolve(self.signal, make_ambulance(), 1000.0001)
        self.assertEqual(res.status, SignalStatus.NORMAL)
        self.assertDefaultPattern(res)

    def test_inactive_is_always_normal(self):
        for d in [0.0, 50.0, 700.0, 5000.0]:
            res = self.system.resolve(self.signal, make_ambulance(status=EmergencyStatus.INACTIVE), d)
            self.assertEqual(res.status, SignalStatus.NORMAL)
            self.assertDefaultPattern(res)

    def test_responding_counts_as_active(self):
        res = self.system.resolve(self.signal, make_ambulance(status=EmergencyStatus.RESPONDING), 100.0)
        self.assertEqual(res.status, SignalStatus.PRIORITY)

    def test_priority_lights_per_direction(self):
        field_for = {
            RouteDirection.N_S: "NS",
            RouteDirection.S_N: "SN",
            RouteDirection.E_W: "EW",
            RouteDirection.W_E: "WE",
        }
        for direction, field in field_for.items():
            res = self.system.resolve(self.signal, make_ambulance(direction=direction), 100.0)
            lights = res.directions.model_dump()
            self.assertEqual(lights[field], LightState.GREEN)
            self.assertEqual(sorted(k for k, v in lights.items() if v == LightState.RED),
                             sorted(k for k in lights if k != field))
            self.assertEqual(res.priorityDirection, direction)

    def test_prepare_blinks_green(self):
        res = self.system.resolve(self.signal, make_ambulance(), 700.0)
        self.assertEqual(res.directions.NS, LightState.BLINK_GREEN)
        self.assertEqual(res.directions.SN, LightState.RED)
        self.assertEqual(res.directions.EW, LightState.RED)
        self.assertEqual(res.directions.WE, LightState.RED)

    def test_missing_route_direction_uses_heading(self):
        res = self.system.resolve(self.signal, make_ambulance(direction=None, heading=90.0), 100.0)
        self.assertEqual(res.priorityDirection, RouteDirection.W_E)
        self.assertEqual(res.directions.WE, LightState.GREEN)

    def test_resolve_is_idempotent(self):
        ambulance = make_ambulance()
        self.assertEqual(
            self.system.resolve(self.signal, ambulance, 300.0),
            self.system.resolve(self.signal, ambulance, 300.0)
        )

    def test_custom_thresholds(self):
        system = SignalSystem(activate_distance=50.0, prepare_distance=100.0)
        self.assertEqual(system.resolve(self.signal, make_ambulance(), 75.0).status, SignalStatus.PREPARE)
        self.assertEqual(system.resolve(self.signal, make_ambulance(), 150.0).status, SignalStatus.NORMAL)

if __name__ == '__main__':
    unittest.main()
