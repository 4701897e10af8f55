import math
import unittest
from mediroute.domain.geo import destination_point, distance_meters, initial_bearing, nearest_signals
from mediroute.domain.models import AmbulanceSnapshot, TrafficSignal

class TestDistance(unittest.TestCase):
    def test_identical_points(self):
        self.assertEqual(distance_meters(30.7, 76.75, 30.7, 76.75), 0.0)

    def test_symmetric(self):
        pairs = [
            ((30.7, 76.75), (30.71, 76.76)),
            ((-33.86, 151.2), (51.5, -0.12)),
            ((0.0, 179.9), (0.0, -179.9)),
        ]
        for a, b in pairs:
            self.assertAlmostEqual(distance_meters(*a, *b), distance_meters(*b, *a), places=6)

    def test_one_degree_latitude(self):
        # 2 * pi * R / 360
        expected = 2 * math.pi * 6371000.0 / 360.0
        self.assertAlmostEqual(distance_meters(0.0, 0.0, 1.0, 0.0), expected, places=3)

    def test_antimeridian_is_continuous(self):
        d = distance_meters(0.0, 179.999, 0.0, -179.999)
        self.assertLess(d, 300.0)

    def test_nan_input_propagates(self):
        self.assertTrue(math.isnan(distance_meters(float("nan"), 0.0, 0.0, 0.0)))
        self.assertTrue(math.isnan(distance_meters(0.0, 0.0, float("nan"), 50.0)))

    def test_infinite_input_is_not_a_distance(self):
        d = distance_meters(float("inf"), 0.0, 0.0, 0.0)
        self.assertTrue(math.isnan(d))
        self.assertFalse(d <= 250.0)

class TestDestinationPoint(unittest.TestCase):
    def test_round_trip_distance(self):
        lat, lng = destination_point(30.7, 76.75, 180.0, 200.0)
        self.assertLess(lat, 30.7)
        self.assertAlmostEqual(lng, 76.75, places=9)
        self.assertAlmostEqual(distance_meters(30.7, 76.75, lat, lng), 200.0, places=3)

    def test_bearing_back_to_origin(self):
        lat, lng = destination_point(30.7, 76.75, 90.0, 500.0)
        self.assertAlmostEqual(initial_bearing(30.7, 76.75, lat, lng), 90.0, places=3)
        self.assertAlmostEqual(initial_bearing(lat, lng, 30.7, 76.75), 270.0, delta=0.01)

class TestNearestSignals(unittest.TestCase):
    def setUp(self):
        self.ambulance = AmbulanceSnapshot(id="A1", currentLat=30.7, currentLng=76.75)
        far = destination_point(30.7, 76.75, 0.0, 900.0)
        near = destination_point(30.7, 76.75, 180.0, 100.0)
        mid = destination_point(30.7, 76.75, 90.0, 400.0)
        self.signals = [
            TrafficSignal(id="far", locationLat=far[0], locationLng=far[1]),
            TrafficSignal(id="near", locationLat=near[0], locationLng=near[1]),
            TrafficSignal(id="mid", locationLat=mid[0], locationLng=mid[1]),
            TrafficSignal(id="nowhere"),
        ]

    def test_sorted_by_distance(self):
        ranked = nearest_signals(self.ambulance, self.signals)
        self.assertEqual([s.id for s, _ in ranked], ["near", "mid", "far"])
        self.assertAlmostEqual(ranked[0][1], 100.0, places=2)

    def test_limit(self):
        ranked = nearest_signals(self.ambulance, self.signals, limit=2)
        self.assertEqual([s.id for s, _ in ranked], ["near", "mid"])

    def test_ambulance_without_fix(self):
        self.assertEqual(nearest_signals(AmbulanceSnapshot(id="A2"), self.signals), [])

if __name__ == '__main__':
    unittest.main()
