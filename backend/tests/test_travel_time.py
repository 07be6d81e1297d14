import unittest
from unittest import mock

import httpx

from sad.services import travel_time as tt


def _matrix(duration, distance, status="OK"):
    return {
        "status": "OK",
        "rows": [{"elements": [{"status": status, "duration": {"value": duration}, "distance": {"value": distance}}]}],
    }


class AddressTests(unittest.TestCase):
    def test_build_full_address(self):
        self.assertEqual(
            tt.build_full_address(tt.AddressInfo("Carrer Nou 5", "08301", "Mataró")), "Carrer Nou 5, 08301, Mataró, España"
        )
        self.assertEqual(tt.build_full_address(tt.AddressInfo("Carrer Nou 5, España")), "Carrer Nou 5, España")
        self.assertEqual(tt.build_full_address(tt.AddressInfo(" ", None, "")), "Mataró, España")

    def test_formatting(self):
        self.assertEqual(tt.format_duration(45), "45s")
        self.assertEqual(tt.format_duration(330), "5m 30s")
        self.assertEqual(tt.format_duration(3900), "1h 5m")
        self.assertEqual(tt.format_duration(7200), "2h")
        self.assertEqual(tt.format_distance(850), "850m")
        self.assertEqual(tt.format_distance(1234), "1.2km")


class DistanceMatrixTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.object(tt.settings, "google_maps_api_key", "key")
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_success(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=_matrix(600, 4200))

        result = tt.calculate_travel_time(
            tt.AddressInfo("Carrer Nou 5"), tt.AddressInfo("Carrer Riera 1"), "WALKING", transport=httpx.MockTransport(handler)
        )
        self.assertTrue(result.success)
        self.assertEqual((result.duration, result.distance), (600, 4200))
        self.assertEqual(seen["params"]["mode"], "walking")
        self.assertEqual(seen["params"]["origins"], "Carrer Nou 5, España")

    def test_incomplete_address_rejected_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        result = tt.calculate_travel_time(tt.AddressInfo(), tt.AddressInfo("Carrer Nou 5"), transport=httpx.MockTransport(handler))
        self.assertFalse(result.success)
        self.assertEqual(result.error_message, "Dirección de origen no válida o incompleta")

    def test_element_not_found(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=_matrix(0, 0, status="NOT_FOUND")))
        result = tt.calculate_travel_time(tt.AddressInfo("a"), tt.AddressInfo("b"), transport=transport)
        self.assertFalse(result.success)
        self.assertIn("NOT_FOUND", result.error_message)

    def test_http_error(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(500))
        result = tt.calculate_travel_time(tt.AddressInfo("a"), tt.AddressInfo("b"), transport=transport)
        self.assertFalse(result.success)

    def test_missing_key(self):
        with mock.patch.object(tt.settings, "google_maps_api_key", ""):
            result = tt.calculate_travel_time(tt.AddressInfo("a"), tt.AddressInfo("b"))
        self.assertEqual(result.error_message, "GOOGLE_MAPS_API_KEY no configurada")


class RouteTests(unittest.TestCase):
    def test_first_leg_from_home_not_totalled_and_failures_skipped(self):
        results = iter(
            [
                tt.TravelTimeResult(900, 5000, True),
                tt.TravelTimeResult(300, 1000, True),
                tt.TravelTimeResult(error_message="Ruta no disponible"),
                tt.TravelTimeResult(120, 400, True),
            ]
        )
        stops = [tt.AddressInfo(f"stop {i}") for i in range(4)]
        with mock.patch.object(tt, "calculate_travel_time", side_effect=lambda *a, **k: next(results)):
            route = tt.calculate_route_travel_time(stops, tt.AddressInfo("home"))
        self.assertEqual(route.total_segments, 4)
        self.assertEqual(route.successful_segments, 3)
        self.assertEqual(route.total_duration, 420)
        self.assertEqual(route.total_distance, 1400)
        self.assertFalse(route.segments[2].success)
        self.assertEqual((route.segments[3].from_index, route.segments[3].to_index), (3, 4))

    def test_without_home_every_leg_counts(self):
        with mock.patch.object(tt, "calculate_travel_time", return_value=tt.TravelTimeResult(60, 100, True)):
            route = tt.calculate_route_travel_time([tt.AddressInfo("a"), tt.AddressInfo("b"), tt.AddressInfo("c")])
        self.assertEqual(route.to_dict()["total_duration"], 120)
        self.assertEqual(route.to_dict()["total_distance_text"], "200m")


if __name__ == "__main__":
    unittest.main()
