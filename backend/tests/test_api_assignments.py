import unittest
from unittest import mock

from sad.models import Holiday, WorkerNotification
from tests.db_case import ApiTestCase

WEEKDAYS_9_TO_11 = {
    day: {"enabled": True, "timeSlots": [{"start": "09:00", "end": "11:00"}]}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}


class AssignmentsApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.worker = self.add_worker()
        self.user = self.add_user()

    def _create(self, **kw):
        body = {
            "user_id": self.user.id,
            "worker_id": self.worker.id,
            "assignment_type": "laborables",
            "start_date": "2025-01-01",
            "schedule": WEEKDAYS_9_TO_11,
            "weekly_hours": 10,
        }
        body.update(kw)
        return self.client.post("/api/assignments", json=body)

    def _types(self):
        return [n.type for n in self.db.query(WorkerNotification).all()]

    def test_create_notifies_new_user(self):
        response = self._create()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["name"], "Josep")
        self.assertEqual(self._types(), ["new_user"])
        note = self.db.query(WorkerNotification).one()
        self.assertIn("Josep Puig", note.body)
        self.assertIn("Carrer Nou 5", note.body)

    def test_create_validates(self):
        self.assertEqual(self._create(assignment_type="weekly").status_code, 422)
        self.assertEqual(self._create(end_date="2024-12-01").status_code, 422)
        self.assertEqual(self._create(user_id="nobody").status_code, 404)
        self.assertEqual(self._types(), [])

    def test_schedule_change_notifies(self):
        assignment_id = self._create().json()["id"]
        new_schedule = {"monday": {"enabled": True, "timeSlots": [{"start": "10:00", "end": "12:00"}]}}
        response = self.client.patch(f"/api/assignments/{assignment_id}", json={"schedule": new_schedule})
        self.assertEqual(response.status_code, 200)
        self.assertCountEqual(self._types(), ["new_user", "schedule_change"])
        note = self.db.query(WorkerNotification).filter(WorkerNotification.type == "schedule_change").one()
        self.assertEqual(note.data["newTime"], "monday 10:00-12:00")

    def test_same_schedule_does_not_notify(self):
        assignment_id = self._create().json()["id"]
        self.client.patch(f"/api/assignments/{assignment_id}", json={"schedule": WEEKDAYS_9_TO_11, "notes": "x"})
        self.assertEqual(self._types(), ["new_user"])

    def test_cancel_notifies_user_removed(self):
        assignment_id = self._create().json()["id"]
        self.client.patch(f"/api/assignments/{assignment_id}", json={"status": "cancelled"})
        self.client.patch(f"/api/assignments/{assignment_id}", json={"status": "inactive"})
        self.assertCountEqual(self._types(), ["new_user", "user_removed"])

    def _types_for(self, worker_id):
        return [n.type for n in self.db.query(WorkerNotification).filter(WorkerNotification.worker_id == worker_id).all()]

    def test_reassign_notifies_both_workers(self):
        other = self.add_worker(email="laura@example.com", name="Laura")
        assignment_id = self._create().json()["id"]
        response = self.client.patch(f"/api/assignments/{assignment_id}", json={"worker_id": other.id})
        self.assertEqual(response.json()["worker_id"], other.id)
        self.assertCountEqual(self._types_for(self.worker.id), ["new_user", "user_removed"])
        self.assertEqual(self._types_for(other.id), ["new_user"])

    def test_reassign_and_cancel_notifies_previous_worker_only(self):
        other = self.add_worker(email="laura@example.com", name="Laura")
        assignment_id = self._create().json()["id"]
        response = self.client.patch(
            f"/api/assignments/{assignment_id}", json={"worker_id": other.id, "status": "cancelled"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertCountEqual(self._types_for(self.worker.id), ["new_user", "user_removed"])
        self.assertEqual(self._types_for(other.id), [])

    def test_update_rejects_end_before_start(self):
        assignment_id = self._create(start_date="2025-03-01").json()["id"]
        response = self.client.patch(f"/api/assignments/{assignment_id}", json={"end_date": "2025-01-01"})
        self.assertEqual(response.status_code, 422)
        moved_start = self.client.patch(
            f"/api/assignments/{assignment_id}", json={"end_date": "2025-06-30", "start_date": "2025-07-01"}
        )
        self.assertEqual(moved_start.status_code, 422)
        stored = self.client.get("/api/assignments").json()["assignments"][0]
        self.assertEqual((stored["start_date"], stored["end_date"]), ("2025-03-01", None))

    def test_list_filters(self):
        other = self.add_worker(email="laura@example.com", name="Laura")
        self._create()
        self._create(worker_id=other.id, status="inactive")
        self.assertEqual(self.client.get("/api/assignments").json()["count"], 2)
        self.assertEqual(self.client.get("/api/assignments", params={"worker_id": other.id}).json()["count"], 1)
        self.assertEqual(self.client.get("/api/assignments", params={"status": "active"}).json()["count"], 1)

    def test_notification_failure_does_not_fail_request(self):
        with mock.patch("sad.services.notification_service.create_and_send_notification", return_value=None):
            self.assertEqual(self._create().status_code, 201)


class HolidaysApiTests(ApiTestCase):
    def test_create_list_delete(self):
        for day, month, name in ((25, 12, "Nadal"), (1, 1, "Cap d'Any"), (6, 1, "Reis")):
            response = self.client.post(
                "/api/holidays", json={"day": day, "month": month, "year": 2025, "name": name, "type": "national"}
            )
            self.assertEqual(response.status_code, 201)
        listed = self.client.get("/api/holidays", params={"year": 2025}).json()
        self.assertEqual([h["name"] for h in listed["holidays"]], ["Cap d'Any", "Reis", "Nadal"])
        january = self.client.get("/api/holidays", params={"year": 2025, "month": 1}).json()
        self.assertEqual(january["count"], 2)
        holiday_id = listed["holidays"][0]["id"]
        self.assertEqual(self.client.delete(f"/api/holidays/{holiday_id}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/holidays/{holiday_id}").status_code, 404)

    def test_create_rejects_impossible_date_and_duplicate(self):
        bad = self.client.post("/api/holidays", json={"day": 30, "month": 2, "year": 2025, "name": "x"})
        self.assertEqual(bad.status_code, 422)
        body = {"day": 24, "month": 6, "year": 2025, "name": "Sant Joan", "type": "national"}
        self.assertEqual(self.client.post("/api/holidays", json=body).status_code, 201)
        self.assertEqual(self.client.post("/api/holidays", json=body).status_code, 409)

    def test_validate_empty_year(self):
        payload = self.client.get("/api/holidays/validate", params={"year": 2030}).json()
        self.assertFalse(payload["is_valid"])
        self.assertIn("No hay festivos registrados para el año 2030", payload["errors"])
        self.assertEqual(len(payload["missing"]), 7)


class BalancesApiTests(ApiTestCase):
    def test_user_balance_counts_weekdays_and_holidays(self):
        worker = self.add_worker()
        user = self.add_user(monthly_assigned_hours=40)
        self.add_assignment(worker, user, schedule=WEEKDAYS_9_TO_11)
        self.db.add(Holiday(day=6, month=1, year=2025, name="Reis", type="national"))
        self.db.commit()
        payload = self.client.get(f"/api/balances/users/{user.id}", params={"year": 2025, "month": 1}).json()
        # January 2025: 23 weekdays, minus Reis (Monday 6th) = 22 working days x 2h
        self.assertEqual(payload["laborables_monthly_hours"], 44.0)
        self.assertEqual(payload["holidays_monthly_hours"], 0.0)
        self.assertEqual(payload["difference"], 4.0)

    def test_unknown_user_and_worker(self):
        self.assertEqual(self.client.get("/api/balances/users/nobody").status_code, 404)
        self.assertEqual(self.client.get("/api/balances/workers/nobody").status_code, 404)

    def test_worker_users_rows(self):
        worker = self.add_worker()
        josep = self.add_user(name="Josep")
        anna = self.add_user(name="Anna", monthly_assigned_hours=10)
        self.add_assignment(worker, josep, schedule=WEEKDAYS_9_TO_11)
        self.add_assignment(
            worker, anna, assignment_type="festivos",
            schedule={"holiday": {"enabled": True, "timeSlots": [{"start": "10:00", "end": "11:00"}]}},
        )
        payload = self.client.get(f"/api/balances/workers/{worker.id}", params={"year": 2025, "month": 2}).json()
        self.assertEqual([r["user_name"] for r in payload["users"]], ["Anna", "Josep"])
        # February 2025 has 8 weekend days
        self.assertEqual(payload["users"][0]["holidays_hours"], 8.0)
        self.assertEqual(payload["users"][1]["laborables_hours"], 40.0)

    def test_users_totals(self):
        worker = self.add_worker()
        user = self.add_user()
        self.add_assignment(worker, user, weekly_hours=12)
        self.add_assignment(worker, user, assignment_type="festivos", monthly_hours=6)
        payload = self.client.get("/api/balances/users").json()
        self.assertEqual(payload["count"], 1)
        totals = payload["users"][0]
        self.assertEqual(totals["total_workers"], 2)
        self.assertEqual(totals["calculation_details"]["laborables_hours"], 52.0)
        self.assertEqual(totals["calculation_details"]["festivos_hours"], 6.0)


class RouteApiTests(ApiTestCase):
    def test_needs_two_addresses(self):
        response = self.client.post("/api/route/travel-time", json={"stops": [{"address": "Carrer Nou 5"}]})
        self.assertEqual(response.status_code, 400)

    def test_rejects_mode(self):
        response = self.client.post(
            "/api/route/travel-time", json={"stops": [{"address": "a"}, {"address": "b"}], "mode": "FLYING"}
        )
        self.assertEqual(response.status_code, 400)

    def test_returns_segments(self):
        from sad.services.travel_time import TravelTimeResult

        with mock.patch(
            "sad.services.travel_time._distance_matrix",
            return_value=TravelTimeResult(duration=600, distance=3000, success=True),
        ):
            response = self.client.post(
                "/api/route/travel-time",
                json={
                    "worker_start": {"address": "Carrer de la Riera 10"},
                    "stops": [{"address": "Carrer Nou 5"}, {"address": "Plaça de Santa Anna 3"}],
                },
            )
        payload = response.json()
        self.assertEqual(payload["total_segments"], 2)
        self.assertEqual(payload["successful_segments"], 2)
        self.assertEqual(payload["total_duration"], 600)
        self.assertEqual(payload["total_duration_text"], "10m")


if __name__ == "__main__":
    unittest.main()
