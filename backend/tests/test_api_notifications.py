import unittest
from datetime import datetime, timedelta, timezone

from sad.models import WorkerDevice, WorkerNotification, WorkerNotificationSettings
from tests.db_case import ApiTestCase


class NotificationsApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.worker = self.add_worker()

    def _add_notification(self, **kw) -> WorkerNotification:
        values = {"worker_id": self.worker.id, "title": "t", "body": "b", "type": "system_message"}
        values.update(kw)
        row = WorkerNotification(**values)
        self.db.add(row)
        self.db.commit()
        return row

    def test_feed_newest_first_with_unread_count(self):
        now = datetime.now(timezone.utc)
        self._add_notification(title="old", sent_at=now - timedelta(hours=2))
        self._add_notification(title="new", sent_at=now - timedelta(minutes=5))
        self._add_notification(title="read", sent_at=now - timedelta(hours=1), read_at=now)
        payload = self.client.get(f"/api/workers/{self.worker.id}/notifications").json()
        self.assertEqual([n["title"] for n in payload["notifications"]], ["new", "read", "old"])
        self.assertEqual(payload["unread_count"], 2)

        unread = self.client.get(f"/api/workers/{self.worker.id}/notifications", params={"unread_only": True}).json()
        self.assertEqual({n["title"] for n in unread["notifications"]}, {"new", "old"})

    def test_feed_hides_expired(self):
        now = datetime.now(timezone.utc)
        self._add_notification(title="gone", expires_at=now - timedelta(minutes=1))
        self._add_notification(title="later", expires_at=now + timedelta(days=1))
        payload = self.client.get(f"/api/workers/{self.worker.id}/notifications").json()
        self.assertEqual([n["title"] for n in payload["notifications"]], ["later"])
        self.assertEqual(payload["unread_count"], 1)

    def test_mark_read_is_idempotent(self):
        row = self._add_notification()
        first = self.client.patch(f"/api/notifications/{row.id}/read").json()
        second = self.client.patch(f"/api/notifications/{row.id}/read").json()
        self.assertIsNotNone(first["read_at"])
        self.assertEqual(first["read_at"], second["read_at"])
        self.assertEqual(self.client.patch("/api/notifications/missing/read").status_code, 404)

    def test_mark_all_read(self):
        self._add_notification()
        self._add_notification()
        response = self.client.post(f"/api/workers/{self.worker.id}/notifications/mark-all-read")
        self.assertEqual(response.json(), {"ok": True, "updated": 2})
        feed = self.client.get(f"/api/workers/{self.worker.id}/notifications").json()
        self.assertEqual(feed["unread_count"], 0)

    def test_delete_notification(self):
        row = self._add_notification()
        self.assertEqual(self.client.delete(f"/api/notifications/{row.id}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/notifications/{row.id}").status_code, 404)

    def test_create_notification_with_expiry(self):
        response = self.client.post(
            "/api/notifications",
            json={
                "worker_id": self.worker.id,
                "title": "Recordatorio",
                "body": "Servicio a las 10:00",
                "type": "reminder",
                "priority": "high",
                "expires_in_hours": 2,
            },
        )
        self.assertEqual(response.status_code, 201)
        notification = response.json()["notification"]
        self.assertEqual(notification["type"], "reminder")
        self.assertIsNotNone(notification["expires_at"])
        self.push.assert_not_called()  # no devices registered
        self.broadcast.assert_called_once()

    def test_create_notification_rejects_unknown_type(self):
        response = self.client.post(
            "/api/notifications",
            json={"worker_id": self.worker.id, "title": "x", "body": "y", "type": "nope"},
        )
        self.assertEqual(response.status_code, 400)

    def test_create_notification_pushes_to_registered_device(self):
        self.db.add(WorkerDevice(worker_id=self.worker.id, device_id="iphone", platform="ios", push_token="abc"))
        self.db.commit()
        self.client.post(
            "/api/notifications",
            json={"worker_id": self.worker.id, "title": "x", "body": "y", "type": "urgent", "priority": "urgent"},
        )
        self.push.assert_called_once()
        devices, payload = self.push.call_args.args
        self.assertEqual(devices, [("abc", "ios")])
        self.assertEqual(payload["data"]["type"], "urgent")
        self.assertEqual(self.push.call_args.kwargs["priority"], "urgent")


class TestNotificationEndpointTests(ApiTestCase):
    def test_missing_worker_id(self):
        response = self.client.post("/api/test-notifications", json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "workerId es requerido"})

    def test_unknown_worker(self):
        response = self.client.post("/api/test-notifications", json={"workerId": "nobody"})
        self.assertEqual(response.status_code, 404)

    def test_unknown_type(self):
        worker = self.add_worker()
        response = self.client.post("/api/test-notifications", json={"workerId": worker.id, "type": "bogus"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Tipo de notificación no válido: bogus"})
        self.assertEqual(self.db.query(WorkerNotification).count(), 0)

    def test_defaults(self):
        worker = self.add_worker()
        response = self.client.post("/api/test-notifications", json={"workerId": worker.id})
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["notification"]["title"], "🧪 Notificación de Prueba")
        self.assertEqual(payload["notification"]["body"], "Esta es una notificación de prueba")
        self.assertEqual(payload["notification"]["type"], "system_message")
        self.assertIn("Rosa", payload["message"])
        self.assertEqual(self.db.query(WorkerNotification).count(), 1)


class DevicesApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.worker = self.add_worker()

    def test_register_then_refresh(self):
        url = f"/api/workers/{self.worker.id}/devices"
        first = self.client.post(url, json={"device_id": "d1", "platform": "iOS", "push_token": "tok1"}).json()
        self.assertTrue(first["created"])
        self.assertTrue(first["device"]["has_push_token"])
        second = self.client.post(url, json={"device_id": "d1", "platform": "ios", "app_version": "1.2"}).json()
        self.assertFalse(second["created"])
        self.assertEqual(self.db.query(WorkerDevice).count(), 1)
        device = self.db.query(WorkerDevice).one()
        self.assertEqual(device.push_token, "tok1")
        self.assertEqual(device.app_version, "1.2")

    def test_register_rejects_platform(self):
        response = self.client.post(
            f"/api/workers/{self.worker.id}/devices", json={"device_id": "d1", "platform": "symbian"}
        )
        self.assertEqual(response.status_code, 400)

    def test_unregister(self):
        url = f"/api/workers/{self.worker.id}/devices"
        self.client.post(url, json={"device_id": "d1", "platform": "android"})
        self.assertEqual(self.client.delete(f"{url}/d1").status_code, 200)
        self.assertEqual(self.client.delete(f"{url}/d1").status_code, 404)


class NotificationSettingsApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.worker = self.add_worker()
        self.url = f"/api/workers/{self.worker.id}/notification-settings"

    def test_defaults_created_lazily(self):
        self.assertEqual(self.db.query(WorkerNotificationSettings).count(), 0)
        payload = self.client.get(self.url).json()
        self.assertTrue(payload["push_enabled"])
        self.assertIsNone(payload["quiet_hours_start"])
        self.assertEqual(self.db.query(WorkerNotificationSettings).count(), 1)

    def test_update_partial_and_clear_quiet_hours(self):
        payload = self.client.put(
            self.url, json={"sound_enabled": False, "quiet_hours_start": "22:00", "quiet_hours_end": "07:00"}
        ).json()
        self.assertFalse(payload["sound_enabled"])
        self.assertTrue(payload["push_enabled"])
        self.assertEqual(payload["quiet_hours_start"], "22:00")
        cleared = self.client.put(self.url, json={"quiet_hours_start": None, "quiet_hours_end": None}).json()
        self.assertIsNone(cleared["quiet_hours_start"])
        self.assertFalse(cleared["sound_enabled"])

    def test_rejects_bad_time(self):
        self.assertEqual(self.client.put(self.url, json={"quiet_hours_start": "25:00"}).status_code, 422)

    def test_unknown_worker(self):
        self.assertEqual(self.client.get("/api/workers/nobody/notification-settings").status_code, 404)


if __name__ == "__main__":
    unittest.main()
