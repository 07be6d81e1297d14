import json
import unittest
from unittest import mock

import httpx

from sad.services import push, realtime
from sad.services.supabase import SupabaseClient, SupabaseConfig


class PushTests(unittest.TestCase):
    def test_aps_body(self):
        body = push._aps_body(
            {"title": "T", "body": "B", "badge": 1, "sound": "s.wav", "data": {"type": "urgent"}, "actions": [{"action": "call"}]}
        )
        self.assertEqual(body["aps"]["alert"], {"title": "T", "body": "B"})
        self.assertEqual(body["aps"]["sound"], "s.wav")
        self.assertEqual(body["aps"]["category"], "urgent")
        self.assertEqual(body["data"], {"type": "urgent"})

    def test_aps_body_without_sound(self):
        body = push._aps_body({"title": "T", "body": "B", "sound": None})
        self.assertNotIn("sound", body["aps"])
        self.assertNotIn("category", body["aps"])

    def test_send_to_devices_only_ios(self):
        with mock.patch.object(push, "send_apns", return_value=True) as send:
            sent = push.send_to_devices([("a", "ios"), ("b", "android"), (None, "ios"), ("c", "web")], {"title": "x"})
        self.assertEqual(sent, 1)
        send.assert_called_once_with("a", {"title": "x"}, priority="normal")

    def test_send_apns_without_bundle(self):
        self.assertFalse(push.send_apns("token", {"title": "x"}, config=push.ApnsConfig(bundle_id="")))

    def _send_with_status(self, status: int) -> tuple[bool, list[httpx.Request]]:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(status, json={"reason": "Unregistered"} if status == 410 else {})

        real_client = httpx.Client
        config = push.ApnsConfig(key_id="K1", team_id="T1", bundle_id="cat.sad.app", key_base64="a2V5", use_sandbox=True)
        with mock.patch.object(push, "_provider_token", return_value="provider"), mock.patch.object(
            push.httpx, "Client", lambda **kw: real_client(transport=httpx.MockTransport(handler))
        ):
            ok = push.send_apns("abcdef0123456789", {"title": "T", "body": "B"}, priority="low", config=config)
        return ok, seen

    def test_send_apns_success(self):
        ok, seen = self._send_with_status(200)
        self.assertTrue(ok)
        request = seen[0]
        self.assertEqual(str(request.url), "https://api.sandbox.push.apple.com/3/device/abcdef0123456789")
        self.assertEqual(request.headers["apns-topic"], "cat.sad.app")
        self.assertEqual(request.headers["apns-priority"], "5")
        self.assertEqual(request.headers["authorization"], "bearer provider")

    def test_send_apns_unregistered_token(self):
        ok, _ = self._send_with_status(410)
        self.assertFalse(ok)

    def test_config_requires_signing_key(self):
        self.assertFalse(push.ApnsConfig(key_id="K", team_id="T", bundle_id="b", key_path="", key_base64="").is_configured())
        self.assertTrue(push.ApnsConfig(key_id="K", team_id="T", bundle_id="b", key_path="/k.p8", key_base64="").is_configured())


class RealtimeTests(unittest.TestCase):
    def _client(self, handler) -> SupabaseClient:
        config = SupabaseConfig(url="https://proj.supabase.co/", anon_key="anon", service_role_key="service")
        return SupabaseClient(config, transport=httpx.MockTransport(handler))

    def test_broadcast_to_worker_channel(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(202)

        ok = realtime.broadcast_notification("w1", {"id": "n1"}, client=self._client(handler))
        self.assertTrue(ok)
        self.assertEqual(seen["url"], "https://proj.supabase.co/realtime/v1/api/broadcast")
        self.assertEqual(seen["auth"], "Bearer service")
        message = seen["body"]["messages"][0]
        self.assertEqual(message["topic"], "worker-w1-notifications")
        self.assertEqual(message["event"], "notification")
        self.assertEqual(message["payload"], {"id": "n1"})

    def test_broadcast_failure_is_false(self):
        ok = realtime.broadcast_notification(
            "w1", {}, client=self._client(lambda r: httpx.Response(500, json={"message": "down"}))
        )
        self.assertFalse(ok)

    def test_broadcast_unconfigured(self):
        with mock.patch("sad.services.supabase.config.settings") as settings:
            settings.supabase_url = ""
            settings.supabase_anon_key = ""
            settings.supabase_service_role_key = ""
            client = SupabaseClient(SupabaseConfig())
        self.assertFalse(realtime.broadcast_notification("w1", {}, client=client))


if __name__ == "__main__":
    unittest.main()
