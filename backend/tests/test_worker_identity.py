import json
import unittest
from datetime import date

import httpx

from sad.models import Assignment, AuthUser, Worker, WorkerDevice, WorkerNotification
from sad.services.id_reconcile import build_id_mapping, orphan_workers, reconcile_worker_ids
from sad.services.supabase import SupabaseClient, SupabaseConfig
from sad.services.worker_auth import ensure_worker_auth_account, reset_worker_password_by_email
from tests.db_case import DbTestCase

AUTH_ID = "aaaaaaaa-0000-0000-0000-000000000001"


class FakeAuthAdmin:
    """Records requests to the identity provider admin API and answers from a user list."""

    def __init__(self, users=None, create_error=None):
        self.users = users or []
        self.create_error = create_error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        if request.method == "POST" and request.url.path == "/auth/v1/admin/users":
            if self.create_error:
                return httpx.Response(422, json={"msg": self.create_error})
            return httpx.Response(200, json={"id": AUTH_ID, "email": body["email"]})
        if request.method == "GET" and request.url.path == "/auth/v1/admin/users":
            return httpx.Response(200, json={"users": self.users})
        if request.method == "PUT":
            return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})
        return httpx.Response(404)

    def client(self) -> SupabaseClient:
        config = SupabaseConfig(url="https://proj.supabase.co", anon_key="anon", service_role_key="service")
        return SupabaseClient(config, transport=httpx.MockTransport(self))


class WorkerAuthTests(DbTestCase):
    def test_creates_account_and_mirrors_auth_user(self):
        fake = FakeAuthAdmin()
        result = ensure_worker_auth_account(self.db, " rosa@example.com ", "Rosa", "secret1", client=fake.client())
        self.assertTrue(result.success)
        self.assertEqual(result.auth_user_id, AUTH_ID)
        method, path, body = fake.requests[0]
        self.assertEqual(body["user_metadata"], {"role": "worker", "name": "Rosa"})
        self.assertTrue(body["email_confirm"])
        auth_user = self.db.query(AuthUser).one()
        self.assertEqual((auth_user.id, auth_user.email, auth_user.role), (AUTH_ID, "rosa@example.com", "worker"))

    def test_existing_account_gets_password_and_metadata(self):
        fake = FakeAuthAdmin(
            users=[{"id": "existing-1", "email": "Rosa@Example.com", "user_metadata": {"phone": "600"}}],
            create_error="A user with this email address has already been registered",
        )
        result = ensure_worker_auth_account(self.db, "rosa@example.com", "Rosa", "secret1", client=fake.client())
        self.assertTrue(result.success)
        self.assertEqual(result.auth_user_id, "existing-1")
        method, path, body = fake.requests[-1]
        self.assertEqual((method, path), ("PUT", "/auth/v1/admin/users/existing-1"))
        self.assertEqual(body, {"password": "secret1", "user_metadata": {"phone": "600", "role": "worker", "name": "Rosa"}})

    def test_rejects_short_password_without_calling_provider(self):
        fake = FakeAuthAdmin()
        result = ensure_worker_auth_account(self.db, "rosa@example.com", "Rosa", "123", client=fake.client())
        self.assertFalse(result.success)
        self.assertEqual(fake.requests, [])

    def test_other_create_error(self):
        fake = FakeAuthAdmin(create_error="Database error")
        result = ensure_worker_auth_account(self.db, "rosa@example.com", "Rosa", "secret1", client=fake.client())
        self.assertFalse(result.success)
        self.assertIn("Database error", result.message)

    def test_reset_password(self):
        fake = FakeAuthAdmin(users=[{"id": "u9", "email": "rosa@example.com"}])
        self.assertTrue(reset_worker_password_by_email("rosa@example.com", "newpass", client=fake.client()).success)
        self.assertEqual(fake.requests[-1][2], {"password": "newpass"})
        missing = reset_worker_password_by_email("nobody@example.com", "newpass", client=fake.client())
        self.assertFalse(missing.success)


class ReconcileTests(DbTestCase):
    def setUp(self):
        super().setUp()
        self.worker = self.add_worker(email="rosa@example.com", phone="600111222")
        self.old_id = self.worker.id
        self.db.add(AuthUser(id=AUTH_ID, email=" ROSA@example.com", role="worker"))
        user = self.add_user()
        self.add_assignment(self.worker, user, start_date=date(2025, 1, 1))
        self.db.add(WorkerNotification(worker_id=self.old_id, title="t", body="b"))
        self.db.add(WorkerDevice(worker_id=self.old_id, device_id="d1", platform="ios"))
        self.add_worker(email="orphan@example.com", name="Orfe")

    def test_mapping_and_orphans(self):
        mapping = build_id_mapping(self.db)
        self.assertEqual(len(mapping), 1)
        self.assertEqual((mapping[0].worker_id, mapping[0].auth_id), (self.old_id, AUTH_ID))
        self.assertEqual([w.email for w in orphan_workers(self.db)], ["orphan@example.com"])

    def test_dry_run_changes_nothing(self):
        reports = reconcile_worker_ids(self.db, build_id_mapping(self.db), dry_run=True)
        self.assertTrue(reports[0].ok)
        self.assertIsNotNone(self.db.query(Worker).filter(Worker.id == self.old_id).first())

    def test_moves_worker_and_references(self):
        reports = reconcile_worker_ids(self.db, build_id_mapping(self.db))
        self.assertTrue(reports[0].ok)
        self.assertEqual(reports[0].moved["assignments"], 1)
        self.assertEqual(reports[0].moved["worker_notifications"], 1)
        self.db.expire_all()
        self.assertIsNone(self.db.query(Worker).filter(Worker.id == self.old_id).first())
        moved = self.db.query(Worker).filter(Worker.id == AUTH_ID).one()
        self.assertEqual((moved.email, moved.phone), ("rosa@example.com", "600111222"))
        self.assertEqual(self.db.query(Assignment).one().worker_id, AUTH_ID)
        self.assertEqual(self.db.query(WorkerDevice).one().worker_id, AUTH_ID)
        self.assertEqual(build_id_mapping(self.db), [])


if __name__ == "__main__":
    unittest.main()
