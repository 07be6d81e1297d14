import unittest
from datetime import datetime, timezone

import jwt

from sad.services.token_debug import analyze_recovery_link, decode_access_token

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def _token(exp: datetime) -> str:
    return jwt.encode({"sub": "user-1", "email": "rosa@example.com", "role": "authenticated", "exp": int(exp.timestamp())}, "secret", algorithm="HS256")


class RecoveryLinkTests(unittest.TestCase):
    def test_fragment(self):
        access = _token(datetime(2025, 5, 1, 13, 0, tzinfo=timezone.utc))
        report = analyze_recovery_link(
            f"https://app.example.com/reset-password#access_token={access}&refresh_token=r1&type=recovery", now=NOW
        )
        self.assertEqual(report["method"], "fragment")
        self.assertEqual(report["access_token"], access)
        self.assertEqual(report["refresh_token"], "r1")
        self.assertEqual(report["token_type"], "recovery")
        self.assertEqual(report["warnings"], [])
        self.assertEqual(report["access_claims"]["email"], "rosa@example.com")
        self.assertFalse(report["access_claims"]["expired"])

    def test_query(self):
        report = analyze_recovery_link("https://app.example.com/reset?access_token=a&refresh_token=r&type=signup", now=NOW)
        self.assertEqual(report["method"], "query")
        self.assertIn('El tipo de token no es "recovery" (signup)', report["warnings"])
        self.assertFalse(report["access_claims"]["valid_format"])

    def test_direct(self):
        report = analyze_recovery_link("  access_token=a&refresh_token=r&type=recovery\n", now=NOW)
        self.assertEqual(report["method"], "direct")
        self.assertEqual((report["access_token"], report["refresh_token"]), ("a", "r"))

    def test_verify_link(self):
        report = analyze_recovery_link(
            "https://abcd1234.supabase.co/auth/v1/verify?token=pkce_abc&type=recovery&redirect_to=https://app.example.com/reset"
        )
        self.assertTrue(report["is_verify_link"])
        self.assertEqual(report["method"], "verify_link")
        self.assertEqual(report["verify_token"], "pkce_abc")
        self.assertEqual(report["project_id"], "abcd1234")
        self.assertEqual(report["redirect_to"], "https://app.example.com/reset")
        self.assertIsNone(report["access_token"])

    def test_nothing_found(self):
        report = analyze_recovery_link("hola")
        self.assertIsNone(report["method"])
        self.assertIn('La URL debe contener "access_token=" y "refresh_token="', report["warnings"])
        self.assertEqual(report["length"], 4)

    def test_expired_access_token_warns(self):
        access = _token(datetime(2025, 5, 1, 11, 0, tzinfo=timezone.utc))
        report = analyze_recovery_link(f"#access_token={access}&refresh_token=r&type=recovery", now=NOW)
        self.assertTrue(report["access_claims"]["expired"])
        self.assertTrue(any("caducado" in w for w in report["warnings"]))

    def test_decode_garbage(self):
        self.assertFalse(decode_access_token("not-a-jwt")["valid_format"])


if __name__ == "__main__":
    unittest.main()
