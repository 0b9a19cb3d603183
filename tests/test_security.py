import unittest
from datetime import timedelta

from auth import security
from user_context import negotiate_locale


class TestTokens(unittest.TestCase):

    def test_access_token_round_trip(self):
        token = security.create_access_token(data={"sub": "user-1"})
        self.assertEqual(security.verify_token(token), "user-1")

    def test_token_type_is_checked(self):
        refresh = security.create_refresh_token(data={"sub": "user-1"})
        self.assertIsNone(security.verify_token(refresh))
        self.assertEqual(security.verify_token(refresh, token_type="refresh"), "user-1")

    def test_expired_and_garbage_tokens(self):
        expired = security.create_access_token(data={"sub": "user-1"}, expires_delta=timedelta(seconds=-1))
        self.assertIsNone(security.verify_token(expired))
        self.assertIsNone(security.verify_token("not-a-jwt"))

    def test_password_hashing(self):
        hashed = security.get_password_hash("password123")
        self.assertNotEqual(hashed, "password123")
        self.assertTrue(security.verify_password("password123", hashed))
        self.assertFalse(security.verify_password("password124", hashed))


class TestNegotiateLocale(unittest.TestCase):

    def test_negotiation(self):
        self.assertEqual(negotiate_locale("pl-PL,pl;q=0.9,en;q=0.8"), "pl")
        self.assertEqual(negotiate_locale("de-DE,en;q=0.5,pl;q=0.7"), "pl")
        self.assertEqual(negotiate_locale("fr"), "en")
        self.assertEqual(negotiate_locale(None), "en")

    def test_zero_quality_is_refused(self):
        self.assertEqual(negotiate_locale("pl;q=0"), "en")
        self.assertEqual(negotiate_locale("pl;q=0, en;q=0.1"), "en")
        self.assertEqual(negotiate_locale("en;q=0.0,pl;q=0.2"), "pl")
