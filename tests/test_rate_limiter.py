import unittest

from services.rate_limiter import (
    RateLimitConfig,
    RateLimitPresets,
    check_rate_limit,
    clear_all_rate_limits,
    get_rate_limit_status,
    reset_rate_limit,
)

CONFIG = RateLimitConfig(max_requests=3, window_seconds=60, identifier="test")
NOW = 1_700_000_000.0


class TestRateLimiter(unittest.TestCase):

    def setUp(self):
        clear_all_rate_limits()
        self.addCleanup(clear_all_rate_limits)

    def test_allows_up_to_the_limit(self):
        results = [check_rate_limit("user-1", CONFIG, now=NOW + i) for i in range(3)]

        self.assertTrue(all(result.allowed for result in results))
        self.assertEqual([result.remaining for result in results], [2, 1, 0])

    def test_blocks_when_window_is_full(self):
        for i in range(3):
            check_rate_limit("user-1", CONFIG, now=NOW + i)

        blocked = check_rate_limit("user-1", CONFIG, now=NOW + 10)

        self.assertFalse(blocked.allowed)
        self.assertEqual(blocked.remaining, 0)
        # The oldest request (at NOW) leaves the window at NOW + 60
        self.assertEqual(blocked.retry_after, 50)
        self.assertEqual(blocked.reset_at.timestamp(), NOW + 60)

    def test_rejected_requests_are_not_recorded(self):
        for i in range(3):
            check_rate_limit("user-1", CONFIG, now=NOW + i)
        for i in range(5):
            check_rate_limit("user-1", CONFIG, now=NOW + 20 + i)

        self.assertTrue(check_rate_limit("user-1", CONFIG, now=NOW + 60.5).allowed)

    def test_window_slides(self):
        for i in range(3):
            check_rate_limit("user-1", CONFIG, now=NOW + i * 20)

        self.assertFalse(check_rate_limit("user-1", CONFIG, now=NOW + 59).allowed)
        self.assertTrue(check_rate_limit("user-1", CONFIG, now=NOW + 61).allowed)

    def test_users_and_identifiers_are_independent(self):
        other_policy = RateLimitConfig(max_requests=3, window_seconds=60, identifier="other")
        for i in range(3):
            check_rate_limit("user-1", CONFIG, now=NOW + i)

        self.assertTrue(check_rate_limit("user-2", CONFIG, now=NOW + 5).allowed)
        self.assertTrue(check_rate_limit("user-1", other_policy, now=NOW + 5).allowed)

    def test_status_does_not_consume(self):
        check_rate_limit("user-1", CONFIG, now=NOW)

        status = get_rate_limit_status("user-1", CONFIG, now=NOW + 1)
        status_again = get_rate_limit_status("user-1", CONFIG, now=NOW + 1)

        self.assertEqual(status.requests_in_window, 1)
        self.assertEqual(status_again.remaining, 2)

    def test_reset(self):
        for i in range(3):
            check_rate_limit("user-1", CONFIG, now=NOW + i)

        reset_rate_limit("user-1", "test")

        self.assertTrue(check_rate_limit("user-1", CONFIG, now=NOW + 5).allowed)

    def test_ai_generation_preset(self):
        self.assertEqual(RateLimitPresets.AI_GENERATION.max_requests, 10)
        self.assertEqual(RateLimitPresets.AI_GENERATION.window_seconds, 60)
