import unittest
from datetime import date

from services import validation

TODAY = date(2025, 3, 10)


class TestFormValidation(unittest.TestCase):

    def test_goal_name(self):
        self.assertIsNone(validation.validate_goal_name("  Run  "))
        self.assertEqual(validation.validate_goal_name("   "), "Name is required.")
        self.assertEqual(validation.validate_goal_name("x" * 51), "Name can be at most 50 characters.")
        self.assertIsNone(validation.validate_goal_name("x" * 50))
        self.assertEqual(validation.validate_goal_name("", "pl"), "Nazwa jest wymagana.")

    def test_target_value(self):
        for value in ("12", "12.5", " 3 ", "1e3"):
            self.assertIsNone(validation.validate_target_value(value), value)
        self.assertEqual(validation.validate_target_value(""), "Target value is required.")
        for value in ("0", "-1", "abc", "inf", "nan"):
            self.assertEqual(validation.validate_target_value(value), "Value must be a positive number.", value)
        self.assertEqual(validation.validate_target_value("-1", "pl"), "Wartość musi być liczbą dodatnią.")

    def test_deadline_future(self):
        self.assertIsNone(validation.validate_deadline_future("11.03.2025", today=TODAY))
        self.assertEqual(validation.validate_deadline_future("10.03.2025", today=TODAY), "Deadline must be in the future.")
        self.assertEqual(validation.validate_deadline_future("2025-03-11", today=TODAY), "Deadline must be in dd.MM.yyyy format.")
        self.assertEqual(validation.validate_deadline_future("31.02.2026", today=TODAY), "Invalid date.")
        self.assertEqual(validation.validate_deadline_future("01.01.2020", "pl", today=TODAY), "Termin musi być w przyszłości.")

    def test_note_limits(self):
        self.assertIsNone(validation.validate_progress_notes("n" * 150))
        self.assertEqual(validation.validate_progress_notes("n" * 151), "Notes can be at most 150 characters.")
        self.assertIsNone(validation.validate_reflection_notes("  " + "n" * 1000 + "  "))
        self.assertEqual(validation.validate_reflection_notes("n" * 1001), "Note can be at most 1000 characters.")
        self.assertEqual(validation.validate_ai_summary("n" * 5001, "pl"), "Podsumowanie może mieć maksymalnie 5000 znaków.")

    def test_auth_fields(self):
        self.assertIsNone(validation.validate_email("me@example.com"))
        self.assertEqual(validation.validate_email(""), "Email address is required.")
        self.assertEqual(validation.validate_email("me@example"), "Enter a valid email address.")
        self.assertEqual(validation.validate_password("1234567"), "Password must be at least 8 characters.")
        self.assertIsNone(validation.validate_password("12345678"))
        self.assertEqual(validation.validate_confirm_password("secret123", ""), "Password confirmation is required.")
        self.assertEqual(validation.validate_confirm_password("secret123", "secret124", "pl"), "Hasła muszą być identyczne.")
        self.assertIsNone(validation.validate_confirm_password("secret123", "secret123"))


class TestApiValueChecks(unittest.TestCase):

    def test_decimal_string(self):
        self.assertIsNone(validation.validate_decimal_string("10.25"))
        self.assertEqual(validation.validate_decimal_string("1e3"), "Value must be a valid decimal number.")
        self.assertEqual(validation.validate_decimal_string("-5"), "Value must be a valid decimal number.")
        self.assertEqual(validation.validate_decimal_string("0.0"), "Value must be a positive number.")

    def test_decimal_string_must_fit_stored_precision(self):
        self.assertIsNone(validation.validate_decimal_string("0.0001"))
        self.assertIsNone(validation.validate_decimal_string("9999999999.9999"))
        self.assertIsNone(validation.validate_decimal_string("1.50000"))
        self.assertEqual(validation.validate_decimal_string("0.00001"), "Value can have at most 4 decimal places.")
        self.assertEqual(validation.validate_decimal_string("0.12345"), "Value can have at most 4 decimal places.")
        self.assertEqual(
            validation.validate_decimal_string("12345678901"),
            "Value can have at most 10 digits before the decimal point.",
        )
        self.assertEqual(
            validation.validate_decimal_string("0.00001", "pl"),
            "Wartość może mieć maksymalnie 4 miejsc po przecinku.",
        )
        self.assertEqual(validation.validate_target_value("1e-5"), "Value can have at most 4 decimal places.")

    def test_iso_deadline(self):
        self.assertEqual(validation.parse_iso_deadline("2025-03-11", today=TODAY), (date(2025, 3, 11), None))
        self.assertEqual(validation.parse_iso_deadline("2025-03-10", today=TODAY), (None, "Deadline must be in the future."))
        self.assertEqual(validation.parse_iso_deadline("11.03.2025", today=TODAY), (None, "Deadline must be in YYYY-MM-DD format."))
        self.assertEqual(validation.parse_iso_deadline("2025-02-30", today=TODAY), (None, "Invalid date."))
