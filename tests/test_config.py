"""Unit tests for roster.core.config validators."""

import unittest

from pydantic import ValidationError

from roster.core.config import Settings


class TestSettingsValidation(unittest.TestCase):
    def test_sqlite_and_postgres_urls_accepted(self) -> None:
        self.assertEqual(Settings(DATABASE_URL="sqlite:// ").DATABASE_URL, "sqlite://")
        Settings(DATABASE_URL="postgresql+psycopg2://u:p@db:5432/roster")

    def test_other_database_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(DATABASE_URL="mysql://u:p@db/roster")

    def test_default_rank_is_normalized(self) -> None:
        self.assertEqual(Settings(DEFAULT_RANK_ABBREVIATION=" rec ").DEFAULT_RANK_ABBREVIATION, "REC")

    def test_login_path_must_be_absolute(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(LOGIN_PATH="login")

    def test_jwt_expiry_bounds(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(JWT_EXPIRE_MINUTES=0)
        with self.assertRaises(ValidationError):
            Settings(JWT_EXPIRE_MINUTES=10081)

    def test_login_throttle_must_be_positive(self) -> None:
        self.assertEqual(Settings(LOGIN_WINDOW_MINUTES=5).LOGIN_WINDOW_MINUTES, 5)
        with self.assertRaises(ValidationError):
            Settings(LOGIN_MAX_ATTEMPTS_PER_IP=0)
