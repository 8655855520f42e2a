"""Tests for settings-driven thresholds."""

from __future__ import annotations

import os
import unittest
from datetime import timedelta
from unittest import mock

from pydantic import ValidationError

from poligraph.config import Settings
from poligraph.identity.types import AUTO_MATCH_THRESHOLD, BIRTHDATE_TOLERANCE, REVIEW_THRESHOLD


class SettingsTests(unittest.TestCase):
    def test_defaults_match_resolver_constants(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            thresholds = Settings(_env_file=None).identity_thresholds()

        self.assertEqual(thresholds.auto_match, AUTO_MATCH_THRESHOLD)
        self.assertEqual(thresholds.review, REVIEW_THRESHOLD)
        self.assertEqual(thresholds.birthdate_tolerance, BIRTHDATE_TOLERANCE)

    def test_environment_overrides_thresholds(self) -> None:
        env = {
            "IDENTITY_AUTO_MATCH_THRESHOLD": "0.9",
            "IDENTITY_REVIEW_THRESHOLD": "0.6",
            "IDENTITY_BIRTHDATE_TOLERANCE_DAYS": "2",
            "AFFAIR_DATE_WINDOW_DAYS": "45",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        thresholds = settings.identity_thresholds()
        self.assertEqual(thresholds.auto_match, 0.9)
        self.assertEqual(thresholds.review, 0.6)
        self.assertEqual(thresholds.birthdate_tolerance, timedelta(days=2))
        self.assertEqual(settings.affair_date_window_days, 45)

    def test_out_of_range_threshold_is_rejected(self) -> None:
        with mock.patch.dict(os.environ, {"IDENTITY_REVIEW_THRESHOLD": "1.5"}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)

    def test_inverted_thresholds_fail_when_built(self) -> None:
        env = {"IDENTITY_AUTO_MATCH_THRESHOLD": "0.5", "IDENTITY_REVIEW_THRESHOLD": "0.8"}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        with self.assertRaises(ValueError):
            settings.identity_thresholds()


if __name__ == "__main__":
    unittest.main()
