import importlib
import os
from unittest.mock import patch

from django.test import SimpleTestCase
from review_service import settings as project_settings


class ReviewerSettingsTest(SimpleTestCase):

    def tearDown(self):
        importlib.reload(project_settings)

    def test_reviewers_per_pr_defaults_to_two(self):
        with patch.dict(os.environ):
            os.environ.pop('REVIEWERS_PER_PR', None)
            importlib.reload(project_settings)

        self.assertEqual(project_settings.REVIEWERS_PER_PR, 2)

    def test_reviewers_per_pr_below_one_rejected(self):
        """Нулевое или отрицательное число ревьюверов не принимается"""
        for value in ('0', '-1'):
            with self.subTest(value=value):
                with patch.dict(os.environ, {'REVIEWERS_PER_PR': value}):
                    with self.assertRaises(ValueError):
                        importlib.reload(project_settings)

    def test_invalid_db_engine_rejected(self):
        with patch.dict(os.environ, {'DB_ENGINE': 'mysql'}):
            with self.assertRaises(ValueError):
                importlib.reload(project_settings)
