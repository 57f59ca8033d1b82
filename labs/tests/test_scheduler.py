"""Test cases for the background job registration."""
from datetime import datetime, timedelta
from io import StringIO
from unittest.mock import MagicMock, patch

from apscheduler.schedulers.background import BackgroundScheduler
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.utils import timezone

from labs.models import PasswordResetToken
from labs.scheduler import LabScheduler, purge_reset_tokens
from labs.tests.factories import PasswordResetTokenFactory


class TestLabScheduler(TestCase):

    def job_ids(self):
        scheduler = LabScheduler().configure(BackgroundScheduler())
        return sorted(job.id for job in scheduler.get_jobs())

    def test_default_jobs(self):
        self.assertEqual(self.job_ids(), ['job_cleanup', 'reset_token_purge'])

    @override_settings(EQUIPMENT_SWEEP_INTERVAL_MINUTES=15)
    def test_sweep_job_when_interval_set(self):
        self.assertEqual(self.job_ids(), ['equipment_sweep', 'job_cleanup', 'reset_token_purge'])

    def test_status_before_start(self):
        self.assertEqual(LabScheduler().get_status(), {'running': False, 'jobs': []})

    def test_purge_job(self):
        PasswordResetTokenFactory(expires_at=timezone.now() - timedelta(hours=1))
        purge_reset_tokens()
        self.assertFalse(PasswordResetToken.objects.exists())


class TestRunSchedulerCommand(TestCase):

    def fake_scheduler(self, starts=True):
        fake = MagicMock()
        fake.started = False

        def start():
            fake.started = starts

        fake.start.side_effect = start
        fake.get_status.return_value = {
            'running': starts,
            'jobs': [{'id': 'reset_token_purge', 'name': 'purge_reset_tokens',
                      'next_run': datetime(2025, 1, 6, 9, 0)}],
        }
        return fake

    @patch('labs.management.commands.run_scheduler.time.sleep', side_effect=KeyboardInterrupt)
    def test_runs_until_interrupted(self, mock_sleep):
        fake = self.fake_scheduler()
        out = StringIO()
        with patch('labs.scheduler.lab_scheduler', fake):
            call_command('run_scheduler', stdout=out)

        fake.start.assert_called_once()
        fake.stop.assert_called_once()
        self.assertIn('purge_reset_tokens - Next: 2025-01-06 09:00:00', out.getvalue())
        self.assertIn('Scheduler stopped', out.getvalue())

    def test_start_failure_raises(self):
        fake = self.fake_scheduler(starts=False)
        with patch('labs.scheduler.lab_scheduler', fake):
            with self.assertRaises(CommandError):
                call_command('run_scheduler', stdout=StringIO())
        fake.stop.assert_not_called()
