# labs/scheduler.py
"""
Background scheduler for LabWatch housekeeping jobs.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from django_apscheduler.jobstores import DjangoJobStore
from django.utils import timezone
from django.conf import settings


logger = logging.getLogger(__name__)


def purge_reset_tokens():
    """Delete expired and used password reset tokens."""
    try:
        from .models import PasswordResetToken

        deleted = PasswordResetToken.objects.purge_expired()
        if deleted > 0:
            logger.info(f"Purged {deleted} expired or used password reset tokens")

    except Exception as e:
        logger.error(f"Error purging password reset tokens: {e}")


def run_equipment_sweep():
    """Run one simulated equipment detection sweep."""
    try:
        from .equipment_service import equipment_detection_service

        equipment_detection_service.sweep()

    except Exception as e:
        logger.error(f"Error during scheduled equipment sweep: {e}")


def cleanup_old_job_executions(max_age_days=7):
    """Clean up old job execution records."""
    try:
        from datetime import timedelta
        from django_apscheduler.models import DjangoJobExecution

        cutoff_date = timezone.now() - timedelta(days=max_age_days)
        deleted_count = DjangoJobExecution.objects.filter(
            run_time__lt=cutoff_date
        ).delete()[0]

        if deleted_count > 0:
            logger.info(f"Cleaned up {deleted_count} old job execution records")

    except Exception as e:
        logger.error(f"Error cleaning up job executions: {e}")


class LabScheduler:
    """Background scheduler for LabWatch housekeeping."""

    def __init__(self):
        self.scheduler = None
        self.started = False

    def configure(self, scheduler):
        """Register the LabWatch jobs on a scheduler."""
        scheduler.add_job(
            purge_reset_tokens,
            'interval',
            hours=1,
            id='reset_token_purge',
            max_instances=1,
            replace_existing=True,
        )

        sweep_minutes = getattr(settings, 'EQUIPMENT_SWEEP_INTERVAL_MINUTES', 0)
        if sweep_minutes > 0:
            scheduler.add_job(
                run_equipment_sweep,
                'interval',
                minutes=sweep_minutes,
                id='equipment_sweep',
                max_instances=1,
                replace_existing=True,
                misfire_grace_time=60,
            )

        scheduler.add_job(
            cleanup_old_job_executions,
            'interval',
            hours=24,
            id='job_cleanup',
            max_instances=1,
            replace_existing=True,
        )
        return scheduler

    def start(self):
        """Start the scheduler."""
        if self.started:
            return

        try:
            self.scheduler = BackgroundScheduler(timezone=str(timezone.get_current_timezone()))
            self.scheduler.add_jobstore(DjangoJobStore(), "default")
            self.configure(self.scheduler)

            self.scheduler.start()
            self.started = True
            logger.info("LabWatch scheduler started successfully")

        except Exception as e:
            logger.error(f"Failed to start LabWatch scheduler: {e}")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            logger.info("LabWatch scheduler stopped")

    def get_status(self):
        """Get scheduler status."""
        if not self.scheduler:
            return {'running': False, 'jobs': []}

        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                'id': job.id,
                'name': job.name or job.id,
                'next_run': job.next_run_time,
            })

        return {
            'running': self.started and self.scheduler.running,
            'jobs': jobs
        }


# Global scheduler instance
lab_scheduler = LabScheduler()


def start_scheduler():
    """Start the global scheduler."""
    lab_scheduler.start()


def stop_scheduler():
    """Stop the global scheduler."""
    lab_scheduler.stop()
