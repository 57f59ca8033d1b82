# labs/management/commands/run_scheduler.py
"""
Management command that runs the LabWatch background jobs in the foreground.

Production servers such as gunicorn never start the scheduler, so run this
command as its own process (systemd unit, supervisor program or container).

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import signal
import time

from django.core.management.base import BaseCommand, CommandError

from labs import scheduler as lab_jobs


def _raise_interrupt(sig, frame):
    raise KeyboardInterrupt


class Command(BaseCommand):
    """
    Run the reset token purge, equipment sweep and job cleanup jobs.

    Usage:
        python manage.py run_scheduler
    """

    help = 'Run the LabWatch background scheduler until interrupted'

    def handle(self, *args, **options):
        lab_jobs.start_scheduler()
        if not lab_jobs.lab_scheduler.started:
            raise CommandError("Failed to start scheduler, see the labs.scheduler log")

        self.show_status()

        previous = signal.signal(signal.SIGTERM, _raise_interrupt)
        try:
            while lab_jobs.lab_scheduler.started:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stdout.write("Stopping scheduler...")
        finally:
            signal.signal(signal.SIGTERM, previous)
            lab_jobs.stop_scheduler()

        self.stdout.write(self.style.SUCCESS("Scheduler stopped"))

    def show_status(self):
        status = lab_jobs.lab_scheduler.get_status()
        self.stdout.write(self.style.SUCCESS("LabWatch scheduler running"))
        self.stdout.write(f"Active jobs: {len(status['jobs'])}")
        for job in status['jobs']:
            next_run = job['next_run'].strftime('%Y-%m-%d %H:%M:%S') if job['next_run'] else 'Not scheduled'
            self.stdout.write(f"  - {job['name']} - Next: {next_run}")
