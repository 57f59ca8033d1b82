# labs/apps.py
"""
App configuration for the labs app.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.apps import AppConfig
import logging
import os
import sys

logger = logging.getLogger(__name__)


class LabsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'labs'
    verbose_name = 'LabWatch'

    def ready(self):
        """Initialize the app when Django starts."""
        import labs.signals  # noqa: F401

        from django.conf import settings
        if not getattr(settings, 'SCHEDULER_AUTOSTART', True):
            return

        # Only the runserver child process (or a --noreload server) runs jobs
        if not (os.environ.get('RUN_MAIN') == 'true' or
                ('runserver' in sys.argv and '--noreload' in sys.argv)):
            return

        if any(cmd in sys.argv for cmd in ['migrate', 'makemigrations', 'test', 'shell']):
            return

        from threading import Timer
        from .scheduler import start_scheduler

        def delayed_start():
            try:
                start_scheduler()
            except Exception as e:
                logger.info(f"Scheduler not started: {e}")

        # Defer startup so app initialization does not touch the database
        Timer(3.0, delayed_start).start()
