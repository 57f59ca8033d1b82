# labs/management/commands/purge_reset_tokens.py
"""
Management command to delete expired and used password reset tokens.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.core.management.base import BaseCommand
from django.db.models import Q
from django.utils import timezone

from labs.models import PasswordResetToken


class Command(BaseCommand):
    help = 'Delete expired and used password reset tokens'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many tokens would be deleted without deleting them',
        )

    def handle(self, *args, **options):
        if options['dry_run']:
            count = PasswordResetToken.objects.filter(
                Q(expires_at__lte=timezone.now()) | Q(is_used=True)
            ).count()
            self.stdout.write(f'Would delete {count} token(s)')
            return

        deleted = PasswordResetToken.objects.purge_expired()
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} token(s)'))
