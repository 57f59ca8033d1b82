# labs/management/commands/run_equipment_sweep.py
"""
Management command to run a simulated equipment detection sweep.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import random

from django.core.management.base import BaseCommand, CommandError

from labs.equipment_service import EquipmentDetectionService
from labs.models import Laboratory


class Command(BaseCommand):
    help = 'Run one equipment detection sweep and raise alerts for missing or damaged items'

    def add_arguments(self, parser):
        parser.add_argument(
            '--lab',
            type=int,
            help='Only sweep the laboratory with this id',
        )
        parser.add_argument(
            '--probability',
            type=float,
            help='Chance of each item being re-detected (defaults to EQUIPMENT_SWEEP_CHANGE_PROBABILITY)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            help='Random seed for a reproducible sweep',
        )

    def handle(self, *args, **options):
        laboratory = None
        if options['lab'] is not None:
            try:
                laboratory = Laboratory.objects.get(pk=options['lab'])
            except Laboratory.DoesNotExist:
                raise CommandError(f"Laboratory {options['lab']} does not exist")

        service = EquipmentDetectionService(rng=random.Random(options['seed']))
        results = service.sweep(laboratory=laboratory, change_probability=options['probability'])

        self.stdout.write(f"Scanned: {results['scanned']}")
        self.stdout.write(f"Touched: {results['touched']}")
        for change in results['changes']:
            self.stdout.write(
                f"  equipment {change['equipmentId']} (lab {change['labId']}): "
                f"{change['from']} -> {change['to']}"
            )
        self.stdout.write(self.style.SUCCESS(f"Sweep complete, {results['changed']} status change(s)"))
