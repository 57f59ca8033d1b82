# labs/equipment_service.py
"""
Equipment detection for LabWatch.

There is no camera feed yet, so a detection sweep is simulated: each item has
a small chance of being reported with a random status. Status changes to
missing or damaged raise alerts through the Equipment signals.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging
import random
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Equipment

logger = logging.getLogger(__name__)

SWEEP_STATUSES = ['present', 'missing', 'damaged', 'maintenance']


def random_floor_position(rng=random):
    """Random (x, y) on the lab floor plan, x in [50, 450) and y in [50, 350)."""
    return rng.random() * 400 + 50, rng.random() * 300 + 50


class EquipmentDetectionService:
    """Runs simulated detection sweeps over the equipment inventory."""

    def __init__(self, rng=None):
        self.rng = rng or random.Random()

    def sweep(self, laboratory=None, change_probability: Optional[float] = None) -> Dict:
        """
        Run one detection sweep.

        Args:
            laboratory: limit the sweep to one laboratory
            change_probability: chance of each item being re-detected

        Returns:
            Dict with counts of scanned, touched and changed items
        """
        if change_probability is None:
            change_probability = getattr(settings, 'EQUIPMENT_SWEEP_CHANGE_PROBABILITY', 0.1)

        items = Equipment.objects.select_related('laboratory').order_by('id')
        if laboratory is not None:
            items = items.filter(laboratory=laboratory)

        now = timezone.now()
        results = {'scanned': 0, 'touched': 0, 'changed': 0, 'changes': []}

        with transaction.atomic():
            for item in items:
                results['scanned'] += 1
                if self.rng.random() >= change_probability:
                    continue

                previous = item.status
                item.status = self.rng.choice(SWEEP_STATUSES)
                item.last_detected = now
                item.save(update_fields=['status', 'last_detected', 'updated_at'])
                results['touched'] += 1

                if item.status != previous:
                    results['changed'] += 1
                    results['changes'].append({
                        'equipmentId': item.pk,
                        'labId': item.laboratory_id,
                        'from': previous,
                        'to': item.status,
                    })

        logger.info(
            f"Equipment sweep finished: {results['scanned']} scanned, "
            f"{results['touched']} touched, {results['changed']} changed"
        )
        return results


# Global service instance
equipment_detection_service = EquipmentDetectionService()
