# labs/signals.py
"""
Django signals for LabWatch.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver
from django.contrib.auth.models import User

from .models import UserProfile, Equipment, Alert

logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """Create UserProfile when User is created."""
    if created:
        UserProfile.objects.get_or_create(
            user=instance,
            defaults={'full_name': instance.get_full_name()}
        )


@receiver(pre_save, sender=Equipment)
def remember_equipment_status(sender, instance, **kwargs):
    """Keep the stored status so post_save can tell what changed."""
    if instance.pk:
        instance._previous_status = (
            Equipment.objects.filter(pk=instance.pk).values_list('status', flat=True).first()
        )
    else:
        instance._previous_status = None


@receiver(post_save, sender=Equipment)
def raise_equipment_alerts(sender, instance, created, **kwargs):
    """Raise an alert when equipment goes missing or gets damaged."""
    previous = getattr(instance, '_previous_status', None)
    if created or previous == instance.status:
        return

    station = instance.assigned_station or 'unassigned station'
    label = f"{instance.get_equipment_type_display()} {instance.serial_number or instance.pk}"

    if instance.status == 'missing':
        Alert.objects.create(
            alert_type='equipment_missing',
            laboratory=instance.laboratory,
            severity='high',
            title='Equipment missing',
            message=f"{label} at {station} in {instance.laboratory.name} was not detected",
            data={'equipmentId': instance.pk, 'previousStatus': previous},
        )
        logger.warning(f"Equipment {instance.pk} reported missing in lab {instance.laboratory_id}")
    elif instance.status == 'damaged':
        Alert.objects.create(
            alert_type='equipment_damaged',
            laboratory=instance.laboratory,
            severity='medium',
            title='Equipment damaged',
            message=f"{label} at {station} in {instance.laboratory.name} was reported damaged",
            data={'equipmentId': instance.pk, 'previousStatus': previous},
        )
        logger.warning(f"Equipment {instance.pk} reported damaged in lab {instance.laboratory_id}")
