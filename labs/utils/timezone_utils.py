# labs/utils/timezone_utils.py
"""
Timezone utilities for LabWatch.

Schedules store wall-clock "HH:MM" strings and a Sunday-based day of week,
so every comparison against "now" goes through the helpers below, which
read the moment in the configured local time zone.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.utils import timezone

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


def local_day_of_week(moment=None):
    """Day of week with 0 = Sunday, in local time."""
    local = timezone.localtime(moment or timezone.now())
    return (local.weekday() + 1) % 7


def local_hhmm(moment=None):
    """Zero-padded "HH:MM" for the moment in local time."""
    local = timezone.localtime(moment or timezone.now())
    return local.strftime('%H:%M')


def day_name(day_of_week):
    if day_of_week is None:
        return None
    return DAY_NAMES[day_of_week]
