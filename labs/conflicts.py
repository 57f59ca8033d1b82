# labs/conflicts.py
"""
Schedule conflict detection for LabWatch.

Two schedules of the same laboratory collide when they fall on the same day
and their "HH:MM" windows overlap. Recurring schedules are compared with
recurring schedules on the same day of week; one-time schedules with one-time
schedules on exactly the same start date. Interval ends are inclusive, so a
class ending at 09:00 collides with one starting at 09:00.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging

from django.conf import settings
from django.db.models import Q

from .exceptions import Conflict
from .models import Schedule
from .utils.timezone_utils import day_name

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = 'Schedule conflict detected for the specified room and time'


def _minutes(hhmm):
    hours, minutes = hhmm.split(':')
    return int(hours) * 60 + int(minutes)


class ScheduleConflict:
    """Represents a schedule conflict with details."""

    def __init__(self, schedule1, schedule2):
        self.schedule1 = schedule1
        self.schedule2 = schedule2
        self.conflict_type = 'recurring' if schedule1.is_recurring else 'one_time'
        self.overlap_start = max(schedule1.start_time, schedule2.start_time)
        self.overlap_end = min(schedule1.end_time, schedule2.end_time)
        self.overlap_minutes = _minutes(self.overlap_end) - _minutes(self.overlap_start)

    def __str__(self):
        return (f"Conflict between schedule {self.schedule1.pk} and schedule {self.schedule2.pk} "
                f"from {self.overlap_start} to {self.overlap_end}")

    @staticmethod
    def _describe(schedule):
        return {
            'id': schedule.pk,
            'courseCode': schedule.course_code,
            'subject': schedule.subject,
            'userId': schedule.user_id,
            'dayOfWeek': schedule.day_of_week,
            'day': day_name(schedule.day_of_week),
            'startDate': schedule.start_date.isoformat() if schedule.start_date else None,
            'startTime': schedule.start_time,
            'endTime': schedule.end_time,
        }

    def to_dict(self):
        """Convert conflict to dictionary for JSON serialization."""
        return {
            'schedule1': self._describe(self.schedule1),
            'schedule2': self._describe(self.schedule2),
            'conflictType': self.conflict_type,
            'overlapStart': self.overlap_start,
            'overlapEnd': self.overlap_end,
            'overlapMinutes': self.overlap_minutes,
        }


class ScheduleConflictDetector:
    """Detects overlapping schedules within a laboratory."""

    @staticmethod
    def overlapping_q(start_time, end_time):
        """
        Inclusive overlap against a candidate window.

        Matches rows where the candidate starts inside the row, ends inside
        the row, or fully contains the row.
        """
        return (
            Q(start_time__lte=start_time, end_time__gte=start_time) |
            Q(start_time__lte=end_time, end_time__gte=end_time) |
            Q(start_time__gte=start_time, end_time__lte=end_time)
        )

    @staticmethod
    def check_schedule_conflicts(schedule):
        """
        Check a (possibly unsaved) schedule against the other rows of its lab.

        Args:
            schedule: Schedule instance carrying the candidate values

        Returns:
            List of ScheduleConflict instances
        """
        candidates = Schedule.objects.filter(
            laboratory_id=schedule.laboratory_id,
            is_recurring=schedule.is_recurring,
        )
        if schedule.is_recurring:
            candidates = candidates.filter(day_of_week=schedule.day_of_week)
        else:
            candidates = candidates.filter(start_date=schedule.start_date)

        if schedule.pk:
            candidates = candidates.exclude(pk=schedule.pk)

        overlapping = candidates.filter(
            ScheduleConflictDetector.overlapping_q(schedule.start_time, schedule.end_time)
        ).order_by('id')

        return [ScheduleConflict(schedule, other) for other in overlapping]

    @staticmethod
    def ensure_no_conflict(schedule, creating=False):
        """
        Raise Conflict when the schedule overlaps another in its lab.

        Creation skips the check unless SCHEDULE_CONFLICT_CHECK_ON_CREATE is
        enabled; updates are always checked.
        """
        if creating and not getattr(settings, 'SCHEDULE_CONFLICT_CHECK_ON_CREATE', False):
            return

        conflicts = ScheduleConflictDetector.check_schedule_conflicts(schedule)
        if conflicts:
            logger.info(
                f"Rejected schedule {schedule.pk or 'new'} in lab {schedule.laboratory_id}: "
                f"{len(conflicts)} conflict(s), first {conflicts[0]}"
            )
            raise Conflict(CONFLICT_MESSAGE, details={
                'conflicts': [conflict.to_dict() for conflict in conflicts],
            })

    @staticmethod
    def find_lab_conflicts(laboratory):
        """
        Every pair of colliding schedules in a laboratory.

        Useful for auditing rows that were created while the create-time
        check was disabled.
        """
        schedules = list(Schedule.objects.filter(laboratory=laboratory).order_by('id'))
        conflicts = []

        for i, first in enumerate(schedules):
            for second in schedules[i + 1:]:
                if first.is_recurring != second.is_recurring:
                    continue
                if first.is_recurring and first.day_of_week != second.day_of_week:
                    continue
                if not first.is_recurring and first.start_date != second.start_date:
                    continue
                if first.start_time <= second.end_time and second.start_time <= first.end_time:
                    conflicts.append(ScheduleConflict(first, second))

        return conflicts

    @staticmethod
    def conflict_report(laboratory):
        """Summary of the schedule conflicts in a laboratory."""
        conflicts = ScheduleConflictDetector.find_lab_conflicts(laboratory)
        return {
            'labId': laboratory.pk,
            'labName': laboratory.name,
            'totalConflicts': len(conflicts),
            'conflicts': [conflict.to_dict() for conflict in conflicts],
        }
