# labs/attendance_service.py
"""
Attendance service for LabWatch.

A scanner posts a biometric id and a laboratory. The service resolves the
faculty member, finds the schedule that covers the current moment and opens
or closes their attendance session in that laboratory.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging
from datetime import datetime
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from .exceptions import Conflict, Forbidden, NotFound
from .models import AttendanceLog, Schedule, UserProfile
from .utils.timezone_utils import local_day_of_week, local_hhmm

logger = logging.getLogger(__name__)

CHECK_IN = 'check_in'
CHECK_OUT = 'check_out'


class AttendanceOutcome:
    """Result of one scan: who, which schedule, which row and what happened."""

    def __init__(self, profile, schedule, attendance, action, timestamp):
        self.profile = profile
        self.user = profile.user
        self.schedule = schedule
        self.attendance = attendance
        self.action = action
        self.timestamp = timestamp

    @property
    def unix_timestamp(self):
        return int(self.timestamp.timestamp())


class AttendanceService:
    """Service for matching scans to schedules and toggling sessions."""

    def resolve_faculty(self, biometric_id: str) -> UserProfile:
        """Look up the profile behind a biometric id and require faculty."""
        try:
            profile = UserProfile.objects.select_related('user').get(biometric_id=biometric_id)
        except UserProfile.DoesNotExist:
            raise NotFound('User not found with provided biometric ID')

        if profile.role != UserProfile.ROLE_FACULTY:
            logger.info(f"Rejected attendance scan from {profile.user.username}: role {profile.role}")
            raise Forbidden('Only faculty members can record attendance')

        return profile

    def find_schedule(self, user, laboratory_id, moment: Optional[datetime] = None) -> Schedule:
        """First schedule (lowest id) of the user in the lab that covers the moment."""
        moment = moment or timezone.now()
        schedule = (
            Schedule.objects.matching(user, laboratory_id, moment)
            .select_related('laboratory')
            .order_by('id')
            .first()
        )
        if schedule is None:
            raise Forbidden(
                'No scheduled class found for this faculty member in the specified laboratory at this time',
                details={
                    'currentDay': local_day_of_week(moment),
                    'currentTime': local_hhmm(moment),
                    'labId': laboratory_id,
                    'userId': user.pk,
                }
            )
        return schedule

    def record_scan(
        self,
        biometric_id: str,
        laboratory_id,
        verification_method: str = 'biometric',
        ip_address: Optional[str] = None,
    ) -> AttendanceOutcome:
        """
        Toggle the attendance session of a faculty member.

        Closes the open session for (user, lab) when one exists, otherwise
        opens a new one. The open row is locked for the duration of the
        transaction, and a concurrent second check-in trips the
        one_open_session_per_user_lab constraint and surfaces as Conflict.
        """
        profile = self.resolve_faculty(biometric_id)
        user = profile.user
        now = timezone.now()
        schedule = self.find_schedule(user, laboratory_id, now)

        with transaction.atomic():
            open_session = (
                AttendanceLog.objects.open_sessions()
                .select_for_update()
                .filter(user=user, laboratory_id=laboratory_id)
                .order_by('id')
                .first()
            )

            if open_session is not None:
                open_session.check_out_time = now
                open_session.save(update_fields=['check_out_time', 'updated_at'])
                attendance = open_session
                action = CHECK_OUT
            else:
                try:
                    with transaction.atomic():
                        attendance = AttendanceLog.objects.create(
                            user=user,
                            laboratory_id=laboratory_id,
                            schedule=schedule,
                            check_in_time=now,
                            verification_method=verification_method or 'biometric',
                            biometric_data=biometric_id,
                            ip_address=ip_address or 'unknown',
                            notes=(
                                f"Scheduled class: {schedule.course_code or 'N/A'} - "
                                f"{schedule.subject or 'N/A'}"
                            ),
                        )
                except IntegrityError:
                    logger.warning(
                        f"Concurrent check-in for {user.username} in lab {laboratory_id} rejected"
                    )
                    raise Conflict('An attendance session is already open for this laboratory')
                action = CHECK_IN

        logger.info(f"User {user.username} {action.replace('_', ' ')} lab {laboratory_id} (schedule {schedule.pk})")
        return AttendanceOutcome(profile, schedule, attendance, action, now)


def client_ip(request):
    """Client address, preferring the proxy supplied X-Forwarded-For."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR') or 'unknown'


# Global service instance
attendance_service = AttendanceService()
