"""Test cases for LabWatch models."""
from datetime import datetime, timedelta, timezone as dt_timezone

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from labs.models import Schedule, UserProfile
from labs.tests.factories import (
    AlertFactory, AttendanceLogFactory, LaboratoryFactory, ScheduleFactory,
    UserFactory, UserProfileFactory
)
from labs.utils.timezone_utils import day_name, local_day_of_week, local_hhmm


class TestUserProfile(TestCase):

    def test_profile_created_with_user(self):
        user = User.objects.create_user(username='newuser', password='password123')
        self.assertEqual(user.userprofile.role, UserProfile.ROLE_FACULTY)
        self.assertIsNone(user.userprofile.biometric_id)

    def test_blank_biometric_ids_do_not_collide(self):
        first = UserProfileFactory(biometric_id='')
        second = UserProfileFactory(biometric_id='')
        self.assertIsNone(first.biometric_id)
        self.assertIsNone(second.biometric_id)

    def test_display_name_fallbacks(self):
        user = UserFactory(first_name='Ana', last_name='Cruz')
        profile = user.userprofile
        profile.full_name = ''
        self.assertEqual(profile.display_name, 'Ana Cruz')

        profile.full_name = 'Prof. Ana Cruz'
        self.assertEqual(profile.display_name, 'Prof. Ana Cruz')

    def test_role_for(self):
        self.assertIsNone(UserProfile.role_for(None))
        self.assertEqual(UserProfile.role_for(UserFactory(is_superuser=True)), 'admin')
        self.assertEqual(UserProfile.role_for(UserProfileFactory(role='custodian').user), 'custodian')


class TestSchedule(TestCase):

    def test_invalid_time_rejected(self):
        with self.assertRaises(ValidationError):
            ScheduleFactory(start_time='7:30')

    def test_end_before_start_rejected(self):
        with self.assertRaises(ValidationError):
            ScheduleFactory(start_time='10:00', end_time='09:00')

    def test_recurring_needs_day(self):
        with self.assertRaises(ValidationError):
            ScheduleFactory(day_of_week=None)

    def test_one_time_needs_date(self):
        with self.assertRaises(ValidationError):
            ScheduleFactory(is_recurring=False, day_of_week=None, start_date=None)

    def test_matching_recurring(self):
        schedule = ScheduleFactory(day_of_week=1, start_time='07:30', end_time='09:00')
        monday = timezone.make_aware(datetime(2025, 1, 6, 9, 0))

        found = Schedule.objects.matching(schedule.user, schedule.laboratory_id, monday)
        self.assertEqual(list(found), [schedule])

        tuesday = monday + timedelta(days=1)
        found = Schedule.objects.matching(schedule.user, schedule.laboratory_id, tuesday)
        self.assertEqual(list(found), [])

    def test_matching_one_time_window(self):
        start = timezone.make_aware(datetime(2025, 1, 9, 16, 0))
        schedule = ScheduleFactory(is_recurring=False, day_of_week=None, start_date=start,
                                   start_time='14:00', end_time='16:00')

        inside = timezone.make_aware(datetime(2025, 1, 10, 15, 0))
        outside = timezone.make_aware(datetime(2025, 1, 11, 15, 0))
        self.assertEqual(
            list(Schedule.objects.matching(schedule.user, schedule.laboratory_id, inside)), [schedule]
        )
        self.assertEqual(
            list(Schedule.objects.matching(schedule.user, schedule.laboratory_id, outside)), []
        )
        self.assertEqual(
            list(Schedule.objects.matching(schedule.user, schedule.laboratory_id, outside, window_hours=48)),
            [schedule]
        )


class TestAttendanceLog(TestCase):

    def test_open_and_duration(self):
        log = AttendanceLogFactory()
        self.assertTrue(log.is_open)
        self.assertIsNone(log.duration)

        log.check_out_time = log.check_in_time + timedelta(minutes=90)
        self.assertFalse(log.is_open)
        self.assertEqual(log.duration, timedelta(minutes=90))


class TestAlert(TestCase):

    def test_resolve(self):
        alert = AlertFactory(laboratory=LaboratoryFactory())
        resolver = UserFactory()
        alert.resolve(resolver)

        alert.refresh_from_db()
        self.assertTrue(alert.resolved)
        self.assertEqual(alert.resolved_by, resolver)
        self.assertIsNotNone(alert.resolved_at)


class TestTimezoneUtils(TestCase):

    def test_sunday_is_zero(self):
        sunday = timezone.make_aware(datetime(2025, 1, 5, 23, 59))
        self.assertEqual(local_day_of_week(sunday), 0)
        self.assertEqual(local_day_of_week(sunday + timedelta(minutes=1)), 1)

    def test_local_time_used(self):
        # 16:30 UTC is 00:30 the next day in Manila
        moment = datetime(2025, 1, 5, 16, 30, tzinfo=dt_timezone.utc)
        self.assertEqual(local_hhmm(moment), '00:30')
        self.assertEqual(local_day_of_week(moment), 1)

    def test_day_name(self):
        self.assertEqual(day_name(0), 'Sunday')
        self.assertIsNone(day_name(None))
