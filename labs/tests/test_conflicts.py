"""Test cases for schedule conflict detection."""
import pytest
from datetime import datetime

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from labs.conflicts import CONFLICT_MESSAGE, ScheduleConflictDetector
from labs.exceptions import Conflict
from labs.models import Schedule
from labs.tests.factories import (
    AdminProfileFactory, LaboratoryFactory, ScheduleFactory, UserProfileFactory
)


class TestScheduleConflictDetection(TestCase):
    """Test schedule overlap rules."""

    def setUp(self):
        self.lab = LaboratoryFactory()
        self.existing = ScheduleFactory(laboratory=self.lab, day_of_week=1,
                                        start_time='07:30', end_time='09:00')

    def candidate(self, **kwargs):
        values = {
            'laboratory': self.lab,
            'user': self.existing.user,
            'is_recurring': True,
            'day_of_week': 1,
            'start_time': '08:00',
            'end_time': '10:00',
        }
        values.update(kwargs)
        return Schedule(**values)

    def assertConflicts(self, schedule, expected=1):
        conflicts = ScheduleConflictDetector.check_schedule_conflicts(schedule)
        self.assertEqual(len(conflicts), expected)
        return conflicts

    def test_end_inside_existing(self):
        self.assertConflicts(self.candidate(start_time='07:00', end_time='08:00'))

    def test_start_inside_existing(self):
        conflicts = self.assertConflicts(self.candidate(start_time='08:30', end_time='10:00'))
        self.assertEqual(conflicts[0].overlap_start, '08:30')
        self.assertEqual(conflicts[0].overlap_end, '09:00')
        self.assertEqual(conflicts[0].overlap_minutes, 30)

    def test_candidate_contains_existing(self):
        self.assertConflicts(self.candidate(start_time='07:00', end_time='10:00'))

    def test_candidate_inside_existing(self):
        self.assertConflicts(self.candidate(start_time='07:45', end_time='08:15'))

    def test_touching_endpoints_conflict(self):
        """A class starting when another ends still collides."""
        self.assertConflicts(self.candidate(start_time='09:00', end_time='12:00'))
        self.assertConflicts(self.candidate(start_time='06:00', end_time='07:30'))

    def test_no_conflict_different_times(self):
        self.assertConflicts(self.candidate(start_time='09:01', end_time='12:00'), expected=0)

    def test_no_conflict_different_day(self):
        self.assertConflicts(self.candidate(day_of_week=2), expected=0)

    def test_no_conflict_different_lab(self):
        self.assertConflicts(self.candidate(laboratory=LaboratoryFactory()), expected=0)

    def test_recurring_and_one_time_never_compared(self):
        one_time = self.candidate(
            is_recurring=False,
            day_of_week=None,
            start_date=timezone.make_aware(datetime(2025, 1, 6, 0, 0)),
        )
        self.assertConflicts(one_time, expected=0)

    def test_one_time_same_date_conflicts(self):
        date = timezone.make_aware(datetime(2025, 2, 3, 0, 0))
        ScheduleFactory(laboratory=self.lab, is_recurring=False, day_of_week=None,
                        start_date=date, start_time='13:00', end_time='15:00')

        self.assertConflicts(self.candidate(
            is_recurring=False, day_of_week=None, start_date=date,
            start_time='14:00', end_time='16:00'
        ))
        self.assertConflicts(self.candidate(
            is_recurring=False, day_of_week=None,
            start_date=timezone.make_aware(datetime(2025, 2, 4, 0, 0)),
            start_time='14:00', end_time='16:00'
        ), expected=0)

    def test_schedule_does_not_conflict_with_itself(self):
        self.existing.start_time = '08:00'
        self.assertConflicts(self.existing, expected=0)

    def test_ensure_no_conflict_raises(self):
        with self.assertRaises(Conflict) as ctx:
            ScheduleConflictDetector.ensure_no_conflict(self.candidate())
        self.assertEqual(ctx.exception.message, CONFLICT_MESSAGE)
        self.assertEqual(ctx.exception.details['conflicts'][0]['schedule2']['id'], self.existing.id)

    def test_create_skips_check_by_default(self):
        ScheduleConflictDetector.ensure_no_conflict(self.candidate(), creating=True)

    @override_settings(SCHEDULE_CONFLICT_CHECK_ON_CREATE=True)
    def test_create_check_can_be_enabled(self):
        with self.assertRaises(Conflict):
            ScheduleConflictDetector.ensure_no_conflict(self.candidate(), creating=True)

    def test_find_lab_conflicts(self):
        ScheduleFactory(laboratory=self.lab, day_of_week=1, start_time='09:00', end_time='12:00')
        ScheduleFactory(laboratory=self.lab, day_of_week=4, start_time='09:00', end_time='12:00')
        ScheduleFactory(laboratory=LaboratoryFactory(), day_of_week=1, start_time='08:00', end_time='09:00')

        conflicts = ScheduleConflictDetector.find_lab_conflicts(self.lab)
        self.assertEqual(len(conflicts), 1)
        self.assertEqual(conflicts[0].schedule1, self.existing)

        report = ScheduleConflictDetector.conflict_report(self.lab)
        self.assertEqual(report['totalConflicts'], 1)
        self.assertEqual(report['conflicts'][0]['schedule1']['day'], 'Monday')


@pytest.mark.django_db
class TestScheduleConflictAPI:
    """Overlap is rejected on update but not on create."""

    def setup_method(self):
        self.client = APIClient()
        self.admin = AdminProfileFactory()
        self.client.force_login(self.admin.user)

        self.lab = LaboratoryFactory()
        self.first_instructor = UserProfileFactory()
        self.second_instructor = UserProfileFactory()
        self.existing = ScheduleFactory(laboratory=self.lab, user=self.first_instructor.user,
                                        day_of_week=1, start_time='07:30', end_time='09:00')
        self.other = ScheduleFactory(laboratory=self.lab, user=self.second_instructor.user,
                                     day_of_week=1, start_time='10:00', end_time='11:00')

    def payload(self, **kwargs):
        data = {
            'labId': self.lab.id,
            'userId': self.second_instructor.user.id,
            'dayOfWeek': 1,
            'startTime': '08:00',
            'endTime': '10:00',
            'isRecurring': True,
        }
        data.update(kwargs)
        return data

    def test_overlapping_update_rejected(self):
        url = reverse('api:schedule-detail', args=[self.other.id])
        response = self.client.put(url, self.payload(), format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Schedule conflict detected for the specified room and time'
        self.other.refresh_from_db()
        assert self.other.start_time == '10:00'

    def test_touching_update_rejected(self):
        url = reverse('api:schedule-detail', args=[self.other.id])
        response = self.client.put(url, self.payload(startTime='09:00', endTime='10:00'), format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_partial_update_checked_against_stored_values(self):
        url = reverse('api:schedule-detail', args=[self.other.id])
        response = self.client.patch(url, {'startTime': '08:30'}, format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_non_overlapping_update_allowed(self):
        url = reverse('api:schedule-detail', args=[self.other.id])
        response = self.client.put(url, self.payload(startTime='13:00', endTime='15:00'), format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['startTime'] == '13:00'

    def test_update_keeping_own_slot_allowed(self):
        url = reverse('api:schedule-detail', args=[self.other.id])
        response = self.client.put(url, self.payload(startTime='10:00', endTime='11:30'), format='json')
        assert response.status_code == status.HTTP_200_OK

    def test_overlapping_create_accepted(self):
        """The same overlap that fails an update is accepted on creation."""
        response = self.client.post(reverse('api:schedule-list'), self.payload(), format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert Schedule.objects.filter(laboratory=self.lab, day_of_week=1).count() == 3

    @override_settings(SCHEDULE_CONFLICT_CHECK_ON_CREATE=True)
    def test_overlapping_create_rejected_when_enabled(self):
        response = self.client.post(reverse('api:schedule-list'), self.payload(), format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_conflict_report_endpoint(self):
        self.client.post(reverse('api:schedule-list'), self.payload(), format='json')
        url = reverse('api:laboratory-conflicts', args=[self.lab.id])
        response = self.client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['labId'] == self.lab.id
        assert response.data['totalConflicts'] == 2

    def test_conflict_report_admin_only(self):
        self.client.force_login(self.first_instructor.user)
        response = self.client.get(reverse('api:laboratory-conflicts', args=[self.lab.id]))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_overlong_course_code_rejected_on_create(self):
        response = self.client.post(reverse('api:schedule-list'),
                                    self.payload(startTime='13:00', endTime='15:00', courseCode='X' * 60),
                                    format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'courseCode' in response.data['details']
        assert Schedule.objects.filter(laboratory=self.lab).count() == 2

    def test_overlong_course_code_rejected_on_update(self):
        url = reverse('api:schedule-detail', args=[self.other.id])
        response = self.client.put(url, self.payload(startTime='13:00', endTime='15:00', courseCode='X' * 60),
                                   format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        self.other.refresh_from_db()
        assert self.other.start_time == '10:00'
