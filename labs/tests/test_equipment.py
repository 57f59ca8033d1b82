"""Test cases for equipment detection sweeps and alerts."""
import pytest

from django.core.management import call_command
from django.core.management.base import CommandError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from labs.equipment_service import EquipmentDetectionService, random_floor_position
from labs.models import Alert
from labs.tests.factories import (
    AdminProfileFactory, CustodianProfileFactory, EquipmentFactory, LaboratoryFactory,
    UserProfileFactory
)


class ScriptedRandom:
    """Stand-in for random.Random that replays fixed draws."""

    def __init__(self, draws, choices):
        self.draws = list(draws)
        self.choices = list(choices)

    def random(self):
        return self.draws.pop(0)

    def choice(self, options):
        value = self.choices.pop(0)
        assert value in options
        return value


@pytest.mark.django_db
class TestEquipmentDetectionService:
    """Test the sweep itself."""

    def setup_method(self):
        self.lab = LaboratoryFactory()
        self.monitor = EquipmentFactory(laboratory=self.lab, equipment_type='monitor')
        self.keyboard = EquipmentFactory(laboratory=self.lab, equipment_type='keyboard')
        self.mouse = EquipmentFactory(laboratory=self.lab, equipment_type='mouse')

    def test_sweep_changes_selected_items(self):
        rng = ScriptedRandom(draws=[0.05, 0.5, 0.01], choices=['missing', 'damaged'])
        results = EquipmentDetectionService(rng=rng).sweep(change_probability=0.1)

        assert results['scanned'] == 3
        assert results['touched'] == 2
        assert results['changed'] == 2
        assert results['changes'] == [
            {'equipmentId': self.monitor.id, 'labId': self.lab.id, 'from': 'present', 'to': 'missing'},
            {'equipmentId': self.mouse.id, 'labId': self.lab.id, 'from': 'present', 'to': 'damaged'},
        ]

        self.keyboard.refresh_from_db()
        assert self.keyboard.status == 'present'

    def test_sweep_raises_alerts(self):
        rng = ScriptedRandom(draws=[0.0, 0.0, 0.0], choices=['missing', 'damaged', 'present'])
        EquipmentDetectionService(rng=rng).sweep(change_probability=0.1)

        alerts = Alert.objects.filter(laboratory=self.lab).order_by('id')
        assert [(a.alert_type, a.severity) for a in alerts] == [
            ('equipment_missing', 'high'),
            ('equipment_damaged', 'medium'),
        ]
        assert alerts[0].data == {'equipmentId': self.monitor.id, 'previousStatus': 'present'}

    def test_unchanged_status_counts_as_touched(self):
        rng = ScriptedRandom(draws=[0.0, 0.9, 0.9], choices=['present'])
        results = EquipmentDetectionService(rng=rng).sweep(change_probability=0.1)

        assert results['touched'] == 1
        assert results['changed'] == 0
        assert not Alert.objects.exists()

    def test_sweep_limited_to_lab(self):
        EquipmentFactory()
        rng = ScriptedRandom(draws=[0.9, 0.9, 0.9], choices=[])
        results = EquipmentDetectionService(rng=rng).sweep(laboratory=self.lab, change_probability=0.1)
        assert results['scanned'] == 3

    def test_repeat_missing_does_not_duplicate_alert(self):
        self.monitor.status = 'missing'
        self.monitor.save()
        self.monitor.save()
        assert Alert.objects.filter(alert_type='equipment_missing').count() == 1

    def test_random_floor_position(self):
        rng = ScriptedRandom(draws=[0.0, 0.5], choices=[])
        assert random_floor_position(rng) == (50.0, 200.0)


@pytest.mark.django_db
class TestEquipmentSweepCommand:

    def test_command_runs(self):
        EquipmentFactory()
        call_command('run_equipment_sweep', '--probability', '1.0', '--seed', '7')
        assert Alert.objects.count() <= 1

    def test_unknown_lab(self):
        with pytest.raises(CommandError):
            call_command('run_equipment_sweep', '--lab', '999999')


@pytest.mark.django_db
class TestEquipmentSweepAPI:
    """Test the sweep endpoint."""

    def setup_method(self):
        self.client = APIClient()
        self.lab = LaboratoryFactory()
        EquipmentFactory(laboratory=self.lab)

    def test_custodian_can_sweep_lab(self):
        self.client.force_login(CustodianProfileFactory().user)
        response = self.client.post(reverse('api:equipment-sweep'), {'labId': self.lab.id}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['scanned'] == 1

    def test_admin_sweep_unknown_lab(self):
        self.client.force_login(AdminProfileFactory().user)
        response = self.client.post(reverse('api:equipment-sweep'), {'labId': 999999}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Laboratory not found'

    def test_faculty_cannot_sweep(self):
        self.client.force_login(UserProfileFactory().user)
        response = self.client.post(reverse('api:equipment-sweep'), {}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN
