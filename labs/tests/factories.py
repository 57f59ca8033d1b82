"""Test factories for creating test data."""
import factory
from django.contrib.auth.models import User
from django.utils import timezone

from labs.models import (
    UserProfile, Laboratory, Equipment, Schedule, AttendanceLog, Alert, PasswordResetToken
)


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda obj: f"{obj.username}@test.com")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True
    password = factory.django.Password('password123')


class UserProfileFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = UserProfile
        django_get_or_create = ('user',)

    user = factory.SubFactory(UserFactory)
    role = 'faculty'
    full_name = factory.Faker('name')
    department = 'College of Computing Studies'
    biometric_id = factory.Sequence(lambda n: f"BIO{n + 100:03d}")

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override creation to handle existing profiles from signals."""
        user = kwargs.get('user')
        if user:
            try:
                profile = model_class.objects.get(user=user)
                for key, value in kwargs.items():
                    if key != 'user':
                        setattr(profile, key, value)
                profile.save()
                return profile
            except model_class.DoesNotExist:
                pass

        return super()._create(model_class, *args, **kwargs)


class AdminProfileFactory(UserProfileFactory):
    role = 'admin'


class CustodianProfileFactory(UserProfileFactory):
    role = 'custodian'


class LaboratoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Laboratory

    name = factory.Sequence(lambda n: f"Computer Laboratory {n}")
    building = 'Engineering Building'
    room_number = factory.Sequence(lambda n: f"E{300 + n}")
    capacity = 40
    status = 'active'


class EquipmentFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Equipment

    laboratory = factory.SubFactory(LaboratoryFactory)
    equipment_type = 'monitor'
    serial_number = factory.Sequence(lambda n: f"MON-{n:04d}")
    brand = 'Dell'
    model = 'P2419H'
    status = 'present'
    assigned_station = factory.Sequence(lambda n: f"Station {n}")
    last_detected = factory.LazyFunction(timezone.now)


class ScheduleFactory(factory.django.DjangoModelFactory):
    """Recurring Monday 07:30-09:00 class by default."""
    class Meta:
        model = Schedule

    laboratory = factory.SubFactory(LaboratoryFactory)
    user = factory.LazyAttribute(lambda obj: UserProfileFactory().user)
    is_recurring = True
    day_of_week = 1
    start_time = '07:30'
    end_time = '09:00'
    course_code = 'CS121'
    section = 'BSCS 1A'
    subject = 'Computer Programming 1'


class AttendanceLogFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AttendanceLog

    user = factory.LazyAttribute(lambda obj: UserProfileFactory().user)
    laboratory = factory.SubFactory(LaboratoryFactory)
    check_in_time = factory.LazyFunction(timezone.now)
    verification_method = 'biometric'


class AlertFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Alert

    alert_type = 'equipment_missing'
    laboratory = factory.SubFactory(LaboratoryFactory)
    severity = 'high'
    title = 'Equipment missing'
    message = factory.Faker('sentence')


class PasswordResetTokenFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PasswordResetToken

    user = factory.SubFactory(UserFactory)
