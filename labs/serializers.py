# labs/serializers.py
"""
DRF serializers for LabWatch.

The JSON API speaks camelCase, so fields are declared with their API name and
mapped to model attributes with ``source``. Request validation raises the
errors from ``labs.exceptions`` so clients receive the same messages whether
a rule lives in a serializer or in a service.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import copy

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from rest_framework import serializers

from .exceptions import Conflict, ValidationError
from .models import (
    TIME_OF_DAY_PATTERN, Alert, AttendanceLog, Equipment, Laboratory, Schedule, UserProfile
)

MIN_PASSWORD_LENGTH = 8


def _missing(data, names):
    """True when any of the named keys is absent or empty in request data."""
    return any(data.get(name) in (None, '') for name in names)


def check_email(email):
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError('Invalid email format')


def check_password(password):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')


class UserAccountSerializer(serializers.ModelSerializer):
    """User account together with its LabWatch profile."""
    email = serializers.CharField(max_length=254, required=False)
    fullName = serializers.CharField(source='userprofile.full_name', max_length=200, required=False)
    role = serializers.ChoiceField(
        source='userprofile.role', choices=UserProfile.ROLE_CHOICES, required=False
    )
    department = serializers.CharField(
        source='userprofile.department', max_length=200, required=False, allow_null=True, allow_blank=True
    )
    biometricId = serializers.CharField(
        source='userprofile.biometric_id', max_length=100, required=False, allow_null=True, allow_blank=True
    )
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)
    updatedAt = serializers.DateTimeField(source='userprofile.updated_at', read_only=True)

    required_on_create = ('username', 'email', 'password', 'fullName')
    required_on_update = ('username', 'email', 'fullName')

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'password', 'fullName', 'role', 'department',
            'biometricId', 'isActive', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'username': {'required': False, 'validators': []},
        }

    def to_internal_value(self, data):
        required = self.required_on_create if self.instance is None else self.required_on_update
        if not self.partial and _missing(data, required):
            raise ValidationError('Missing required fields')
        return super().to_internal_value(data)

    def validate(self, attrs):
        profile_attrs = attrs.get('userprofile', {})
        instance_pk = self.instance.pk if self.instance is not None else None

        if 'email' in attrs:
            check_email(attrs['email'])

        password = attrs.get('password')
        if self.instance is None or password:
            check_password(password or '')

        others = User.objects.exclude(pk=instance_pk) if instance_pk else User.objects.all()
        if 'username' in attrs and others.filter(username=attrs['username']).exists():
            raise Conflict('Username already taken')
        if 'email' in attrs and others.filter(email__iexact=attrs['email']).exists():
            raise Conflict('Email already registered')

        biometric_id = profile_attrs.get('biometric_id')
        if biometric_id:
            taken = UserProfile.objects.filter(biometric_id=biometric_id)
            if instance_pk:
                taken = taken.exclude(user_id=instance_pk)
            if taken.exists():
                raise Conflict('Biometric ID already registered')

        return attrs

    @transaction.atomic
    def create(self, validated_data):
        profile_data = validated_data.pop('userprofile', {})
        user = User.objects.create_user(
            username=validated_data['username'],
            email=validated_data['email'],
            password=validated_data['password'],
        )
        profile = user.userprofile
        profile.full_name = profile_data.get('full_name', '')
        profile.role = profile_data.get('role') or UserProfile.ROLE_FACULTY
        profile.department = profile_data.get('department') or None
        profile.biometric_id = profile_data.get('biometric_id') or None
        profile.save()
        return user

    @transaction.atomic
    def update(self, instance, validated_data):
        profile_data = validated_data.pop('userprofile', {})
        password = validated_data.pop('password', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()

        profile = instance.userprofile
        for attr, value in profile_data.items():
            setattr(profile, attr, value)
        profile.save()
        return instance


class RegistrationSerializer(UserAccountSerializer):
    """Self-service sign up. Always creates a faculty account without a credential."""

    def validate(self, attrs):
        profile_attrs = attrs.setdefault('userprofile', {})
        profile_attrs['role'] = UserProfile.ROLE_FACULTY
        profile_attrs.pop('biometric_id', None)
        return super().validate(attrs)


class LaboratorySerializer(serializers.ModelSerializer):
    roomNumber = serializers.CharField(source='room_number', max_length=50, required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    required_fields = ('name', 'building', 'roomNumber', 'capacity')

    class Meta:
        model = Laboratory
        fields = [
            'id', 'name', 'building', 'roomNumber', 'capacity', 'status',
            'description', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'name': {'required': False},
            'building': {'required': False},
            'capacity': {'required': False, 'min_value': 1},
        }

    def to_internal_value(self, data):
        if not self.partial and _missing(data, self.required_fields):
            raise ValidationError('Missing required fields')
        return super().to_internal_value(data)


class EquipmentSerializer(serializers.ModelSerializer):
    type = serializers.ChoiceField(source='equipment_type', choices=Equipment.TYPE_CHOICES, required=False)
    labId = serializers.PrimaryKeyRelatedField(
        source='laboratory', queryset=Laboratory.objects.all(), required=False
    )
    labName = serializers.CharField(source='laboratory.name', read_only=True)
    serialNumber = serializers.CharField(source='serial_number', max_length=100, required=False)
    assignedStation = serializers.CharField(source='assigned_station', max_length=50, required=False)
    lastDetected = serializers.DateTimeField(source='last_detected', read_only=True)
    positionX = serializers.FloatField(source='position_x', required=False, allow_null=True)
    positionY = serializers.FloatField(source='position_y', required=False, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    required_fields = ('type', 'serialNumber', 'brand', 'model', 'labId', 'assignedStation')

    class Meta:
        model = Equipment
        fields = [
            'id', 'labId', 'labName', 'type', 'serialNumber', 'brand', 'model', 'status',
            'lastDetected', 'positionX', 'positionY', 'assignedStation', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'brand': {'required': False},
            'model': {'required': False},
        }

    def to_internal_value(self, data):
        if not self.partial and _missing(data, self.required_fields):
            raise ValidationError('Missing required fields')
        return super().to_internal_value(data)


class ScheduleSerializer(serializers.ModelSerializer):
    labId = serializers.PrimaryKeyRelatedField(
        source='laboratory', queryset=Laboratory.objects.all(), required=False
    )
    userId = serializers.PrimaryKeyRelatedField(
        source='user', queryset=User.objects.select_related('userprofile'), required=False
    )
    dayOfWeek = serializers.IntegerField(
        source='day_of_week', min_value=0, max_value=6, required=False, allow_null=True
    )
    startTime = serializers.CharField(source='start_time', required=False)
    endTime = serializers.CharField(source='end_time', required=False)
    courseCode = serializers.CharField(
        source='course_code', max_length=50, required=False, allow_null=True, allow_blank=True
    )
    isRecurring = serializers.BooleanField(source='is_recurring', required=False)
    startDate = serializers.DateTimeField(source='start_date', required=False, allow_null=True)
    endDate = serializers.DateTimeField(source='end_date', required=False, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    userName = serializers.SerializerMethodField()
    userEmail = serializers.EmailField(source='user.email', read_only=True)
    userBiometricId = serializers.SerializerMethodField()
    labName = serializers.CharField(source='laboratory.name', read_only=True)

    required_fields = ('labId', 'userId', 'startTime', 'endTime')

    class Meta:
        model = Schedule
        fields = [
            'id', 'labId', 'userId', 'dayOfWeek', 'startTime', 'endTime', 'courseCode',
            'section', 'subject', 'isRecurring', 'startDate', 'endDate', 'createdAt',
            'updatedAt', 'userName', 'userEmail', 'userBiometricId', 'labName'
        ]
        read_only_fields = ['id']
        extra_kwargs = {
            'section': {'required': False, 'allow_null': True, 'allow_blank': True},
            'subject': {'required': False, 'allow_null': True, 'allow_blank': True},
        }

    def get_userName(self, obj):
        return obj.user.userprofile.display_name

    def get_userBiometricId(self, obj):
        return obj.user.userprofile.biometric_id

    def to_internal_value(self, data):
        if not self.partial and _missing(data, self.required_fields):
            raise ValidationError('Missing required fields: labId, userId, startTime, endTime')
        return super().to_internal_value(data)

    def _value(self, attrs, field, default=None):
        """Incoming value, falling back to the stored one on partial updates."""
        if field in attrs:
            return attrs[field]
        if self.instance is not None and self.partial:
            return getattr(self.instance, field)
        return default

    def validate(self, attrs):
        if 'is_recurring' in attrs:
            is_recurring = attrs['is_recurring']
        elif self.instance is not None:
            is_recurring = self.instance.is_recurring
        else:
            is_recurring = True
        attrs['is_recurring'] = is_recurring

        day_of_week = self._value(attrs, 'day_of_week')
        start_date = self._value(attrs, 'start_date')
        if is_recurring and day_of_week is None:
            raise ValidationError('dayOfWeek is required for recurring schedules')
        if not is_recurring and start_date is None:
            raise ValidationError('startDate is required for one-time schedules')

        start_time = self._value(attrs, 'start_time')
        end_time = self._value(attrs, 'end_time')
        for label, value in (('startTime', start_time), ('endTime', end_time)):
            if not TIME_OF_DAY_PATTERN.match(value or ''):
                raise ValidationError(f'{label} must be in HH:MM format', details={label: value})
        if start_time >= end_time:
            raise ValidationError('endTime must be after startTime')

        if self.instance is None:
            user = attrs['user']
            if not UserProfile.objects.filter(user=user, biometric_id__isnull=False).exists():
                raise ValidationError('Teacher must have biometric ID registered before scheduling')

        if is_recurring:
            attrs['day_of_week'] = day_of_week
            attrs['start_date'] = None
            attrs['end_date'] = self._value(attrs, 'end_date')
        else:
            attrs['start_date'] = start_date
            attrs['day_of_week'] = None
            attrs['end_date'] = None
        return attrs

    def build_candidate(self):
        """Unsaved schedule carrying the validated values, for conflict checks."""
        if self.instance is None:
            return Schedule(**self.validated_data)
        candidate = copy.copy(self.instance)
        for attr, value in self.validated_data.items():
            setattr(candidate, attr, value)
        return candidate


class AttendanceLogSerializer(serializers.ModelSerializer):
    userId = serializers.IntegerField(source='user_id', read_only=True)
    labId = serializers.IntegerField(source='laboratory_id', read_only=True)
    scheduleId = serializers.IntegerField(source='schedule_id', read_only=True)
    checkInTime = serializers.DateTimeField(source='check_in_time', read_only=True)
    checkOutTime = serializers.DateTimeField(source='check_out_time', read_only=True)
    verificationMethod = serializers.CharField(source='verification_method', read_only=True)
    biometricData = serializers.CharField(source='biometric_data', read_only=True)
    ipAddress = serializers.CharField(source='ip_address', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    userName = serializers.SerializerMethodField()
    userEmail = serializers.EmailField(source='user.email', read_only=True)
    labName = serializers.CharField(source='laboratory.name', read_only=True)

    class Meta:
        model = AttendanceLog
        fields = [
            'id', 'userId', 'labId', 'scheduleId', 'checkInTime', 'checkOutTime',
            'verificationMethod', 'biometricData', 'ipAddress', 'notes', 'createdAt',
            'userName', 'userEmail', 'labName'
        ]
        read_only_fields = fields

    def get_userName(self, obj):
        return obj.user.userprofile.display_name


class AttendanceScanSerializer(serializers.Serializer):
    """Incoming scanner event."""
    biometricId = serializers.CharField(max_length=100, required=False)
    labId = serializers.IntegerField(required=False)
    verificationMethod = serializers.ChoiceField(
        choices=AttendanceLog.VERIFICATION_METHODS, required=False, default='biometric'
    )

    def to_internal_value(self, data):
        if _missing(data, ('biometricId', 'labId')):
            raise ValidationError('Missing required fields: biometricId, labId')
        return super().to_internal_value(data)


class AlertSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='alert_type', read_only=True)
    labId = serializers.IntegerField(source='laboratory_id', read_only=True)
    labName = serializers.CharField(source='laboratory.name', read_only=True, default=None)
    resolvedBy = serializers.IntegerField(source='resolved_by_id', read_only=True)
    resolvedAt = serializers.DateTimeField(source='resolved_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Alert
        fields = [
            'id', 'type', 'labId', 'labName', 'severity', 'title', 'message', 'resolved',
            'resolvedBy', 'resolvedAt', 'data', 'createdAt'
        ]
        read_only_fields = fields
