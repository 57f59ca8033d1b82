# labs/views.py
"""
API views for LabWatch.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import logging
import uuid

from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction
from django.http import Http404
from django.utils import timezone
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from .attendance_service import attendance_service, client_ip
from .conflicts import ScheduleConflictDetector
from .equipment_service import equipment_detection_service, random_floor_position
from .exceptions import Forbidden, NotFound, ValidationError
from .models import (
    Alert, AttendanceLog, Equipment, Laboratory, PasswordResetToken, Schedule, UserProfile
)
from .serializers import (
    AlertSerializer, AttendanceLogSerializer, AttendanceScanSerializer, EquipmentSerializer,
    LaboratorySerializer, RegistrationSerializer, ScheduleSerializer, UserAccountSerializer,
    check_password,
)

logger = logging.getLogger(__name__)

WRITE_ACTIONS = ['create', 'update', 'partial_update', 'destroy']


def _flag(value):
    """Query string boolean; None when the parameter is absent."""
    if value is None or value == '':
        return None
    return value.lower() == 'true'


class HasRole(permissions.BasePermission):
    """Grants access when the user's LabWatch role is in ``allowed_roles``."""
    allowed_roles = ()
    message = 'Insufficient permissions'

    def has_permission(self, request, view):
        return UserProfile.role_for(request.user) in self.allowed_roles


class IsAdminRole(HasRole):
    allowed_roles = (UserProfile.ROLE_ADMIN,)


class IsAdminOrCustodian(HasRole):
    allowed_roles = (UserProfile.ROLE_ADMIN, UserProfile.ROLE_CUSTODIAN)


class NotFoundMessageMixin:
    """Replace DRF's generic 404 with a resource specific message."""
    not_found_message = 'Not found'

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound(self.not_found_message)


class UserViewSet(NotFoundMessageMixin, viewsets.ModelViewSet):
    """User administration. Admins only."""
    queryset = User.objects.select_related('userprofile').order_by('-date_joined', '-id')
    serializer_class = UserAccountSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]
    not_found_message = 'User not found'

    def list(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return Response({'users': serializer.data})

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return Response({'user': serializer.data})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"User {user.username} created by {request.user.username}")
        return Response(
            {'message': 'User created successfully', 'user': self.get_serializer(user).data},
            status=status.HTTP_201_CREATED
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"User {user.username} updated by {request.user.username}")
        return Response({'message': 'User updated successfully', 'user': self.get_serializer(user).data})

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if UserProfile.role_for(user) == UserProfile.ROLE_ADMIN:
            raise Forbidden('Cannot delete admin users')
        username = user.username
        user.delete()
        logger.info(f"User {username} deleted by {request.user.username}")
        return Response({'message': 'User deleted successfully'})

    @action(detail=True, methods=['patch'])
    def toggle(self, request, pk=None):
        """Activate or deactivate a user account."""
        is_active = request.data.get('isActive')
        if not isinstance(is_active, bool):
            raise ValidationError('Invalid status value')

        user = self.get_object()
        if not is_active and UserProfile.role_for(user) == UserProfile.ROLE_ADMIN:
            raise Forbidden('Cannot deactivate admin users')

        user.is_active = is_active
        user.save(update_fields=['is_active'])
        logger.info(f"User {user.username} {'activated' if is_active else 'deactivated'} by {request.user.username}")
        return Response({'message': 'User status updated successfully', 'user': self.get_serializer(user).data})


class LaboratoryViewSet(NotFoundMessageMixin, viewsets.ModelViewSet):
    """Laboratories. Readable by everyone signed in, managed by admins."""
    queryset = Laboratory.objects.order_by('-created_at', '-id')
    serializer_class = LaboratorySerializer
    permission_classes = [permissions.IsAuthenticated]
    not_found_message = 'Laboratory not found'

    def get_permissions(self):
        """Different permissions for different actions."""
        if self.action in WRITE_ACTIONS + ['conflicts']:
            self.permission_classes = [permissions.IsAuthenticated, IsAdminRole]
        return super().get_permissions()

    def destroy(self, request, *args, **kwargs):
        laboratory = self.get_object()
        laboratory.delete()
        return Response({'message': 'Laboratory deleted successfully'})

    @action(detail=True, methods=['get'])
    def conflicts(self, request, pk=None):
        """Every pair of overlapping schedules in this laboratory."""
        return Response(ScheduleConflictDetector.conflict_report(self.get_object()))


class EquipmentViewSet(NotFoundMessageMixin, viewsets.ModelViewSet):
    """Equipment inventory. Managed by admins and custodians."""
    queryset = Equipment.objects.select_related('laboratory').order_by('-created_at', '-id')
    serializer_class = EquipmentSerializer
    permission_classes = [permissions.IsAuthenticated]
    not_found_message = 'Equipment not found'

    def get_permissions(self):
        """Different permissions for different actions."""
        if self.action in WRITE_ACTIONS + ['sweep']:
            self.permission_classes = [permissions.IsAuthenticated, IsAdminOrCustodian]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        lab_id = self.request.query_params.get('labId')
        if lab_id:
            queryset = queryset.filter(laboratory_id=lab_id)
        return queryset

    def perform_create(self, serializer):
        position_x, position_y = random_floor_position()
        serializer.save(
            status='present',
            last_detected=timezone.now(),
            position_x=position_x,
            position_y=position_y,
        )

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return Response({'message': 'Equipment deleted successfully'})

    @action(detail=False, methods=['post'])
    def sweep(self, request):
        """Run a detection sweep over all equipment or one laboratory."""
        laboratory = None
        lab_id = request.data.get('labId')
        if lab_id:
            laboratory = Laboratory.objects.filter(pk=lab_id).first()
            if laboratory is None:
                raise NotFound('Laboratory not found')
        results = equipment_detection_service.sweep(laboratory=laboratory)
        return Response(results)


class ScheduleViewSet(NotFoundMessageMixin, viewsets.ModelViewSet):
    """Class schedules. Readable by everyone signed in, managed by admins."""
    serializer_class = ScheduleSerializer
    permission_classes = [permissions.IsAuthenticated]
    not_found_message = 'Schedule not found'

    def get_permissions(self):
        """Different permissions for different actions."""
        if self.action in WRITE_ACTIONS:
            self.permission_classes = [permissions.IsAuthenticated, IsAdminRole]
        return super().get_permissions()

    def get_queryset(self):
        queryset = Schedule.objects.select_related('laboratory', 'user', 'user__userprofile')

        lab_id = self.request.query_params.get('labId')
        if lab_id:
            queryset = queryset.filter(laboratory_id=lab_id)

        user_id = self.request.query_params.get('userId')
        if user_id:
            queryset = queryset.filter(user_id=user_id)

        if _flag(self.request.query_params.get('upcoming')):
            queryset = queryset.upcoming(timezone.now())

        return queryset.order_by('-created_at', '-id')

    def perform_create(self, serializer):
        ScheduleConflictDetector.ensure_no_conflict(serializer.build_candidate(), creating=True)
        schedule = serializer.save()
        logger.info(f"Schedule {schedule.pk} created in lab {schedule.laboratory_id}")

    def perform_update(self, serializer):
        with transaction.atomic():
            ScheduleConflictDetector.ensure_no_conflict(serializer.build_candidate())
            schedule = serializer.save()
        logger.info(f"Schedule {schedule.pk} updated in lab {schedule.laboratory_id}")

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return Response({'message': 'Schedule deleted successfully'})


class AttendanceViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Attendance sessions and the scanner endpoint that toggles them."""
    serializer_class = AttendanceLogSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = AttendanceLog.objects.select_related('user', 'user__userprofile', 'laboratory')

        # Faculty only ever see their own sessions
        if UserProfile.role_for(self.request.user) == UserProfile.ROLE_FACULTY:
            queryset = queryset.filter(user=self.request.user)

        user_id = self.request.query_params.get('userId')
        if user_id:
            queryset = queryset.filter(user_id=user_id)

        lab_id = self.request.query_params.get('labId')
        if lab_id:
            queryset = queryset.filter(laboratory_id=lab_id)

        if _flag(self.request.query_params.get('active')):
            queryset = queryset.open_sessions()

        return queryset.order_by('-check_in_time', '-id')

    def create(self, request, *args, **kwargs):
        """Record a scanner event as a check-in or check-out."""
        scan = AttendanceScanSerializer(data=request.data)
        scan.is_valid(raise_exception=True)

        outcome = attendance_service.record_scan(
            biometric_id=scan.validated_data['biometricId'],
            laboratory_id=scan.validated_data['labId'],
            verification_method=scan.validated_data['verificationMethod'],
            ip_address=client_ip(request),
        )

        return Response({
            'success': True,
            'action': outcome.action,
            'user': {
                'id': outcome.user.pk,
                'fullName': outcome.profile.display_name,
                'email': outcome.user.email,
                'role': outcome.profile.role,
            },
            'schedule': ScheduleSerializer(outcome.schedule).data,
            'attendance': AttendanceLogSerializer(outcome.attendance).data,
            'timestamp': outcome.unix_timestamp,
        })


class AlertViewSet(NotFoundMessageMixin, viewsets.ReadOnlyModelViewSet):
    """Alerts raised for laboratories."""
    serializer_class = AlertSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrCustodian]
    not_found_message = 'Alert not found'

    def get_queryset(self):
        queryset = Alert.objects.select_related('laboratory')

        resolved = _flag(self.request.query_params.get('resolved'))
        if resolved is not None:
            queryset = queryset.filter(resolved=resolved)

        lab_id = self.request.query_params.get('labId')
        if lab_id:
            queryset = queryset.filter(laboratory_id=lab_id)

        return queryset.order_by('-created_at', '-id')

    @action(detail=True, methods=['post'])
    def resolve(self, request, pk=None):
        """Mark an alert as resolved by the current user."""
        alert = self.get_object()
        if alert.resolved:
            raise ValidationError('Alert is already resolved')
        alert.resolve(request.user)
        logger.info(f"Alert {alert.pk} resolved by {request.user.username}")
        return Response(self.get_serializer(alert).data)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def biometric_lookup(request):
    """Find the user enrolled under a biometric id."""
    biometric_id = request.query_params.get('biometricId')
    if not biometric_id:
        raise ValidationError('Biometric ID is required')

    profile = UserProfile.objects.select_related('user').filter(biometric_id=biometric_id).first()
    if profile is None:
        return Response(
            {'error': 'User not found with this biometric ID', 'biometricId': biometric_id, 'found': False},
            status=status.HTTP_404_NOT_FOUND
        )

    user = profile.user
    return Response({
        'success': True,
        'user': {
            'id': user.pk,
            'username': user.username,
            'fullName': profile.display_name,
            'role': profile.role,
            'department': profile.department,
            'biometricId': profile.biometric_id,
            'isActive': user.is_active,
        },
        'message': f"User found: {profile.display_name} ({profile.role})",
    })


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def register(request):
    """Self-service faculty registration."""
    serializer = RegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    user = serializer.save()
    logger.info(f"New faculty account registered: {user.username}")
    return Response(
        {'message': 'User created successfully', 'userId': user.pk},
        status=status.HTTP_201_CREATED
    )


FORGOT_PASSWORD_MESSAGE = 'If an account exists with this email, a reset link has been sent.'


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def forgot_password(request):
    """Issue a password reset token. The response never reveals whether the email exists."""
    email = request.data.get('email')
    if not email:
        raise ValidationError('Email is required')

    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        return Response({'message': FORGOT_PASSWORD_MESSAGE})

    reset_token = PasswordResetToken.objects.create(user=user)
    reset_link = f"{settings.APP_URL.rstrip('/')}/auth/reset-password?token={reset_token.token}"
    logger.info(f"Password reset link for {user.username}: {reset_link} (expires {reset_token.expires_at:%Y-%m-%d %H:%M})")

    payload = {'message': FORGOT_PASSWORD_MESSAGE}
    if settings.DEBUG:
        payload['resetLink'] = reset_link
    return Response(payload)


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def reset_password(request):
    """Set a new password using a reset token."""
    token = request.data.get('token')
    password = request.data.get('password')
    if not token or not password:
        raise ValidationError('Token and password are required')
    check_password(password)

    try:
        token_uuid = uuid.UUID(str(token))
    except ValueError:
        raise ValidationError('Invalid or expired reset token')

    reset_token = (
        PasswordResetToken.objects.select_related('user')
        .filter(token=token_uuid, is_used=False)
        .first()
    )
    if reset_token is None:
        raise ValidationError('Invalid or expired reset token')

    if reset_token.is_expired():
        reset_token.delete()
        raise ValidationError('Reset token has expired')

    with transaction.atomic():
        user = reset_token.user
        user.set_password(password)
        user.save(update_fields=['password'])
        reset_token.is_used = True
        reset_token.save(update_fields=['is_used'])

    logger.info(f"Password reset completed for {user.username}")
    return Response({'message': 'Password reset successfully'})
