# labs/admin.py
"""
Django admin configuration for LabWatch.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import (
    UserProfile, Laboratory, Equipment, Schedule, AttendanceLog, Alert, PasswordResetToken
)


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Profile'


class UserAdmin(BaseUserAdmin):
    inlines = (UserProfileInline,)
    list_display = ('username', 'email', 'get_role', 'get_biometric_id', 'is_active')

    @admin.display(description='Role')
    def get_role(self, obj):
        return UserProfile.role_for(obj)

    @admin.display(description='Biometric ID')
    def get_biometric_id(self, obj):
        profile = getattr(obj, 'userprofile', None)
        return profile.biometric_id if profile else None


admin.site.unregister(User)
admin.site.register(User, UserAdmin)


@admin.register(Laboratory)
class LaboratoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'building', 'room_number', 'capacity', 'status')
    list_filter = ('status', 'building')
    search_fields = ('name', 'building', 'room_number')
    readonly_fields = ('created_at', 'updated_at')


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ('equipment_type', 'serial_number', 'laboratory', 'assigned_station', 'status', 'last_detected')
    list_filter = ('status', 'equipment_type', 'laboratory')
    search_fields = ('serial_number', 'brand', 'model', 'assigned_station')
    readonly_fields = ('created_at', 'updated_at')


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display = ('course_code', 'laboratory', 'user', 'is_recurring', 'day_of_week', 'start_date', 'start_time', 'end_time')
    list_filter = ('is_recurring', 'day_of_week', 'laboratory')
    search_fields = ('course_code', 'subject', 'section', 'user__username')
    readonly_fields = ('created_at', 'updated_at')
    fieldsets = (
        ('Booking', {
            'fields': ('laboratory', 'user', 'course_code', 'section', 'subject')
        }),
        ('When', {
            'fields': ('is_recurring', 'day_of_week', 'start_date', 'end_date', 'start_time', 'end_time'),
            'description': 'Recurring schedules use the day of week; one-time schedules use the start date.'
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(AttendanceLog)
class AttendanceLogAdmin(admin.ModelAdmin):
    list_display = ('user', 'laboratory', 'check_in_time', 'check_out_time', 'verification_method')
    list_filter = ('verification_method', 'laboratory')
    search_fields = ('user__username', 'biometric_data', 'notes')
    date_hierarchy = 'check_in_time'
    readonly_fields = ('created_at', 'updated_at')


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ('title', 'alert_type', 'severity', 'laboratory', 'resolved', 'created_at')
    list_filter = ('resolved', 'severity', 'alert_type')
    search_fields = ('title', 'message')
    readonly_fields = ('created_at',)


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
    list_display = ('user', 'created_at', 'expires_at', 'is_used')
    list_filter = ('is_used',)
    readonly_fields = ('token', 'created_at')
