# labs/api_urls.py
"""
API URL configuration for the labs app.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'users', views.UserViewSet, basename='user')
router.register(r'laboratories', views.LaboratoryViewSet, basename='laboratory')
router.register(r'equipment', views.EquipmentViewSet, basename='equipment')
router.register(r'schedules', views.ScheduleViewSet, basename='schedule')
router.register(r'attendance', views.AttendanceViewSet, basename='attendance')
router.register(r'alerts', views.AlertViewSet, basename='alert')

app_name = 'api'

urlpatterns = [
    path('', include(router.urls)),

    path('biometric/', views.biometric_lookup, name='biometric-lookup'),
    path('auth/register/', views.register, name='register'),
    path('auth/forgot-password/', views.forgot_password, name='forgot-password'),
    path('auth/reset-password/', views.reset_password, name='reset-password'),
]
