# labwatch/settings.py
"""
Base settings for LabWatch.

Development defaults; every value that differs between deployments can be
overridden through environment variables. Production overrides live in
settings_production.py.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-labwatch-development-key')

DEBUG = os.environ.get('DEBUG', 'True').lower() == 'true'

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework.authtoken',
    'django_apscheduler',
    'labs',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'labs.middleware.role_access.RoleAccessMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'labwatch.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'labwatch.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('SQLITE_PATH', BASE_DIR / 'db.sqlite3'),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator', 'OPTIONS': {'min_length': 8}},
]

LANGUAGE_CODE = os.environ.get('LANGUAGE_CODE', 'en-us')
# Schedules are stored as local wall-clock "HH:MM" strings, so the matcher
# compares them against this zone.
TIME_ZONE = os.environ.get('TIME_ZONE', 'Asia/Manila')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.TokenAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'EXCEPTION_HANDLER': 'labs.exceptions.api_exception_handler',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{levelname} {asctime} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'labs': {
            'handlers': ['console'],
            'level': os.environ.get('LABS_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

# Base URL used when building links sent to users (password reset).
APP_URL = os.environ.get('APP_URL', 'http://localhost:8000')

# Attendance matching: one-time schedules match when their start date lies
# within this many hours either side of "now".
ONE_TIME_SCHEDULE_WINDOW_HOURS = int(os.environ.get('ONE_TIME_SCHEDULE_WINDOW_HOURS', '24'))

# Overlap detection runs on schedule updates. Creation skips it unless enabled.
SCHEDULE_CONFLICT_CHECK_ON_CREATE = os.environ.get(
    'SCHEDULE_CONFLICT_CHECK_ON_CREATE', 'False'
).lower() == 'true'

PASSWORD_RESET_TOKEN_TTL_HOURS = int(os.environ.get('PASSWORD_RESET_TOKEN_TTL_HOURS', '1'))

# Simulated equipment detection
EQUIPMENT_SWEEP_CHANGE_PROBABILITY = float(os.environ.get('EQUIPMENT_SWEEP_CHANGE_PROBABILITY', '0.1'))
EQUIPMENT_SWEEP_INTERVAL_MINUTES = int(os.environ.get('EQUIPMENT_SWEEP_INTERVAL_MINUTES', '0'))

# Route prefix -> roles allowed to reach it. Longest prefix wins.
ROLE_ROUTE_PREFIXES = {
    '/admin/': ['admin'],
    '/api/users/': ['admin'],
    '/api/alerts/': ['admin', 'custodian'],
    '/api/equipment/sweep/': ['admin', 'custodian'],
}

SCHEDULER_AUTOSTART = os.environ.get('SCHEDULER_AUTOSTART', 'True').lower() == 'true'
APSCHEDULER_DATETIME_FORMAT = 'N j, Y, f:s a'
APSCHEDULER_RUN_NOW_TIMEOUT = 25
