# labs/middleware/role_access.py
"""
Role based route access middleware.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from django.conf import settings
from django.http import JsonResponse
from rest_framework.authentication import TokenAuthentication
from rest_framework.exceptions import AuthenticationFailed
import logging

from labs.models import UserProfile

logger = logging.getLogger(__name__)


class RoleAccessMiddleware:
    """
    Reject authenticated requests whose role may not use a route.

    ``ROLE_ROUTE_PREFIXES`` maps path prefixes to the roles allowed under
    them; the longest matching prefix decides. Anonymous requests pass
    through so the views can answer with their own authentication errors.
    """

    EXEMPT_URLS = [
        '/admin/login/',
        '/admin/logout/',
        '/static/',
    ]

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if any(request.path.startswith(url) for url in self.EXEMPT_URLS):
            return self.get_response(request)

        allowed_roles = self._allowed_roles(request.path)
        if allowed_roles is None:
            return self.get_response(request)

        user = self._resolve_user(request)
        if user is None:
            return self.get_response(request)

        role = UserProfile.role_for(user)
        if role not in allowed_roles:
            logger.warning(f"Blocked {user.username} ({role}) from {request.method} {request.path}")
            return JsonResponse({'error': 'Insufficient permissions'}, status=403)

        return self.get_response(request)

    def _allowed_roles(self, path):
        """Roles for the longest configured prefix of the path, or None."""
        prefixes = getattr(settings, 'ROLE_ROUTE_PREFIXES', {})
        matches = [prefix for prefix in prefixes if path.startswith(prefix)]
        if not matches:
            return None
        return prefixes[max(matches, key=len)]

    def _resolve_user(self, request):
        """Session user, or the owner of a valid API token."""
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            return user

        try:
            result = TokenAuthentication().authenticate(request)
        except AuthenticationFailed:
            return None
        return result[0] if result else None
