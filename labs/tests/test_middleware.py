"""Test cases for role based route protection."""
import pytest

from django.http import HttpResponse
from django.test import RequestFactory
from django.contrib.auth.models import AnonymousUser
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from labs.middleware import RoleAccessMiddleware
from labs.tests.factories import (
    AdminProfileFactory, CustodianProfileFactory, UserFactory, UserProfileFactory
)


ROUTES = {
    '/api/alerts/': ['admin', 'custodian'],
    '/api/alerts/archive/': ['admin'],
}


@pytest.mark.django_db
class TestRoleAccessMiddleware:
    """Test the middleware in isolation."""

    @pytest.fixture(autouse=True)
    def routes(self, settings):
        settings.ROLE_ROUTE_PREFIXES = ROUTES

    def setup_method(self):
        self.factory = RequestFactory()
        self.middleware = RoleAccessMiddleware(lambda request: HttpResponse('ok'))

    def call(self, path, user=None, **headers):
        request = self.factory.get(path, **headers)
        request.user = user or AnonymousUser()
        return self.middleware(request)

    def test_allowed_role_passes(self):
        response = self.call('/api/alerts/', CustodianProfileFactory().user)
        assert response.status_code == 200

    def test_disallowed_role_blocked(self):
        response = self.call('/api/alerts/', UserProfileFactory().user)
        assert response.status_code == 403
        assert response.content == b'{"error": "Insufficient permissions"}'

    def test_longest_prefix_wins(self):
        custodian = CustodianProfileFactory().user
        assert self.call('/api/alerts/archive/', custodian).status_code == 403
        assert self.call('/api/alerts/archive/', AdminProfileFactory().user).status_code == 200

    def test_unlisted_route_passes(self):
        response = self.call('/api/schedules/', UserProfileFactory().user)
        assert response.status_code == 200

    def test_anonymous_passes_through(self):
        response = self.call('/api/alerts/')
        assert response.status_code == 200

    def test_token_user_resolved(self):
        user = UserProfileFactory().user
        token = Token.objects.create(user=user)

        response = self.call('/api/alerts/', HTTP_AUTHORIZATION=f'Token {token.key}')
        assert response.status_code == 403

    def test_invalid_token_passes_through(self):
        response = self.call('/api/alerts/', HTTP_AUTHORIZATION='Token not-a-real-token')
        assert response.status_code == 200

    def test_superuser_counts_as_admin(self):
        superuser = UserFactory(is_superuser=True)
        assert self.call('/api/alerts/archive/', superuser).status_code == 200


@pytest.mark.django_db
class TestRoleAccessWithClient:
    """Test the middleware in front of the API."""

    def setup_method(self):
        self.client = APIClient()

    def test_faculty_token_blocked_from_users(self):
        user = UserProfileFactory().user
        token = Token.objects.create(user=user)
        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token.key}')

        response = self.client.get('/api/users/')
        assert response.status_code == 403
        assert response.json() == {'error': 'Insufficient permissions'}

    def test_custodian_reaches_alerts(self):
        self.client.force_login(CustodianProfileFactory().user)
        response = self.client.get('/api/alerts/')
        assert response.status_code == 200

    def test_anonymous_gets_view_error(self):
        response = self.client.get('/api/users/')
        assert response.status_code == 401
