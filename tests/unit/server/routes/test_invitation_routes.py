"""Tests for the invitation API routes, with the service mocked."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from routemaker.server.app import create_app
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_org_invitation_service
from routemaker.server.routes.org_invitation_models import (
    EmailMismatchError,
    InsufficientPermissionError,
    InvitationExpiredError,
    InvitationInvalidError,
    InvitationNotFoundError,
    UserAlreadyMemberError,
)
from routemaker.storage.base import utc_now

IDENTITY = UserIdentity(user_id=uuid4(), email='alice@x.com')


def _invitation(**overrides):
    invitation = MagicMock()
    invitation.id = uuid4()
    invitation.organization_id = uuid4()
    invitation.email = 'bob@x.com'
    invitation.role = 'member'
    invitation.status = 'pending'
    invitation.invited_by = IDENTITY.user_id
    invitation.token = 'inv-' + 'a' * 48
    invitation.expires_at = utc_now() + timedelta(days=7)
    invitation.accepted_at = None
    invitation.created_at = utc_now()
    invitation.org.name = 'Acme'
    invitation.org.logo_url = None
    for key, value in overrides.items():
        setattr(invitation, key, value)
    return invitation


@pytest.fixture
def service():
    return MagicMock()


@pytest.fixture
def client(service):
    app = create_app()
    app.dependency_overrides[get_user_identity] = lambda: IDENTITY
    app.dependency_overrides[get_org_invitation_service] = lambda: service
    return TestClient(app)


class TestCreateInvitation:
    def test_new_invitation_returns_201(self, client, service):
        invitation = _invitation()
        service.create_invitation = AsyncMock(return_value=(invitation, True))

        response = client.post(
            '/api/invitations',
            json={
                'organization_id': str(invitation.organization_id),
                'email': 'bob@x.com',
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body['invitation']['email'] == 'bob@x.com'
        assert body['invitation']['status'] == 'pending'
        assert body['invite_url'].endswith(f'/invite/{invitation.token}')
        assert 'token' not in body['invitation']
        kwargs = service.create_invitation.call_args.kwargs
        assert kwargs['role_name'] == 'member'
        assert kwargs['inviter_id'] == IDENTITY.user_id
        assert kwargs['inviter_email'] == 'alice@x.com'

    def test_existing_pending_invitation_returns_200(self, client, service):
        invitation = _invitation()
        service.create_invitation = AsyncMock(return_value=(invitation, False))

        response = client.post(
            '/api/invitations',
            json={'organization_id': str(uuid4()), 'email': 'bob@x.com'},
        )

        assert response.status_code == 200

    def test_invalid_email_is_400(self, client, service):
        service.create_invitation = AsyncMock()

        response = client.post(
            '/api/invitations',
            json={'organization_id': str(uuid4()), 'email': 'not-an-email'},
        )

        assert response.status_code == 400
        assert 'email' in response.json()['error']
        service.create_invitation.assert_not_called()

    @pytest.mark.parametrize(
        'error,status_code',
        [
            (InsufficientPermissionError(), 403),
            (UserAlreadyMemberError(), 409),
        ],
    )
    def test_domain_errors(self, client, service, error, status_code):
        service.create_invitation = AsyncMock(side_effect=error)

        response = client.post(
            '/api/invitations',
            json={'organization_id': str(uuid4()), 'email': 'bob@x.com'},
        )

        assert response.status_code == status_code
        assert response.json() == {'error': str(error)}

    def test_unexpected_error_is_500(self, client, service):
        service.create_invitation = AsyncMock(side_effect=RuntimeError('db down'))

        response = client.post(
            '/api/invitations',
            json={'organization_id': str(uuid4()), 'email': 'bob@x.com'},
        )

        assert response.status_code == 500
        assert response.json() == {'error': 'Failed to create invitation'}


class TestBatchInvitations:
    def test_partial_success(self, client, service):
        service.create_invitations_batch = AsyncMock(
            return_value=([_invitation()], [('alice@x.com', 'User is already a member')])
        )

        response = client.post(
            '/api/invitations/batch',
            json={
                'organization_id': str(uuid4()),
                'emails': ['bob@x.com', 'alice@x.com'],
                'role': 'admin',
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert len(body['successful']) == 1
        assert body['failed'] == [
            {'email': 'alice@x.com', 'error': 'User is already a member'}
        ]


class TestTokenLookup:
    def test_public_lookup_needs_no_auth(self, service):
        app = create_app()
        app.dependency_overrides[get_org_invitation_service] = lambda: service
        service.get_invitation_by_token = AsyncMock(return_value=_invitation())

        response = TestClient(app).get('/api/invitations/token/inv-abc')

        assert response.status_code == 200
        details = response.json()['invitation']
        assert details['organization'] == {'name': 'Acme', 'logo_url': None}
        assert details['email'] == 'bob@x.com'

    @pytest.mark.parametrize(
        'error,status_code',
        [
            (InvitationNotFoundError(), 404),
            (InvitationExpiredError(), 409),
            (InvitationInvalidError(), 409),
        ],
    )
    def test_lookup_errors(self, client, service, error, status_code):
        service.get_invitation_by_token = AsyncMock(side_effect=error)

        response = client.get('/api/invitations/token/inv-abc')

        assert response.status_code == status_code
        assert response.json() == {'error': str(error)}


class TestAcceptInvitation:
    def test_accept(self, client, service):
        org_id = uuid4()
        service.accept_invitation = AsyncMock(return_value=org_id)

        response = client.post('/api/invitations/accept/inv-abc')

        assert response.status_code == 200
        assert response.json() == {'success': True, 'organization_id': str(org_id)}
        service.accept_invitation.assert_awaited_once_with(
            'inv-abc', IDENTITY.user_id, IDENTITY.email
        )

    def test_accept_requires_auth(self, service):
        app = create_app()
        app.dependency_overrides[get_org_invitation_service] = lambda: service

        response = TestClient(app).post('/api/invitations/accept/inv-abc')

        assert response.status_code == 401
        assert response.json() == {'error': 'Missing or invalid authorization header'}

    def test_email_mismatch(self, client, service):
        service.accept_invitation = AsyncMock(side_effect=EmailMismatchError())

        response = client.post('/api/invitations/accept/inv-abc')

        assert response.status_code == 403
        assert response.json() == {'error': 'Your email does not match the invitation'}


class TestListAndRevoke:
    def test_list(self, client, service):
        service.list_invitations = AsyncMock(return_value=[_invitation(), _invitation()])
        org_id = uuid4()

        response = client.get(f'/api/invitations/organization/{org_id}')

        assert response.status_code == 200
        assert len(response.json()['invitations']) == 2
        service.list_invitations.assert_awaited_once_with(org_id, IDENTITY.user_id)

    def test_revoke(self, client, service):
        service.revoke_invitation = AsyncMock(return_value=None)
        invitation_id = uuid4()

        response = client.delete(f'/api/invitations/{invitation_id}')

        assert response.status_code == 200
        assert response.json() == {'success': True}
        service.revoke_invitation.assert_awaited_once_with(
            invitation_id, IDENTITY.user_id
        )
