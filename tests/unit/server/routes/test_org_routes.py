"""Tests for the organization routes and app-level error formatting."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from routemaker.server.app import create_app
from routemaker.server.auth.authorization import (
    AuthorizationResult,
    RoleName,
    get_membership_authority,
)
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import get_org_member_service, get_org_service
from routemaker.server.routes.org_models import LastOwnerError, OrgNotFoundError
from routemaker.storage.base import utc_now

IDENTITY = UserIdentity(user_id=uuid4(), email='alice@x.com')


class StubAuthority:
    def __init__(self, result=AuthorizationResult.OK):
        self.result = result
        self.permissions = []

    async def check_permission(self, user_id, org_id, permission):
        self.permissions.append(permission)
        return self.result


def _org():
    org = MagicMock()
    org.id = uuid4()
    org.name = 'Acme'
    org.slug = 'acme'
    org.logo_url = None
    org.settings = {}
    org.created_by = IDENTITY.user_id
    org.created_at = utc_now()
    org.updated_at = utc_now()
    return org


@pytest.fixture
def org_service():
    return MagicMock()


@pytest.fixture
def member_service():
    return MagicMock()


@pytest.fixture
def authority():
    return StubAuthority()


@pytest.fixture
def client(org_service, member_service, authority):
    app = create_app()
    app.dependency_overrides[get_user_identity] = lambda: IDENTITY
    app.dependency_overrides[get_membership_authority] = lambda: authority
    app.dependency_overrides[get_org_service] = lambda: org_service
    app.dependency_overrides[get_org_member_service] = lambda: member_service
    return TestClient(app)


class TestOrganizations:
    def test_list(self, client, org_service):
        org = _org()
        org_service.list_user_orgs = AsyncMock(
            return_value=[
                {
                    'id': org.id,
                    'name': 'Acme',
                    'slug': 'acme',
                    'role': 'owner',
                    'logo_url': None,
                }
            ]
        )

        response = client.get('/api/organizations')

        assert response.status_code == 200
        assert response.json()['organizations'][0]['role'] == 'owner'

    def test_create(self, client, org_service):
        org_service.create_org = AsyncMock(return_value=_org())

        response = client.post('/api/organizations', json={'name': ' Acme '})

        assert response.status_code == 201
        assert response.json()['slug'] == 'acme'
        org_service.create_org.assert_awaited_once_with('Acme', IDENTITY)

    def test_create_requires_name(self, client, org_service):
        response = client.post('/api/organizations', json={'name': '   '})

        assert response.status_code == 400
        assert 'error' in response.json()

    def test_get_includes_role(self, client, org_service):
        org = _org()
        org_service.get_org = AsyncMock(return_value=(org, RoleName.ADMIN))

        response = client.get(f'/api/organizations/{org.id}')

        assert response.status_code == 200
        assert response.json()['role'] == 'admin'
        assert response.json()['organization']['name'] == 'Acme'

    def test_update_passes_only_sent_fields(self, client, org_service, authority):
        org = _org()
        org_service.update_org = AsyncMock(return_value=org)

        response = client.patch(f'/api/organizations/{org.id}', json={'name': 'Acme 2'})

        assert response.status_code == 200
        org_service.update_org.assert_awaited_once_with(org.id, {'name': 'Acme 2'})
        assert authority.permissions[-1].value == 'edit_organization'

    @pytest.mark.parametrize('body', [{'name': None}, {'settings': None}])
    def test_update_rejects_null_required_fields(self, client, org_service, body):
        org_service.update_org = AsyncMock()

        response = client.patch(f'/api/organizations/{uuid4()}', json=body)

        assert response.status_code == 400
        org_service.update_org.assert_not_called()

    def test_update_forbidden_for_member(self, org_service, member_service):
        app = create_app()
        app.dependency_overrides[get_user_identity] = lambda: IDENTITY
        app.dependency_overrides[get_membership_authority] = lambda: StubAuthority(
            AuthorizationResult.INSUFFICIENT_ROLE
        )
        app.dependency_overrides[get_org_service] = lambda: org_service
        org_service.update_org = AsyncMock()

        response = TestClient(app).patch(
            f'/api/organizations/{uuid4()}', json={'name': 'x'}
        )

        assert response.status_code == 403
        assert response.json() == {'error': 'Insufficient permissions'}
        org_service.update_org.assert_not_called()

    def test_delete(self, client, org_service, authority):
        org_service.delete_org = AsyncMock(return_value=None)

        response = client.delete(f'/api/organizations/{uuid4()}')

        assert response.status_code == 200
        assert response.json() == {'success': True}
        assert authority.permissions[-1].value == 'delete_organization'

    def test_delete_missing(self, client, org_service):
        org_id = uuid4()
        org_service.delete_org = AsyncMock(side_effect=OrgNotFoundError(str(org_id)))

        response = client.delete(f'/api/organizations/{org_id}')

        assert response.status_code == 404


class TestMembers:
    def test_update_role(self, client, member_service):
        member = MagicMock()
        member.id = uuid4()
        member.role = 'admin'
        member_service.update_member_role = AsyncMock(return_value=member)
        org_id = uuid4()

        response = client.patch(
            f'/api/organizations/{org_id}/members/{member.id}', json={'role': 'admin'}
        )

        assert response.status_code == 200
        assert response.json() == {
            'success': True,
            'member_id': str(member.id),
            'role': 'admin',
        }

    def test_leave_as_last_owner_is_conflict(self, client, member_service):
        member_service.leave = AsyncMock(side_effect=LastOwnerError())

        response = client.post(f'/api/organizations/{uuid4()}/leave')

        assert response.status_code == 409
        assert 'last owner' in response.json()['error']


class TestAppErrors:
    def test_missing_auth_header(self):
        response = TestClient(create_app()).get('/api/organizations')

        assert response.status_code == 401
        assert response.json() == {'error': 'Missing or invalid authorization header'}

    def test_unknown_route_uses_error_format(self):
        response = TestClient(create_app()).get('/api/nope')

        assert response.status_code == 404
        assert 'error' in response.json()

    def test_invalid_uuid_path_is_400(self, client):
        response = client.get('/api/organizations/not-a-uuid')

        assert response.status_code == 400

    @pytest.mark.parametrize('path', ['/health', '/api/health'])
    def test_health(self, path):
        response = TestClient(create_app()).get(path)

        assert response.status_code == 200
        assert response.json()['status'] == 'ok'
        assert response.json()['timestamp'].endswith('Z')
