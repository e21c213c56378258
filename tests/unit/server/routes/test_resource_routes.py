"""Tests for project, technician, location and profile routes."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from routemaker.server.app import create_app
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity
from routemaker.server.dependencies import (
    get_location_service,
    get_profile_service,
    get_project_service,
    get_technician_service,
)
from routemaker.server.errors import ForbiddenError, NotFoundError
from routemaker.server.geocoding import GeocodingError
from routemaker.storage.base import utc_now

IDENTITY = UserIdentity(user_id=uuid4(), email='alice@x.com')


def _technician(**overrides):
    values = {
        'id': uuid4(),
        'organization_id': uuid4(),
        'created_by': IDENTITY.user_id,
        'full_name': 'Ana Diaz',
        'employment_type': 'employee',
        'email': None,
        'phone': None,
        'address_line1': None,
        'address_line2': None,
        'city': None,
        'state': None,
        'postal_code': None,
        'cost_basis': 'hourly',
        'cost_amount': 30.0,
        'color_hex': '#22C55E',
        'active': True,
        'notes': None,
        'created_at': utc_now(),
        'updated_at': utc_now(),
    }
    values.update(overrides)
    return MagicMock(**values)


@pytest.fixture
def services():
    return {
        'project': MagicMock(),
        'technician': MagicMock(),
        'location': MagicMock(),
        'profile': MagicMock(),
    }


@pytest.fixture
def client(services):
    app = create_app()
    app.dependency_overrides[get_user_identity] = lambda: IDENTITY
    app.dependency_overrides[get_project_service] = lambda: services['project']
    app.dependency_overrides[get_technician_service] = lambda: services['technician']
    app.dependency_overrides[get_location_service] = lambda: services['location']
    app.dependency_overrides[get_profile_service] = lambda: services['profile']
    return TestClient(app)


class TestProjects:
    def test_create_ignores_client_org_in_body_fields(self, client, services):
        project = MagicMock(
            id=uuid4(),
            organization_id=uuid4(),
            description=None,
            created_by=IDENTITY.user_id,
            created_at=utc_now(),
            updated_at=utc_now(),
        )
        project.name = 'Spring'
        services['project'].create = AsyncMock(return_value=project)

        response = client.post(
            '/api/projects',
            json={'organization_id': str(project.organization_id), 'name': 'Spring'},
        )

        assert response.status_code == 201
        assert response.json()['project']['name'] == 'Spring'
        org_id, data, user_id = services['project'].create.call_args.args
        assert org_id == project.organization_id
        assert 'organization_id' not in data
        assert user_id == IDENTITY.user_id

    def test_delete_forbidden(self, client, services):
        services['project'].delete = AsyncMock(
            side_effect=ForbiddenError('Insufficient permissions')
        )

        response = client.delete(f'/api/projects/{uuid4()}')

        assert response.status_code == 403
        assert response.json() == {'error': 'Insufficient permissions'}

    def test_get_missing(self, client, services):
        services['project'].get = AsyncMock(side_effect=NotFoundError('Project not found'))

        response = client.get(f'/api/projects/{uuid4()}')

        assert response.status_code == 404
        assert response.json() == {'error': 'Project not found'}

    def test_update_rejects_null_name(self, client, services):
        services['project'].update = AsyncMock()

        response = client.patch(f'/api/projects/{uuid4()}', json={'name': None})

        assert response.status_code == 400
        services['project'].update.assert_not_called()

    def test_update_allows_null_description(self, client, services):
        project = MagicMock(
            id=uuid4(),
            organization_id=uuid4(),
            description=None,
            created_by=IDENTITY.user_id,
            created_at=utc_now(),
            updated_at=utc_now(),
        )
        project.name = 'Spring'
        services['project'].update = AsyncMock(return_value=project)

        response = client.patch(
            f'/api/projects/{project.id}', json={'description': None}
        )

        assert response.status_code == 200
        _, data, _ = services['project'].update.call_args.args
        assert data == {'description': None}


class TestTechnicians:
    def test_list_page(self, client, services):
        services['technician'].list_page = AsyncMock(
            return_value={
                'data': [_technician()],
                'count': 26,
                'page': 2,
                'page_size': 25,
                'total_pages': 2,
            }
        )
        org_id = uuid4()

        response = client.get(
            f'/api/technicians/organization/{org_id}',
            params={
                'search': 'ana',
                'active': 'true',
                'sort_by': 'cost_amount',
                'sort_dir': 'desc',
                'page': 2,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body['count'] == 26
        assert body['total_pages'] == 2
        assert body['data'][0]['full_name'] == 'Ana Diaz'
        kwargs = services['technician'].list_page.call_args.kwargs
        assert kwargs['search'] == 'ana'
        assert kwargs['active'] is True
        assert kwargs['sort_desc'] is True
        assert kwargs['page'] == 2

    def test_page_size_is_bounded(self, client, services):
        response = client.get(
            f'/api/technicians/organization/{uuid4()}', params={'page_size': 500}
        )

        assert response.status_code == 400

    @pytest.mark.parametrize('color', ['green', '#12345', '#GGGGGG'])
    def test_invalid_color_rejected(self, client, services, color):
        services['technician'].create = AsyncMock()

        response = client.post(
            '/api/technicians',
            json={
                'organization_id': str(uuid4()),
                'full_name': 'Ana Diaz',
                'employment_type': 'employee',
                'color_hex': color,
            },
        )

        assert response.status_code == 400
        services['technician'].create.assert_not_called()

    def test_color_is_upper_cased(self, client, services):
        services['technician'].create = AsyncMock(
            return_value=_technician(color_hex='#ABCDEF')
        )

        response = client.post(
            '/api/technicians',
            json={
                'organization_id': str(uuid4()),
                'full_name': 'Ana Diaz',
                'employment_type': 'employee',
                'color_hex': '#abcdef',
            },
        )

        assert response.status_code == 201
        data = services['technician'].create.call_args.args[1]
        assert data['color_hex'] == '#ABCDEF'

    @pytest.mark.parametrize(
        'field', ['full_name', 'cost_basis', 'active', 'color_hex']
    )
    def test_update_rejects_null_required_field(self, client, services, field):
        services['technician'].update = AsyncMock()

        response = client.patch(f'/api/technicians/{uuid4()}', json={field: None})

        assert response.status_code == 400
        services['technician'].update.assert_not_called()


class TestLocations:
    def test_import(self, client, services):
        services['location'].import_locations = AsyncMock(
            return_value={
                'success': 1,
                'failed': 1,
                'errors': [{'row': 2, 'error': 'Missing required fields', 'data': {}}],
            }
        )
        org_id = uuid4()

        response = client.post(
            '/api/locations/import',
            json={'organization_id': str(org_id), 'locations': [{}, {}]},
        )

        assert response.status_code == 200
        assert response.json()['errors'][0]['row'] == 2
        services['location'].import_locations.assert_awaited_once_with(
            org_id, [{}, {}], IDENTITY.user_id
        )

    def test_import_requires_rows(self, client, services):
        services['location'].import_locations = AsyncMock()

        response = client.post(
            '/api/locations/import',
            json={'organization_id': str(uuid4()), 'locations': []},
        )

        assert response.status_code == 400
        services['location'].import_locations.assert_not_called()

    @pytest.mark.parametrize('field', ['country', 'name', 'city', 'is_active'])
    def test_update_rejects_null_required_field(self, client, services, field):
        services['location'].update = AsyncMock()

        response = client.put(f'/api/locations/{uuid4()}', json={field: None})

        assert response.status_code == 400
        assert field in response.json()['error']
        services['location'].update.assert_not_called()

    def test_geocode_bulk_requires_ids(self, client, services):
        response = client.post('/api/locations/geocode-bulk', json={'location_ids': []})

        assert response.status_code == 400

    def test_geocode_provider_down_is_502(self, client, services):
        services['location'].geocode_one = AsyncMock(side_effect=GeocodingError())

        response = client.post(f'/api/locations/{uuid4()}/geocode')

        assert response.status_code == 502
        assert response.json() == {'error': 'Geocoding provider unreachable'}


class TestProfiles:
    def test_me_includes_email(self, client, services):
        profile = MagicMock(
            id=IDENTITY.user_id,
            first_name='Alice',
            last_name=None,
            avatar_url=None,
            bio=None,
            created_at=utc_now(),
            updated_at=utc_now(),
        )
        services['profile'].get_me = AsyncMock(return_value=profile)

        response = client.get('/api/profiles/me')

        assert response.status_code == 200
        assert response.json()['email'] == 'alice@x.com'
        assert response.json()['first_name'] == 'Alice'

    def test_unknown_profile(self, client, services):
        services['profile'].get_profile = AsyncMock(
            side_effect=NotFoundError('Profile not found')
        )

        response = client.get(f'/api/profiles/{uuid4()}')

        assert response.status_code == 404
