"""Tests for role resolution and the require_permission dependency."""

from uuid import UUID, uuid4

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from routemaker.server.auth.authorization import (
    PERMISSION_MIN_ROLE,
    AuthorizationResult,
    MembershipAuthority,
    Permission,
    RoleName,
    get_membership_authority,
    meets,
    parse_role,
    require_permission,
)
from routemaker.server.auth.user_auth import UserIdentity, get_user_identity


class TestRoleHierarchy:
    def test_parse_role(self):
        assert parse_role('admin') == RoleName.ADMIN
        assert parse_role('superuser') is None
        assert parse_role(None) is None

    @pytest.mark.parametrize(
        'role,min_role,expected',
        [
            (RoleName.MEMBER, RoleName.MEMBER, True),
            (RoleName.MEMBER, RoleName.ADMIN, False),
            (RoleName.ADMIN, RoleName.ADMIN, True),
            (RoleName.OWNER, RoleName.ADMIN, True),
            (RoleName.ADMIN, RoleName.OWNER, False),
            (None, RoleName.MEMBER, False),
        ],
    )
    def test_meets(self, role, min_role, expected):
        assert meets(role, min_role) is expected

    def test_every_permission_has_a_minimum_role(self):
        assert set(PERMISSION_MIN_ROLE) == set(Permission)
        assert PERMISSION_MIN_ROLE[Permission.DELETE_ORGANIZATION] == RoleName.OWNER


class TestMembershipAuthority:
    async def test_check_role(self, authority, add_member, acme):
        org, owner = acme
        admin = await add_member(org, 'admin')
        member = await add_member(org, 'member')

        assert (
            await authority.check_role(member.user_id, org.id, RoleName.ADMIN)
            == AuthorizationResult.INSUFFICIENT_ROLE
        )
        assert (
            await authority.check_role(admin.user_id, org.id, RoleName.ADMIN)
            == AuthorizationResult.OK
        )
        assert (
            await authority.check_role(owner.user_id, org.id, RoleName.ADMIN)
            == AuthorizationResult.OK
        )
        assert (
            await authority.check_role(uuid4(), org.id, RoleName.MEMBER)
            == AuthorizationResult.NOT_A_MEMBER
        )

    async def test_unknown_stored_role_is_denied(self, authority, add_member, acme):
        org, _ = acme
        odd = await add_member(org, 'superuser')

        assert await authority.resolve_role(odd.user_id, org.id) is None
        assert (
            await authority.check_role(odd.user_id, org.id, RoleName.MEMBER)
            == AuthorizationResult.INSUFFICIENT_ROLE
        )


class FakeAuthority:
    def __init__(self, result: AuthorizationResult):
        self.result = result

    async def check_permission(self, user_id, org_id, permission):
        return self.result


def _client(result: AuthorizationResult, identity: UserIdentity) -> TestClient:
    app = FastAPI()

    @app.get('/orgs/{org_id}')
    async def guarded(
        org_id: UUID,
        caller: UserIdentity = Depends(require_permission(Permission.EDIT_ORGANIZATION)),
    ):
        return {'user_id': str(caller.user_id)}

    app.dependency_overrides[get_user_identity] = lambda: identity
    app.dependency_overrides[get_membership_authority] = lambda: FakeAuthority(result)
    return TestClient(app)


class TestRequirePermission:
    def test_authorized_caller_gets_identity(self):
        identity = UserIdentity(user_id=uuid4(), email='a@x.com')

        response = _client(AuthorizationResult.OK, identity).get(f'/orgs/{uuid4()}')

        assert response.status_code == 200
        assert response.json() == {'user_id': str(identity.user_id)}

    def test_non_member(self):
        identity = UserIdentity(user_id=uuid4(), email='a@x.com')

        response = _client(AuthorizationResult.NOT_A_MEMBER, identity).get(
            f'/orgs/{uuid4()}'
        )

        assert response.status_code == 403
        assert response.json()['detail'] == 'Not a member of this organization'

    def test_insufficient_role(self):
        identity = UserIdentity(user_id=uuid4(), email='a@x.com')

        response = _client(AuthorizationResult.INSUFFICIENT_ROLE, identity).get(
            f'/orgs/{uuid4()}'
        )

        assert response.status_code == 403
        assert response.json()['detail'] == 'Insufficient permissions'


async def test_membership_authority_dependency(session_maker):
    authority = get_membership_authority(session_maker)

    assert isinstance(authority, MembershipAuthority)
    assert authority.member_store.session_maker is session_maker
