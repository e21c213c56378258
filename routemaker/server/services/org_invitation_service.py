"""Service for managing organization invitations."""

import asyncio
from dataclasses import dataclass
from uuid import UUID

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.auth.authorization import (
    AuthorizationResult,
    MembershipAuthority,
    RoleName,
    parse_role,
)
from routemaker.server.errors import ValidationError
from routemaker.server.routes.org_invitation_models import (
    EmailMismatchError,
    InsufficientPermissionError,
    InvitationExpiredError,
    InvitationInvalidError,
    InvitationNotFoundError,
    UserAlreadyMemberError,
)
from routemaker.server.routes.org_models import OrgNotFoundError
from routemaker.server.services.email_service import EmailService
from routemaker.storage.org import Org
from routemaker.storage.org_invitation import OrgInvitation
from routemaker.storage.org_invitation_store import (
    REASON_ALREADY_MEMBER,
    REASON_EMAIL_MISMATCH,
    REASON_EXPIRED,
    REASON_NOT_FOUND,
    OrgInvitationStore,
)
from routemaker.storage.org_member_store import OrgMemberStore
from routemaker.storage.org_store import OrgStore


def _token_prefix(token: str) -> str:
    return token[:10] + '...' if len(token) > 10 else token


@dataclass
class OrgInvitationService:
    """Service for organization invitation operations."""

    org_store: OrgStore
    member_store: OrgMemberStore
    invitation_store: OrgInvitationStore
    authority: MembershipAuthority

    async def _authorize_inviter(
        self, org_id: UUID, inviter_id: UUID, role_name: str
    ) -> tuple[Org, RoleName]:
        """Validate the organization, the inviter's role and the offered role.

        Returns:
            (organization, role to grant)
        """
        target_role = parse_role(role_name.lower().strip())
        if target_role is None:
            raise ValidationError(f'Invalid role: {role_name}')

        org = await self.org_store.get_org_by_id(org_id)
        if not org:
            raise OrgNotFoundError(str(org_id))

        inviter_role = await self.authority.resolve_role(inviter_id, org_id)
        if inviter_role is None:
            raise InsufficientPermissionError('Not a member of this organization')
        if inviter_role not in (RoleName.OWNER, RoleName.ADMIN):
            raise InsufficientPermissionError('Insufficient permissions')
        if target_role == RoleName.OWNER and inviter_role != RoleName.OWNER:
            raise InsufficientPermissionError('Only owners can invite with owner role')

        return org, target_role

    async def _send_email(
        self, invitation: OrgInvitation, org_name: str, inviter_name: str
    ) -> None:
        # Delivery failures never undo the invitation
        try:
            await asyncio.to_thread(
                EmailService.send_invitation_email,
                to_email=invitation.email,
                org_name=org_name,
                inviter_name=inviter_name,
                role_name=invitation.role,
                invitation_token=invitation.token,
                invitation_id=str(invitation.id),
            )
        except Exception as e:
            logger.error(
                'Failed to send invitation email',
                extra={
                    'invitation_id': str(invitation.id),
                    'email': invitation.email,
                    'error': str(e),
                },
            )

    async def _create_for_email(
        self,
        org: Org,
        email: str,
        role: RoleName,
        inviter_id: UUID,
        inviter_name: str,
    ) -> tuple[OrgInvitation, bool]:
        if await self.member_store.get_org_member_by_email(org.id, email):
            raise UserAlreadyMemberError()

        existing = await self.invitation_store.get_pending_invitation(org.id, email)
        if existing and await self.invitation_store.mark_expired_if_needed(existing):
            existing = None

        if existing:
            logger.info(
                'Re-sending existing pending invitation',
                extra={'invitation_id': str(existing.id), 'org_id': str(org.id)},
            )
            await self._send_email(existing, org.name, inviter_name)
            return existing, False

        invitation, created = await self.invitation_store.create_invitation(
            org_id=org.id,
            email=email,
            role=role.value,
            inviter_id=inviter_id,
        )
        await self._send_email(invitation, org.name, inviter_name)
        return invitation, created

    async def create_invitation(
        self,
        org_id: UUID,
        email: str,
        role_name: str,
        inviter_id: UUID,
        inviter_email: str | None = None,
    ) -> tuple[OrgInvitation, bool]:
        """Create an invitation, or return the pending one for the same email.

        Returns:
            (invitation, created): created is False when an existing pending
            invitation was returned and its email re-sent

        Raises:
            ValidationError: If the role is not a valid role name
            OrgNotFoundError: If the organization does not exist
            InsufficientPermissionError: If the inviter lacks permission
            UserAlreadyMemberError: If the email already belongs to a member
        """
        email = email.lower().strip()

        logger.info(
            'Creating organization invitation',
            extra={
                'org_id': str(org_id),
                'email': email,
                'role_name': role_name,
                'inviter_id': str(inviter_id),
            },
        )

        org, target_role = await self._authorize_inviter(org_id, inviter_id, role_name)
        return await self._create_for_email(
            org, email, target_role, inviter_id, _inviter_name(inviter_email)
        )

    async def create_invitations_batch(
        self,
        org_id: UUID,
        emails: list[str],
        role_name: str,
        inviter_id: UUID,
        inviter_email: str | None = None,
    ) -> tuple[list[OrgInvitation], list[tuple[str, str]]]:
        """Create invitations for several emails.

        Permissions are validated once upfront; each email then succeeds or
        fails on its own.

        Returns:
            Tuple of (successful_invitations, failed_emails_with_errors)
        """
        logger.info(
            'Creating batch organization invitations',
            extra={
                'org_id': str(org_id),
                'email_count': len(emails),
                'role_name': role_name,
                'inviter_id': str(inviter_id),
            },
        )

        org, target_role = await self._authorize_inviter(org_id, inviter_id, role_name)
        inviter_name = _inviter_name(inviter_email)

        successful: list[OrgInvitation] = []
        failed: list[tuple[str, str]] = []
        seen: set[str] = set()
        for raw_email in emails:
            email = raw_email.lower().strip()
            if email in seen:
                continue
            seen.add(email)
            try:
                invitation, _ = await self._create_for_email(
                    org, email, target_role, inviter_id, inviter_name
                )
                successful.append(invitation)
            except UserAlreadyMemberError as e:
                failed.append((email, str(e)))

        logger.info(
            'Batch invitation creation completed',
            extra={
                'org_id': str(org_id),
                'successful': len(successful),
                'failed': len(failed),
            },
        )
        return successful, failed

    async def list_invitations(
        self, org_id: UUID, actor_id: UUID
    ) -> list[OrgInvitation]:
        result = await self.authority.check_role(actor_id, org_id, RoleName.ADMIN)
        if result == AuthorizationResult.NOT_A_MEMBER:
            raise InsufficientPermissionError('Not a member of this organization')
        if result == AuthorizationResult.INSUFFICIENT_ROLE:
            raise InsufficientPermissionError()
        return await self.invitation_store.list_org_invitations(org_id)

    async def get_invitation_by_token(self, token: str) -> OrgInvitation:
        """Look up a pending invitation for display to its recipient.

        Raises:
            InvitationNotFoundError: If the token is unknown
            InvitationExpiredError: If the invitation expired (it is marked so)
            InvitationInvalidError: If the invitation is no longer pending
        """
        invitation = await self.invitation_store.get_invitation_by_token(token)
        if not invitation:
            raise InvitationNotFoundError()

        if await self.invitation_store.mark_expired_if_needed(invitation):
            raise InvitationExpiredError()

        if invitation.status != OrgInvitation.STATUS_PENDING:
            raise InvitationInvalidError()

        return invitation

    async def accept_invitation(self, token: str, user_id: UUID, email: str) -> UUID:
        """Accept an invitation on behalf of the authenticated identity.

        Returns:
            UUID: The organization the user joined

        Raises:
            InvitationNotFoundError: If the token is unknown
            InvitationExpiredError: If the invitation has expired
            InvitationInvalidError: If the invitation is not pending
            EmailMismatchError: If the identity's email differs from the invitation
            UserAlreadyMemberError: If the user already belongs to the organization
        """
        logger.info(
            'Accepting organization invitation',
            extra={'token_prefix': _token_prefix(token), 'user_id': str(user_id)},
        )

        result = await self.invitation_store.accept_invitation(token, user_id, email)
        if result.success:
            return result.organization_id

        logger.warning(
            'Invitation acceptance rejected',
            extra={
                'token_prefix': _token_prefix(token),
                'user_id': str(user_id),
                'reason': result.reason,
            },
        )
        if result.reason == REASON_NOT_FOUND:
            raise InvitationNotFoundError()
        if result.reason == REASON_EXPIRED:
            raise InvitationExpiredError()
        if result.reason == REASON_EMAIL_MISMATCH:
            raise EmailMismatchError()
        if result.reason == REASON_ALREADY_MEMBER:
            raise UserAlreadyMemberError(result.error)
        raise InvitationInvalidError(result.error)

    async def revoke_invitation(self, invitation_id: UUID, actor_id: UUID) -> None:
        invitation = await self.invitation_store.get_invitation_by_id(invitation_id)
        if not invitation:
            raise InvitationNotFoundError()

        result = await self.authority.check_role(
            actor_id, invitation.organization_id, RoleName.ADMIN
        )
        if result != AuthorizationResult.OK:
            raise InsufficientPermissionError()

        await self.invitation_store.revoke_invitation(invitation_id)


def _inviter_name(inviter_email: str | None) -> str:
    if inviter_email:
        return inviter_email.split('@')[0]
    return 'A team member'
