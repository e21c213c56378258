"""
Store class for managing organization invitations.
"""

import secrets
import string
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import INVITATION_EXPIRATION_DAYS
from routemaker.storage.base import utc_now
from routemaker.storage.org_invitation import OrgInvitation
from routemaker.storage.org_member import OrgMember

# Invitation token configuration
INVITATION_TOKEN_PREFIX = 'inv-'
INVITATION_TOKEN_LENGTH = 48  # Total length will be 52 with prefix

# Reasons reported by accept_invitation
REASON_NOT_FOUND = 'not_found'
REASON_NOT_PENDING = 'not_pending'
REASON_EXPIRED = 'expired'
REASON_EMAIL_MISMATCH = 'email_mismatch'
REASON_ALREADY_MEMBER = 'already_member'


@dataclass
class AcceptInvitationResult:
    success: bool
    error: Optional[str] = None
    reason: Optional[str] = None
    organization_id: Optional[UUID] = None


def _failure(reason: str, error: str) -> AcceptInvitationResult:
    return AcceptInvitationResult(success=False, error=error, reason=reason)


@dataclass
class OrgInvitationStore:
    """Store for managing organization invitations."""

    session_maker: async_sessionmaker[AsyncSession]

    @staticmethod
    def generate_token(length: int = INVITATION_TOKEN_LENGTH) -> str:
        """Generate a secure invitation token.

        Args:
            length: Length of the random part of the token

        Returns:
            str: Token with prefix (e.g., 'inv-aBcDeF123...')
        """
        alphabet = string.ascii_letters + string.digits
        random_part = ''.join(secrets.choice(alphabet) for _ in range(length))
        return f'{INVITATION_TOKEN_PREFIX}{random_part}'

    @staticmethod
    def is_token_expired(invitation: OrgInvitation) -> bool:
        # Database stores naive UTC
        return invitation.expires_at < utc_now()

    async def create_invitation(
        self,
        org_id: UUID,
        email: str,
        role: str,
        inviter_id: UUID,
        expiration_days: int = INVITATION_EXPIRATION_DAYS,
    ) -> tuple[OrgInvitation, bool]:
        """Create a pending invitation.

        When a concurrent request already created the pending invitation for
        the same email, that invitation is returned instead.

        Returns:
            (invitation, created): created is False when an existing pending
            invitation was returned
        """
        email = email.lower().strip()
        expires_at = utc_now() + timedelta(days=expiration_days)

        async with self.session_maker() as session:
            invitation = OrgInvitation(
                token=self.generate_token(),
                organization_id=org_id,
                email=email,
                role=role,
                invited_by=inviter_id,
                status=OrgInvitation.STATUS_PENDING,
                expires_at=expires_at,
            )
            session.add(invitation)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                existing = await self.get_pending_invitation(org_id, email)
                if existing is None:
                    raise
                logger.info(
                    'Pending invitation already exists',
                    extra={'org_id': str(org_id), 'email': email},
                )
                return existing, False

            result = await session.execute(
                select(OrgInvitation)
                .options(joinedload(OrgInvitation.org))
                .filter(OrgInvitation.id == invitation.id)
            )
            invitation = result.scalars().first()

            logger.info(
                'Created organization invitation',
                extra={
                    'invitation_id': str(invitation.id),
                    'org_id': str(org_id),
                    'email': email,
                    'inviter_id': str(inviter_id),
                    'expires_at': expires_at.isoformat(),
                },
            )
            return invitation, True

    async def get_invitation_by_token(self, token: str) -> Optional[OrgInvitation]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgInvitation)
                .options(joinedload(OrgInvitation.org))
                .filter(OrgInvitation.token == token)
            )
            return result.scalars().first()

    async def get_invitation_by_id(
        self, invitation_id: UUID
    ) -> Optional[OrgInvitation]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgInvitation).filter(OrgInvitation.id == invitation_id)
            )
            return result.scalars().first()

    async def get_pending_invitation(
        self, org_id: UUID, email: str
    ) -> Optional[OrgInvitation]:
        """Get the pending invitation for an email in an organization."""
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgInvitation)
                .options(joinedload(OrgInvitation.org))
                .filter(
                    and_(
                        OrgInvitation.organization_id == org_id,
                        OrgInvitation.email == email.lower().strip(),
                        OrgInvitation.status == OrgInvitation.STATUS_PENDING,
                    )
                )
            )
            return result.scalars().first()

    async def list_org_invitations(self, org_id: UUID) -> list[OrgInvitation]:
        """Pending and expired invitations of an organization, newest first."""
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgInvitation)
                .filter(
                    OrgInvitation.organization_id == org_id,
                    or_(
                        OrgInvitation.status == OrgInvitation.STATUS_PENDING,
                        OrgInvitation.status == OrgInvitation.STATUS_EXPIRED,
                    ),
                )
                .order_by(OrgInvitation.created_at.desc())
            )
            return list(result.scalars().all())

    async def update_invitation_status(
        self, invitation_id: UUID, status: str
    ) -> Optional[OrgInvitation]:
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgInvitation).filter(OrgInvitation.id == invitation_id)
            )
            invitation = result.scalars().first()
            if not invitation:
                return None

            old_status = invitation.status
            invitation.status = status
            await session.commit()
            await session.refresh(invitation)

            logger.info(
                'Updated invitation status',
                extra={
                    'invitation_id': str(invitation_id),
                    'old_status': old_status,
                    'new_status': status,
                },
            )
            return invitation

    async def revoke_invitation(self, invitation_id: UUID) -> Optional[OrgInvitation]:
        return await self.update_invitation_status(
            invitation_id, OrgInvitation.STATUS_REVOKED
        )

    async def mark_expired_if_needed(self, invitation: OrgInvitation) -> bool:
        """Mark a pending invitation as expired once its deadline passed.

        The update only touches rows still pending, so repeated or concurrent
        calls leave the same end state.

        Returns:
            bool: True if the invitation is (now) expired
        """
        if invitation.status != OrgInvitation.STATUS_PENDING:
            return invitation.status == OrgInvitation.STATUS_EXPIRED
        if not self.is_token_expired(invitation):
            return False

        async with self.session_maker() as session:
            await session.execute(
                update(OrgInvitation)
                .where(
                    OrgInvitation.id == invitation.id,
                    OrgInvitation.status == OrgInvitation.STATUS_PENDING,
                )
                .values(status=OrgInvitation.STATUS_EXPIRED, updated_at=utc_now())
            )
            await session.commit()

        invitation.status = OrgInvitation.STATUS_EXPIRED
        logger.info(
            'Marked invitation as expired',
            extra={'invitation_id': str(invitation.id)},
        )
        return True

    async def accept_invitation(
        self, token: str, user_id: UUID, email: str
    ) -> AcceptInvitationResult:
        """Exchange an invitation token for a membership.

        Validation, membership creation and the status change happen in one
        transaction with the invitation row locked, so an invitation can be
        accepted at most once.
        """
        async with self.session_maker() as session:
            result = await session.execute(
                select(OrgInvitation)
                .filter(OrgInvitation.token == token)
                .with_for_update()
            )
            invitation = result.scalars().first()
            if not invitation:
                return _failure(REASON_NOT_FOUND, 'Invitation not found')

            if invitation.status != OrgInvitation.STATUS_PENDING:
                return _failure(
                    REASON_NOT_PENDING,
                    f'Invitation has already been {invitation.status}',
                )

            if self.is_token_expired(invitation):
                invitation.status = OrgInvitation.STATUS_EXPIRED
                await session.commit()
                return _failure(REASON_EXPIRED, 'Invitation has expired')

            normalized_email = (email or '').lower().strip()
            if invitation.email.lower() != normalized_email:
                return _failure(
                    REASON_EMAIL_MISMATCH,
                    'Your email does not match the invitation',
                )

            org_id = invitation.organization_id
            existing = await session.execute(
                select(OrgMember.id).filter(
                    OrgMember.organization_id == org_id,
                    OrgMember.user_id == user_id,
                )
            )
            if existing.first() is not None:
                return _failure(
                    REASON_ALREADY_MEMBER,
                    'You are already a member of this organization',
                )

            session.add(
                OrgMember(
                    organization_id=org_id,
                    user_id=user_id,
                    email=normalized_email,
                    role=invitation.role,
                )
            )
            invitation.status = OrgInvitation.STATUS_ACCEPTED
            invitation.accepted_at = utc_now()
            invitation.accepted_by = user_id
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return _failure(
                    REASON_ALREADY_MEMBER,
                    'You are already a member of this organization',
                )

            logger.info(
                'Invitation accepted',
                extra={
                    'invitation_id': str(invitation.id),
                    'org_id': str(org_id),
                    'user_id': str(user_id),
                    'role': invitation.role,
                },
            )
            return AcceptInvitationResult(success=True, organization_id=org_id)
