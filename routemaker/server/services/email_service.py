"""Email service for sending transactional emails via Resend."""

import os

import resend

from routemaker.core.logger import routemaker_logger as logger
from routemaker.server.constants import INVITATION_EXPIRATION_DAYS, WEB_HOST

DEFAULT_FROM_EMAIL = 'RouteMaker <no-reply@routemaker.app>'


def build_invitation_url(token: str) -> str:
    return f'{WEB_HOST.rstrip("/")}/invite/{token}'


class EmailService:
    """Service for sending transactional emails."""

    @staticmethod
    def _configure_resend() -> bool:
        """Set the Resend API key from the environment.

        Returns:
            bool: True if emails can be sent, False otherwise
        """
        resend_api_key = os.environ.get('RESEND_API_KEY')
        if not resend_api_key:
            logger.warning('RESEND_API_KEY not configured, skipping email')
            return False

        resend.api_key = resend_api_key
        return True

    @staticmethod
    def send_invitation_email(
        to_email: str,
        org_name: str,
        inviter_name: str,
        role_name: str,
        invitation_token: str,
        invitation_id: str,
    ) -> bool:
        """Send an organization invitation email.

        Args:
            to_email: Recipient's email address
            org_name: Name of the organization
            inviter_name: Display name of the person who sent the invite
            role_name: Role being offered (e.g., 'member', 'admin')
            invitation_token: The secure invitation token
            invitation_id: The invitation ID for logging

        Returns:
            bool: True if Resend accepted the email, False if sending was skipped

        Raises:
            Exception: Whatever the Resend SDK raised; callers decide whether
            delivery failures matter
        """
        if not EmailService._configure_resend():
            return False

        invitation_url = build_invitation_url(invitation_token)
        from_email = os.environ.get('RESEND_FROM_EMAIL', DEFAULT_FROM_EMAIL)

        params = {
            'from': from_email,
            'to': [to_email],
            'subject': f"You've been invited to join {org_name} on RouteMaker",
            'html': f"""
            <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2 style="color: #111827;">Join {org_name} on RouteMaker</h2>

                <p><strong>{inviter_name}</strong> has invited you to join <strong>{org_name}</strong> as a <strong>{role_name}</strong>.</p>

                <p style="margin: 30px 0;">
                    <a href="{invitation_url}"
                       style="background-color: #22C55E; color: #ffffff; padding: 10px 18px;
                              text-decoration: none; border-radius: 6px; display: inline-block;
                              font-size: 14px; font-weight: 600;">
                        Accept Invitation
                    </a>
                </p>

                <p style="color: #6b7280; font-size: 14px;">
                    Or open this link in your browser:<br>
                    <a href="{invitation_url}">{invitation_url}</a>
                </p>

                <p style="color: #6b7280; font-size: 14px;">
                    This invitation expires in {INVITATION_EXPIRATION_DAYS} days. If you
                    weren't expecting it, you can ignore this email.
                </p>
            </div>
            """,
        }

        try:
            response = resend.Emails.send(params)
        except Exception as e:
            logger.error(
                'Failed to send invitation email',
                extra={
                    'invitation_id': invitation_id,
                    'email': to_email,
                    'error': str(e),
                },
            )
            raise

        logger.info(
            'Invitation email sent',
            extra={
                'invitation_id': invitation_id,
                'email': to_email,
                'response_id': response.get('id') if response else None,
            },
        )
        return True
