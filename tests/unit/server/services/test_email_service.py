"""Tests for EmailService."""

import os
from unittest.mock import patch

import pytest

from routemaker.server.services.email_service import (
    EmailService,
    build_invitation_url,
)


def _send(**overrides):
    kwargs = {
        'to_email': 'bob@x.com',
        'org_name': 'Acme',
        'inviter_name': 'alice',
        'role_name': 'member',
        'invitation_token': 'inv-abc123',
        'invitation_id': 'invitation-1',
    }
    kwargs.update(overrides)
    return EmailService.send_invitation_email(**kwargs)


class TestSendInvitationEmail:
    def test_skips_without_api_key(self):
        with (
            patch.dict(os.environ, {}, clear=True),
            patch('routemaker.server.services.email_service.resend') as mock_resend,
        ):
            assert _send() is False
            mock_resend.Emails.send.assert_not_called()

    def test_sends_invitation(self):
        with (
            patch.dict(os.environ, {'RESEND_API_KEY': 're_test'}, clear=True),
            patch('routemaker.server.services.email_service.resend') as mock_resend,
        ):
            mock_resend.Emails.send.return_value = {'id': 'email-1'}

            assert _send() is True

            assert mock_resend.api_key == 're_test'
            params = mock_resend.Emails.send.call_args.args[0]
            assert params['to'] == ['bob@x.com']
            assert params['subject'] == "You've been invited to join Acme on RouteMaker"
            assert build_invitation_url('inv-abc123') in params['html']
            assert '<strong>alice</strong>' in params['html']

    def test_custom_from_address(self):
        with (
            patch.dict(
                os.environ,
                {'RESEND_API_KEY': 're_test', 'RESEND_FROM_EMAIL': 'Ops <ops@x.com>'},
                clear=True,
            ),
            patch('routemaker.server.services.email_service.resend') as mock_resend,
        ):
            _send()
            assert mock_resend.Emails.send.call_args.args[0]['from'] == 'Ops <ops@x.com>'

    def test_send_failure_propagates(self):
        with (
            patch.dict(os.environ, {'RESEND_API_KEY': 're_test'}, clear=True),
            patch('routemaker.server.services.email_service.resend') as mock_resend,
        ):
            mock_resend.Emails.send.side_effect = RuntimeError('rate limited')

            with pytest.raises(RuntimeError):
                _send()


def test_invitation_url_points_at_accept_page():
    with patch('routemaker.server.services.email_service.WEB_HOST', 'https://app.x.com/'):
        assert build_invitation_url('inv-abc') == 'https://app.x.com/invite/inv-abc'
