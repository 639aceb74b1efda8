"""
Tests for security code issuance and verification.

Tests cover:
- Code format and storage as digests
- Registration, including rollback when the email fails
- Single-use login codes
- The weekly code refresh window
"""

import re
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from django.core import mail
from django.utils import timezone

from apps.accounts.models import Member
from apps.accounts.services import (
    authenticate_with_code,
    find_code_slot,
    generate_security_codes,
    hash_security_code,
    refresh_security_codes,
    register_member,
)
from apps.core.exceptions import (
    AuthenticationFailedError,
    DuplicateError,
    ErrorCode,
    NotFoundError,
    NotificationError,
    RateLimitedError,
)


CODE_RE = re.compile(r'^[0-9A-F]{8}$')


@pytest.fixture
def gateway():
    """Notification gateway that records codes instead of emailing."""
    return MagicMock()


@pytest.fixture
def registered(db, gateway):
    """A registered member together with their plaintext codes."""
    return register_member('writer@example.com', gateway=gateway)


# ============================================================================
# Code helpers
# ============================================================================

class TestCodeHelpers:

    def test_batch_of_twenty_hex_codes(self):
        codes = generate_security_codes()

        assert len(codes) == 20
        assert all(CODE_RE.match(code) for code in codes)

    def test_digest_ignores_case_and_whitespace(self):
        assert hash_security_code(' deadbeef ') == hash_security_code('DEADBEEF')

    def test_find_code_slot(self):
        stored = [hash_security_code('AAAAAAAA'), None, hash_security_code('BBBBBBBB')]

        assert find_code_slot(stored, 'BBBBBBBB') == 2
        assert find_code_slot(stored, 'CCCCCCCC') is None
        assert find_code_slot([], 'AAAAAAAA') is None


# ============================================================================
# Registration
# ============================================================================

@pytest.mark.django_db
class TestRegistration:

    def test_creates_member_and_sends_codes(self, registered, gateway):
        member, codes = registered

        assert member.email == 'writer@example.com'
        assert len(codes) == 20
        assert member.codes_remaining == 20
        assert not member.has_usable_password()
        gateway.send_security_codes.assert_called_once_with('writer@example.com', codes)

    def test_stores_digests_only(self, registered):
        member, codes = registered
        member.refresh_from_db()

        assert set(member.security_codes).isdisjoint(codes)
        assert member.security_codes[0] == hash_security_code(codes[0])

    def test_email_is_normalized(self, gateway):
        member, _ = register_member('  Writer@Example.COM ', gateway=gateway)
        assert member.email == 'writer@example.com'

    def test_duplicate_email(self, registered, gateway):
        with pytest.raises(DuplicateError) as exc_info:
            register_member('WRITER@example.com', gateway=gateway)

        assert exc_info.value.error_code == ErrorCode.ALREADY_EXISTS
        assert exc_info.value.status_code == 409

    def test_rolled_back_when_email_fails(self, gateway):
        gateway.send_security_codes.side_effect = NotificationError("Failed to send email")

        with pytest.raises(NotificationError):
            register_member('writer@example.com', gateway=gateway)

        assert not Member.objects.filter(email='writer@example.com').exists()

    def test_default_gateway_sends_email(self, db):
        register_member('mailbox@example.com')

        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['mailbox@example.com']


# ============================================================================
# Login
# ============================================================================

@pytest.mark.django_db
class TestAuthenticateWithCode:

    def test_valid_code(self, registered):
        member, codes = registered

        authenticated, remaining = authenticate_with_code('writer@example.com', codes[3])

        assert authenticated.pk == member.pk
        assert remaining == 19
        assert authenticated.last_login is not None
        member.refresh_from_db()
        assert member.security_codes[3] is None

    def test_code_works_only_once(self, registered):
        _, codes = registered
        authenticate_with_code('writer@example.com', codes[0])

        with pytest.raises(AuthenticationFailedError) as exc_info:
            authenticate_with_code('writer@example.com', codes[0])

        assert exc_info.value.error_code == ErrorCode.INVALID_SECURITY_CODE
        assert exc_info.value.message == 'Invalid security code'

    def test_lowercase_code_accepted(self, registered):
        _, codes = registered
        _, remaining = authenticate_with_code('Writer@Example.com', codes[1].lower())
        assert remaining == 19

    def test_wrong_code(self, registered):
        with pytest.raises(AuthenticationFailedError):
            authenticate_with_code('writer@example.com', 'ZZZZZZZZ')

    def test_unknown_email(self, db):
        with pytest.raises(AuthenticationFailedError) as exc_info:
            authenticate_with_code('nobody@example.com', 'DEADBEEF')

        assert exc_info.value.error_code == ErrorCode.INVALID_CREDENTIALS
        assert exc_info.value.message == 'Invalid credentials'

    def test_inactive_member_rejected(self, registered):
        member, codes = registered
        Member.objects.filter(pk=member.pk).update(is_active=False)

        with pytest.raises(AuthenticationFailedError):
            authenticate_with_code('writer@example.com', codes[0])

    def test_all_codes_spent(self, registered):
        _, codes = registered
        for code in codes:
            _, remaining = authenticate_with_code('writer@example.com', code)

        assert remaining == 0


# ============================================================================
# Refresh
# ============================================================================

@pytest.mark.django_db
class TestRefreshSecurityCodes:

    def test_first_refresh_allowed_immediately(self, registered, gateway):
        member, old_codes = registered
        gateway.reset_mock()

        refreshed = refresh_security_codes('writer@example.com', gateway=gateway)

        new_codes = gateway.send_security_codes.call_args[0][1]
        assert len(new_codes) == 20
        assert refreshed.codes_remaining == 20
        assert refreshed.next_refresh_allowed > timezone.now() + timedelta(days=6)

        with pytest.raises(AuthenticationFailedError):
            authenticate_with_code('writer@example.com', old_codes[0])
        _, remaining = authenticate_with_code('writer@example.com', new_codes[0])
        assert remaining == 19

    def test_second_refresh_blocked_for_a_week(self, registered, gateway):
        refresh_security_codes('writer@example.com', gateway=gateway)

        with pytest.raises(RateLimitedError) as exc_info:
            refresh_security_codes('writer@example.com', gateway=gateway)

        assert exc_info.value.message == 'Please wait 7 day(s) before requesting new codes'
        assert exc_info.value.error_details == {'days_left': 7}

    def test_days_left_rounds_up(self, registered, gateway):
        member, _ = registered
        Member.objects.filter(pk=member.pk).update(
            next_refresh_allowed=timezone.now() + timedelta(days=2, hours=3),
        )

        with pytest.raises(RateLimitedError) as exc_info:
            refresh_security_codes('writer@example.com', gateway=gateway)

        assert exc_info.value.error_details == {'days_left': 3}

    def test_unknown_email(self, db, gateway):
        with pytest.raises(NotFoundError) as exc_info:
            refresh_security_codes('nobody@example.com', gateway=gateway)

        assert exc_info.value.message == 'User not found'
