"""
Security code issuance and verification.

Codes are 8 uppercase hex characters issued in batches. Only a keyed
digest of each code is stored; verification hashes the candidate and
compares it against every unused slot in constant time.
"""

import logging
import math
from datetime import timedelta
from typing import List, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare, get_random_string, salted_hmac

from apps.core.exceptions import (
    AuthenticationFailedError,
    DuplicateError,
    ErrorCode,
    NotFoundError,
    RateLimitedError,
)
from apps.core.notifications import NotificationGateway, get_notification_gateway

from .models import Member

logger = logging.getLogger(__name__)

CODE_LENGTH = 8
CODE_ALPHABET = '0123456789ABCDEF'
CODE_DIGEST_SALT = 'apps.accounts.security_code'


def generate_security_codes(count: Optional[int] = None) -> List[str]:
    """Return a fresh batch of plaintext codes."""
    count = count or settings.SECURITY_CODE_BATCH_SIZE
    return [get_random_string(CODE_LENGTH, CODE_ALPHABET) for _ in range(count)]


def hash_security_code(code: str) -> str:
    return salted_hmac(CODE_DIGEST_SALT, code.strip().upper()).hexdigest()


def find_code_slot(stored: List[Optional[str]], code: str) -> Optional[int]:
    """
    Index of the unused slot matching ``code``, or None.

    Every slot is compared so timing does not reveal the position.
    """
    candidate = hash_security_code(code)
    match = None
    for index, digest in enumerate(stored or []):
        if digest and constant_time_compare(digest, candidate) and match is None:
            match = index
    return match


def _issue_codes(member: Member, now) -> List[str]:
    codes = generate_security_codes()
    member.security_codes = [hash_security_code(code) for code in codes]
    member.last_code_refresh = now
    return codes


def register_member(email: str, gateway: Optional[NotificationGateway] = None) -> Tuple[Member, List[str]]:
    """
    Create a member and email the first batch of codes.

    The member row is rolled back if the email cannot be sent, so the
    address can register again.
    """
    gateway = gateway or get_notification_gateway()
    email = Member.objects.normalize_email(email)

    if Member.objects.filter(email=email).exists():
        raise DuplicateError("User already exists", code=ErrorCode.ALREADY_EXISTS, field='email')

    now = timezone.now()
    with transaction.atomic():
        member = Member.objects.create_user(email=email, next_refresh_allowed=now)
        codes = _issue_codes(member, now)
        member.save(update_fields=['security_codes', 'last_code_refresh', 'updated_at'])
        gateway.send_security_codes(email, codes)

    logger.info("Registered member %s", member.pk, extra={'member_id': str(member.pk)})
    return member, codes


def authenticate_with_code(email: str, code: str) -> Tuple[Member, int]:
    """
    Consume ``code`` and return the member with the number of codes left.

    The member row is locked for the duration so two concurrent logins
    cannot both spend the same code.
    """
    email = Member.objects.normalize_email(email)

    with transaction.atomic():
        member = (
            Member.objects.select_for_update()
            .filter(email=email, is_active=True)
            .first()
        )
        if member is None:
            raise AuthenticationFailedError("Invalid credentials")

        slot = find_code_slot(member.security_codes, code or '')
        if slot is None:
            logger.warning(
                "Rejected security code for member %s", member.pk,
                extra={'member_id': str(member.pk)},
            )
            raise AuthenticationFailedError(
                "Invalid security code",
                code=ErrorCode.INVALID_SECURITY_CODE,
                field='security_code',
            )

        codes = list(member.security_codes)
        codes[slot] = None
        member.security_codes = codes
        member.last_login = timezone.now()
        member.save(update_fields=['security_codes', 'last_login', 'updated_at'])

    return member, member.codes_remaining


def refresh_security_codes(email: str, gateway: Optional[NotificationGateway] = None) -> Member:
    """
    Replace a member's codes with a new batch.

    Allowed once per SECURITY_CODE_REFRESH_DAYS; the whole previous batch
    stops working.
    """
    gateway = gateway or get_notification_gateway()
    email = Member.objects.normalize_email(email)
    now = timezone.now()

    with transaction.atomic():
        member = Member.objects.select_for_update().filter(email=email).first()
        if member is None:
            raise NotFoundError("User not found")

        if member.next_refresh_allowed and now < member.next_refresh_allowed:
            days_left = math.ceil((member.next_refresh_allowed - now).total_seconds() / 86400)
            raise RateLimitedError(
                f"Please wait {days_left} day(s) before requesting new codes",
                details={'days_left': days_left},
            )

        codes = _issue_codes(member, now)
        member.next_refresh_allowed = now + timedelta(days=settings.SECURITY_CODE_REFRESH_DAYS)
        member.save(update_fields=[
            'security_codes', 'last_code_refresh', 'next_refresh_allowed', 'updated_at',
        ])
        gateway.send_security_codes(email, codes)

    logger.info("Issued new security codes for member %s", member.pk)
    return member
