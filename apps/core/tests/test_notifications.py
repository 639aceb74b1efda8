"""
Tests for the email notification gateway.
"""

from datetime import timedelta
from smtplib import SMTPException
from unittest.mock import patch

import pytest
from django.core import mail
from django.utils import timezone

from apps.core.exceptions import NotificationError
from apps.core.notifications import NotificationGateway, get_notification_gateway


class TestSecurityCodesEmail:

    def test_sends_codes(self):
        codes = ['0A1B2C3D', 'DEADBEEF']

        get_notification_gateway().send_security_codes('reader@example.com', codes)

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.subject == 'Your SuperArticles Security Codes'
        assert message.to == ['reader@example.com']
        assert '1. 0A1B2C3D' in message.body
        assert '2. DEADBEEF' in message.body
        assert 'request new ones in 7 days' in message.body
        html, mimetype = message.alternatives[0]
        assert mimetype == 'text/html'
        assert 'DEADBEEF' in html

    def test_delivery_failure_raises(self):
        with patch('apps.core.notifications.send_mail', side_effect=SMTPException('refused')):
            with pytest.raises(NotificationError) as exc_info:
                NotificationGateway().send_security_codes('reader@example.com', ['0A1B2C3D'])

        assert exc_info.value.status_code == 502
        assert 'refused' in exc_info.value.message


@pytest.mark.django_db
class TestRenewalReminderEmail:

    def test_sends_to_owner(self, make_article, member):
        now = timezone.now()
        article = make_article(
            title='Storm: Weather Witch',
            next_renewal_date=now + timedelta(days=2, hours=1),
        )

        NotificationGateway().send_renewal_reminder(article, now=now)

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.subject == 'Your SuperArticles article needs renewal'
        assert message.to == [member.email]
        assert 'Storm: Weather Witch' in message.body
        assert 'in 3 days' in message.body
        assert article.public_url in message.body

    def test_days_left_counted_from_given_time(self, make_article):
        now = timezone.now()
        article = make_article(next_renewal_date=now + timedelta(days=6, hours=23))

        NotificationGateway().send_renewal_reminder(article, now=now - timedelta(days=1))

        assert 'in 8 days' in mail.outbox[0].body

    def test_partial_day_rounds_up(self, make_article):
        now = timezone.now()
        article = make_article(next_renewal_date=now + timedelta(hours=5))

        NotificationGateway().send_renewal_reminder(article, now=now)

        assert 'in 1 day ' in mail.outbox[0].body
