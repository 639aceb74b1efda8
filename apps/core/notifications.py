"""
Email notifications for SuperArticles.

All outgoing mail goes through NotificationGateway so views and the
lifecycle sweep never talk to the mail backend directly. Delivery uses
Django's mail API; the backend is chosen by EMAIL_BACKEND.
"""

import logging
from typing import List

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils import timezone

from apps.articles.lifecycle import days_until
from apps.core.exceptions import NotificationError
from apps.core.observability import timed

logger = logging.getLogger(__name__)


class NotificationGateway:
    """
    Sends security codes and renewal reminders.

    Every send raises NotificationError on delivery failure so callers can
    roll back whatever state the message was supposed to announce.
    """

    SECURITY_CODES_SUBJECT = 'Your SuperArticles Security Codes'
    RENEWAL_REMINDER_SUBJECT = 'Your SuperArticles article needs renewal'

    def __init__(self, from_email=None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    @timed('notifications.send')
    def _send(self, subject: str, template: str, context: dict, recipient: str) -> None:
        text_body = render_to_string(f'emails/{template}.txt', context)
        html_body = render_to_string(f'emails/{template}.html', context)

        try:
            send_mail(
                subject,
                text_body,
                self.from_email,
                [recipient],
                html_message=html_body,
                fail_silently=False,
            )
        except Exception as e:
            logger.error(
                "Failed to send %s email: %s", template, e,
                extra={'template': template},
            )
            raise NotificationError(f"Failed to send email: {e}") from e

        logger.info("Sent %s email", template, extra={'template': template})

    def send_security_codes(self, email: str, codes: List[str]) -> None:
        """Email a freshly issued batch of security codes."""
        self._send(
            self.SECURITY_CODES_SUBJECT,
            'security_codes',
            {
                'codes': codes,
                'code_count': len(codes),
                'refresh_days': settings.SECURITY_CODE_REFRESH_DAYS,
            },
            email,
        )

    def send_renewal_reminder(self, article, now=None) -> None:
        """Warn an article's owner that the renewal deadline is close."""
        days_left = days_until(article.next_renewal_date, now or timezone.now())
        self._send(
            self.RENEWAL_REMINDER_SUBJECT,
            'renewal_reminder',
            {
                'title': article.title,
                'public_url': article.public_url,
                'next_renewal_date': article.next_renewal_date,
                'days_left': days_left,
                'grace_days': settings.ARTICLE_REMOVAL_GRACE_DAYS,
            },
            article.owner.email,
        )


def get_notification_gateway() -> NotificationGateway:
    return NotificationGateway()
