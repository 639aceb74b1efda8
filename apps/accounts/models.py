"""
Member model for SuperArticles.

Members have no password. They log in with one of the security codes
emailed to them; each code works once.
"""

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone


class MemberManager(BaseUserManager):
    """Creates members keyed by email."""

    use_in_migrations = True

    @classmethod
    def normalize_email(cls, email):
        return (email or '').strip().lower()

    def create_user(self, email, **extra_fields):
        if not email:
            raise ValueError('Members must have an email address')

        member = self.model(email=self.normalize_email(email), **extra_fields)
        member.set_unusable_password()
        member.save(using=self._db)
        return member

    def create_superuser(self, email, password=None, **extra_fields):
        """Staff accounts keep a password for the Django admin."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        member = self.model(email=self.normalize_email(email), **extra_fields)
        member.set_password(password)
        member.save(using=self._db)
        return member


class Member(AbstractBaseUser, PermissionsMixin):
    """
    A registered reader or author.

    ``security_codes`` holds keyed digests of the current batch, never the
    codes themselves. A consumed code's slot is set to null so the list
    keeps its original positions.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name='ID'
    )

    email = models.EmailField(
        unique=True,
        verbose_name='Email'
    )

    username = models.CharField(
        max_length=150,
        blank=True,
        verbose_name='Username',
        help_text='Optional display name'
    )

    avatar_url = models.URLField(
        max_length=500,
        blank=True,
        verbose_name='Avatar URL'
    )

    security_codes = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Security Codes',
        help_text='Digests of the current code batch; used entries are null'
    )

    last_code_refresh = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Last Code Refresh'
    )

    next_refresh_allowed = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Next Refresh Allowed',
        help_text='Earliest time a new code batch may be requested'
    )

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    date_joined = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MemberManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'members'
        ordering = ['-date_joined']
        verbose_name = 'Member'
        verbose_name_plural = 'Members'

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.username or self.email.split('@')[0]

    @property
    def codes_remaining(self):
        return sum(1 for code in self.security_codes or [] if code)
