"""
Article lifecycle state machine.

Pure functions that look at an article's status and timestamps and decide
what should change. Nothing here touches the database; the sweep and the
renewal service persist the returned transitions.

States:
    active ──(renewal date passed)──> outdated ──(20 more days)──> removed
      ^                                  |
      └──────────── renewal ─────────────┘

removed is terminal. Renewal is allowed from active and outdated.

Usage:
    now = timezone.now()
    for transition in plan_sweep(article, now):
        ...persist transition.changes and transition.quality_delta...
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from django.conf import settings

REMOVAL_REASON = 'automatic_cleanup_20_days'
MIN_QUALITY = 0
MAX_QUALITY = 100
INITIAL_QUALITY = 100


class ArticleStatus(str, Enum):
    """Lifecycle states of an article."""
    ACTIVE = 'active'
    OUTDATED = 'outdated'
    REMOVED = 'removed'

    @classmethod
    def from_string(cls, value: str) -> 'ArticleStatus':
        for status in cls:
            if status.value == value:
                return status
        raise ValueError(f"Unknown status: {value}")

    @property
    def is_renewable(self) -> bool:
        return self in RENEWABLE_STATUSES


RENEWABLE_STATUSES = (ArticleStatus.ACTIVE, ArticleStatus.OUTDATED)

VALID_TRANSITIONS: Dict[ArticleStatus, Set[ArticleStatus]] = {
    ArticleStatus.ACTIVE: {ArticleStatus.OUTDATED, ArticleStatus.ACTIVE},
    ArticleStatus.OUTDATED: {ArticleStatus.REMOVED, ArticleStatus.ACTIVE},
    ArticleStatus.REMOVED: set(),  # Terminal state
}


class TransitionError(Exception):
    """Raised when a lifecycle transition is not allowed."""
    pass


@dataclass(frozen=True)
class LifecyclePolicy:
    """Durations and score adjustments driving the lifecycle."""
    renewal_days: int = 30
    grace_days: int = 20
    notice_days: int = 7
    outdated_penalty: int = 20
    renewal_bonus: int = 10

    @classmethod
    def from_settings(cls) -> 'LifecyclePolicy':
        return cls(
            renewal_days=getattr(settings, 'ARTICLE_RENEWAL_DAYS', cls.renewal_days),
            grace_days=getattr(settings, 'ARTICLE_REMOVAL_GRACE_DAYS', cls.grace_days),
            notice_days=getattr(settings, 'RENEWAL_NOTICE_DAYS', cls.notice_days),
        )

    @property
    def renewal_period(self) -> timedelta:
        return timedelta(days=self.renewal_days)

    @property
    def grace_period(self) -> timedelta:
        return timedelta(days=self.grace_days)

    @property
    def notice_period(self) -> timedelta:
        return timedelta(days=self.notice_days)


DEFAULT_POLICY = LifecyclePolicy()


@dataclass
class Transition:
    """
    One edge of the state machine applied to one article.

    ``changes`` holds the plain field values to write; ``quality_delta``
    is applied to the stored score and clamped, never written as an
    absolute value.
    """
    from_status: ArticleStatus
    to_status: ArticleStatus
    changes: Dict[str, Any] = field(default_factory=dict)
    quality_delta: int = 0

    def __post_init__(self):
        if self.to_status not in VALID_TRANSITIONS[self.from_status]:
            raise TransitionError(
                f"Cannot move article from {self.from_status.value} to {self.to_status.value}"
            )

    @property
    def name(self) -> str:
        return f"{self.from_status.value}->{self.to_status.value}"


def clamp_quality(score: int) -> int:
    return max(MIN_QUALITY, min(MAX_QUALITY, score))


def initial_fields(now: datetime, policy: Optional[LifecyclePolicy] = None) -> Dict[str, Any]:
    """Lifecycle fields of a newly submitted article."""
    policy = policy or DEFAULT_POLICY
    next_renewal = now + policy.renewal_period
    return {
        'status': ArticleStatus.ACTIVE.value,
        'quality_score': INITIAL_QUALITY,
        'last_renewed': now,
        'next_renewal_date': next_renewal,
        'removal_date': next_renewal + policy.grace_period,
    }


def is_outdated_due(next_renewal_date: datetime, now: datetime) -> bool:
    return next_renewal_date < now


def is_removal_due(
    next_renewal_date: datetime,
    now: datetime,
    policy: Optional[LifecyclePolicy] = None,
) -> bool:
    policy = policy or DEFAULT_POLICY
    return next_renewal_date < now - policy.grace_period


def plan_sweep(article, now: datetime, policy: Optional[LifecyclePolicy] = None) -> List[Transition]:
    """
    Transitions the daily sweep should apply to ``article``.

    An active article that is already past the removal threshold gets both
    edges in order, so one sweep leaves it removed and the quality penalty
    is charged exactly once.
    """
    policy = policy or DEFAULT_POLICY
    status = ArticleStatus.from_string(article.status)
    transitions: List[Transition] = []

    if status is ArticleStatus.ACTIVE and is_outdated_due(article.next_renewal_date, now):
        transitions.append(Transition(
            from_status=ArticleStatus.ACTIVE,
            to_status=ArticleStatus.OUTDATED,
            changes={
                'status': ArticleStatus.OUTDATED.value,
                'outdated_since': now,
            },
            quality_delta=-policy.outdated_penalty,
        ))
        status = ArticleStatus.OUTDATED

    if status is ArticleStatus.OUTDATED and is_removal_due(article.next_renewal_date, now, policy):
        transitions.append(Transition(
            from_status=ArticleStatus.OUTDATED,
            to_status=ArticleStatus.REMOVED,
            changes={
                'status': ArticleStatus.REMOVED.value,
                'removal_date': now,
                'removal_reason': REMOVAL_REASON,
            },
        ))

    return transitions


def plan_renewal(article, now: datetime, policy: Optional[LifecyclePolicy] = None) -> Transition:
    """
    The renewal edge for ``article``.

    Raises:
        TransitionError: the article has been removed.
    """
    policy = policy or DEFAULT_POLICY
    status = ArticleStatus.from_string(article.status)
    if not status.is_renewable:
        raise TransitionError("Cannot renew removed article")

    next_renewal = now + policy.renewal_period
    return Transition(
        from_status=status,
        to_status=ArticleStatus.ACTIVE,
        changes={
            'status': ArticleStatus.ACTIVE.value,
            'last_renewed': now,
            'next_renewal_date': next_renewal,
            'removal_date': next_renewal + policy.grace_period,
            'outdated_since': None,
        },
        quality_delta=policy.renewal_bonus,
    )


def needs_renewal_notice(article, now: datetime, policy: Optional[LifecyclePolicy] = None) -> bool:
    """
    True when the owner should be warned about the coming renewal date.

    At most one notice per renewal window: a notice sent before the last
    renewal no longer counts.
    """
    policy = policy or DEFAULT_POLICY
    if ArticleStatus.from_string(article.status) is not ArticleStatus.ACTIVE:
        return False
    if not (now <= article.next_renewal_date < now + policy.notice_period):
        return False

    sent = article.renewal_notification_sent
    return sent is None or (article.last_renewed is not None and sent < article.last_renewed)


def days_until(target: datetime, now: datetime) -> int:
    """Whole days left until ``target``, rounded up and never negative."""
    seconds = (target - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def age_in_days(created_at: datetime, now: datetime) -> int:
    return int((now - created_at).total_seconds() // 86400)
