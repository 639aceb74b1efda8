"""
Daily article lifecycle sweep.

Steps, in order:
1. Advance due articles (active -> outdated -> removed), one transaction
   per article, in batches.
2. Store recommendations on outdated articles that have none.
3. Email owners whose renewal date is close.

Each state change is a compare-and-set UPDATE filtered on the status and
renewal date the sweep read. If a renewal slips in between, the UPDATE
matches nothing and the article is counted as a conflict and left alone.
A failure on one article is logged and counted; it never stops the run.
"""

import time
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from apps.core.notifications import NotificationGateway, get_notification_gateway
from apps.core.observability import LogContext, get_logger, record_sweep_metrics

from .lifecycle import (
    ArticleStatus,
    LifecyclePolicy,
    Transition,
    age_in_days,
    needs_renewal_notice,
    plan_sweep,
)
from .models import Article
from .recommendations import generate_recommendations
from .services import quality_expression

logger = get_logger(__name__, component='lifecycle_sweep')

SWEEP_INTERVAL = timedelta(hours=24)


@dataclass
class SweepStats:
    """Counters reported by one sweep run."""
    outdated_marked: int = 0
    removed: int = 0
    recommendations_generated: int = 0
    notifications_sent: int = 0
    conflicts: int = 0
    failures: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['duration'] = f"{self.duration_ms / 1000:.2f} seconds"
        return data


class LifecycleSweep:
    """
    One run of the lifecycle sweep at a fixed ``now``.

    Usage:
        stats = LifecycleSweep().run()
    """

    def __init__(
        self,
        now=None,
        policy: Optional[LifecyclePolicy] = None,
        gateway: Optional[NotificationGateway] = None,
        batch_size: Optional[int] = None,
        recommendation_limit: Optional[int] = None,
        notifications_enabled: Optional[bool] = None,
    ):
        self.now = now or timezone.now()
        self.policy = policy or LifecyclePolicy.from_settings()
        self.gateway = gateway
        self.batch_size = batch_size or settings.LIFECYCLE_SWEEP_BATCH_SIZE
        self.recommendation_limit = (
            recommendation_limit if recommendation_limit is not None
            else settings.LIFECYCLE_RECOMMENDATION_LIMIT
        )
        if notifications_enabled is None:
            notifications_enabled = settings.LIFECYCLE_NOTIFICATIONS_ENABLED
        self.notifications_enabled = notifications_enabled
        self.stats = SweepStats()

    def run(self) -> SweepStats:
        start = time.perf_counter()
        logger.info("Starting lifecycle sweep", now=self.now.isoformat())

        self.advance_due_articles()
        self.generate_missing_recommendations()
        if self.notifications_enabled:
            self.send_renewal_notices()

        self.stats.duration_ms = (time.perf_counter() - start) * 1000
        logger.info("Lifecycle sweep completed", **self.stats.to_dict())
        return self.stats

    # -------------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------------

    def _due_ids(self) -> List:
        removal_cutoff = self.now - self.policy.grace_period
        return list(
            Article.objects.filter(
                Q(status=ArticleStatus.ACTIVE.value, next_renewal_date__lt=self.now)
                | Q(status=ArticleStatus.OUTDATED.value, next_renewal_date__lt=removal_cutoff)
            )
            .order_by('next_renewal_date')
            .values_list('pk', flat=True)
        )

    def advance_due_articles(self) -> None:
        due_ids = self._due_ids()
        for offset in range(0, len(due_ids), self.batch_size):
            batch_ids = due_ids[offset:offset + self.batch_size]
            for article in Article.objects.filter(pk__in=batch_ids).order_by('next_renewal_date'):
                self.advance_article(article)

    def advance_article(self, article: Article) -> None:
        transitions = plan_sweep(article, self.now, self.policy)
        if not transitions:
            return

        ctx = LogContext(component='lifecycle_sweep', operation='advance', article_id=str(article.pk))
        applied: List[Transition] = []
        conflicted = False
        try:
            with transaction.atomic():
                for transition in transitions:
                    if not self._apply(article, transition, ctx):
                        conflicted = True
                        break
                    applied.append(transition)
        except Exception as e:
            self.stats.failures += 1
            logger.exception(f"Failed to advance article: {e}", ctx)
            return

        # Counted only after the article's transaction commits
        for transition in applied:
            if transition.to_status is ArticleStatus.OUTDATED:
                self.stats.outdated_marked += 1
            elif transition.to_status is ArticleStatus.REMOVED:
                self.stats.removed += 1
        if conflicted:
            self.stats.conflicts += 1

    def _apply(self, article: Article, transition: Transition, ctx: LogContext) -> bool:
        updates = dict(transition.changes)
        updates['updated_at'] = self.now
        if transition.quality_delta:
            updates['quality_score'] = quality_expression(transition.quality_delta)

        rows = Article.objects.filter(
            pk=article.pk,
            status=transition.from_status.value,
            next_renewal_date=article.next_renewal_date,
        ).update(**updates)

        if rows == 0:
            logger.warning("Article changed during sweep, skipping", ctx, transition=transition.name)
            return False

        article.status = transition.to_status.value
        logger.info("Applied lifecycle transition", ctx, transition=transition.name)
        return True

    # -------------------------------------------------------------------------
    # Recommendations
    # -------------------------------------------------------------------------

    def generate_missing_recommendations(self) -> None:
        if self.recommendation_limit <= 0:
            return

        pending = (
            Article.objects.filter(
                status=ArticleStatus.OUTDATED.value,
                renewal_recommendations__isnull=True,
            )
            .order_by('outdated_since')[:self.recommendation_limit]
        )

        for article in pending:
            ctx = LogContext(
                component='lifecycle_sweep', operation='recommend', article_id=str(article.pk)
            )
            try:
                recs = generate_recommendations(
                    age_in_days(article.created_at, self.now),
                    article.category,
                    article.tags,
                )
                rows = Article.objects.filter(
                    pk=article.pk,
                    status=ArticleStatus.OUTDATED.value,
                    renewal_recommendations__isnull=True,
                ).update(
                    renewal_recommendations=recs,
                    recommendations_generated_at=self.now,
                )
            except Exception as e:
                self.stats.failures += 1
                logger.exception(f"Failed to generate recommendations: {e}", ctx)
                continue

            if rows:
                self.stats.recommendations_generated += 1
            else:
                self.stats.conflicts += 1

    # -------------------------------------------------------------------------
    # Renewal notices
    # -------------------------------------------------------------------------

    def _notice_candidates(self):
        return (
            Article.objects.select_related('owner')
            .filter(
                status=ArticleStatus.ACTIVE.value,
                next_renewal_date__gte=self.now,
                next_renewal_date__lt=self.now + self.policy.notice_period,
            )
            .filter(
                Q(renewal_notification_sent__isnull=True)
                | Q(renewal_notification_sent__lt=F('last_renewed'))
            )
            .order_by('next_renewal_date')
        )

    def send_renewal_notices(self) -> None:
        gateway = self.gateway or get_notification_gateway()

        for article in self._notice_candidates():
            ctx = LogContext(
                component='lifecycle_sweep',
                operation='notify',
                article_id=str(article.pk),
                user_id=str(article.owner_id),
            )
            try:
                if not needs_renewal_notice(article, self.now, self.policy):
                    continue
                sent = self.notify_owner(article, gateway)
            except Exception as e:
                self.stats.failures += 1
                logger.exception(f"Failed to send renewal notice: {e}", ctx)
                continue

            if sent:
                self.stats.notifications_sent += 1
                logger.info("Sent renewal notice", ctx)
            else:
                self.stats.conflicts += 1

    def notify_owner(self, article: Article, gateway: NotificationGateway) -> bool:
        """
        Claim the notice for ``article`` and email its owner.

        Returns False when the article changed or another run claimed the
        notice first. A failed send releases the claim and re-raises.
        """
        previous = article.renewal_notification_sent

        # Claim the notice first so two sweeps never email twice
        claimed = Article.objects.filter(
            pk=article.pk,
            status=ArticleStatus.ACTIVE.value,
            next_renewal_date=article.next_renewal_date,
            renewal_notification_sent=previous,
        ).update(renewal_notification_sent=self.now)
        if not claimed:
            return False

        try:
            gateway.send_renewal_reminder(article, now=self.now)
        except Exception:
            Article.objects.filter(
                pk=article.pk, renewal_notification_sent=self.now,
            ).update(renewal_notification_sent=previous)
            raise
        return True


def run_sweep(trigger: str = 'manual', now=None, **options) -> SweepStats:
    """Run one sweep and record its metrics."""
    stats = LifecycleSweep(now=now, **options).run()
    record_sweep_metrics(stats.to_dict(), trigger=trigger)
    return stats


def sweep_response(stats: SweepStats, now=None) -> Dict[str, Any]:
    """Response body shared by the HTTP triggers."""
    now = now or timezone.now()
    return {
        'success': True,
        'message': 'Cleanup process completed',
        'stats': stats.to_dict(),
        'timestamp': now.isoformat(),
        'next_run': (now + SWEEP_INTERVAL).isoformat(),
    }
