"""
Article services: submission, renewal and reader interactions.

Views stay thin and call into here. Every write that can race with the
lifecycle sweep is a conditional UPDATE so the database decides which
side wins.
"""

import hashlib
import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlparse

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest, Least
from django.utils import timezone

from apps.core.exceptions import (
    ConflictError,
    DuplicateError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)

from .lifecycle import (
    MAX_QUALITY,
    MIN_QUALITY,
    RENEWABLE_STATUSES,
    ArticleStatus,
    LifecyclePolicy,
    TransitionError,
    age_in_days,
    initial_fields,
    plan_renewal,
)
from .models import PAGE_NAME_PATTERN, Article, ArticleBookmark, ArticleLike, ArticleView, Comment
from .recommendations import generate_renewal_suggestions

logger = logging.getLogger(__name__)

MAX_TAGS = 10
IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.webp', '.gif')
RELATED_LIMIT = 3
RELATED_TAG_COUNT = 3
RELATED_SCAN_LIMIT = 500
AVATAR_FALLBACK_URL = 'https://ui-avatars.com/api/?name={name}'

_page_name_re = re.compile(PAGE_NAME_PATTERN)


# =============================================================================
# Helpers
# =============================================================================

def quality_expression(delta: int):
    """Database-side ``clamp(quality_score + delta)``."""
    return Greatest(
        Least(F('quality_score') + delta, Value(MAX_QUALITY)),
        Value(MIN_QUALITY),
    )


def build_encrypted_id(page_name: str, member_id, timestamp_ms: Optional[int] = None) -> str:
    """20 hex characters identifying an article in public URLs."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    data = f"{page_name}-{member_id}-{timestamp_ms}"
    return hashlib.sha256((data + settings.ENCRYPTION_SECRET).encode('utf-8')).hexdigest()[:20]


def public_url_for(encrypted_id: str) -> str:
    return f"{settings.SITE_BASE_URL.rstrip('/')}/{encrypted_id}"


def preview_url_for(encrypted_id: str) -> str:
    return f"{settings.SITE_BASE_URL.rstrip('/')}/preview/{encrypted_id}"


def is_valid_page_name(page_name: str) -> bool:
    return bool(page_name) and _page_name_re.match(page_name) is not None


def is_valid_image_url(url: str) -> bool:
    """HTTPS URL whose path ends in a supported image extension."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return (
        parsed.scheme == 'https'
        and bool(parsed.netloc)
        and parsed.path.lower().endswith(IMAGE_EXTENSIONS)
    )


def avatar_for(member) -> str:
    if member.avatar_url:
        return member.avatar_url
    return AVATAR_FALLBACK_URL.format(name=quote(member.display_name))


# =============================================================================
# Submission
# =============================================================================

def create_article(
    owner,
    *,
    title: str,
    page_name: str,
    content: str,
    image_url: str,
    tags: Optional[List[str]] = None,
    category: Optional[str] = None,
    description: str = '',
    now=None,
) -> Article:
    """
    Create an active article for ``owner``.

    Raises:
        ValidationError: bad page name or image URL.
        DuplicateError: another live article already uses the page name.
    """
    now = now or timezone.now()

    if not is_valid_page_name(page_name):
        raise ValidationError(
            "Page name must be 3-50 lowercase letters, numbers, and hyphens only",
            code=ErrorCode.INVALID_VALUE,
            field='page_name',
        )

    if not is_valid_image_url(image_url):
        raise ValidationError(
            "Invalid image URL. Must be HTTPS and end with .png, .jpg, .jpeg, .webp, or .gif",
            code=ErrorCode.INVALID_VALUE,
            field='image_url',
        )

    live = Article.objects.exclude(status=ArticleStatus.REMOVED.value)
    if live.filter(page_name=page_name).exists():
        raise DuplicateError("Page name already exists", field='page_name')

    encrypted_id = build_encrypted_id(page_name, owner.pk, int(now.timestamp() * 1000))

    try:
        with transaction.atomic():
            article = Article.objects.create(
                owner=owner,
                title=title.strip(),
                page_name=page_name,
                encrypted_id=encrypted_id,
                public_url=public_url_for(encrypted_id),
                image_url=image_url,
                content={
                    'text': content,
                    'formatted': content,
                    'created': now.isoformat(),
                },
                tags=list(tags or [])[:MAX_TAGS],
                category=category or 'general',
                description=description or '',
                **initial_fields(now, LifecyclePolicy.from_settings()),
            )
    except IntegrityError as e:
        # Lost a race with a concurrent upload of the same page name
        raise DuplicateError("Page name already exists", field='page_name') from e

    logger.info(
        "Created article %s (%s)", article.pk, page_name,
        extra={'article_id': str(article.pk), 'member_id': str(owner.pk)},
    )
    return article


# =============================================================================
# Renewal
# =============================================================================

def _renewal_updates(transition, now) -> Dict[str, Any]:
    updates = dict(transition.changes)
    updates['quality_score'] = quality_expression(transition.quality_delta)
    updates['renewal_recommendations'] = None
    updates['recommendations_generated_at'] = None
    updates['updated_at'] = now
    return updates


def renew_article(owner, article_id, updated_content: Optional[str] = None, now=None) -> Tuple[Article, List[str]]:
    """
    Renew one of ``owner``'s articles and return it with suggestions.

    Raises:
        NotFoundError: no such article for this owner.
        ValidationError: the article is already removed.
        ConflictError: the sweep removed the article while renewing.
    """
    now = now or timezone.now()
    policy = LifecyclePolicy.from_settings()

    # The row lock keeps concurrent renewals from losing content merges
    with transaction.atomic():
        article = Article.objects.select_for_update().filter(pk=article_id, owner=owner).first()
        if article is None:
            raise NotFoundError("Article not found or unauthorized")

        try:
            transition = plan_renewal(article, now, policy)
        except TransitionError as e:
            raise ValidationError(str(e), code=ErrorCode.INVALID_TRANSITION) from e

        updates = _renewal_updates(transition, now)
        if updated_content:
            content = dict(article.content or {})
            content.update({
                'text': updated_content,
                'lastUpdated': now.isoformat(),
                'updateCount': (content.get('updateCount') or 0) + 1,
            })
            updates['content'] = content

        renewable = [status.value for status in RENEWABLE_STATUSES]
        rows = Article.objects.filter(
            pk=article.pk, owner=owner, status__in=renewable,
        ).update(**updates)

        if rows == 0:
            logger.warning(
                "Renewal of article %s lost to a concurrent removal", article.pk,
                extra={'article_id': str(article.pk)},
            )
            raise ConflictError("Article was removed before it could be renewed")

    article.refresh_from_db()
    suggestions = generate_renewal_suggestions(
        age_in_days(article.created_at, now),
        article.content_text,
        article.tags,
        article.update_count,
    )

    logger.info(
        "Renewed article %s", article.pk,
        extra={'article_id': str(article.pk), 'from_status': transition.from_status.value},
    )
    return article, suggestions


def renew_all_articles(owner, now=None) -> int:
    """Renew every active or outdated article of ``owner``; returns the count."""
    now = now or timezone.now()
    policy = LifecyclePolicy.from_settings()

    next_renewal = now + policy.renewal_period
    renewable = [status.value for status in RENEWABLE_STATUSES]

    count = Article.objects.filter(owner=owner, status__in=renewable).update(
        status=ArticleStatus.ACTIVE.value,
        last_renewed=now,
        next_renewal_date=next_renewal,
        removal_date=next_renewal + policy.grace_period,
        outdated_since=None,
        quality_score=quality_expression(policy.renewal_bonus),
        renewal_recommendations=None,
        recommendations_generated_at=None,
        updated_at=now,
    )

    logger.info("Renewed %d articles for member %s", count, owner.pk)
    return count


# =============================================================================
# Public reading and interactions
# =============================================================================

def get_public_article(encrypted_id: str) -> Article:
    article = (
        Article.objects.select_related('owner')
        .filter(encrypted_id=encrypted_id, status=ArticleStatus.ACTIVE.value)
        .first()
    )
    if article is None:
        raise NotFoundError("Article not found or no longer available")
    return article


def _is_member(member) -> bool:
    return member is not None and member.is_authenticated


def record_view(article: Article, member=None) -> bool:
    """
    Count a view of ``article``.

    Signed-in members count once per day; anonymous readers every time.
    Returns True if the counter moved.
    """
    if _is_member(member):
        _, created = ArticleView.objects.get_or_create(
            article=article,
            member=member,
            viewed_on=timezone.localdate(),
        )
        if not created:
            return False

    Article.objects.filter(pk=article.pk).update(views=F('views') + 1)
    return True


def get_interactions(article: Article, member=None) -> Dict[str, bool]:
    if not _is_member(member):
        return {'liked': False, 'bookmarked': False}
    return {
        'liked': ArticleLike.objects.filter(article=article, member=member).exists(),
        'bookmarked': ArticleBookmark.objects.filter(article=article, member=member).exists(),
    }


def add_comment(article: Article, member, content: str) -> Comment:
    content = (content or '').strip()
    if not content:
        raise ValidationError("Comment cannot be empty", field='content')
    return Comment.objects.create(article=article, author=member, content=content)


def _toggle(model, counter_field: str, article: Article, member) -> bool:
    """
    Flip ``member``'s row in ``model`` for ``article``.

    Returns True when the row now exists.
    """
    with transaction.atomic():
        deleted, _ = model.objects.filter(article=article, member=member).delete()
        if deleted:
            Article.objects.filter(pk=article.pk).update(
                **{counter_field: Greatest(F(counter_field) - 1, Value(0))}
            )
            return False

        try:
            with transaction.atomic():
                model.objects.create(article=article, member=member)
        except IntegrityError:
            # A concurrent request from the same member already added it
            return True

        Article.objects.filter(pk=article.pk).update(**{counter_field: F(counter_field) + 1})
        return True


def toggle_like(article: Article, member) -> bool:
    return _toggle(ArticleLike, 'likes_count', article, member)


def toggle_bookmark(article: Article, member) -> bool:
    return _toggle(ArticleBookmark, 'bookmarks_count', article, member)


def related_articles(article: Article, limit: int = RELATED_LIMIT) -> List[Article]:
    """
    Up to ``limit`` other active articles, newest first.

    Articles sharing one of the first three tags are preferred; without
    tags the match falls back to the same category.
    """
    candidates = (
        Article.objects.filter(status=ArticleStatus.ACTIVE.value)
        .exclude(pk=article.pk)
        .order_by('-created_at')
    )

    wanted = set((article.tags or [])[:RELATED_TAG_COUNT])
    if not wanted:
        if not article.category:
            return list(candidates[:limit])
        return list(candidates.filter(category=article.category)[:limit])

    # Tag overlap is checked in Python so it works on every database backend
    related = []
    for candidate in candidates[:RELATED_SCAN_LIMIT]:
        if wanted.intersection(candidate.tags or []):
            related.append(candidate)
            if len(related) >= limit:
                break
    return related
