"""
Article models for SuperArticles.
Articles, their lifecycle fields and reader interactions.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.models import BaseModel

from .lifecycle import INITIAL_QUALITY, MAX_QUALITY, MIN_QUALITY, ArticleStatus

PAGE_NAME_PATTERN = r'^[a-z0-9-]{3,50}$'


class Article(BaseModel):
    """
    A member-submitted article with a renewal lifecycle.

    Removal is a soft tombstone: removed rows stay in the table and drop
    out of every public query.
    """

    STATUS_CHOICES = [
        (ArticleStatus.ACTIVE.value, 'Active'),
        (ArticleStatus.OUTDATED.value, 'Outdated'),
        (ArticleStatus.REMOVED.value, 'Removed'),
    ]

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='articles',
        verbose_name='Owner'
    )

    title = models.CharField(
        max_length=200,
        verbose_name='Title'
    )

    page_name = models.CharField(
        max_length=50,
        validators=[RegexValidator(PAGE_NAME_PATTERN)],
        verbose_name='Page Name',
        help_text='Lowercase letters, numbers and hyphens (3-50 characters)'
    )

    encrypted_id = models.CharField(
        max_length=20,
        unique=True,
        verbose_name='Encrypted ID',
        help_text='Public identifier used in shareable URLs'
    )

    public_url = models.URLField(
        max_length=500,
        verbose_name='Public URL'
    )

    image_url = models.URLField(
        max_length=2000,
        verbose_name='Image URL'
    )

    content = models.JSONField(
        default=dict,
        verbose_name='Content',
        help_text='text, formatted, created, lastUpdated, updateCount'
    )

    tags = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Tags'
    )

    category = models.CharField(
        max_length=50,
        default='general',
        db_index=True,
        verbose_name='Category'
    )

    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )

    # Lifecycle
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=ArticleStatus.ACTIVE.value,
        verbose_name='Status'
    )

    last_renewed = models.DateTimeField(
        default=timezone.now,
        verbose_name='Last Renewed'
    )

    next_renewal_date = models.DateTimeField(
        verbose_name='Next Renewal Date',
        help_text='Article becomes outdated once this passes'
    )

    removal_date = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Removal Date',
        help_text='Scheduled removal while alive; actual removal time once removed'
    )

    outdated_since = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Outdated Since'
    )

    removal_reason = models.CharField(
        max_length=100,
        blank=True,
        verbose_name='Removal Reason'
    )

    renewal_notification_sent = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Renewal Notification Sent'
    )

    renewal_recommendations = models.JSONField(
        null=True,
        blank=True,
        verbose_name='Renewal Recommendations'
    )

    recommendations_generated_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Recommendations Generated At'
    )

    quality_score = models.IntegerField(
        default=INITIAL_QUALITY,
        validators=[MinValueValidator(MIN_QUALITY), MaxValueValidator(MAX_QUALITY)],
        verbose_name='Quality Score',
        help_text='Freshness proxy (0-100)'
    )

    # Counters
    views = models.PositiveIntegerField(default=0, verbose_name='Views')
    likes_count = models.PositiveIntegerField(default=0, verbose_name='Likes')
    bookmarks_count = models.PositiveIntegerField(default=0, verbose_name='Bookmarks')

    class Meta:
        db_table = 'articles'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'next_renewal_date'], name='articles_status_renewal_idx'),
            models.Index(fields=['owner', 'status'], name='articles_owner_status_idx'),
            models.Index(fields=['page_name'], name='articles_page_name_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quality_score__gte=MIN_QUALITY) & Q(quality_score__lte=MAX_QUALITY),
                name='articles_quality_score_range',
            ),
            models.UniqueConstraint(
                fields=['page_name'],
                condition=~Q(status=ArticleStatus.REMOVED.value),
                name='articles_unique_live_page_name',
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def content_text(self):
        return (self.content or {}).get('text', '')

    @property
    def update_count(self):
        return (self.content or {}).get('updateCount', 0) or 0


class Comment(BaseModel):
    """A reader comment on an article."""

    article = models.ForeignKey(
        Article,
        on_delete=models.CASCADE,
        related_name='comments'
    )

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='comments'
    )

    content = models.TextField(max_length=5000)

    class Meta:
        db_table = 'comments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['article', '-created_at'], name='comments_article_created_idx'),
        ]

    def __str__(self):
        return f"Comment by {self.author_id} on {self.article_id}"


class ArticleLike(BaseModel):
    article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name='likes')
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='article_likes'
    )

    class Meta:
        db_table = 'article_likes'
        constraints = [
            models.UniqueConstraint(fields=['article', 'member'], name='article_likes_unique_member'),
        ]


class ArticleBookmark(BaseModel):
    article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name='bookmarks')
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='article_bookmarks'
    )

    class Meta:
        db_table = 'article_bookmarks'
        constraints = [
            models.UniqueConstraint(fields=['article', 'member'], name='article_bookmarks_unique_member'),
        ]


class ArticleView(BaseModel):
    """
    One signed-in member's view of an article on one day.

    Anonymous views only bump ``Article.views`` and leave no row.
    """

    article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name='view_records')
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='article_views'
    )
    viewed_on = models.DateField(default=timezone.localdate)

    class Meta:
        db_table = 'article_views'
        constraints = [
            models.UniqueConstraint(
                fields=['article', 'member', 'viewed_on'],
                name='article_views_unique_daily',
            ),
        ]
