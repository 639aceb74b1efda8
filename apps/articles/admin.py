"""
Admin interface for articles and reader interactions.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Article, ArticleBookmark, ArticleLike, ArticleView, Comment


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    fields = ['author', 'content', 'created_at']
    readonly_fields = ['created_at']
    raw_id_fields = ['author']


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    """
    Admin interface for Article model.
    """

    list_display = [
        'title_short',
        'owner',
        'page_name',
        'category',
        'status_badge',
        'quality_badge',
        'next_renewal_date',
        'views',
        'created_at',
    ]

    list_filter = [
        'status',
        'category',
        ('next_renewal_date', admin.DateFieldListFilter),
        ('created_at', admin.DateFieldListFilter),
    ]

    search_fields = [
        'title',
        'page_name',
        'encrypted_id',
        'owner__email',
    ]

    readonly_fields = [
        'id',
        'encrypted_id',
        'public_url',
        'views',
        'likes_count',
        'bookmarks_count',
        'created_at',
        'updated_at',
    ]

    raw_id_fields = ['owner']

    date_hierarchy = 'created_at'

    inlines = [CommentInline]

    fieldsets = (
        ('Basic Information', {
            'fields': (
                'owner',
                'title',
                'page_name',
                'encrypted_id',
                'public_url',
                'image_url',
                'category',
                'tags',
                'description',
            )
        }),
        ('Content', {
            'fields': ('content',),
            'classes': ('collapse',),
        }),
        ('Lifecycle', {
            'fields': (
                'status',
                'quality_score',
                'last_renewed',
                'next_renewal_date',
                'removal_date',
                'outdated_since',
                'removal_reason',
                'renewal_notification_sent',
            )
        }),
        ('Recommendations', {
            'fields': (
                'renewal_recommendations',
                'recommendations_generated_at',
            ),
            'classes': ('collapse',),
        }),
        ('Engagement', {
            'fields': (
                'views',
                'likes_count',
                'bookmarks_count',
            )
        }),
        ('System Fields', {
            'fields': (
                'id',
                'created_at',
                'updated_at',
            ),
            'classes': ('collapse',),
        }),
    )

    ordering = ['-created_at']

    def title_short(self, obj):
        max_length = 60
        if len(obj.title) > max_length:
            return obj.title[:max_length] + '...'
        return obj.title
    title_short.short_description = 'Title'
    title_short.admin_order_field = 'title'

    def status_badge(self, obj):
        colors = {
            'active': 'green',
            'outdated': 'orange',
            'removed': 'gray',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 6px; '
            'border-radius: 3px; font-size: 11px; font-weight: bold;">{}</span>',
            colors.get(obj.status, 'gray'),
            obj.status.upper()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def quality_badge(self, obj):
        """Display quality score with color coding."""
        if obj.quality_score >= 70:
            color = 'green'
        elif obj.quality_score >= 50:
            color = 'orange'
        else:
            color = 'red'

        return format_html(
            '<span style="color: {}; font-weight: bold;">{}/100</span>',
            color,
            obj.quality_score
        )
    quality_badge.short_description = 'Quality'
    quality_badge.admin_order_field = 'quality_score'


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ['article', 'author', 'created_at']
    search_fields = ['content', 'author__email', 'article__title']
    raw_id_fields = ['article', 'author']


@admin.register(ArticleLike, ArticleBookmark, ArticleView)
class InteractionAdmin(admin.ModelAdmin):
    list_display = ['article', 'member', 'created_at']
    raw_id_fields = ['article', 'member']
