# Generated migration for articles, comments and reader interactions

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


def base_fields():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
        ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
        ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Article',
            fields=base_fields() + [
                ('title', models.CharField(max_length=200, verbose_name='Title')),
                ('page_name', models.CharField(help_text='Lowercase letters, numbers and hyphens (3-50 characters)', max_length=50, validators=[django.core.validators.RegexValidator('^[a-z0-9-]{3,50}$')], verbose_name='Page Name')),
                ('encrypted_id', models.CharField(help_text='Public identifier used in shareable URLs', max_length=20, unique=True, verbose_name='Encrypted ID')),
                ('public_url', models.URLField(max_length=500, verbose_name='Public URL')),
                ('image_url', models.URLField(max_length=2000, verbose_name='Image URL')),
                ('content', models.JSONField(default=dict, help_text='text, formatted, created, lastUpdated, updateCount', verbose_name='Content')),
                ('tags', models.JSONField(blank=True, default=list, verbose_name='Tags')),
                ('category', models.CharField(db_index=True, default='general', max_length=50, verbose_name='Category')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('status', models.CharField(choices=[('active', 'Active'), ('outdated', 'Outdated'), ('removed', 'Removed')], default='active', max_length=20, verbose_name='Status')),
                ('last_renewed', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Last Renewed')),
                ('next_renewal_date', models.DateTimeField(help_text='Article becomes outdated once this passes', verbose_name='Next Renewal Date')),
                ('removal_date', models.DateTimeField(blank=True, help_text='Scheduled removal while alive; actual removal time once removed', null=True, verbose_name='Removal Date')),
                ('outdated_since', models.DateTimeField(blank=True, null=True, verbose_name='Outdated Since')),
                ('removal_reason', models.CharField(blank=True, max_length=100, verbose_name='Removal Reason')),
                ('renewal_notification_sent', models.DateTimeField(blank=True, null=True, verbose_name='Renewal Notification Sent')),
                ('renewal_recommendations', models.JSONField(blank=True, null=True, verbose_name='Renewal Recommendations')),
                ('recommendations_generated_at', models.DateTimeField(blank=True, null=True, verbose_name='Recommendations Generated At')),
                ('quality_score', models.IntegerField(default=100, help_text='Freshness proxy (0-100)', validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)], verbose_name='Quality Score')),
                ('views', models.PositiveIntegerField(default=0, verbose_name='Views')),
                ('likes_count', models.PositiveIntegerField(default=0, verbose_name='Likes')),
                ('bookmarks_count', models.PositiveIntegerField(default=0, verbose_name='Bookmarks')),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='articles', to=settings.AUTH_USER_MODEL, verbose_name='Owner')),
            ],
            options={
                'db_table': 'articles',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'next_renewal_date'], name='articles_status_renewal_idx'),
                    models.Index(fields=['owner', 'status'], name='articles_owner_status_idx'),
                    models.Index(fields=['page_name'], name='articles_page_name_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quality_score__gte', 0), ('quality_score__lte', 100)), name='articles_quality_score_range'),
                    models.UniqueConstraint(condition=models.Q(('status', 'removed'), _negated=True), fields=('page_name',), name='articles_unique_live_page_name'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=base_fields() + [
                ('content', models.TextField(max_length=5000)),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='articles.article')),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'comments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['article', '-created_at'], name='comments_article_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ArticleLike',
            fields=base_fields() + [
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='likes', to='articles.article')),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='article_likes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'article_likes',
                'constraints': [
                    models.UniqueConstraint(fields=('article', 'member'), name='article_likes_unique_member'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ArticleBookmark',
            fields=base_fields() + [
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bookmarks', to='articles.article')),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='article_bookmarks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'article_bookmarks',
                'constraints': [
                    models.UniqueConstraint(fields=('article', 'member'), name='article_bookmarks_unique_member'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ArticleView',
            fields=base_fields() + [
                ('viewed_on', models.DateField(default=django.utils.timezone.localdate)),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='view_records', to='articles.article')),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='article_views', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'article_views',
                'constraints': [
                    models.UniqueConstraint(fields=('article', 'member', 'viewed_on'), name='article_views_unique_daily'),
                ],
            },
        ),
    ]
