"""
Article serializers.

Owner-facing serializers expose lifecycle fields; public serializers
shape the reader view (author, stats, renewal info, comments).
"""

from django.utils import timezone
from rest_framework import serializers

from .lifecycle import days_until
from .models import Article, Comment
from .services import avatar_for


# ============================================================================
# Owner serializers
# ============================================================================

class ArticleCreateSerializer(serializers.Serializer):
    """Upload payload. Format rules are enforced in services.create_article."""

    title = serializers.CharField(max_length=200)
    page_name = serializers.CharField(max_length=100)
    content = serializers.CharField()
    image_url = serializers.CharField(max_length=2000)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        default=list,
    )
    category = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')


class ArticleListSerializer(serializers.ModelSerializer):
    """Compact serializer for the owner's article list."""

    days_left = serializers.SerializerMethodField()

    class Meta:
        model = Article
        fields = [
            'id',
            'title',
            'page_name',
            'encrypted_id',
            'public_url',
            'category',
            'status',
            'quality_score',
            'next_renewal_date',
            'removal_date',
            'days_left',
            'views',
            'likes_count',
            'bookmarks_count',
            'created_at',
        ]

    def get_days_left(self, obj):
        return days_until(obj.next_renewal_date, timezone.now())


class ArticleDetailSerializer(ArticleListSerializer):
    """Full article for its owner, including lifecycle bookkeeping."""

    class Meta(ArticleListSerializer.Meta):
        fields = ArticleListSerializer.Meta.fields + [
            'image_url',
            'content',
            'tags',
            'description',
            'last_renewed',
            'outdated_since',
            'removal_reason',
            'renewal_notification_sent',
            'renewal_recommendations',
            'recommendations_generated_at',
            'updated_at',
        ]


class RenewSerializer(serializers.Serializer):
    updated_content = serializers.CharField(required=False, allow_blank=True)


# ============================================================================
# Public serializers
# ============================================================================

class AuthorSerializer(serializers.Serializer):
    id = serializers.UUIDField(source='pk')
    username = serializers.CharField(source='display_name')
    avatar = serializers.SerializerMethodField()

    def get_avatar(self, obj):
        return avatar_for(obj)


class CommentSerializer(serializers.ModelSerializer):
    author = AuthorSerializer(read_only=True)

    class Meta:
        model = Comment
        fields = ['id', 'content', 'created_at', 'author']


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default='', max_length=5000)


class RelatedArticleSerializer(serializers.ModelSerializer):
    excerpt = serializers.SerializerMethodField()
    created = serializers.DateTimeField(source='created_at')

    class Meta:
        model = Article
        fields = [
            'id',
            'encrypted_id',
            'title',
            'page_name',
            'image_url',
            'public_url',
            'excerpt',
            'tags',
            'category',
            'views',
            'created',
        ]

    def get_excerpt(self, obj):
        return obj.description or obj.title


class PublicArticleSerializer(serializers.ModelSerializer):
    """
    Reader view of an active article.

    Expects ``comments`` (a list) and ``user_interactions`` in the
    serializer context.
    """

    author = AuthorSerializer(source='owner', read_only=True)
    stats = serializers.SerializerMethodField()
    renewal = serializers.SerializerMethodField()
    metadata = serializers.SerializerMethodField()
    comments = serializers.SerializerMethodField()
    recommendations = serializers.SerializerMethodField()
    user_interactions = serializers.SerializerMethodField()

    class Meta:
        model = Article
        fields = [
            'id',
            'encrypted_id',
            'title',
            'page_name',
            'content',
            'image_url',
            'public_url',
            'tags',
            'category',
            'description',
            'author',
            'stats',
            'renewal',
            'metadata',
            'comments',
            'recommendations',
            'user_interactions',
        ]

    def _comments(self):
        return self.context.get('comments', [])

    def get_stats(self, obj):
        return {
            'views': obj.views,
            'likes': obj.likes_count,
            'bookmarks': obj.bookmarks_count,
            'comments': len(self._comments()),
        }

    def get_renewal(self, obj):
        return {
            'last_renewed': obj.last_renewed,
            'next_renewal': obj.next_renewal_date,
            'days_left': days_until(obj.next_renewal_date, timezone.now()),
        }

    def get_metadata(self, obj):
        return {
            'created': obj.created_at,
            'updated': obj.updated_at,
            'quality_score': obj.quality_score,
            'status': obj.status,
        }

    def get_comments(self, obj):
        return CommentSerializer(self._comments(), many=True).data

    def get_recommendations(self, obj):
        return obj.renewal_recommendations or []

    def get_user_interactions(self, obj):
        return self.context.get('user_interactions', {'liked': False, 'bookmarked': False})
