"""
Article API views.

Owner endpoints (authenticated):
    GET  /api/articles/                 - List own articles
    POST /api/articles/                 - Upload a new article
    GET  /api/articles/{id}/            - Own article detail
    POST /api/articles/{id}/renew/      - Renew one article
    POST /api/articles/renew-all/       - Renew every active/outdated article

Reader endpoints (by encrypted id, only active articles):
    GET  /api/view/{encrypted_id}/               - Article with comments
    GET  /api/view/{encrypted_id}/interactions/  - Caller's like/bookmark state
    GET  /api/view/{encrypted_id}/related/       - Up to 3 related articles
    POST /api/view/{encrypted_id}/comments/      - Add a comment
    POST /api/view/{encrypted_id}/like/          - Toggle like
    POST /api/view/{encrypted_id}/bookmark/      - Toggle bookmark

Lifecycle triggers (shared secret, no member auth):
    POST /api/lifecycle/sweep/          - X-Cron-Secret
    POST /api/lifecycle/sweep/manual/   - Admin-Token
"""

from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.middleware import celery_request_id_headers
from apps.core.permissions import HasAdminToken, HasCronSecret, IsArticleOwner
from apps.core.throttling import (
    RenewEndpointThrottle,
    UploadEndpointThrottle,
    ViewEndpointThrottle,
)

from . import services
from .models import Article
from .recommendations import starter_recommendations
from .serializers import (
    ArticleCreateSerializer,
    ArticleDetailSerializer,
    ArticleListSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    PublicArticleSerializer,
    RelatedArticleSerializer,
    RenewSerializer,
)
from .sweep import run_sweep, sweep_response


class ArticleViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    The caller's own articles, in every lifecycle state.
    """

    permission_classes = [IsAuthenticated, IsArticleOwner]

    def get_queryset(self):
        return Article.objects.filter(owner=self.request.user).order_by('-created_at')

    def get_serializer_class(self):
        if self.action == 'list':
            return ArticleListSerializer
        return ArticleDetailSerializer

    def get_throttles(self):
        if self.action == 'create':
            return [UploadEndpointThrottle()]
        if self.action in ('renew', 'renew_all'):
            return [RenewEndpointThrottle()]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = ArticleCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        article = services.create_article(request.user, **serializer.validated_data)

        return Response(
            {
                'success': True,
                'message': 'SuperArticle created successfully!',
                'data': {
                    'id': str(article.pk),
                    'title': article.title,
                    'page_name': article.page_name,
                    'public_url': article.public_url,
                    'encrypted_id': article.encrypted_id,
                    'renewal_date': article.next_renewal_date,
                    'recommendations': starter_recommendations(),
                    'preview_url': services.preview_url_for(article.encrypted_id),
                },
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'])
    def renew(self, request, pk=None):
        serializer = RenewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        article, suggestions = services.renew_article(
            request.user,
            pk,
            updated_content=serializer.validated_data.get('updated_content'),
        )

        return Response({
            'success': True,
            'message': 'Article renewed successfully!',
            'data': {
                'next_renewal_date': article.next_renewal_date,
                'removal_date': article.removal_date,
                'suggestions': suggestions,
                'status': article.status,
                'quality_score': article.quality_score,
            },
        })

    @action(detail=False, methods=['post'], url_path='renew-all')
    def renew_all(self, request):
        count = services.renew_all_articles(request.user)
        return Response({
            'success': True,
            'message': f'Successfully renewed {count} articles',
            'renewed_count': count,
        })


class PublicArticleViewSet(viewsets.ViewSet):
    """
    Reader access to active articles by encrypted id.

    Reading is open to everyone; commenting, liking and bookmarking
    require a signed-in member.
    """

    throttle_classes = [ViewEndpointThrottle]
    write_actions = ('comments', 'like', 'bookmark')

    def get_permissions(self):
        if self.action in self.write_actions:
            return [IsAuthenticated()]
        return [AllowAny()]

    def retrieve(self, request, encrypted_id=None):
        article = services.get_public_article(encrypted_id)

        services.record_view(article, request.user)
        article.refresh_from_db(fields=['views'])

        comments = list(article.comments.select_related('author').order_by('-created_at'))
        serializer = PublicArticleSerializer(article, context={
            'request': request,
            'comments': comments,
            'user_interactions': services.get_interactions(article, request.user),
        })
        return Response({'success': True, 'data': serializer.data})

    def interactions(self, request, encrypted_id=None):
        article = services.get_public_article(encrypted_id)
        return Response({
            'success': True,
            'interactions': services.get_interactions(article, request.user),
        })

    def related(self, request, encrypted_id=None):
        article = services.get_public_article(encrypted_id)
        related = services.related_articles(article)
        return Response({
            'success': True,
            'articles': RelatedArticleSerializer(related, many=True).data,
        })

    def comments(self, request, encrypted_id=None):
        article = services.get_public_article(encrypted_id)
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment = services.add_comment(article, request.user, serializer.validated_data['content'])
        return Response(
            {'success': True, 'comment': CommentSerializer(comment).data},
            status=status.HTTP_201_CREATED,
        )

    def like(self, request, encrypted_id=None):
        article = services.get_public_article(encrypted_id)
        return Response({'success': True, 'liked': services.toggle_like(article, request.user)})

    def bookmark(self, request, encrypted_id=None):
        article = services.get_public_article(encrypted_id)
        return Response({'success': True, 'bookmarked': services.toggle_bookmark(article, request.user)})


class LifecycleSweepView(APIView):
    """
    Scheduled sweep trigger.

    POST /api/lifecycle/sweep/
    Headers: X-Cron-Secret: <CRON_SECRET>
    """
    authentication_classes = []
    permission_classes = [HasCronSecret]
    throttle_classes = []
    trigger = 'cron'

    def post(self, request):
        stats = run_sweep(trigger=self.trigger)
        return Response(sweep_response(stats, timezone.now()))


class ManualLifecycleSweepView(LifecycleSweepView):
    """
    Operator-initiated sweep.

    POST /api/lifecycle/sweep/manual/
    Headers: Admin-Token: <ADMIN_TOKEN>
    Body: {"async": true} queues the Celery task instead of running inline.
    """
    permission_classes = [HasAdminToken]
    trigger = 'manual'

    def post(self, request):
        if str(request.data.get('async', '')).lower() in ('1', 'true'):
            from .tasks import run_lifecycle_sweep

            result = run_lifecycle_sweep.apply_async(
                kwargs={'trigger': self.trigger},
                headers=celery_request_id_headers(),
            )
            return Response(
                {
                    'success': True,
                    'message': 'Lifecycle sweep queued',
                    'task_id': result.id,
                },
                status=status.HTTP_202_ACCEPTED,
            )

        return super().post(request)
