"""
Article API URLs.

``urlpatterns`` is mounted at /api/articles/, ``public_urlpatterns`` at
/api/view/ and ``lifecycle_urlpatterns`` at /api/lifecycle/.
"""

from django.urls import include, path

from config.routers import SafeDefaultRouter

from .views import (
    ArticleViewSet,
    LifecycleSweepView,
    ManualLifecycleSweepView,
    PublicArticleViewSet,
)

app_name = 'articles'

router = SafeDefaultRouter()
# Mounted at the app root, so the API root view would shadow list/create
router.include_root_view = False
router.register(r'', ArticleViewSet, basename='article')

urlpatterns = [
    # Router URLs (includes renew and renew-all actions)
    path('', include(router.urls)),
]

public_urlpatterns = [
    path(
        '<str:encrypted_id>/',
        PublicArticleViewSet.as_view({'get': 'retrieve'}),
        name='article',
    ),
    path(
        '<str:encrypted_id>/interactions/',
        PublicArticleViewSet.as_view({'get': 'interactions'}),
        name='interactions',
    ),
    path(
        '<str:encrypted_id>/related/',
        PublicArticleViewSet.as_view({'get': 'related'}),
        name='related',
    ),
    path(
        '<str:encrypted_id>/comments/',
        PublicArticleViewSet.as_view({'post': 'comments'}),
        name='comments',
    ),
    path(
        '<str:encrypted_id>/like/',
        PublicArticleViewSet.as_view({'post': 'like'}),
        name='like',
    ),
    path(
        '<str:encrypted_id>/bookmark/',
        PublicArticleViewSet.as_view({'post': 'bookmark'}),
        name='bookmark',
    ),
]

lifecycle_urlpatterns = [
    path('sweep/', LifecycleSweepView.as_view(), name='sweep'),
    path('sweep/manual/', ManualLifecycleSweepView.as_view(), name='sweep-manual'),
]
