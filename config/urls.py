"""
URL configuration for the SuperArticles backend.
"""

from django.contrib import admin
from django.urls import path, include

from apps.accounts.urls import auth_urlpatterns
from apps.articles.urls import public_urlpatterns, lifecycle_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    # Security-code accounts
    path('api/auth/', include((auth_urlpatterns, 'auth'))),
    # Owner article management (upload, renew)
    path('api/articles/', include('apps.articles.urls')),
    # Public reader endpoints keyed by encrypted id
    path('api/view/', include((public_urlpatterns, 'view'))),
    # Scheduler / admin lifecycle triggers
    path('api/lifecycle/', include((lifecycle_urlpatterns, 'lifecycle'))),
    # Observability endpoints
    path('', include('apps.core.urls')),
]

admin.site.site_header = "SuperArticles Administration"
admin.site.site_title = "SuperArticles Admin"
admin.site.index_title = "Articles, members and lifecycle"
