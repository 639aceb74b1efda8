"""
URL patterns for member accounts. Mounted at /api/auth/ in config/urls.py.
"""

from django.urls import path

from .views import (
    CookieTokenRefreshView,
    CurrentMemberView,
    LoginView,
    LogoutView,
    RegisterView,
    RequestCodesView,
)

auth_urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', LoginView.as_view(), name='login'),
    path('request-codes/', RequestCodesView.as_view(), name='request_codes'),
    path('refresh/', CookieTokenRefreshView.as_view(), name='token_refresh'),
    path('me/', CurrentMemberView.as_view(), name='current_member'),
    path('logout/', LogoutView.as_view(), name='logout'),
]
