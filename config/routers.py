"""
Shared DRF router.

DefaultRouter registers the 'drf_format_suffix' converter through
format_suffix_patterns; with a router per app that registration happens
twice and raises "Converter 'drf_format_suffix' is already registered."
"""

from rest_framework.routers import DefaultRouter


class SafeDefaultRouter(DefaultRouter):
    """DefaultRouter without format suffix patterns."""
    include_format_suffixes = False
