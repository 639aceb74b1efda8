"""
Core app for SuperArticles.

Shared base model, error envelope, HTTP middleware, throttles, trigger
permissions, email gateway and health checks.
"""
