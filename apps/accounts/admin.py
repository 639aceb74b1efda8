"""
Admin interface for members.
"""

from django.contrib import admin

from .models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = [
        'email',
        'username',
        'codes_remaining',
        'next_refresh_allowed',
        'is_active',
        'is_staff',
        'date_joined',
    ]

    list_filter = ['is_active', 'is_staff', ('date_joined', admin.DateFieldListFilter)]

    search_fields = ['email', 'username']

    # Code digests are never shown or edited by hand
    exclude = ['security_codes', 'password']

    readonly_fields = [
        'id',
        'last_code_refresh',
        'next_refresh_allowed',
        'last_login',
        'date_joined',
        'updated_at',
    ]

    def codes_remaining(self, obj):
        return obj.codes_remaining
    codes_remaining.short_description = 'Codes Left'
