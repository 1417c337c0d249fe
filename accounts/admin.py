"""Django admin configuration for dashboard users."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class DashboardUserAdmin(UserAdmin):
    """Admin configuration for users, including role and school links."""

    model = User
    list_display = ['email', 'name', 'role', 'school_id', 'is_staff', 'is_active']
    list_filter = ('role', 'is_staff', 'is_active')
    search_fields = ('email', 'name', 'school_id', 'trustee_id')
    ordering = ('email',)

    fieldsets = UserAdmin.fieldsets + (
        ('Role & School', {'fields': ('name', 'role', 'school_id', 'trustee_id')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'username', 'name', 'role', 'school_id', 'password1', 'password2'),
        }),
    )
