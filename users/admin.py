from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User

from .models import Profile


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ['role', 'phone', 'whatsapp_account', 'whatsapp_secret']


class UserAdmin(BaseUserAdmin):
    inlines = [ProfileInline]
    list_display = ['username', 'email', 'first_name', 'role_display', 'is_staff', 'is_active']

    def get_inline_instances(self, request, obj=None):
        # The profile is created by a post_save signal; only edit it afterwards
        if obj is None:
            return []
        return super().get_inline_instances(request, obj)

    def role_display(self, obj):
        profile = getattr(obj, 'profile', None)
        return profile.get_role_display() if profile else '-'
    role_display.short_description = 'Role'


admin.site.unregister(User)
admin.site.register(User, UserAdmin)
