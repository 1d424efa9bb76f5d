from django.contrib import admin
from django.utils.html import format_html
from django.urls import reverse
from django.http import HttpResponse
import csv

from users.mixins import OwnedInlineMixin

from .models import App, Code, Combo, ComboItem

# ============================================
# CUSTOM ACTIONS
# ============================================

def export_to_csv(modeladmin, request, queryset):
    """Export selected items to CSV"""
    opts = modeladmin.model._meta
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename={opts.verbose_name_plural}.csv'

    writer = csv.writer(response)
    fields = [field for field in opts.get_fields() if not field.many_to_many and not field.one_to_many
              and not field.one_to_one and field.concrete]

    writer.writerow([field.verbose_name for field in fields])
    for obj in queryset:
        writer.writerow([getattr(obj, field.name) for field in fields])

    return response
export_to_csv.short_description = "Export to CSV"


# ============================================
# INLINE ADMINS
# ============================================

class ComboItemInline(OwnedInlineMixin, admin.TabularInline):
    model = ComboItem
    owned_fields = ('app',)
    extra = 1
    autocomplete_fields = ['app']


# ============================================
# APP ADMIN
# ============================================

@admin.register(App)
class AppAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'price', 'codes_badge', 'created_at']
    list_filter = ['owner']
    search_fields = ['name']
    readonly_fields = ['created_at', 'updated_at']
    actions = [export_to_csv]

    def get_queryset(self, request):
        return super().get_queryset(request).with_code_counts()

    def codes_badge(self, obj):
        available = obj.codes_available
        color = '#28a745' if available > 5 else ('#ffc107' if available > 0 else '#dc3545')
        url = reverse('admin:inventory_code_changelist') + f'?app__id__exact={obj.id}&used__exact=0'
        return format_html(
            '<a href="{}"><span style="background-color: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px;">{} available</span></a>',
            url,
            color,
            available,
        )
    codes_badge.short_description = 'Codes'
    codes_badge.admin_order_field = 'available_codes'


# ============================================
# CODE ADMIN
# ============================================

@admin.register(Code)
class CodeAdmin(admin.ModelAdmin):
    list_display = ['formatted_code', 'app', 'status_badge', 'used_at', 'created_at']
    list_filter = ['used', 'app']
    search_fields = ['code', 'app__name']
    readonly_fields = ['used_at', 'created_at']
    list_select_related = ['app']
    actions = [export_to_csv]

    def formatted_code(self, obj):
        return format_html('<code>{}</code>', obj.formatted)
    formatted_code.short_description = 'Code'
    formatted_code.admin_order_field = 'code'

    def status_badge(self, obj):
        if obj.used:
            return format_html('<span style="color: #dc3545; font-weight: bold;">Used</span>')
        return format_html('<span style="color: #28a745;">Available</span>')
    status_badge.short_description = 'Status'


# ============================================
# COMBO ADMIN
# ============================================

@admin.register(Combo)
class ComboAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'price', 'app_list', 'created_at']
    search_fields = ['name']
    inlines = [ComboItemInline]

    def app_list(self, obj):
        return ", ".join(app.name for app in obj.apps.all())
    app_list.short_description = 'Apps'
