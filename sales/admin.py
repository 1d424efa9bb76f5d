# sales/admin.py

from django.contrib import admin, messages
from django.db import transaction
from django.utils.html import format_html

from users.mixins import OwnedInlineMixin

from .exceptions import SaleError
from .forms import SaleAdminForm, SaleItemInlineForm
from .models import Sale, SaleCode, SaleItem
from .services import cancel_sale, confirm_sale, delete_sale
from .signals import sale_placed


# ============================================
# INLINE ADMIN FOR SALE ITEMS
# ============================================

class SaleItemInline(OwnedInlineMixin, admin.TabularInline):
    model = SaleItem
    owned_fields = ('app', 'combo')
    form = SaleItemInlineForm
    extra = 0
    fields = ['app', 'combo', 'quantity', 'price', 'subtotal_display', 'codes_display']
    readonly_fields = ['subtotal_display', 'codes_display']
    autocomplete_fields = ['app']

    def has_add_permission(self, request, obj=None):
        return obj is None or obj.is_pending

    def has_change_permission(self, request, obj=None):
        return obj is None or obj.is_pending

    def has_delete_permission(self, request, obj=None):
        return obj is None or obj.is_pending

    def subtotal_display(self, obj):
        return f"{obj.subtotal:,.2f}" if obj.pk else '-'
    subtotal_display.short_description = 'Subtotal'

    def codes_display(self, obj):
        if not obj.pk:
            return '-'
        codes = [link.code.formatted for link in obj.sale_codes.select_related('code')]
        return ', '.join(codes) or '-'
    codes_display.short_description = 'Codes'


# ============================================
# MAIN SALE ADMIN
# ============================================

@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    form = SaleAdminForm
    inlines = [SaleItemInline]

    list_display = [
        'id',
        'customer',
        'owner',
        'item_count_display',
        'total_price_display',
        'status_badge',
        'date',
    ]
    list_filter = ['status', 'date', 'owner']
    search_fields = ['id', 'customer__name', 'customer__phone']
    readonly_fields = ['status', 'total_price', 'confirmed_at', 'cancelled_at', 'created_at']
    list_select_related = ['customer', 'owner']
    date_hierarchy = 'date'

    actions = ['confirm_sales_action', 'cancel_sales_action']

    def get_fields(self, request, obj=None):
        return ['owner', 'customer', 'date'] + self.readonly_fields

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        # Items were edited inline; keep the stored total in step
        sale = form.instance
        sale.update_total()
        if not change:
            transaction.on_commit(lambda: sale_placed.send(sender=Sale, sale=sale))

    def delete_model(self, request, obj):
        delete_sale(obj)

    def delete_queryset(self, request, queryset):
        for sale in queryset:
            delete_sale(sale)

    # ============================================
    # DISPLAY METHODS
    # ============================================

    def item_count_display(self, obj):
        count = obj.items.count()
        return format_html('<strong>{}</strong> item{}', count, 's' if count != 1 else '')
    item_count_display.short_description = 'Items'

    def total_price_display(self, obj):
        amount = f"{float(obj.total_price):,.2f}"
        return format_html('<strong style="color: #10b981;">{}</strong>', amount)
    total_price_display.short_description = 'Total'
    total_price_display.admin_order_field = 'total_price'

    def status_badge(self, obj):
        colors = {
            Sale.STATUS_PENDING: '#fbbf24',
            Sale.STATUS_CONFIRMED: '#10b981',
            Sale.STATUS_CANCELLED: '#ef4444',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 12px; font-size: 11px; font-weight: bold;">{}</span>',
            colors.get(obj.status, '#6b7280'),
            obj.get_status_display().upper(),
        )
    status_badge.short_description = 'Status'

    # ============================================
    # ADMIN ACTIONS
    # ============================================

    def _run(self, request, queryset, operation, verb):
        done = 0
        for sale in queryset:
            try:
                operation(sale)
                done += 1
            except SaleError as e:
                self.message_user(request, f"Sale #{sale.pk}: {e}", messages.ERROR)
        if done:
            self.message_user(request, f"{verb} {done} sale(s)", messages.SUCCESS)

    @admin.action(description='Confirm selected sales (allocate codes)')
    def confirm_sales_action(self, request, queryset):
        self._run(request, queryset, confirm_sale, 'Confirmed')

    @admin.action(description='Cancel selected sales')
    def cancel_sales_action(self, request, queryset):
        self._run(request, queryset, cancel_sale, 'Cancelled')


# ============================================
# DELIVERED CODES
# ============================================

@admin.register(SaleCode)
class SaleCodeAdmin(admin.ModelAdmin):
    list_display = ['formatted_code', 'app_name', 'sale_link', 'created_at']
    search_fields = ['code__code', 'sale_item__sale__customer__name']
    list_select_related = ['code__app', 'sale_item__sale']
    readonly_fields = ['sale_item', 'code', 'created_at']

    def has_add_permission(self, request):
        return False

    def formatted_code(self, obj):
        return format_html('<code>{}</code>', obj.code.formatted)
    formatted_code.short_description = 'Code'

    def app_name(self, obj):
        return obj.code.app.name
    app_name.short_description = 'App'

    def sale_link(self, obj):
        return f"Sale #{obj.sale_item.sale_id}"
    sale_link.short_description = 'Sale'
