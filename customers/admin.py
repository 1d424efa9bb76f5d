from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'owner', 'sale_count', 'created_at']
    list_filter = ['owner', 'created_at']
    search_fields = ['name', 'email', 'phone']
    readonly_fields = ['created_at', 'updated_at']

    def sale_count(self, obj):
        return obj.sales.count()
    sale_count.short_description = 'Sales'
