from django.contrib import admin
from .models import Product
from .services import next_available_product_code


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'category', 'material', 'alert_threshold', 'active']
    list_filter = ['active', 'category', 'material']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at', 'updated_at']

    def save_model(self, request, obj, form, change):
        if not obj.code:
            obj.code = next_available_product_code(obj.category, obj.material)
        super().save_model(request, obj, form, change)
