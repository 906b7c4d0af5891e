from django.contrib import admin
from .models import NonConformity


@admin.register(NonConformity)
class NonConformityAdmin(admin.ModelAdmin):
    list_display = ['code', 'severity', 'status', 'product', 'production_record', 'reported_by', 'created_at']
    list_filter = ['status', 'severity', 'created_at']
    search_fields = ['code', 'description', 'product__name', 'production_record__lot_number']
    readonly_fields = ['code', 'reported_by', 'resolved_by', 'resolved_at', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False
