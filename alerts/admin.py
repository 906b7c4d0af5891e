from django.contrib import admin
from .models import Alert


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = [
        'product', 'alert_type', 'threshold', 'actual_value',
        'status', 'email_sent', 'created_at'
    ]
    list_filter = ['alert_type', 'status', 'email_sent', 'created_at']
    search_fields = ['product__name', 'production_record__lot_number', 'resolution_notes']
    readonly_fields = [
        'product', 'production_record', 'quality_control', 'alert_type',
        'threshold', 'actual_value', 'status', 'resolved_by', 'resolved_at',
        'resolution_notes', 'email_sent', 'created_at', 'updated_at'
    ]

    def has_add_permission(self, request):
        return False
