from django.contrib import admin
from .models import Certificate


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ['code', 'product', 'production_record', 'status', 'requested_by', 'approved_by', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['code', 'product__name', 'production_record__lot_number']
    readonly_fields = [
        'code', 'product', 'production_record', 'quality_control', 'requested_by',
        'approved_by', 'status', 'pdf_path', 'approved_at', 'rejection_reason',
        'email_sent', 'created_at', 'updated_at'
    ]

    def has_add_permission(self, request):
        return False
