from django.contrib import admin
from .models import Defect


@admin.register(Defect)
class DefectAdmin(admin.ModelAdmin):
    list_display = ['quality_control', 'defect_type', 'quantity', 'created_at']
    list_filter = ['defect_type', 'created_at']
    search_fields = ['quality_control__production_record__lot_number', 'description']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
