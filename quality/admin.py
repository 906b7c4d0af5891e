from django.contrib import admin

from defects.models import Defect
from .models import ProductionRecord, QualityControl


class DefectInline(admin.TabularInline):
    model = Defect
    extra = 0
    can_delete = False
    readonly_fields = ['defect_type', 'quantity', 'description', 'created_at']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ProductionRecord)
class ProductionRecordAdmin(admin.ModelAdmin):
    list_display = [
        'lot_number', 'product', 'production_date', 'shift',
        'total_produced', 'total_approved', 'total_rejected', 'operator'
    ]
    list_filter = ['shift', 'production_date', 'product']
    search_fields = ['lot_number', 'product__name', 'product__code']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(QualityControl)
class QualityControlAdmin(admin.ModelAdmin):
    list_display = ['production_record', 'inspector', 'waste_percentage', 'approved', 'created_at']
    list_filter = ['approved', 'created_at']
    search_fields = ['production_record__lot_number', 'production_record__product__name']
    readonly_fields = [
        'production_record', 'inspector', 'weight', 'diameter', 'height', 'width',
        'other_measurements', 'waste_percentage', 'approved', 'created_at', 'updated_at'
    ]
    inlines = [DefectInline]

    def has_add_permission(self, request):
        return False
