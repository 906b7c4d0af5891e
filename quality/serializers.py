from rest_framework import serializers

from alerts.models import Alert
from certificates.models import Certificate
from defects.models import Defect
from nonconformities.models import NonConformity
from products.models import Product
from .models import ProductionRecord, QualityControl


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ['id', 'code', 'name', 'category', 'material', 'alert_threshold', 'active']


class DefectSerializer(serializers.ModelSerializer):
    defect_type_display = serializers.CharField(source='get_defect_type_display', read_only=True)

    class Meta:
        model = Defect
        fields = ['id', 'defect_type', 'defect_type_display', 'quantity', 'description', 'created_at']


class ProductionRecordSerializer(serializers.ModelSerializer):
    product_info = ProductSerializer(source='product', read_only=True)
    operator_name = serializers.CharField(source='operator.get_full_name', read_only=True)
    shift_display = serializers.CharField(source='get_shift_display', read_only=True)
    has_quality_control = serializers.ReadOnlyField()

    class Meta:
        model = ProductionRecord
        fields = [
            'id', 'product', 'product_info', 'operator', 'operator_name',
            'lot_number', 'production_date', 'shift', 'shift_display', 'production_line',
            'total_produced', 'total_approved', 'total_rejected', 'notes',
            'has_quality_control', 'created_at', 'updated_at'
        ]


class QualityControlSerializer(serializers.ModelSerializer):
    lot_number = serializers.CharField(source='production_record.lot_number', read_only=True)
    product = serializers.IntegerField(source='production_record.product_id', read_only=True)
    product_name = serializers.CharField(source='production_record.product.name', read_only=True)
    inspector_name = serializers.CharField(source='inspector.get_full_name', read_only=True)
    defects = DefectSerializer(many=True, read_only=True)
    total_defects = serializers.ReadOnlyField()

    class Meta:
        model = QualityControl
        fields = [
            'id', 'production_record', 'lot_number', 'product', 'product_name',
            'inspector', 'inspector_name', 'weight', 'diameter', 'height', 'width',
            'other_measurements', 'waste_percentage', 'approved', 'notes',
            'defects', 'total_defects', 'created_at', 'updated_at'
        ]


class AlertSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    lot_number = serializers.CharField(source='production_record.lot_number', read_only=True, default=None)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    resolved_by_name = serializers.CharField(source='resolved_by.get_full_name', read_only=True, default=None)

    class Meta:
        model = Alert
        fields = [
            'id', 'product', 'product_name', 'production_record', 'lot_number',
            'quality_control', 'alert_type', 'threshold', 'actual_value',
            'status', 'status_display', 'resolved_by', 'resolved_by_name',
            'resolved_at', 'resolution_notes', 'email_sent', 'created_at', 'updated_at'
        ]


class CertificateSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    lot_number = serializers.CharField(source='production_record.lot_number', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    requested_by_name = serializers.CharField(source='requested_by.get_full_name', read_only=True)
    approved_by_name = serializers.CharField(source='approved_by.get_full_name', read_only=True, default=None)
    has_pdf = serializers.SerializerMethodField()

    class Meta:
        model = Certificate
        fields = [
            'id', 'code', 'product', 'product_name', 'production_record', 'lot_number',
            'quality_control', 'status', 'status_display', 'requested_by', 'requested_by_name',
            'approved_by', 'approved_by_name', 'approved_at', 'rejection_reason',
            'has_pdf', 'email_sent', 'created_at', 'updated_at'
        ]

    def get_has_pdf(self, obj):
        return bool(obj.pdf_path)


class NonConformitySerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True, default=None)
    lot_number = serializers.CharField(source='production_record.lot_number', read_only=True, default=None)
    severity_display = serializers.CharField(source='get_severity_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    reported_by_name = serializers.CharField(source='reported_by.get_full_name', read_only=True)
    resolved_by_name = serializers.CharField(source='resolved_by.get_full_name', read_only=True, default=None)

    class Meta:
        model = NonConformity
        fields = [
            'id', 'code', 'product', 'product_name', 'production_record', 'lot_number',
            'reported_by', 'reported_by_name', 'description', 'severity', 'severity_display',
            'status', 'status_display', 'resolved_by', 'resolved_by_name',
            'corrective_action', 'resolved_at', 'created_at', 'updated_at'
        ]
