from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from alerts.services import AlertService
from certificates.services import CertificateService
from nonconformities.services import NonConformityService
from .pagination import page_envelope
from .serializers import (
    ProductionRecordSerializer, QualityControlSerializer, AlertSerializer,
    CertificateSerializer, NonConformitySerializer
)
from .services import ProductionRecordService, QualityControlService


def _list_response(request, list_method, serializer_class):
    params = request.query_params
    page = list_method(params, params.get('page'), params.get('limit'))
    data = serializer_class(page.object_list, many=True).data
    return Response(page_envelope(page, data))


def _object_response(instance, serializer_class, message=None, status_code=status.HTTP_200_OK):
    body = {'success': True, 'data': serializer_class(instance).data}
    if message:
        body['message'] = message
    return Response(body, status=status_code)


# =========================================================
# REGISTROS DE PRODUCCIÓN
# =========================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def production_records_api(request):
    """List production records or register a new lot"""
    if request.method == 'GET':
        return _list_response(
            request, ProductionRecordService.list_production_records, ProductionRecordSerializer
        )

    data = request.data
    record = ProductionRecordService.create_production_record(
        user=request.user,
        product_id=data.get('product_id'),
        lot_number=data.get('lot_number'),
        production_date=data.get('production_date'),
        shift=data.get('shift'),
        total_produced=data.get('total_produced'),
        total_approved=data.get('total_approved', 0),
        total_rejected=data.get('total_rejected', 0),
        production_line=data.get('production_line', ''),
        notes=data.get('notes', ''),
    )
    return _object_response(
        record, ProductionRecordSerializer,
        message=f'Lote {record.lot_number} registrado exitosamente',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def production_record_detail_api(request, record_id):
    record = ProductionRecordService.get_production_record(record_id)
    return _object_response(record, ProductionRecordSerializer)


# =========================================================
# CONTROLES DE CALIDAD
# =========================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def quality_controls_api(request):
    """List quality controls or submit the inspection of a lot"""
    if request.method == 'GET':
        return _list_response(
            request, QualityControlService.list_quality_controls, QualityControlSerializer
        )

    data = request.data
    measurements = {
        field: data.get(field)
        for field in ('weight', 'diameter', 'height', 'width', 'other_measurements')
    }
    control = QualityControlService.submit_quality_control(
        production_record_id=data.get('production_record_id'),
        user=request.user,
        measurements=measurements,
        approved=data.get('approved'),
        defects=data.get('defects') or [],
        notes=data.get('notes', ''),
    )
    return _object_response(
        control, QualityControlSerializer,
        message=f'Control de calidad registrado (merma {control.waste_percentage}%)',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quality_control_detail_api(request, control_id):
    control = QualityControlService.get_quality_control(control_id)
    return _object_response(control, QualityControlSerializer)


# =========================================================
# ALERTAS
# =========================================================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def alerts_api(request):
    return _list_response(request, AlertService.list_alerts, AlertSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def alert_detail_api(request, alert_id):
    return _object_response(AlertService.get_alert(alert_id), AlertSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resolve_alert_api(request, alert_id):
    alert = AlertService.resolve(alert_id, request.user, request.data.get('notes'))
    return _object_response(alert, AlertSerializer, message='Alerta resuelta')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def dismiss_alert_api(request, alert_id):
    alert = AlertService.dismiss(alert_id, request.user)
    return _object_response(alert, AlertSerializer, message='Alerta descartada')


# =========================================================
# CERTIFICADOS
# =========================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def certificates_api(request):
    """List certificates or request a new one for an inspected lot"""
    if request.method == 'GET':
        return _list_response(request, CertificateService.list_certificates, CertificateSerializer)

    data = request.data
    certificate = CertificateService.create_certificate(
        user=request.user,
        product_id=data.get('product_id'),
        production_record_id=data.get('production_record_id'),
        quality_control_id=data.get('quality_control_id'),
    )
    return _object_response(
        certificate, CertificateSerializer,
        message=f'Certificado {certificate.code} solicitado',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def certificate_detail_api(request, certificate_id):
    return _object_response(CertificateService.get_certificate(certificate_id), CertificateSerializer)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def approve_certificate_api(request, certificate_id):
    certificate = CertificateService.approve(certificate_id, request.user)
    return _object_response(
        certificate, CertificateSerializer, message=f'Certificado {certificate.code} aprobado'
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reject_certificate_api(request, certificate_id):
    certificate = CertificateService.reject(
        certificate_id, request.user, request.data.get('rejection_reason')
    )
    return _object_response(
        certificate, CertificateSerializer, message=f'Certificado {certificate.code} rechazado'
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def download_certificate_api(request, certificate_id):
    """Stream the PDF of an approved certificate"""
    certificate, pdf_file = CertificateService.get_document(certificate_id)
    return FileResponse(
        pdf_file,
        as_attachment=True,
        filename=f'{certificate.code}.pdf',
        content_type='application/pdf',
    )


# =========================================================
# NO CONFORMIDADES
# =========================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def non_conformities_api(request):
    if request.method == 'GET':
        return _list_response(
            request, NonConformityService.list_non_conformities, NonConformitySerializer
        )

    data = request.data
    non_conformity = NonConformityService.create_non_conformity(
        user=request.user,
        description=data.get('description'),
        severity=data.get('severity'),
        product_id=data.get('product_id'),
        production_record_id=data.get('production_record_id'),
    )
    return _object_response(
        non_conformity, NonConformitySerializer,
        message=f'No conformidad {non_conformity.code} registrada',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def non_conformity_detail_api(request, non_conformity_id):
    return _object_response(
        NonConformityService.get_non_conformity(non_conformity_id), NonConformitySerializer
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resolve_non_conformity_api(request, non_conformity_id):
    non_conformity = NonConformityService.resolve(
        non_conformity_id, request.user, request.data.get('corrective_action')
    )
    return _object_response(non_conformity, NonConformitySerializer, message='No conformidad resuelta')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def update_non_conformity_status_api(request, non_conformity_id):
    non_conformity = NonConformityService.update_status(
        non_conformity_id, request.data.get('status'), request.user
    )
    return _object_response(non_conformity, NonConformitySerializer, message='Estado actualizado')
