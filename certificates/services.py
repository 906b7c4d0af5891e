import logging
from functools import partial

from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone

from operators.permissions import ensure_role, WRITE_ROLES, SUPERVISOR_ROLES
from quality.codes import create_with_unique_code
from quality.documents import CertificateRenderer
from quality.exceptions import NotFoundError, ValidationError, ConflictError
from quality.filters import parse_filter_choice, parse_filter_id
from quality.models import ProductionRecord, QualityControl
from quality.notifications import NotificationService
from quality.pagination import paginate
from .models import Certificate

logger = logging.getLogger(__name__)


def _decimal(value):
    return None if value is None else str(value)


def _user_display(user):
    if user is None:
        return None
    return user.get_full_name() or user.username


def build_certificate_facts(certificate, approver, approved_at):
    """
    Complete, deterministic snapshot of everything printed on a certificate

    Decimals are rendered as strings, defects are ordered by id and extra
    measurements by name.
    """
    record = certificate.production_record
    control = certificate.quality_control or QualityControl.objects.get(production_record=record)
    product = certificate.product

    other_measurements = sorted(
        (str(name), str(value)) for name, value in (control.other_measurements or {}).items()
    )

    return {
        'certificate': {
            'code': certificate.code,
            'requested_by': _user_display(certificate.requested_by),
            'approved_by': _user_display(approver),
            'approved_at': timezone.localtime(approved_at).strftime('%d/%m/%Y %H:%M'),
        },
        'product': {
            'id': product.pk,
            'code': product.code,
            'name': product.name,
        },
        'production_record': {
            'id': record.pk,
            'lot_number': record.lot_number,
            'production_date': record.production_date.isoformat(),
            'shift': record.get_shift_display(),
            'production_line': record.production_line,
            'total_produced': record.total_produced,
            'total_approved': record.total_approved,
            'total_rejected': record.total_rejected,
        },
        'quality_control': {
            'id': control.pk,
            'weight': _decimal(control.weight),
            'diameter': _decimal(control.diameter),
            'height': _decimal(control.height),
            'width': _decimal(control.width),
            'other_measurements': other_measurements,
            'waste_percentage': _decimal(control.waste_percentage),
            'approved': control.approved,
            'notes': control.notes,
        },
        'defects': [
            {
                'defect_type': defect.get_defect_type_display(),
                'quantity': defect.quantity,
                'description': defect.description,
            }
            for defect in control.defects.order_by('id')
        ],
    }


class CertificateService:
    """Certificate lifecycle: pendiente -> aprobado | rechazado"""

    @staticmethod
    def create_certificate(user, product_id, production_record_id, quality_control_id=None):
        """
        Request a certificate for an inspected lot

        Raises:
            NotFoundError: unknown production record
            ValidationError: lot without inspection, inspection from another
                lot, or product not matching the lot
        """
        ensure_role(user, WRITE_ROLES)

        try:
            record = ProductionRecord.objects.select_related('product').get(pk=production_record_id)
        except (ProductionRecord.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Registro de producción {production_record_id} no encontrado")

        if not QualityControl.objects.filter(production_record=record).exists():
            raise ValidationError("El lote no tiene control de calidad registrado")

        quality_control = None
        if quality_control_id not in (None, ''):
            quality_control = QualityControl.objects.filter(pk=quality_control_id).first()
            if quality_control is None or quality_control.production_record_id != record.pk:
                raise ValidationError("El control de calidad no pertenece a este lote")

        try:
            product_id = int(product_id)
        except (TypeError, ValueError):
            raise ValidationError("El producto es requerido")
        if product_id != record.product_id:
            raise ValidationError("El producto no corresponde al lote")

        certificate = create_with_unique_code(
            Certificate,
            'CERT',
            product=record.product,
            production_record=record,
            quality_control=quality_control,
            requested_by=user,
            status=Certificate.PENDING,
        )

        logger.info("Certificado %s solicitado para el lote %s", certificate.code, record.lot_number)
        return certificate

    @staticmethod
    def get_certificate(certificate_id):
        try:
            return Certificate.objects.select_related(
                'product', 'production_record', 'quality_control', 'requested_by', 'approved_by'
            ).get(pk=certificate_id)
        except (Certificate.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Certificado {certificate_id} no encontrado")

    @staticmethod
    def _ensure_pending(certificate):
        if certificate.status != Certificate.PENDING:
            raise ConflictError(
                f"El certificado {certificate.code} ya fue procesado "
                f"(estado: {certificate.get_status_display()})"
            )

    @staticmethod
    def approve(certificate_id, user, renderer=None, notifier=NotificationService):
        """
        Approve a pending certificate and generate its PDF

        The certificate is only approved once its document exists; a render
        failure leaves it pending.

        Raises:
            NotFoundError: unknown certificate
            ConflictError: certificate is not pending
            DocumentRenderError: the PDF could not be generated
        """
        ensure_role(user, SUPERVISOR_ROLES)

        certificate = CertificateService.get_certificate(certificate_id)
        CertificateService._ensure_pending(certificate)

        renderer = renderer or CertificateRenderer()
        approved_at = timezone.now()
        facts = build_certificate_facts(certificate, user, approved_at)
        pdf_path = renderer.render(facts)

        updated = Certificate.objects.filter(pk=certificate.pk, status=Certificate.PENDING).update(
            status=Certificate.APPROVED,
            pdf_path=pdf_path,
            approved_by=user,
            approved_at=approved_at,
            updated_at=timezone.now(),
        )
        if not updated:
            renderer.discard(pdf_path)
            CertificateService._ensure_pending(CertificateService.get_certificate(certificate.pk))

        transaction.on_commit(
            partial(CertificateService.dispatch_notifications, certificate.pk, notifier),
            robust=True,
        )

        logger.info("Certificado %s aprobado por %s", certificate.code, user.username)
        return CertificateService.get_certificate(certificate.pk)

    @staticmethod
    def reject(certificate_id, user, rejection_reason):
        """
        Reject a pending certificate; no document is generated

        Raises:
            ValidationError: empty rejection reason
            NotFoundError: unknown certificate
            ConflictError: certificate is not pending
        """
        ensure_role(user, SUPERVISOR_ROLES)

        rejection_reason = (rejection_reason or '').strip()
        if not rejection_reason:
            raise ValidationError("El motivo de rechazo es requerido")

        updated = Certificate.objects.filter(pk=certificate_id, status=Certificate.PENDING).update(
            status=Certificate.REJECTED,
            approved_by=user,
            rejection_reason=rejection_reason,
            updated_at=timezone.now(),
        )
        certificate = CertificateService.get_certificate(certificate_id)
        if not updated:
            CertificateService._ensure_pending(certificate)

        transaction.on_commit(
            partial(
                NotificationService.broadcast,
                message=f"Certificado {certificate.code} rechazado",
                alert_type='certificate',
            ),
            robust=True,
        )

        logger.info("Certificado %s rechazado por %s", certificate.code, user.username)
        return certificate

    @staticmethod
    def dispatch_notifications(certificate_id, notifier=NotificationService):
        """Tell the requester the certificate is ready; never raises"""
        certificate = Certificate.objects.select_related(
            'product', 'production_record', 'requested_by'
        ).filter(pk=certificate_id).first()
        if certificate is None:
            return False

        sent = False
        recipient = certificate.requested_by.email if certificate.requested_by else ''
        if recipient:
            sent = notifier.send_certificate_email(recipient, {
                'code': certificate.code,
                'product_name': certificate.product.name,
                'lot_number': certificate.production_record.lot_number,
                'status': certificate.get_status_display(),
                'date': timezone.localtime(certificate.approved_at).strftime('%d/%m/%Y %H:%M'),
            })
            if sent:
                Certificate.objects.filter(pk=certificate.pk).update(email_sent=True)

        notifier.broadcast(
            message=f"Certificado {certificate.code} aprobado",
            alert_type='certificate',
            certificate_id=certificate.pk,
        )
        return sent

    @staticmethod
    def get_document(certificate_id):
        """
        Open the PDF of an approved certificate

        Returns:
            tuple: (Certificate, file object opened in binary mode)

        Raises:
            NotFoundError: unknown certificate, or no stored document
            ValidationError: certificate is not approved
        """
        certificate = CertificateService.get_certificate(certificate_id)

        if certificate.status != Certificate.APPROVED:
            raise ValidationError("El certificado debe estar aprobado para descargar el PDF")

        if not certificate.pdf_path:
            raise NotFoundError("El PDF no está disponible para este certificado")

        if not default_storage.exists(certificate.pdf_path):
            raise NotFoundError("El archivo PDF no se encontró en el servidor")

        return certificate, default_storage.open(certificate.pdf_path, 'rb')

    @staticmethod
    def filter_certificates(filters=None):
        filters = filters or {}
        queryset = Certificate.objects.select_related(
            'product', 'production_record', 'quality_control', 'requested_by', 'approved_by'
        )

        status = parse_filter_choice(filters.get('status'), 'status', Certificate.STATUS_CHOICES)
        if status:
            queryset = queryset.filter(status=status)

        product_id = parse_filter_id(filters.get('product_id'), 'product_id')
        if product_id is not None:
            queryset = queryset.filter(product_id=product_id)

        production_record_id = parse_filter_id(filters.get('production_record_id'), 'production_record_id')
        if production_record_id is not None:
            queryset = queryset.filter(production_record_id=production_record_id)

        return queryset.order_by('-created_at', '-id')

    @staticmethod
    def list_certificates(filters=None, page=None, limit=None):
        return paginate(CertificateService.filter_certificates(filters), page, limit)
