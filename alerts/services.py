import logging
from functools import partial

from django.db import transaction
from django.utils import timezone

from operators.permissions import ensure_role, notification_recipients, SUPERVISOR_ROLES
from products.services import get_alert_threshold
from quality.exceptions import NotFoundError, ValidationError, ConflictError
from quality.filters import parse_filter_choice, parse_filter_id
from quality.notifications import NotificationService
from quality.pagination import paginate
from .models import Alert

logger = logging.getLogger(__name__)


class AlertService:
    """Waste-threshold alerts: trigger, notification fan-out and resolution"""

    @staticmethod
    def evaluate_waste(product, production_record, quality_control, waste_percentage):
        """
        Raise an alert when ``waste_percentage`` is strictly above the product threshold

        Only called by the quality control evaluator, inside its transaction.
        Notifications are dispatched after commit.

        Returns:
            Alert or None
        """
        threshold = get_alert_threshold(product)

        if waste_percentage <= threshold:
            return None

        alert = Alert.objects.create(
            product=product,
            production_record=production_record,
            quality_control=quality_control,
            alert_type=Alert.WASTE_THRESHOLD,
            threshold=threshold,
            actual_value=waste_percentage,
            status=Alert.ACTIVE,
        )

        logger.warning(
            "Alerta de merma para %s, lote %s: %s%% > %s%%",
            product.name, production_record.lot_number, waste_percentage, threshold
        )

        transaction.on_commit(partial(AlertService.dispatch_notifications, alert.pk), robust=True)
        return alert

    @staticmethod
    def dispatch_notifications(alert_id, notifier=NotificationService):
        """
        Notify supervisors and administrators of an alert; never raises

        ``email_sent`` is set when at least one message was handed to the
        mail backend.
        """
        try:
            alert = Alert.objects.select_related('product', 'production_record').get(pk=alert_id)
        except Alert.DoesNotExist:
            logger.warning("Alerta %s no encontrada para notificar", alert_id)
            return False

        alert_data = {
            'product_name': alert.product.name,
            'lot_number': alert.production_record.lot_number if alert.production_record else None,
            'waste_percentage': alert.actual_value,
            'threshold': alert.threshold,
            'date': timezone.localtime(alert.created_at).strftime('%d/%m/%Y %H:%M'),
        }

        sent_any = False
        for recipient in notification_recipients():
            if notifier.send_alert_email(recipient.email, alert_data):
                sent_any = True

        if sent_any:
            Alert.objects.filter(pk=alert.pk).update(email_sent=True)
        else:
            logger.warning("No se confirmó el envío de correos para la alerta %s", alert.pk)

        notifier.broadcast(
            message=(
                f"Merma de {alert.actual_value}% en {alert.product.name} "
                f"supera el umbral de {alert.threshold}%"
            ),
            alert_type=alert.alert_type,
            priority="HIGH",
            alert_id=alert.pk,
        )
        return sent_any

    @staticmethod
    def get_alert(alert_id):
        try:
            return Alert.objects.select_related(
                'product', 'production_record', 'quality_control', 'resolved_by'
            ).get(pk=alert_id)
        except (Alert.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Alerta {alert_id} no encontrada")

    @staticmethod
    def _close(alert_id, user, status, notes=''):
        # Conditional update: only an active alert can be closed
        updated = Alert.objects.filter(pk=alert_id, status=Alert.ACTIVE).update(
            status=status,
            resolved_by=user,
            resolved_at=timezone.now(),
            resolution_notes=notes,
            updated_at=timezone.now(),
        )

        if not updated:
            alert = AlertService.get_alert(alert_id)
            raise ConflictError(
                f"La alerta {alert.pk} ya fue cerrada (estado: {alert.get_status_display()})"
            )

        return AlertService.get_alert(alert_id)

    @staticmethod
    def resolve(alert_id, user, notes):
        """
        Mark an active alert as resolved

        Raises:
            PermissionDenied: user is not supervisor or administrator
            ValidationError: empty resolution notes
            NotFoundError: unknown alert
            ConflictError: alert already resolved or dismissed
        """
        ensure_role(user, SUPERVISOR_ROLES)

        notes = (notes or '').strip()
        if not notes:
            raise ValidationError("Las notas de resolución son requeridas")

        alert = AlertService._close(alert_id, user, Alert.RESOLVED, notes)
        logger.info("Alerta %s resuelta por %s", alert.pk, user.username)
        return alert

    @staticmethod
    def dismiss(alert_id, user):
        """Mark an active alert as dismissed; same failures as resolve, no notes needed"""
        ensure_role(user, SUPERVISOR_ROLES)

        alert = AlertService._close(alert_id, user, Alert.DISMISSED)
        logger.info("Alerta %s descartada por %s", alert.pk, user.username)
        return alert

    @staticmethod
    def filter_alerts(filters=None):
        filters = filters or {}
        queryset = Alert.objects.select_related(
            'product', 'production_record', 'quality_control', 'resolved_by'
        )

        status = parse_filter_choice(filters.get('status'), 'status', Alert.STATUS_CHOICES)
        if status:
            queryset = queryset.filter(status=status)

        product_id = parse_filter_id(filters.get('product_id'), 'product_id')
        if product_id is not None:
            queryset = queryset.filter(product_id=product_id)

        alert_type = filters.get('alert_type')
        if alert_type:
            queryset = queryset.filter(alert_type=alert_type)

        return queryset.order_by('-created_at', '-id')

    @staticmethod
    def list_alerts(filters=None, page=None, limit=None):
        return paginate(AlertService.filter_alerts(filters), page, limit)
