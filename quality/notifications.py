import logging
import smtplib

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

logger = logging.getLogger(__name__)

NOTIFICATIONS_GROUP = "notifications"


class NotificationService:
    """Best-effort e-mail and real-time notifications; never raises"""

    @staticmethod
    def send_email(to, subject, text, html=None):
        """
        Hand one message to the mail backend

        Returns:
            bool: True when the backend accepted the message
        """
        if not settings.QUALITY_MAIL_ENABLED:
            logger.info("Correo deshabilitado, no se envía '%s' a %s", subject, to)
            return False

        try:
            sent = send_mail(
                subject,
                text,
                settings.DEFAULT_FROM_EMAIL,
                [to],
                html_message=html,
                fail_silently=False,
            )
        except (smtplib.SMTPException, OSError):
            logger.warning("Error al enviar correo '%s' a %s", subject, to, exc_info=True)
            return False

        return sent > 0

    @staticmethod
    def send_alert_email(to, alert_data):
        subject = f"Alerta de Calidad - {alert_data['product_name']}"
        lines = [
            "Se ha detectado una alerta en el sistema de calidad:",
            f"Producto: {alert_data['product_name']}",
            f"Lote: {alert_data.get('lot_number') or 'N/A'}",
            f"Porcentaje de Merma: {alert_data['waste_percentage']}%",
            f"Umbral Configurado: {alert_data['threshold']}%",
            f"Fecha: {alert_data['date']}",
            "Por favor, revise el registro en el sistema.",
        ]
        return NotificationService.send_email(to, subject, "\n".join(lines))

    @staticmethod
    def send_certificate_email(to, certificate_data):
        subject = f"Certificado de Calidad - {certificate_data['code']}"
        lines = [
            "Se ha generado un nuevo certificado de calidad:",
            f"Código: {certificate_data['code']}",
            f"Producto: {certificate_data['product_name']}",
            f"Lote: {certificate_data.get('lot_number') or 'N/A'}",
            f"Estado: {certificate_data['status']}",
            f"Fecha: {certificate_data['date']}",
            "Puede descargar el certificado desde el sistema.",
        ]
        return NotificationService.send_email(to, subject, "\n".join(lines))

    @staticmethod
    def broadcast(message, alert_type, priority="MEDIUM", **extra):
        """Push a notification to every websocket in the notifications group"""
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return False

        try:
            async_to_sync(channel_layer.group_send)(
                NOTIFICATIONS_GROUP,
                {
                    "type": "notification_message",
                    "message": message,
                    "alert_type": alert_type,
                    "priority": priority,
                    "timestamp": str(timezone.now()),
                    **extra,
                }
            )
        except Exception:
            logger.warning("No se pudo difundir la notificación '%s'", message, exc_info=True)
            return False

        return True
