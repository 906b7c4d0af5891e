import logging

from django.utils import timezone

from operators.permissions import ensure_role, WRITE_ROLES, SUPERVISOR_ROLES
from products.models import Product
from quality.codes import create_with_unique_code
from quality.exceptions import NotFoundError, ValidationError
from quality.filters import parse_filter_choice, parse_filter_id
from quality.models import ProductionRecord
from quality.pagination import paginate
from .models import NonConformity

logger = logging.getLogger(__name__)


def is_status_change_allowed(current_status, new_status):
    """
    Transition policy for manual status changes

    The nominal flow is abierta -> en_revision -> resuelta -> cerrada, but any
    change between the four states is accepted.
    """
    return True


class NonConformityService:

    @staticmethod
    def create_non_conformity(user, description, severity=None, product_id=None, production_record_id=None):
        """
        Report a non-conformity, optionally tied to a product and/or a lot

        When only the lot is given, the product is taken from it.

        Raises:
            ValidationError: empty description, unknown severity, or a
                product that does not match the lot
            NotFoundError: unknown product or production record
        """
        ensure_role(user, WRITE_ROLES)

        description = (description or '').strip()
        if not description:
            raise ValidationError("La descripción es requerida")

        severity = severity or NonConformity.MEDIUM
        valid_severities = [choice for choice, _ in NonConformity.SEVERITY_CHOICES]
        if severity not in valid_severities:
            raise ValidationError(
                f"Severidad '{severity}' no válida. Opciones: {', '.join(valid_severities)}"
            )

        product = None
        if product_id not in (None, ''):
            try:
                product = Product.objects.get(pk=product_id)
            except (Product.DoesNotExist, ValueError, TypeError):
                raise NotFoundError(f"Producto {product_id} no encontrado")

        production_record = None
        if production_record_id not in (None, ''):
            try:
                production_record = ProductionRecord.objects.select_related('product').get(pk=production_record_id)
            except (ProductionRecord.DoesNotExist, ValueError, TypeError):
                raise NotFoundError(f"Registro de producción {production_record_id} no encontrado")

            if product is None:
                product = production_record.product
            elif product.pk != production_record.product_id:
                raise ValidationError("El producto no corresponde al lote")

        non_conformity = create_with_unique_code(
            NonConformity,
            'NC',
            product=product,
            production_record=production_record,
            reported_by=user,
            description=description,
            severity=severity,
            status=NonConformity.OPEN,
        )

        logger.info("No conformidad %s registrada (%s)", non_conformity.code, severity)
        return non_conformity

    @staticmethod
    def get_non_conformity(non_conformity_id):
        try:
            return NonConformity.objects.select_related(
                'product', 'production_record', 'reported_by', 'resolved_by'
            ).get(pk=non_conformity_id)
        except (NonConformity.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"No conformidad {non_conformity_id} no encontrada")

    @staticmethod
    def resolve(non_conformity_id, user, corrective_action):
        """Force the non-conformity to resuelta, whatever its current state"""
        ensure_role(user, SUPERVISOR_ROLES)

        corrective_action = (corrective_action or '').strip()
        if not corrective_action:
            raise ValidationError("La acción correctiva es requerida")

        non_conformity = NonConformityService.get_non_conformity(non_conformity_id)
        non_conformity.status = NonConformity.RESOLVED
        non_conformity.resolved_by = user
        non_conformity.resolved_at = timezone.now()
        non_conformity.corrective_action = corrective_action
        non_conformity.save(update_fields=[
            'status', 'resolved_by', 'resolved_at', 'corrective_action', 'updated_at'
        ])

        logger.info("No conformidad %s resuelta por %s", non_conformity.code, user.username)
        return non_conformity

    @staticmethod
    def update_status(non_conformity_id, status, user):
        ensure_role(user, SUPERVISOR_ROLES)

        valid_statuses = [choice for choice, _ in NonConformity.STATUS_CHOICES]
        if status not in valid_statuses:
            raise ValidationError(f"Estado '{status}' no válido. Opciones: {', '.join(valid_statuses)}")

        non_conformity = NonConformityService.get_non_conformity(non_conformity_id)
        if not is_status_change_allowed(non_conformity.status, status):
            raise ValidationError(
                f"No se permite pasar de '{non_conformity.status}' a '{status}'"
            )

        previous = non_conformity.status
        non_conformity.status = status
        non_conformity.save(update_fields=['status', 'updated_at'])

        logger.info(
            "No conformidad %s: %s -> %s (%s)",
            non_conformity.code, previous, status, user.username
        )
        return non_conformity

    @staticmethod
    def filter_non_conformities(filters=None):
        filters = filters or {}
        queryset = NonConformity.objects.select_related(
            'product', 'production_record', 'reported_by', 'resolved_by'
        )

        status = parse_filter_choice(filters.get('status'), 'status', NonConformity.STATUS_CHOICES)
        if status:
            queryset = queryset.filter(status=status)

        severity = parse_filter_choice(filters.get('severity'), 'severity', NonConformity.SEVERITY_CHOICES)
        if severity:
            queryset = queryset.filter(severity=severity)

        product_id = parse_filter_id(filters.get('product_id'), 'product_id')
        if product_id is not None:
            queryset = queryset.filter(product_id=product_id)

        return queryset.order_by('-created_at', '-id')

    @staticmethod
    def list_non_conformities(filters=None, page=None, limit=None):
        return paginate(NonConformityService.filter_non_conformities(filters), page, limit)
