import datetime
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import IntegrityError, transaction

from alerts.services import AlertService
from defects.services import validate_defects, total_quantity, record_defects
from operators.permissions import ensure_role, WRITE_ROLES
from products.models import Product
from .exceptions import NotFoundError, ValidationError, ConflictError
from .filters import parse_filter_bool, parse_filter_choice, parse_filter_date, parse_filter_id
from .models import ProductionRecord, QualityControl
from .pagination import paginate

logger = logging.getLogger(__name__)

ONE_INSPECTION_PER_LOT = "Ya existe un control de calidad para este lote (una inspección por lote)"

MEASUREMENT_FIELDS = ('weight', 'diameter', 'height', 'width')

TWO_PLACES = Decimal('0.01')


def calculate_waste_percentage(total_defects, total_produced):
    """round(total_defects / total_produced * 100, 2); zero when nothing was produced"""
    if not total_produced:
        return Decimal('0.00')
    percentage = Decimal(total_defects) / Decimal(total_produced) * 100
    return percentage.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _fit_column(number, model_field, label):
    """Round ``number`` to the column scale; reject what the column cannot hold"""
    limit = Decimal(10) ** (model_field.max_digits - model_field.decimal_places)
    message = f"{label} debe ser menor que {limit}"
    if abs(number) >= limit:
        raise ValidationError(message)
    number = number.quantize(Decimal(1).scaleb(-model_field.decimal_places), rounding=ROUND_HALF_UP)
    if abs(number) >= limit:
        raise ValidationError(message)
    return number


def _checked_waste_percentage(total_defects, total_produced):
    # Bound the raw ratio before rounding; huge totals overflow the quantize context
    if total_produced:
        _fit_column(
            Decimal(total_defects) / Decimal(total_produced) * 100,
            QualityControl._meta.get_field('waste_percentage'),
            "El porcentaje de merma",
        )
    return calculate_waste_percentage(total_defects, total_produced)


def _clean_count(value, name):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"El campo '{name}' debe ser un número entero")
    if value < 0:
        raise ValidationError(f"El campo '{name}' no puede ser negativo")
    return value


def _clean_measurements(measurements):
    measurements = measurements or {}
    cleaned = {}

    for field in MEASUREMENT_FIELDS:
        value = measurements.get(field)
        if value in (None, ''):
            cleaned[field] = None
            continue
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"La medida '{field}' debe ser un número decimal")
        if not number.is_finite():
            raise ValidationError(f"La medida '{field}' debe ser un número finito")
        if number < 0:
            raise ValidationError(f"La medida '{field}' no puede ser negativa")
        cleaned[field] = _fit_column(
            number, QualityControl._meta.get_field(field), f"La medida '{field}'"
        )

    other = measurements.get('other_measurements')
    if other is not None and not isinstance(other, dict):
        raise ValidationError("Las otras medidas deben ser un objeto clave/valor")
    cleaned['other_measurements'] = other

    return cleaned


class ProductionRecordService:
    """Creation and read side of production records (lots)"""

    @staticmethod
    def create_production_record(user, product_id, lot_number, production_date, shift,
                                 total_produced, total_approved=0, total_rejected=0,
                                 production_line='', notes=''):
        """
        Register a production lot

        Raises:
            NotFoundError: unknown product
            ValidationError: empty lot number, bad shift or date, or counts
                breaking total_approved + total_rejected <= total_produced
        """
        ensure_role(user, WRITE_ROLES)

        lot_number = (lot_number or '').strip()
        if not lot_number:
            raise ValidationError("El número de lote es requerido")

        valid_shifts = [choice for choice, _ in ProductionRecord.SHIFT_CHOICES]
        if shift not in valid_shifts:
            raise ValidationError(f"Turno '{shift}' no válido. Opciones: {', '.join(valid_shifts)}")

        if not isinstance(production_date, datetime.date):
            production_date = parse_filter_date(production_date, 'production_date')
            if production_date is None:
                raise ValidationError("La fecha de producción es requerida")

        total_produced = _clean_count(total_produced, 'total_produced')
        total_approved = _clean_count(total_approved, 'total_approved')
        total_rejected = _clean_count(total_rejected, 'total_rejected')

        if total_produced < 1:
            raise ValidationError("El total producido debe ser al menos 1")
        if total_approved + total_rejected > total_produced:
            raise ValidationError("La suma de aprobados y rechazados excede el total producido")

        try:
            product = Product.objects.get(pk=product_id)
        except (Product.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Producto {product_id} no encontrado")

        record = ProductionRecord.objects.create(
            product=product,
            operator=user,
            lot_number=lot_number,
            production_date=production_date,
            shift=shift,
            production_line=(production_line or '').strip(),
            total_produced=total_produced,
            total_approved=total_approved,
            total_rejected=total_rejected,
            notes=notes or '',
        )

        logger.info("Registro de producción creado: lote %s (%s unidades)", lot_number, total_produced)
        return record

    @staticmethod
    def get_production_record(production_record_id):
        try:
            return ProductionRecord.objects.select_related('product', 'operator').get(pk=production_record_id)
        except (ProductionRecord.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Registro de producción {production_record_id} no encontrado")

    @staticmethod
    def filter_production_records(filters=None):
        filters = filters or {}
        queryset = ProductionRecord.objects.select_related(
            'product', 'operator', 'quality_control'
        )

        product_id = parse_filter_id(filters.get('product_id'), 'product_id')
        if product_id is not None:
            queryset = queryset.filter(product_id=product_id)

        lot_number = (filters.get('lot_number') or '').strip()
        if lot_number:
            queryset = queryset.filter(lot_number__icontains=lot_number)

        start_date = parse_filter_date(filters.get('start_date'), 'start_date')
        if start_date:
            queryset = queryset.filter(production_date__gte=start_date)

        end_date = parse_filter_date(filters.get('end_date'), 'end_date')
        if end_date:
            queryset = queryset.filter(production_date__lte=end_date)

        shift = parse_filter_choice(filters.get('shift'), 'shift', ProductionRecord.SHIFT_CHOICES)
        if shift:
            queryset = queryset.filter(shift=shift)

        has_quality_control = parse_filter_bool(filters.get('has_quality_control'), 'has_quality_control')
        if has_quality_control is not None:
            queryset = queryset.filter(quality_control__isnull=not has_quality_control)

        return queryset.order_by('-production_date', '-id')

    @staticmethod
    def list_production_records(filters=None, page=None, limit=None):
        return paginate(ProductionRecordService.filter_production_records(filters), page, limit)


class QualityControlService:
    """Quality control evaluator: waste percentage, one inspection per lot, alert hand-off"""

    @staticmethod
    def submit_quality_control(production_record_id, user, measurements=None, approved=None,
                               defects=None, notes=''):
        """
        Register the inspection of a production record together with its defects

        Args:
            production_record_id (int): inspected lot
            user (User): inspector
            measurements (dict): weight, diameter, height, width and
                other_measurements, all optional
            approved (bool): verdict; when None it defaults to
                total_approved > total_rejected of the lot
            defects (list): ``{defect_type, quantity, description}`` items
            notes (str): free text

        Returns:
            QualityControl: the persisted control; its defects are written in
            the same transaction

        Raises:
            NotFoundError: unknown production record
            ConflictError: the lot already has a quality control
            ValidationError: malformed measurements, defects or verdict, or
                values the storage columns cannot hold
        """
        ensure_role(user, WRITE_ROLES)

        if approved is not None and not isinstance(approved, bool):
            raise ValidationError("El campo 'approved' debe ser verdadero o falso")

        cleaned_defects = validate_defects(defects)
        cleaned_measurements = _clean_measurements(measurements)

        record = ProductionRecordService.get_production_record(production_record_id)

        if QualityControl.objects.filter(production_record=record).exists():
            raise ConflictError(ONE_INSPECTION_PER_LOT)

        waste_percentage = _checked_waste_percentage(
            total_quantity(cleaned_defects), record.total_produced
        )

        if approved is None:
            approved = record.total_approved > record.total_rejected

        with transaction.atomic():
            try:
                with transaction.atomic():
                    control = QualityControl.objects.create(
                        production_record=record,
                        inspector=user,
                        waste_percentage=waste_percentage,
                        approved=approved,
                        notes=notes or '',
                        **cleaned_measurements
                    )
                    record_defects(control, cleaned_defects)
            except IntegrityError:
                if QualityControl.objects.filter(production_record=record).exists():
                    raise ConflictError(ONE_INSPECTION_PER_LOT)
                raise

            AlertService.evaluate_waste(record.product, record, control, waste_percentage)

        logger.info(
            "Control de calidad registrado: lote %s, merma %s%%",
            record.lot_number, waste_percentage
        )
        return control

    @staticmethod
    def get_quality_control(quality_control_id):
        try:
            return QualityControl.objects.select_related(
                'production_record__product', 'inspector'
            ).prefetch_related('defects').get(pk=quality_control_id)
        except (QualityControl.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Control de calidad {quality_control_id} no encontrado")

    @staticmethod
    def filter_quality_controls(filters=None):
        filters = filters or {}
        queryset = QualityControl.objects.select_related(
            'production_record__product', 'inspector'
        ).prefetch_related('defects')

        product_id = parse_filter_id(filters.get('product_id'), 'product_id')
        if product_id is not None:
            queryset = queryset.filter(production_record__product_id=product_id)

        production_record_id = parse_filter_id(filters.get('production_record_id'), 'production_record_id')
        if production_record_id is not None:
            queryset = queryset.filter(production_record_id=production_record_id)

        lot_number = (filters.get('lot_number') or '').strip()
        if lot_number:
            queryset = queryset.filter(production_record__lot_number__icontains=lot_number)

        start_date = parse_filter_date(filters.get('start_date'), 'start_date')
        if start_date:
            queryset = queryset.filter(production_record__production_date__gte=start_date)

        end_date = parse_filter_date(filters.get('end_date'), 'end_date')
        if end_date:
            queryset = queryset.filter(production_record__production_date__lte=end_date)

        shift = parse_filter_choice(filters.get('shift'), 'shift', ProductionRecord.SHIFT_CHOICES)
        if shift:
            queryset = queryset.filter(production_record__shift=shift)

        approved = parse_filter_bool(filters.get('approved'), 'approved')
        if approved is not None:
            queryset = queryset.filter(approved=approved)

        return queryset.order_by('-created_at', '-id')

    @staticmethod
    def list_quality_controls(filters=None, page=None, limit=None):
        return paginate(QualityControlService.filter_quality_controls(filters), page, limit)
