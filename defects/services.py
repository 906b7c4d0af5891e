from quality.exceptions import ValidationError
from .models import Defect


VALID_DEFECT_TYPES = {choice for choice, _ in Defect.DEFECT_TYPE_CHOICES}

# PositiveIntegerField range
MAX_DEFECT_QUANTITY = 2147483647


def validate_defects(defects):
    """
    Normalise a defect payload

    Args:
        defects (list): items with ``defect_type``, ``quantity`` and an
            optional ``description``

    Returns:
        list: dicts ready to build Defect rows

    Raises:
        ValidationError: payload that is not a list of objects, unknown
            defect type, or a quantity outside 0..MAX_DEFECT_QUANTITY
    """
    if defects is None:
        return []
    if not isinstance(defects, list):
        raise ValidationError("Los defectos deben enviarse como una lista")

    cleaned = []

    for index, item in enumerate(defects, 1):
        if not isinstance(item, dict):
            raise ValidationError(f"Defecto {index}: debe ser un objeto con tipo y cantidad")

        defect_type = item.get('defect_type')
        if defect_type not in VALID_DEFECT_TYPES:
            raise ValidationError(f"Defecto {index}: tipo de defecto '{defect_type}' no válido")

        quantity = item.get('quantity', 0)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"Defecto {index}: la cantidad debe ser un número entero")
        if quantity < 0:
            raise ValidationError(f"Defecto {index}: la cantidad no puede ser negativa")
        if quantity > MAX_DEFECT_QUANTITY:
            raise ValidationError(
                f"Defecto {index}: la cantidad no puede superar {MAX_DEFECT_QUANTITY}"
            )

        description = item.get('description') or ''
        if not isinstance(description, str):
            raise ValidationError(f"Defecto {index}: la descripción debe ser texto")

        cleaned.append({
            'defect_type': defect_type,
            'quantity': quantity,
            'description': description.strip(),
        })

    return cleaned


def total_quantity(defects):
    """Sum of defect quantities (zero for an empty ledger)"""
    return sum(defect['quantity'] for defect in defects)


def record_defects(quality_control, defects):
    """Persist the cleaned ``defects`` for ``quality_control``; must run inside its transaction"""
    return Defect.objects.bulk_create([
        Defect(quality_control=quality_control, **defect) for defect in defects
    ])
