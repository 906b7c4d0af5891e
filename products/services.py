from decimal import Decimal

from django.conf import settings

from .models import Product


CATEGORY_CODES = {
    'ACCESORIOS': '001',
    'BASES': '002',
    'BOTELLAS': '003',
    'BOTELLONES': '004',
    'BIDONES': '005',
    'TAPAS Y ASAS': '006',
    'FRASCOS': '007',
}

MATERIAL_CODES = {
    'ACERO INOXIDABLE': '001',
    'PET': '002',
    'POLICARBONATO': '003',
    'POLIETILENO': '004',
    'POLIPROPILENO': '005',
    'PVC': '006',
    'OTRO': '007',
}


def get_alert_threshold(product):
    """Waste-percentage threshold of ``product``, falling back to the system default"""
    if product.alert_threshold is not None:
        return Decimal(product.alert_threshold)
    return Decimal(settings.QUALITY_DEFAULT_ALERT_THRESHOLD)


def generate_product_code(category, material, sequence_number=None):
    """
    Build a product code in PT###### format

    The first three digits identify the category; the last three the
    material, or ``sequence_number`` when given.
    """
    category_code = CATEGORY_CODES.get((category or '').upper(), '000')

    if sequence_number is not None:
        return f"PT{category_code}{int(sequence_number):03d}"

    material_code = MATERIAL_CODES.get((material or '').upper(), '000')
    return f"PT{category_code}{material_code}"


def next_available_product_code(category, material):
    """
    First free code for the category/material pair

    Falls back to a per-category sequence when the material code is taken.
    """
    code = generate_product_code(category, material)
    if not Product.objects.filter(code=code).exists():
        return code

    for sequence_number in range(1, 1000):
        code = generate_product_code(category, material, sequence_number)
        if not Product.objects.filter(code=code).exists():
            return code

    raise ValueError(f"No hay códigos disponibles para la categoría {category}")
