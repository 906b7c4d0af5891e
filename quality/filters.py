import datetime

from django.utils.dateparse import parse_date

from .exceptions import ValidationError


def parse_filter_date(value, name):
    if value in (None, ''):
        return None
    if isinstance(value, datetime.date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"El filtro '{name}' debe tener formato AAAA-MM-DD")
    return parsed


def parse_filter_bool(value, name):
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in ('true', '1', 'yes', 'si'):
        return True
    if normalized in ('false', '0', 'no'):
        return False
    raise ValidationError(f"El filtro '{name}' debe ser verdadero o falso")


def parse_filter_id(value, name):
    if value in (None, ''):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"El filtro '{name}' debe ser un identificador numérico")


def parse_filter_choice(value, name, choices):
    if value in (None, ''):
        return None
    valid = [choice for choice, _ in choices]
    if value not in valid:
        raise ValidationError(f"El filtro '{name}' debe ser uno de: {', '.join(valid)}")
    return value
