from django.conf import settings
from django.core.paginator import EmptyPage, Page, Paginator

from .exceptions import ValidationError


def _positive_int(value, name, default):
    if value in (None, ''):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"El parámetro '{name}' debe ser un número entero")
    if number < 1:
        raise ValidationError(f"El parámetro '{name}' debe ser mayor o igual a 1")
    return number


def paginate(queryset, page=None, limit=None):
    """
    Paginate ``queryset`` with 1-based ``page`` and ``limit``

    Returns:
        Page: a page past the end is returned empty, with the real totals.
    """
    page = _positive_int(page, 'page', 1)
    limit = min(
        _positive_int(limit, 'limit', settings.QUALITY_PAGE_SIZE),
        settings.QUALITY_MAX_PAGE_SIZE,
    )

    paginator = Paginator(queryset, limit)
    try:
        return paginator.page(page)
    except EmptyPage:
        return Page([], page, paginator)


def page_envelope(page, data):
    """Response body shape shared by every list endpoint"""
    total = page.paginator.count
    return {
        'success': True,
        'data': data,
        'pagination': {
            'total': total,
            'page': page.number,
            'limit': page.paginator.per_page,
            'totalPages': page.paginator.num_pages if total else 0,
        },
    }
