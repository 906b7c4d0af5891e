import logging
import secrets

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from .exceptions import ConflictError

logger = logging.getLogger(__name__)


def generate_code(prefix):
    """Timestamp + random suffix code, e.g. CERT-20250114093012-4F1A9C"""
    stamp = timezone.now().strftime('%Y%m%d%H%M%S')
    return f"{prefix}-{stamp}-{secrets.token_hex(3).upper()}"


def create_with_unique_code(model, prefix, **fields):
    """
    Create a ``model`` row with a freshly generated unique ``code``

    Uniqueness is guaranteed by the column's unique constraint; a collision
    rolls back to a savepoint and retries with a new code.

    Raises:
        ConflictError: if no free code was found within the configured attempts
    """
    attempts = settings.QUALITY_CODE_MAX_ATTEMPTS

    for attempt in range(1, attempts + 1):
        code = generate_code(prefix)
        try:
            with transaction.atomic():
                return model.objects.create(code=code, **fields)
        except IntegrityError:
            if not model.objects.filter(code=code).exists():
                raise
            logger.warning(
                "Colisión de código %s para %s (intento %s/%s)",
                code, model.__name__, attempt, attempts,
            )

    raise ConflictError(f"No se pudo generar un código único para {model._meta.verbose_name}")
