from django.db import models
from django.contrib.auth.models import User


class NonConformity(models.Model):
    """Quality issue reported against a product and/or a lot"""

    LOW = 'baja'
    MEDIUM = 'media'
    HIGH = 'alta'
    CRITICAL = 'critica'

    SEVERITY_CHOICES = [
        (LOW, 'Baja'),
        (MEDIUM, 'Media'),
        (HIGH, 'Alta'),
        (CRITICAL, 'Crítica'),
    ]

    OPEN = 'abierta'
    IN_REVIEW = 'en_revision'
    RESOLVED = 'resuelta'
    CLOSED = 'cerrada'

    STATUS_CHOICES = [
        (OPEN, 'Abierta'),
        (IN_REVIEW, 'En revisión'),
        (RESOLVED, 'Resuelta'),
        (CLOSED, 'Cerrada'),
    ]

    code = models.CharField(max_length=50, unique=True, help_text="Código único de la no conformidad")

    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='non_conformities'
    )
    production_record = models.ForeignKey(
        'quality.ProductionRecord',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='non_conformities'
    )

    reported_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='reported_non_conformities'
    )
    description = models.TextField()
    severity = models.CharField(max_length=20, choices=SEVERITY_CHOICES, default=MEDIUM)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OPEN)

    resolved_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='resolved_non_conformities'
    )
    corrective_action = models.TextField(blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "No conformidad"
        verbose_name_plural = "No conformidades"
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='non_conformity_status_idx'),
            models.Index(fields=['severity'], name='non_conformity_severity_idx'),
        ]

    def __str__(self):
        return f"{self.code} - {self.get_severity_display()} ({self.get_status_display()})"
