from django.db import models
from django.contrib.auth.models import User


class Alert(models.Model):
    """Waste-threshold incident raised from a quality control"""

    WASTE_THRESHOLD = 'waste_threshold'

    ACTIVE = 'activa'
    RESOLVED = 'resuelta'
    DISMISSED = 'descartada'

    STATUS_CHOICES = [
        (ACTIVE, 'Activa'),
        (RESOLVED, 'Resuelta'),
        (DISMISSED, 'Descartada'),
    ]

    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='alerts'
    )
    production_record = models.ForeignKey(
        'quality.ProductionRecord',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='alerts'
    )
    quality_control = models.ForeignKey(
        'quality.QualityControl',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='alerts'
    )

    alert_type = models.CharField(max_length=50, default=WASTE_THRESHOLD)
    # Snapshots taken when the alert is raised
    threshold = models.DecimalField(max_digits=5, decimal_places=2)
    actual_value = models.DecimalField(max_digits=7, decimal_places=2)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=ACTIVE)

    resolved_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='resolved_alerts'
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolution_notes = models.TextField(blank=True)
    email_sent = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Alerta"
        verbose_name_plural = "Alertas"
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='alert_status_idx'),
            models.Index(fields=['alert_type'], name='alert_type_idx'),
        ]

    def __str__(self):
        return f"{self.product.name}: {self.actual_value}% > {self.threshold}% ({self.status})"
