from django.db import models
from django.contrib.auth.models import User


class Certificate(models.Model):
    """Quality certificate requested for a lot; decided once by a supervisor"""

    PENDING = 'pendiente'
    APPROVED = 'aprobado'
    REJECTED = 'rechazado'

    STATUS_CHOICES = [
        (PENDING, 'Pendiente'),
        (APPROVED, 'Aprobado'),
        (REJECTED, 'Rechazado'),
    ]

    code = models.CharField(max_length=50, unique=True, help_text="Código único del certificado")

    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='certificates'
    )
    production_record = models.ForeignKey(
        'quality.ProductionRecord',
        on_delete=models.PROTECT,
        related_name='certificates'
    )
    quality_control = models.ForeignKey(
        'quality.QualityControl',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='certificates'
    )

    requested_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='requested_certificates'
    )
    approved_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='decided_certificates',
        help_text="Supervisor que aprobó o rechazó el certificado"
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    pdf_path = models.CharField(max_length=500, blank=True, help_text="Ruta al PDF generado")
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    email_sent = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Certificado"
        verbose_name_plural = "Certificados"
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='certificate_status_idx'),
        ]

    def __str__(self):
        return f"{self.code} ({self.get_status_display()})"

    @property
    def is_final(self):
        return self.status in (self.APPROVED, self.REJECTED)
