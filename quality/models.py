from django.db import models
from django.db.models import F, Q
from django.contrib.auth.models import User


class ProductionRecord(models.Model):
    """One dated, shifted manufacturing run (lot) of a single product"""

    MORNING = 'morning'
    AFTERNOON = 'afternoon'
    NIGHT = 'night'

    SHIFT_CHOICES = [
        (MORNING, 'Mañana'),
        (AFTERNOON, 'Tarde'),
        (NIGHT, 'Noche'),
    ]

    product = models.ForeignKey(
        'products.Product',
        on_delete=models.PROTECT,
        related_name='production_records'
    )
    operator = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='production_records',
        help_text="Usuario que registró la producción"
    )

    lot_number = models.CharField(max_length=100, help_text="Número de lote")
    production_date = models.DateField()
    shift = models.CharField(max_length=20, choices=SHIFT_CHOICES)
    production_line = models.CharField(max_length=50, blank=True)

    total_produced = models.PositiveIntegerField()
    total_approved = models.PositiveIntegerField(default=0)
    total_rejected = models.PositiveIntegerField(default=0)

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Registro de Producción"
        verbose_name_plural = "Registros de Producción"
        ordering = ['-production_date', '-id']
        indexes = [
            models.Index(fields=['production_date'], name='production_record_date_idx'),
            models.Index(fields=['lot_number'], name='production_record_lot_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(total_produced__gte=1),
                name='production_record_total_produced_gte_1',
            ),
            models.CheckConstraint(
                condition=Q(total_approved__lte=F('total_produced') - F('total_rejected')),
                name='production_record_counts_within_total',
            ),
        ]

    def __str__(self):
        return f"Lote {self.lot_number} ({self.production_date})"

    @property
    def has_quality_control(self):
        return hasattr(self, 'quality_control')


class QualityControl(models.Model):
    """The single quality inspection of a production record"""

    production_record = models.OneToOneField(
        ProductionRecord,
        on_delete=models.PROTECT,
        related_name='quality_control'
    )
    inspector = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='quality_controls'
    )

    weight = models.DecimalField(
        max_digits=10, decimal_places=3, null=True, blank=True,
        help_text="Peso en gramos"
    )
    diameter = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text="Diámetro en mm"
    )
    height = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text="Altura en mm"
    )
    width = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True,
        help_text="Ancho en mm"
    )
    other_measurements = models.JSONField(null=True, blank=True)

    waste_percentage = models.DecimalField(
        max_digits=7,
        decimal_places=2,
        default=0,
        help_text="Porcentaje de merma calculado"
    )
    approved = models.BooleanField(default=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Control de Calidad"
        verbose_name_plural = "Controles de Calidad"
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Control {self.production_record.lot_number} - merma {self.waste_percentage}%"

    @property
    def total_defects(self):
        return sum(defect.quantity for defect in self.defects.all())
