from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator


class Product(models.Model):
    """Catalog entry read by the quality workflow (name and alert threshold)"""

    code = models.CharField(
        max_length=20,
        unique=True,
        blank=True,
        help_text="Código de producto (formato PT######)"
    )
    name = models.CharField(max_length=255, help_text="Nombre del producto")
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)
    material = models.CharField(max_length=100, blank=True)
    active = models.BooleanField(default=True)

    alert_threshold = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Porcentaje de merma que activa alertas (vacío = valor por defecto)"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Producto"
        verbose_name_plural = "Productos"
        ordering = ['name']

    def __str__(self):
        return f"{self.code} - {self.name}"
