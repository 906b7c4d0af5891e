from django.core.exceptions import ValidationError
from django.db import models


class Defect(models.Model):
    """Defect tally recorded as part of one quality control; never edited afterwards"""

    MANCHA = 'mancha'
    REBABA = 'rebaba'
    INCOMPLETO = 'incompleto'
    DEFORMACION = 'deformacion'
    RAYON = 'rayon'
    OTRO = 'otro'

    DEFECT_TYPE_CHOICES = [
        (MANCHA, 'Mancha'),
        (REBABA, 'Rebaba'),
        (INCOMPLETO, 'Incompleto'),
        (DEFORMACION, 'Deformación'),
        (RAYON, 'Rayón'),
        (OTRO, 'Otro'),
    ]

    quality_control = models.ForeignKey(
        'quality.QualityControl',
        on_delete=models.CASCADE,
        related_name='defects'
    )
    defect_type = models.CharField(max_length=20, choices=DEFECT_TYPE_CHOICES)
    quantity = models.PositiveIntegerField(default=0)
    description = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Defecto"
        verbose_name_plural = "Defectos"
        ordering = ['id']
        indexes = [
            models.Index(fields=['defect_type'], name='defect_type_idx'),
        ]

    def __str__(self):
        return f"{self.get_defect_type_display()} x{self.quantity}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValidationError("Los defectos registrados no se pueden modificar")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Los defectos registrados no se pueden eliminar")
