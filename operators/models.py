from django.db import models
from django.contrib.auth.models import User


class UserProfile(models.Model):
    """Extended user profile carrying the quality system role"""

    ASSISTANT = 'asistente_calidad'
    SUPERVISOR = 'supervisor'
    ADMIN = 'administrador'
    MANAGEMENT = 'gerencia'
    VISITOR = 'visitante'

    ROLE_CHOICES = [
        (ASSISTANT, 'Asistente de Calidad'),
        (SUPERVISOR, 'Supervisor'),
        (ADMIN, 'Administrador'),
        (MANAGEMENT, 'Gerencia'),
        (VISITOR, 'Visitante'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ASSISTANT)
    department = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Perfil de Usuario"
        verbose_name_plural = "Perfiles de Usuario"

    def __str__(self):
        return f"{self.user.get_full_name() or self.user.username} ({self.get_role_display()})"
