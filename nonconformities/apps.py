from django.apps import AppConfig


class NonconformitiesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'nonconformities'
    verbose_name = 'No conformidades'
