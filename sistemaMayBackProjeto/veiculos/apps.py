from django.apps import AppConfig


class VeiculosConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'veiculos'
    verbose_name = 'Veículos'
