from django.apps import AppConfig


class RestoConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'resto'
    verbose_name = 'Resto Point of Sale'

    def ready(self):
        from . import realtime  # noqa
