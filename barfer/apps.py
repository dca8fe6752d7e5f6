from django.apps import AppConfig


class BarferConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "barfer"
    verbose_name = "Barfer - Orders & Client Analytics"
