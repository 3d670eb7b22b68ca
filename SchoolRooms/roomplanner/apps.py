from django.apps import AppConfig


class RoomplannerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'roomplanner'
    verbose_name = 'Salas e Reservas'
