import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class UploadsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'uploads'
    verbose_name = "Fichiers privés"

    def ready(self):
        from .exceptions import StorageUnavailable
        from .storages import get_private_store

        # Le répertoire privé est créé au démarrage ; en cas d'échec les
        # téléchargements répondront 500 au lieu d'arrêter le processus.
        try:
            base = get_private_store().ensure_base_dir()
            logger.debug(f"Répertoire privé prêt : {base}")
        except StorageUnavailable as e:
            logger.error(f"Répertoire privé indisponible : {e}")
