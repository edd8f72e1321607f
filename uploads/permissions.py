from django.conf import settings
from django.utils.module_loading import import_string


def is_administrator(user):
    """
    Seuls les administrateurs (superusers actifs et connectés) peuvent
    télécharger les fichiers privés. Aucun autre rôle n'est accepté.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return bool(getattr(user, "is_active", False) and getattr(user, "is_superuser", False))


def get_authorizer():
    path = getattr(settings, "PRIVATE_UPLOADS_AUTHORIZER", None)
    if path:
        return import_string(path)
    return is_administrator
