class PrivateUploadError(Exception):
    """
    Erreur de base des fichiers privés.
    Chaque sous-classe porte le code HTTP et le message renvoyés au client.
    """
    status_code = 500
    message = "Erreur interne"

    def __init__(self, detail=""):
        super().__init__(detail or self.message)
        self.detail = detail


class PathInvalid(PrivateUploadError):
    status_code = 400
    message = "Requête invalide"


class Unauthorized(PrivateUploadError):
    status_code = 403
    message = "Accès refusé"


class LinkTampered(PrivateUploadError):
    """Lien falsifié ou expiré : chemin et preuve ne correspondent pas."""
    status_code = 403
    message = "Accès refusé"


class NotFound(PrivateUploadError):
    status_code = 404
    message = "Fichier introuvable."


class StorageUnavailable(PrivateUploadError):
    status_code = 500
    message = "Répertoire privé manquant"


class RelocationFailed(PrivateUploadError):
    # Jamais renvoyée au client : journalisée, la valeur d'origine est conservée.
    pass
