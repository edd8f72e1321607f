import logging
import os
from pathlib import Path

from django.conf import settings

from .sanitizer import sanitize
from .storages import DEFAULT_PRIVATE_URL, get_private_store, is_reference

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "fluentform"


class ReferenceRewriter:
    """
    Parcourt une soumission de formulaire (dict / list / tuple imbriqués),
    déplace chaque fichier uploadé vers le stockage privé et remplace son URL
    par une référence "ff-private://YYYY/MM/fichier".

    Les valeurs déjà privées sont laissées telles quelles : repasser une
    soumission déjà traitée ne change rien.
    """

    def __init__(self, store=None, public_root=None, public_url=None, marker=None, private_url=None):
        self.store = store or get_private_store()
        self.public_root = Path(
            public_root or getattr(settings, "PRIVATE_UPLOADS_PUBLIC_ROOT", None)
            or os.path.join(str(getattr(settings, "MEDIA_ROOT", "")), DEFAULT_MARKER)
        )
        self.public_url = public_url if public_url is not None else getattr(settings, "PRIVATE_UPLOADS_PUBLIC_URL", "")
        self.marker = (marker or getattr(settings, "PRIVATE_UPLOADS_MARKER", DEFAULT_MARKER)).strip("/")
        self.private_url = private_url or getattr(settings, "PRIVATE_UPLOADS_URL", DEFAULT_PRIVATE_URL)

    def rewrite(self, payload):
        """Retourne une structure de même forme ; ne lève jamais d'exception."""
        if isinstance(payload, dict):
            return {key: self.rewrite(value) for key, value in payload.items()}
        if isinstance(payload, list):
            return [self.rewrite(value) for value in payload]
        if isinstance(payload, tuple):
            return tuple(self.rewrite(value) for value in payload)
        if isinstance(payload, str):
            try:
                return self.rewrite_value(payload)
            except Exception as e:
                # Une valeur malformée ne doit pas faire échouer l'enregistrement
                logger.error(f"Erreur lors de la réécriture de {payload!r} : {e}", exc_info=True)
        return payload

    def rewrite_value(self, value: str) -> str:
        if is_reference(value):
            return value
        relative = self.extract_relative(value)
        if not relative:
            return value
        reference = self.store.relocate(self.public_root / relative, relative)
        return reference or value

    def extract_relative(self, value) -> str:
        """
        Extrait le chemin relatif d'une URL / d'un chemin d'upload :
          https://site.example/wp-content/uploads/fluentform/2026/02/a.pdf -> 2026/02/a.pdf
          /__ff_private_uploads__/2026/02/a.pdf                         -> 2026/02/a.pdf
        Retourne "" si la valeur ne désigne pas un fichier uploadé.
        """
        if not isinstance(value, str):
            return ""
        value = value.strip()
        rest = None

        if self.public_url and value.startswith(self.public_url):
            rest = value[len(self.public_url):]
        elif self.private_url and self.private_url in value:
            rest = value.split(self.private_url, 1)[1]
        else:
            needle = f"/{self.marker}/"
            if needle in value:
                rest = value.split(needle, 1)[1]

        if rest is None:
            return ""
        rest = rest.split("#", 1)[0].split("?", 1)[0]
        return sanitize(rest)
