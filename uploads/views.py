import logging
import mimetypes
import os
from urllib.parse import quote

from django.conf import settings
from django.http import FileResponse, HttpResponse, HttpResponseRedirect
from django.views.decorators.http import require_GET

from .exceptions import LinkTampered, NotFound, PathInvalid, PrivateUploadError, Unauthorized
from .links import mint_link, verify_proof
from .permissions import get_authorizer
from .sanitizer import sanitize
from .storages import get_private_store

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("uploads.security")


class DownloadGate:
    """
    Téléchargement d'un fichier privé :
    autorisation -> validation du chemin -> vérification de la preuve
    -> résolution -> envoi en flux.
    Toute erreur termine la requête sans envoyer le moindre octet du fichier.
    """
    chunk_size = 1024 * 1024

    def __init__(self, store=None, authorizer=None, verifier=None):
        self.store = store or get_private_store()
        self.authorizer = authorizer or get_authorizer()
        self.verifier = verifier or verify_proof

    def authorize(self, user):
        # Session authentifiée ET administrateur, sans exception
        if user is None or not getattr(user, "is_authenticated", False) or not self.authorizer(user):
            raise Unauthorized(f"utilisateur refusé : {user}")

    def handle(self, user, params):
        logger.debug(f"Demande de fichier privé : path={params.get('path', '')!r} utilisateur={user}")
        try:
            self.authorize(user)
            relative = sanitize(params.get("path", ""))
            if not relative:
                raise PathInvalid(f"chemin refusé : {params.get('path', '')!r}")
            self.verifier(relative, params.get("action", ""), params.get("proof", ""))

            path = self.store.resolve_servable(relative)
            if path is None:
                raise NotFound(relative)
            return self.serve(path)
        except LinkTampered as e:
            security_logger.warning(f"Lien falsifié ou expiré (utilisateur {user}) : {e}")
            return self.reject(e)
        except PrivateUploadError as e:
            logger.warning(f"Téléchargement privé refusé ({e.status_code}) : {e}")
            return self.reject(e)

    def redirect_legacy(self, user, suffix):
        """
        Anciennes URL /__ff_private_uploads__/2026/02/a.pdf : redirige un
        administrateur vers un lien protégé tout neuf.
        """
        try:
            self.authorize(user)
            relative = sanitize(suffix)
            if not relative:
                raise PathInvalid(f"chemin refusé : {suffix!r}")
        except PrivateUploadError as e:
            logger.warning(f"Ancienne URL privée refusée ({e.status_code}) : {e}")
            return self.reject(e)
        return HttpResponseRedirect(mint_link(relative))

    def serve(self, path):
        try:
            fh = open(path, "rb")
        except OSError as e:
            raise NotFound(f"{path} : {e}") from e

        content_type = "application/octet-stream"
        if getattr(settings, "PRIVATE_UPLOADS_SNIFF_MIME", False):
            content_type = mimetypes.guess_type(path.name)[0] or content_type

        resp = FileResponse(fh, content_type=content_type)
        resp.block_size = self.chunk_size
        resp["Content-Description"] = "File Transfer"
        resp["Content-Disposition"] = f'attachment; filename="{quote(path.name)}"'
        resp["Content-Length"] = os.fstat(fh.fileno()).st_size
        resp["X-Content-Type-Options"] = "nosniff"
        logger.info(f"Fichier privé servi : {path}")
        return resp

    def reject(self, error):
        return HttpResponse(error.message, status=error.status_code, content_type="text/plain; charset=utf-8")


@require_GET
def download(request):
    """Lien protégé : ?action=...&path=2026/02/a.pdf&proof=..."""
    return DownloadGate().handle(getattr(request, "user", None), request.GET)


@require_GET
def legacy_private_url(request, suffix):
    return DownloadGate().redirect_legacy(getattr(request, "user", None), suffix)
