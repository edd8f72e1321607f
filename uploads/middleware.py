import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def log_response_body(request, body):
    logger.debug(f"Réponse brute de l'upload : {body[:2000]!r}")


class UploadResponseTapMiddleware:
    """
    Observe les réponses des requêtes d'upload de formulaire
    (?action=PRIVATE_UPLOADS_UPLOAD_ACTION) sans jamais les modifier.
    L'observateur reçoit la requête et le corps final de la réponse.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.action = getattr(settings, "PRIVATE_UPLOADS_UPLOAD_ACTION", "fluentform_file_upload")
        observer = getattr(settings, "PRIVATE_UPLOADS_RESPONSE_OBSERVER", None)
        if observer:
            self.observer = import_string(observer) if isinstance(observer, str) else observer
        elif getattr(settings, "PRIVATE_UPLOADS_DEBUG", False):
            self.observer = log_response_body
        else:
            self.observer = None

    def __call__(self, request):
        if self.observer is None or not self.is_upload_request(request):
            return self.get_response(request)

        keys = sorted(set(request.GET) | set(request.POST))
        logger.debug(f"Requête d'upload : action={self.action} clés={','.join(keys)}")

        response = self.get_response(request)
        if getattr(response, "streaming", False):
            return response
        try:
            self.observer(request, response.content)
        except Exception as e:
            logger.error(f"Erreur de l'observateur d'upload : {e}", exc_info=True)
        return response

    def is_upload_request(self, request):
        action = request.GET.get("action") or request.POST.get("action") or ""
        return action == self.action
