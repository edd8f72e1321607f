import logging
import posixpath
from urllib.parse import urlencode

from django.conf import settings
from django.core import signing
from django.urls import reverse
from django.utils.html import format_html, format_html_join

from .exceptions import LinkTampered
from .rewriter import ReferenceRewriter
from .storages import unwrap_reference

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "ff_private_download"
DEFAULT_MAX_AGE = 48 * 3600


def _action():
    return getattr(settings, "PRIVATE_UPLOADS_LINK_ACTION", DEFAULT_ACTION)


def _signer(action):
    # Le sel lie la preuve à l'action : une preuve d'une autre action est refusée
    return signing.TimestampSigner(salt=f"uploads.links:{action}")


def make_proof(relative: str, action=None) -> str:
    signed = _signer(action or _action()).sign(relative)
    # "chemin:horodatage:signature" -> "horodatage:signature"
    return signed[len(relative) + 1:]


def verify_proof(relative, action, proof):
    """Lève LinkTampered si la preuve ne correspond pas exactement au chemin et à l'action."""
    if not relative or not action or not proof:
        raise LinkTampered("preuve absente")
    max_age = getattr(settings, "PRIVATE_UPLOADS_LINK_MAX_AGE", DEFAULT_MAX_AGE)
    try:
        value = _signer(action).unsign(f"{relative}:{proof}", max_age=max_age)
    except signing.SignatureExpired as e:
        raise LinkTampered(f"lien expiré pour {relative}") from e
    except signing.BadSignature as e:
        raise LinkTampered(f"preuve invalide pour {relative}") from e
    if value != relative:
        raise LinkTampered(f"preuve invalide pour {relative}")


def mint_link(relative: str, action=None) -> str:
    action = action or _action()
    query = urlencode({"action": action, "path": relative, "proof": make_proof(relative, action)})
    return f"{reverse('uploads:download')}?{query}"


def resolve_relative(value, rewriter=None) -> str:
    """
    Référence privée -> chemin relatif.
    Les anciennes valeurs (URL publiques enregistrées avant la relocalisation)
    sont déplacées à la volée.
    """
    relative = unwrap_reference(value)
    if relative:
        return relative
    rewriter = rewriter or ReferenceRewriter()
    try:
        relative = unwrap_reference(rewriter.rewrite_value(value))
        return relative or rewriter.extract_relative(value)
    except Exception as e:
        logger.error(f"Valeur de fichier illisible {value!r} : {e}", exc_info=True)
        return ""


def render_links(values, display=True, rewriter=None, action=None):
    """
    Affichage des fichiers d'une soumission.

    display=False : les valeurs sont retournées telles quelles (usage machine).
    display=True  : une liste HTML de liens protégés, ou "" si aucun fichier.
    """
    if not display:
        return values
    if isinstance(values, str):
        values = [values]

    items = []
    for value in values or []:
        relative = resolve_relative(value, rewriter)
        if not relative:
            continue
        items.append((mint_link(relative, action), posixpath.basename(relative)))

    if not items:
        return ""
    return format_html(
        '<ul class="ff-private-uploads">{}</ul>',
        format_html_join("", '<li><a href="{}" target="_blank" rel="noopener">{}</a></li>', items),
    )
