import filecmp
import glob
import logging
import os
import shutil
from pathlib import Path

from django.conf import settings
from django.core.files.storage import FileSystemStorage
from django.utils import timezone

from .exceptions import RelocationFailed, StorageUnavailable
from .sanitizer import decode_token, sanitize

logger = logging.getLogger(__name__)

REFERENCE_SCHEME = "ff-private://"
DEFAULT_PRIVATE_URL = "/__ff_private_uploads__/"


def is_reference(value) -> bool:
    return isinstance(value, str) and value.startswith(REFERENCE_SCHEME)


def make_reference(relative: str) -> str:
    return REFERENCE_SCHEME + relative


def unwrap_reference(value) -> str:
    """"ff-private://2026/02/a.pdf" -> "2026/02/a.pdf" ("" si invalide)."""
    if not is_reference(value):
        return ""
    return sanitize(value[len(REFERENCE_SCHEME):])


def private_upload_to(instance, filename):
    # YYYY/MM/filename, même arborescence que le dossier d'upload public
    today = timezone.now()
    return os.path.join(str(today.year), f"{today.month:02d}", os.path.basename(filename))


class PrivateStore(FileSystemStorage):
    """
    Stockage privé HORS de la racine web : aucun fichier n'y a d'URL publique.
    L'URL de base est un préfixe factice, servi uniquement par la vue
    d'administration qui vérifie les permissions.

    Seul ce stockage écrit dans PRIVATE_UPLOADS_ROOT.
    """

    def __init__(self, location=None, base_url=None, **kwargs):
        if location is None:
            location = getattr(settings, "PRIVATE_UPLOADS_ROOT", None) or os.path.join(
                str(getattr(settings, "BASE_DIR", ".")), "private_uploads"
            )
        if base_url is None:
            base_url = getattr(settings, "PRIVATE_UPLOADS_URL", DEFAULT_PRIVATE_URL)
        super().__init__(location=location, base_url=base_url, **kwargs)

    def ensure_base_dir(self) -> Path:
        """Crée le répertoire privé (et ses parents) s'il n'existe pas."""
        try:
            os.makedirs(self.location, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"{self.location} : {e}") from e
        return Path(self.location)

    def absolute_path(self, relative: str) -> Path:
        # safe_join lève SuspiciousFileOperation si le chemin sort de la base
        return Path(self.path(relative))

    # --- Relocalisation -----------------------------------------------------

    def relocate(self, source, relative):
        """
        Déplace `source` vers PRIVATE_UPLOADS_ROOT/relative.

        Retourne la référence privée ("ff-private://...") ou None si le
        fichier n'a pas pu être déplacé ; l'appelant conserve alors la valeur
        d'origine. Rejouer l'appel après un déplacement réussi est sans effet.

        Un fichier privé différent déjà présent sous le même nom n'est jamais
        écrasé : le nouveau fichier reçoit un nom libre (ex: cv_a1B2c3D.pdf)
        et la référence retournée désigne ce nom.
        """
        try:
            relative = sanitize(relative)
            if not relative:
                raise RelocationFailed(f"chemin relatif invalide pour {source}")
            source = Path(source)
            dest = self.absolute_path(relative)
            if self._conflicts(source, dest):
                relative = Path(self.get_available_name(relative)).as_posix()
                logger.warning(f"{dest} existe déjà avec un autre contenu, nouveau nom : {relative}")
                dest = self.absolute_path(relative)
            self._move(source, dest)
        except RelocationFailed as e:
            logger.error(f"Relocalisation échouée, le fichier reste à son emplacement public : {e}")
            return None
        return make_reference(relative)

    def _conflicts(self, source: Path, dest: Path) -> bool:
        # Vrai si dest contient déjà un AUTRE fichier que source
        if not source.is_file() or not dest.exists():
            return False
        try:
            if os.path.samefile(source, dest):
                return False
            return not filecmp.cmp(source, dest, shallow=False)
        except OSError as e:
            raise RelocationFailed(f"comparaison impossible {source} / {dest} : {e}") from e

    def _move(self, source: Path, dest: Path):
        if not source.exists():
            if dest.is_file():
                # Déjà déplacé (retraitement ou soumission concurrente)
                logger.debug(f"Déjà présent dans le stockage privé : {dest}")
                return
            raise RelocationFailed(f"source introuvable : {source}")

        if dest.exists() and os.path.samefile(source, dest):
            return

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RelocationFailed(f"impossible de créer {dest.parent} : {e}") from e

        try:
            os.replace(source, dest)
            logger.info(f"Fichier déplacé vers le stockage privé : {dest}")
            return
        except OSError as e:
            # ex: EXDEV lorsque les deux dossiers sont sur des volumes différents
            logger.warning(f"Déplacement impossible ({e}), tentative de copie : {source}")

        try:
            shutil.copy2(source, dest)
        except OSError as e:
            self._discard_partial(dest)
            raise RelocationFailed(f"copie impossible {source} -> {dest} : {e}") from e

        try:
            os.remove(source)
        except OSError as e:
            logger.error(f"Copie privée créée mais l'original reste public : {source} ({e})")
        logger.info(f"Fichier copié vers le stockage privé : {dest}")

    def _discard_partial(self, dest: Path):
        try:
            dest.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Copie partielle non supprimée : {dest} ({e})")

    # --- Résolution pour le téléchargement -----------------------------------

    def resolve_servable(self, suffix):
        """
        Trouve le fichier à servir pour `suffix`.

        1) Correspondance directe : suffix est un chemin relatif ("2026/02/a.pdf").
        2) Sinon, le dernier segment est traité comme un jeton court et on
           cherche, sur deux niveaux (YYYY/MM), un fichier dont le chemin
           relatif se termine par ce jeton.

        Le parcours suit l'ordre du système de fichiers : en cas de collision
        de suffixes, le premier fichier trouvé est retourné, sans garantie de
        stabilité. Retourne None si rien ne correspond.
        """
        base = Path(self.location)
        if not base.is_dir():
            raise StorageUnavailable(str(base))
        base = base.resolve()

        relative = sanitize(suffix)
        if not relative:
            return None

        found = self._servable(base, base / relative)
        if found is None:
            found = self._match_suffix(base, relative.rsplit("/", 1)[-1])
        return found

    def _servable(self, base: Path, candidate: Path):
        real = candidate.resolve()
        if real == base or not real.is_relative_to(base):
            return None
        if not real.is_file() or not os.access(real, os.R_OK):
            return None
        return real

    def _match_suffix(self, base: Path, short: str):
        tokens = [short]
        decoded = decode_token(short)
        if decoded != short:
            tokens.append(decoded)

        for match in glob.iglob(os.path.join(glob.escape(str(base)), "*", "*", "*")):
            path = Path(match)
            real = self._servable(base, path)
            if real is None:
                continue
            rel = path.relative_to(base).as_posix()
            # "report_Xiw==.pdf" doit répondre au jeton "Xiw=="
            stem = rel[: -len(path.suffix)] if path.suffix else rel
            if any(rel.endswith(t) or stem.endswith(t) for t in tokens):
                logger.debug(f"Correspondance par suffixe : {short} -> {rel}")
                return real
        return None


def get_private_store():
    return PrivateStore()
