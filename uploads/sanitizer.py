from urllib.parse import unquote

INVALID = ""


def fully_unquote(raw: str) -> str:
    """Décode les séquences %XX jusqu'à stabilité (%252e -> %2e -> .)."""
    value = raw
    while True:
        # Chaque passe raccourcit la chaîne ou la laisse inchangée
        decoded = unquote(value)
        if decoded == value:
            return value
        value = decoded


def decode_token(raw: str) -> str:
    """
    Normalise un jeton base64url en base64 classique ("-" -> "+", "_" -> "/").
    Appliqué uniquement aux jetons courts, jamais aux chemins complets.
    """
    return fully_unquote(raw).translate(str.maketrans("-_", "+/"))


def sanitize(raw) -> str:
    """
    Valide un chemin relatif fourni par l'appelant.

    - décode entièrement la valeur avant toute vérification
    - "\\" devient "/", les segments vides et "." disparaissent
    - refuse tout segment ".." et les octets nuls

    Retourne le chemin normalisé (ex: "2026/02/report.pdf") ou INVALID ("").
    Fonction pure : aucun accès disque.

    Limite connue : un nom de fichier contenant littéralement une séquence
    %XX (ex: "rapport%20v2.pdf") est toujours décodé ; ce fichier ne peut
    donc pas être servi par un lien protégé.
    """
    if not isinstance(raw, str):
        return INVALID
    value = fully_unquote(raw).replace("\\", "/")
    if "\x00" in value:
        return INVALID

    segments = [s for s in value.split("/") if s not in ("", ".")]
    if not segments or ".." in segments:
        return INVALID
    return "/".join(segments)
