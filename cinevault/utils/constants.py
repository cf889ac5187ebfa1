"""
Constantes globales pour CineVault.

Ce module contient les constantes utilisees par le scan des repertoires:
- Extensions et mots-cles des fichiers annexes (bandes-annonces, sous-titres, themes)
- Extensions des images reconnues
- Taille des blocs de lecture pour le hash de contenu
"""

# Extensions d'images reconnues par le scanner (les specs filtrent ensuite par type)
IMAGE_EXTENSIONS = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
})

# Bandes-annonces : mot-cle dans le nom + extension video
TRAILER_KEYWORDS = ("trailer", "preview")
TRAILER_EXTENSIONS = frozenset({
    ".mp4",
    ".mkv",
    ".avi",
    ".mov",
    ".webm",
    ".m4v",
})

# Sous-titres : extension seule, langue optionnelle dans le nom (film.fr.srt)
SUBTITLE_EXTENSIONS = frozenset({
    ".srt",
    ".sub",
    ".ass",
    ".ssa",
    ".vtt",
    ".idx",
})

# Themes musicaux : mot-cle + extension audio
THEME_KEYWORDS = ("theme",)
THEME_EXTENSIONS = frozenset({
    ".mp3",
    ".flac",
    ".ogg",
    ".m4a",
    ".aac",
})

# Types d'assets annexes (sans specification physique)
TRAILER = "trailer"
SUBTITLE = "subtitle"
THEME = "theme"
SIDECAR_ASSET_TYPES = (TRAILER, SUBTITLE, THEME)

# Lecture par blocs de 1 Mo pour le hash SHA-256
HASH_CHUNK_SIZE = 1024 * 1024

# Cle de reglage des limites par type (app_settings)
ASSET_LIMIT_KEY_PREFIX = "asset_limit_"

# Suffixes des fichiers publies dans la mediatheque (defaut "-{type}")
PUBLISH_SUFFIXES = {
    "poster": "-poster",
    "fanart": "-fanart",
    "banner": "-banner",
    "clearlogo": "-clearlogo",
    "clearart": "-clearart",
    "discart": "-disc",
    "landscape": "-landscape",
    "keyart": "-keyart",
    "trailer": "-trailer",
    "theme": "-theme",
}
