"""
Service de calcul des empreintes de contenu.

Deux usages distincts :
- compute_content_hash / compute_bytes_hash : SHA-256 sur la totalite du
  contenu, lu par blocs de 1 Mo. C'est la cle du cache adresse par contenu :
  deux fichiers de meme hash sont le meme asset.
- compute_directory_fingerprint : XXH3-64 sur le listing d'un repertoire
  (nom, taille, date de modification). Rapide et non cryptographique, il
  sert uniquement a detecter qu'un repertoire n'a pas change depuis le
  dernier scan.
"""

import hashlib
from pathlib import Path
from typing import Iterable

import xxhash

from cinevault.utils.constants import HASH_CHUNK_SIZE


def compute_content_hash(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """
    Calcule le SHA-256 d'un fichier par blocs.

    Args :
        file_path : Chemin vers le fichier a hasher
        chunk_size : Taille des blocs de lecture (defaut 1 Mo)

    Retourne :
        Hash hexadecimal de 64 caracteres

    Raises :
        FileNotFoundError : Si le fichier n'existe pas
        PermissionError : Si le fichier n'est pas lisible
    """
    digest = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def compute_bytes_hash(data: bytes) -> str:
    """SHA-256 hexadecimal d'un contenu en memoire."""
    return hashlib.sha256(data).hexdigest()


def compute_directory_fingerprint(entries: Iterable[tuple[str, int, float]]) -> str:
    """
    Calcule l'empreinte XXH3-64 d'un listing de repertoire.

    L'ordre des entrees n'a pas d'importance : elles sont triees par nom.
    La date de modification est arrondie a la milliseconde.

    Args :
        entries : Tuples (nom, taille en octets, mtime)

    Retourne :
        Hash hexadecimal de 16 caracteres
    """
    hasher = xxhash.xxh3_64()
    for name, size, mtime in sorted(entries):
        hasher.update(f"{name}\0{size}\0{int(mtime * 1000)}\n".encode("utf-8"))
    return hasher.hexdigest()
