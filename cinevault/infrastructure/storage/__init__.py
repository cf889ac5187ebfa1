"""
Stockage adresse par contenu.

Exports :
- FileSystemContentStore : Cache {kind}/{h[0:2]}/{h[2:4]}/{h}.{ext}
- compute_content_hash, compute_bytes_hash : SHA-256 du contenu
- compute_directory_fingerprint : Empreinte XXH3 d'un listing de repertoire
"""

from cinevault.infrastructure.storage.content_store import FileSystemContentStore
from cinevault.infrastructure.storage.hash_service import (
    compute_bytes_hash,
    compute_content_hash,
    compute_directory_fingerprint,
)

__all__ = [
    "FileSystemContentStore",
    "compute_bytes_hash",
    "compute_content_hash",
    "compute_directory_fingerprint",
]
