"""
CineVault - Moteur de decouverte et de cache des assets de mediatheque.

Ce package decouvre les illustrations et fichiers annexes (posters, fanarts,
bandes-annonces, sous-titres, themes) d'une mediatheque, les valide selon les
specifications Kodi, les stocke dans un cache adresse par contenu et gere
leur selection.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, objets valeur, exceptions)
- services/ : Couche application (scan, validation, scoring, selection)
- adapters/ : Adaptateurs techniques (telechargement HTTP, lecture d'images)
- infrastructure/ : Persistance SQLModel et stockage adresse par contenu
- web/ : API JSON FastAPI
"""

__version__ = "0.1.0"
