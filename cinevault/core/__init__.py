"""
Couche domaine de CineVault.

Contient les entites (candidats d'assets, entrees de cache, slots),
les objets valeur (specifications de types d'assets) et les ports
(interfaces abstraites) implementes par l'infrastructure.
"""
