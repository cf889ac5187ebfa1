"""Couche infrastructure : persistance SQLModel et cache sur disque."""
